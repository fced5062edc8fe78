"""
Ordered free-text price patterns.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from app.scraping.parsing.text import normalize_text
from app.scraping.parsing.validator import PriceValidator

_AMOUNT = r"([\d,]+(?:\.\d{2})?)"

# Most specific first. Every pattern captures the amount in group 1.
DEFAULT_PRICE_PATTERNS: tuple[str, ...] = (
    # currency-prefixed
    rf"Rs\.?\s*{_AMOUNT}",
    rf"PKR\s*{_AMOUNT}",
    rf"USD\s*{_AMOUNT}",
    # labeled
    rf"Price:?\s*Rs\.?\s*{_AMOUNT}",
    rf"Price:?\s*PKR\s*{_AMOUNT}",
    rf"Price:?\s*USD\s*{_AMOUNT}",
    # currency-suffixed
    rf"{_AMOUNT}\s*Rs",
    rf"{_AMOUNT}\s*PKR",
    rf"{_AMOUNT}\s*USD",
    # e-commerce attribute literals
    rf"data-price=[\"']{_AMOUNT}[\"']",
    rf"product_price[\"']?:\s*[\"']?{_AMOUNT}",
    # bare numeric tokens
    r"(?<!\d)(\d{3,6}(?:\.\d{2})?)(?!\d)",
    r"(?<!\d)(\d{1,3}(?:,\d{3})+(?:\.\d{2})?)(?!\d)",
)


def compile_patterns(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    return [re.compile(pattern, flags=re.IGNORECASE) for pattern in patterns]


class PatternMatcher:
    """
    Runs an ordered pattern list over normalized text.

    Within one pattern every match is tried in document order, so a stray
    quantity such as "1" is skipped in favour of a later amount that passes
    validation. The first pattern that yields a valid amount wins.
    """

    def __init__(
        self,
        *,
        validator: PriceValidator,
        patterns: Sequence[str] = DEFAULT_PRICE_PATTERNS,
    ) -> None:
        self._validator = validator
        self._patterns = compile_patterns(patterns)

    def find(self, text: str | None) -> str | None:
        """
        Return the first valid amount (separators stripped, not yet formatted).
        """

        normalized = normalize_text(text)
        if not normalized:
            return None

        for pattern in self._patterns:
            for match in pattern.finditer(normalized):
                amount = _captured(match).replace(",", "")
                if self._validator.is_valid(amount):
                    return amount
        return None


def _captured(match: re.Match[str]) -> str:
    if match.groups():
        return match.group(1) or ""
    return match.group(0)
