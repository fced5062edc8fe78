"""
Two-phase price extraction: structural selectors, then free-text patterns.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from app.scraping.config.models import SourceConfig
from app.scraping.logging_utils import log_event
from app.scraping.parsing.patterns import DEFAULT_PRICE_PATTERNS, PatternMatcher
from app.scraping.parsing.selectors import StructuralSelector, build_selector_chain
from app.scraping.parsing.validator import PriceValidator


class ExtractionChain:
    """
    Converts arbitrary, possibly malformed page content into a validated price.

    Phase 1 walks the structural selectors in priority order and runs the
    pattern matcher over each candidate. Phase 2 runs the matcher over the
    document's flattened text. Both phases stop at the first value that
    validates; the result is always in canonical two-decimal form.
    """

    def __init__(
        self,
        *,
        validator: PriceValidator,
        selectors: Sequence[StructuralSelector],
        matcher: PatternMatcher | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.validator = validator
        self._selectors = list(selectors)
        self._matcher = matcher or PatternMatcher(validator=validator)
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def for_source(
        cls,
        source: SourceConfig,
        *,
        logger: logging.Logger | None = None,
    ) -> "ExtractionChain":
        validator = PriceValidator(min_price=source.min_price, max_price=source.max_price)
        return cls(
            validator=validator,
            selectors=build_selector_chain(
                source_selectors=source.selectors,
                script_patterns=source.script_patterns,
                use_defaults=source.use_default_selectors,
            ),
            matcher=PatternMatcher(
                validator=validator,
                patterns=[*source.patterns, *DEFAULT_PRICE_PATTERNS],
            ),
            logger=logger,
        )

    def extract_price(self, content: str | None, source_hint: str = "") -> str | None:
        """
        Return the canonical price found in `content`, or None.
        """

        if not content or not content.strip():
            log_event(self._logger, logging.DEBUG, "empty_content", source=source_hint)
            return None

        soup = self._parse(content, source_hint)
        if soup is None:
            return self.extract_from_text(content)

        for selector in self._selectors:
            for candidate in selector.candidates(soup):
                price = self.extract_from_text(candidate.candidate_text())
                if price is not None:
                    log_event(
                        self._logger,
                        logging.DEBUG,
                        "price_matched_selector",
                        source=source_hint,
                        selector=selector.label,
                        price=price,
                    )
                    return price

        log_event(self._logger, logging.DEBUG, "selectors_exhausted", source=source_hint)
        return self.extract_from_text(soup.get_text(" "))

    def extract_from_text(self, text: str | None) -> str | None:
        """
        Phase 2 on its own: a bare valid number, else the ordered patterns.
        """

        if not text:
            return None
        stripped = text.strip()
        if self.validator.is_valid(stripped):
            return self.validator.format(stripped)

        amount = self._matcher.find(stripped)
        if amount is None:
            return None
        return self.validator.format(amount)

    def _parse(self, content: str, source_hint: str) -> BeautifulSoup | None:
        try:
            return BeautifulSoup(content, "html.parser")
        except (ParserRejectedMarkup, AssertionError) as exc:
            log_event(
                self._logger,
                logging.DEBUG,
                "markup_parse_failed",
                source=source_hint,
                error=str(exc),
            )
            return None
