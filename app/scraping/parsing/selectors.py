"""
Structural selectors that locate price candidates in a parsed document.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence

import soupsieve
from bs4 import BeautifulSoup, Tag

from app.scraping.config.models import SelectorSpec
from app.scraping.types import AttributeValue, Candidate, ElementText

# Attributes that carry a machine-readable price on an otherwise visible element.
PRICE_ATTRIBUTES = ("content", "data-price", "data-amount")

DEFAULT_METADATA_SELECTORS: tuple[SelectorSpec, ...] = (
    SelectorSpec(css='meta[property="product:price:amount"]', attribute="content"),
    SelectorSpec(css='meta[itemprop="price"]', attribute="content"),
    SelectorSpec(css="[data-price]", attribute="data-price"),
    SelectorSpec(css="[data-product-price]", attribute="data-product-price"),
)

DEFAULT_ELEMENT_SELECTORS: tuple[SelectorSpec, ...] = (
    SelectorSpec(css=".price"),
    SelectorSpec(css=".product-price"),
    SelectorSpec(css=".current-price"),
    SelectorSpec(css=".special-price"),
    SelectorSpec(css=".amount"),
    SelectorSpec(css="#price"),
    SelectorSpec(css="#productPrice"),
    # last resort within the structured phase
    SelectorSpec(css='[class*="price"]:not([class*="old"])'),
    SelectorSpec(css='[id*="price"]'),
    SelectorSpec(css='[class*="amount"]'),
    SelectorSpec(css='[class*="cost"]'),
)


class StructuralSelector(ABC):
    """
    One prioritized rule yielding price candidates in document order.
    """

    label: str

    @abstractmethod
    def candidates(self, soup: BeautifulSoup) -> Iterator[Candidate]:
        """
        Yield candidates for every matching node.
        """


class MetadataSelector(StructuralSelector):
    """
    Reads an attribute value directly, e.g. a meta tag's `content`.
    """

    def __init__(self, *, css: str, attribute: str) -> None:
        self.label = f"{css}@{attribute}"
        self._compiled = soupsieve.compile(css)
        self._attribute = attribute

    def candidates(self, soup: BeautifulSoup) -> Iterator[Candidate]:
        for node in self._compiled.select(soup):
            value = _attribute_text(node, self._attribute)
            if value:
                yield AttributeValue(text=value)


class ElementSelector(StructuralSelector):
    """
    Reads an element's visible text, alongside any price-carrying attribute it has.
    """

    def __init__(self, *, css: str) -> None:
        self.label = css
        self._compiled = soupsieve.compile(css)

    def candidates(self, soup: BeautifulSoup) -> Iterator[Candidate]:
        for node in self._compiled.select(soup):
            content_attr = None
            for attribute in PRICE_ATTRIBUTES:
                content_attr = _attribute_text(node, attribute)
                if content_attr:
                    break
            yield ElementText(text=node.get_text(" ", strip=True), content_attr=content_attr)


class ScriptPatternSelector(StructuralSelector):
    """
    Applies a regex to inline `<script>` bodies, for pages that embed prices as JSON.
    """

    def __init__(self, *, pattern: str) -> None:
        self.label = f"script:{pattern}"
        self._pattern = re.compile(pattern)

    def candidates(self, soup: BeautifulSoup) -> Iterator[Candidate]:
        for script in soup.find_all("script"):
            body = script.string or script.get_text()
            if not body:
                continue
            for match in self._pattern.finditer(body):
                value = match.group(1) if match.groups() else match.group(0)
                if value:
                    yield AttributeValue(text=value)


def build_selector(spec: SelectorSpec) -> StructuralSelector:
    if spec.is_metadata:
        return MetadataSelector(css=spec.css, attribute=spec.attribute)
    return ElementSelector(css=spec.css)


def build_selector_chain(
    *,
    source_selectors: Sequence[SelectorSpec] = (),
    script_patterns: Sequence[str] = (),
    use_defaults: bool = True,
) -> list[StructuralSelector]:
    """
    Assemble selectors in priority order.

    Script patterns come first, then the default metadata selectors, then the
    source's own selectors, then the generic element heuristics.
    """

    chain: list[StructuralSelector] = [
        ScriptPatternSelector(pattern=pattern) for pattern in script_patterns
    ]
    if use_defaults:
        chain.extend(build_selector(spec) for spec in DEFAULT_METADATA_SELECTORS)
    chain.extend(build_selector(spec) for spec in source_selectors)
    if use_defaults:
        chain.extend(build_selector(spec) for spec in DEFAULT_ELEMENT_SELECTORS)
    return chain


def _attribute_text(node: Tag, attribute: str) -> str | None:
    value = node.get(attribute)
    if value is None:
        return None
    if isinstance(value, list):
        value = " ".join(value)
    stripped = str(value).strip()
    return stripped or None
