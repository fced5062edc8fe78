"""
Price extraction layer exports.
"""

from app.scraping.parsing.extraction import ExtractionChain
from app.scraping.parsing.patterns import DEFAULT_PRICE_PATTERNS, PatternMatcher
from app.scraping.parsing.selectors import (
    DEFAULT_ELEMENT_SELECTORS,
    DEFAULT_METADATA_SELECTORS,
    ElementSelector,
    MetadataSelector,
    ScriptPatternSelector,
    StructuralSelector,
    build_selector_chain,
)
from app.scraping.parsing.text import normalize_text
from app.scraping.parsing.validator import PriceValidator

__all__ = [
    "DEFAULT_ELEMENT_SELECTORS",
    "DEFAULT_METADATA_SELECTORS",
    "DEFAULT_PRICE_PATTERNS",
    "ElementSelector",
    "ExtractionChain",
    "MetadataSelector",
    "PatternMatcher",
    "PriceValidator",
    "ScriptPatternSelector",
    "StructuralSelector",
    "build_selector_chain",
    "normalize_text",
]
