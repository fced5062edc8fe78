"""
Shared price scraping runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

NO_PRICE_SENTINEL = "none"


class FetchStatus(str, Enum):
    """
    Outcome of one fetch attempt or of a whole bounded fetch.
    """

    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    TERMINAL_FAILURE = "terminal_failure"


class FailureKind(str, Enum):
    """
    Reason a row ended up without a competitor price.
    """

    NETWORK_FAILURE = "network_failure"
    AUTOMATION_FAILURE = "automation_failure"
    NO_PRICE_FOUND = "no_price_found"
    NO_LINK = "no_link"


@dataclass(frozen=True)
class FetchResult:
    """
    Discriminated fetch outcome consumed by the bounded retry loop and the engine.

    `price` is only set by fetchers that resolve the price themselves (rendered
    pages); everything else hands raw `content` to the extraction chain.
    """

    status: FetchStatus
    content: str | None = None
    price: str | None = None
    failure: FailureKind | None = None
    error: str | None = None
    status_code: int | None = None
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    @classmethod
    def success(cls, content: str, *, price: str | None = None, status_code: int | None = None) -> "FetchResult":
        return cls(status=FetchStatus.SUCCESS, content=content, price=price, status_code=status_code)

    @classmethod
    def retryable(
        cls,
        error: str,
        *,
        failure: FailureKind = FailureKind.NETWORK_FAILURE,
        status_code: int | None = None,
    ) -> "FetchResult":
        return cls(
            status=FetchStatus.RETRYABLE_FAILURE,
            failure=failure,
            error=error,
            status_code=status_code,
        )

    @classmethod
    def terminal(
        cls,
        error: str,
        *,
        failure: FailureKind = FailureKind.NETWORK_FAILURE,
        status_code: int | None = None,
    ) -> "FetchResult":
        return cls(
            status=FetchStatus.TERMINAL_FAILURE,
            failure=failure,
            error=error,
            status_code=status_code,
        )


@dataclass(frozen=True)
class AttributeValue:
    """
    Candidate read directly from an attribute (meta content, data-price, script JSON).
    """

    text: str

    def candidate_text(self) -> str:
        return self.text.strip()


@dataclass(frozen=True)
class ElementText:
    """
    Candidate read from an element; a price-carrying attribute wins over visible text.
    """

    text: str
    content_attr: str | None = None

    def candidate_text(self) -> str:
        if self.content_attr is not None and self.content_attr.strip():
            return self.content_attr.strip()
        return self.text.strip()


Candidate = AttributeValue | ElementText


@dataclass(frozen=True)
class CatalogRow:
    """
    One usable data row of the input catalog.
    """

    sku: str
    baseline_price: str
    competitor_url: str
    row_number: int


@dataclass(frozen=True)
class ScrapeResult:
    """
    Outcome for one catalog row with a non-empty SKU.
    """

    sku: str
    baseline_price: str
    competitor_price: str
    competitor_url: str
    failure: FailureKind | None = None

    @property
    def has_price(self) -> bool:
        return self.competitor_price != NO_PRICE_SENTINEL
