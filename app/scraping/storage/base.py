"""
Storage layer interfaces for scraped competitor prices.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.scraping.config.models import SourceConfig
from app.scraping.types import ScrapeResult


class PersistenceError(RuntimeError):
    """
    Raised when the shared price table cannot be migrated or written.
    """


class PriceStore(ABC):
    """
    Storage abstraction for merging one source's results into the shared table.
    """

    @abstractmethod
    def migrate(self, *, source: SourceConfig) -> list[str]:
        """
        Ensure the shared table and the source's columns exist.

        Returns the names of columns added by this call.
        """

    @abstractmethod
    def persist(self, results: Sequence[ScrapeResult], *, source: SourceConfig) -> int:
        """
        Upsert results keyed by SKU and return the number of rows written.
        """
