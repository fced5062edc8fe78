"""
app/domain/price_scraping.py

Domain models for price scraping runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PriceScrapeSummary:
    """
    Summary for one source's scrape run.
    """

    source: str
    rows_processed: int
    prices_found: int
    missing_prices: int
    database_saved: bool
    output_file: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def data_saved(self) -> bool:
        return self.database_saved or self.output_file is not None
