"""
app/schemas/price_scraping.py

Response schemas for price scraping runs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PriceScrapeSummaryResponse(BaseModel):
    """
    API response model for one source scrape run.
    """

    source: str
    rows_processed: int = Field(..., ge=0)
    prices_found: int = Field(..., ge=0)
    missing_prices: int = Field(..., ge=0)
    database_saved: bool
    output_file: str | None = None
    errors: list[str] = Field(default_factory=list)
