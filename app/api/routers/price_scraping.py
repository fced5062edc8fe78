"""
app/api/routers/price_scraping.py

Price scraping run endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.schemas.price_scraping import PriceScrapeSummaryResponse
from app.services.price_scraping_service import (
    PriceScrapingService,
    get_price_scraping_service,
)
from db.session import get_db

router = APIRouter(tags=["price-scraping"])


@router.post("/scrape-prices", response_model=PriceScrapeSummaryResponse)
def scrape_prices(
    source: str = Query(..., description="Configured source name, e.g. Naheed"),
    catalog_path: str | None = Query(default=None, description="Optional catalog CSV path"),
    db: Session = Depends(get_db),
    scraping_service: PriceScrapingService = Depends(get_price_scraping_service),
) -> PriceScrapeSummaryResponse:
    """
    Scrape one source's competitor prices and merge them into the shared table.
    """

    try:
        summary = scraping_service.scrape(source=source, db=db, catalog_path=catalog_path)
    except (ValueError, FileNotFoundError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return PriceScrapeSummaryResponse(
        source=summary.source,
        rows_processed=summary.rows_processed,
        prices_found=summary.prices_found,
        missing_prices=summary.missing_prices,
        database_saved=summary.database_saved,
        output_file=summary.output_file,
        errors=summary.errors,
    )
