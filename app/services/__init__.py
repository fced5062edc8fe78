"""
app/services package marker.
"""

from app.services.price_scraping_service import (
    PriceScrapingService,
    get_price_scraping_service,
)

__all__ = [
    "PriceScrapingService",
    "get_price_scraping_service",
]
