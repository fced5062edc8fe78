"""
app/schemas package marker.
"""

from app.schemas.price_scraping import PriceScrapeSummaryResponse

__all__ = ["PriceScrapeSummaryResponse"]
