"""
app/domain package marker.
"""

from app.domain.price_scraping import PriceScrapeSummary

__all__ = ["PriceScrapeSummary"]
