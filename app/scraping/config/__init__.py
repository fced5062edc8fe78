"""
Config helpers for price scraping.
"""

from app.scraping.config.loader import (
    get_price_scraping_settings,
    get_source_config,
    load_source_configs,
    parse_source_config,
)
from app.scraping.config.models import (
    PriceScrapingSettings,
    RenderingConfig,
    SelectorSpec,
    SourceConfig,
)

__all__ = [
    "PriceScrapingSettings",
    "RenderingConfig",
    "SelectorSpec",
    "SourceConfig",
    "get_price_scraping_settings",
    "get_source_config",
    "load_source_configs",
    "parse_source_config",
]
