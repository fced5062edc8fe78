"""
Price scraping configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class SelectorSpec:
    """
    One structural selector: CSS path plus, for metadata selectors, the attribute to read.
    """

    css: str
    attribute: str | None = None

    @property
    def is_metadata(self) -> bool:
        return self.attribute is not None


@dataclass(frozen=True)
class RenderingConfig:
    """
    Browser-automation settings for sources whose price is injected client-side.
    """

    price_selector: str
    fallback_selector: str
    settle_seconds: float = 5.0
    wait_timeout_seconds: float = 20.0


@dataclass(frozen=True)
class SourceConfig:
    """
    One competitor source: where its link lives in the catalog and how to extract its price.
    """

    name: str
    link_column_index: int
    min_columns: int
    fetcher_type: str = "http"
    selectors: list[SelectorSpec] = field(default_factory=list)
    patterns: list[str] = field(default_factory=list)
    script_patterns: list[str] = field(default_factory=list)
    use_default_selectors: bool = True
    min_price: Decimal = Decimal("10")
    max_price: Decimal = Decimal("1000000")
    warmup_rows: int | None = None
    output_file: str | None = None
    rendering: RenderingConfig | None = None
    headers: dict[str, str] = field(default_factory=dict)
    enabled: bool = True

    @property
    def price_column(self) -> str:
        return f"{self.name}_price"

    @property
    def link_column(self) -> str:
        return f"{self.name}_link"

    @property
    def snapshot_filename(self) -> str:
        return self.output_file or f"{self.name.lower()}.csv"


@dataclass(frozen=True)
class PriceScrapingSettings:
    """
    Runtime settings for price scraping runs.
    """

    sources_path: str
    catalog_path: str
    output_dir: str
    user_agent: str
    referer: str
    connect_timeout_seconds: float
    read_timeout_seconds: float
    max_retries: int
    retry_delay_seconds: float
    request_delay_seconds: float
    warmup_rows: int
    webdriver_url: str
    debug_html_dir: str | None = None
    log_file: str | None = None
