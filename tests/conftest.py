"""
Shared fixtures for price scraping tests.

Nothing here touches the network: settings carry zero-cost defaults and every
sleep is captured by a recorder instead of blocking.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from app.scraping.config.models import PriceScrapingSettings, SourceConfig

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SOURCES_PATH = PROJECT_ROOT / "app" / "scraping" / "config" / "sources.json"


@pytest.fixture()
def make_settings(tmp_path: Path) -> Callable[..., PriceScrapingSettings]:
    def _make(**overrides: Any) -> PriceScrapingSettings:
        values: dict[str, Any] = {
            "sources_path": str(SOURCES_PATH),
            "catalog_path": str(tmp_path / "catalog.csv"),
            "output_dir": str(tmp_path / "out"),
            "user_agent": "price-scraper-tests/1.0",
            "referer": "https://www.google.com/",
            "connect_timeout_seconds": 15.0,
            "read_timeout_seconds": 30.0,
            "max_retries": 3,
            "retry_delay_seconds": 2.0,
            "request_delay_seconds": 5.0,
            "warmup_rows": 2,
            "webdriver_url": "http://selenium.test:4444/wd/hub",
        }
        values.update(overrides)
        return PriceScrapingSettings(**values)

    return _make


@pytest.fixture()
def settings(make_settings: Callable[..., PriceScrapingSettings]) -> PriceScrapingSettings:
    return make_settings()


@pytest.fixture()
def make_source() -> Callable[..., SourceConfig]:
    def _make(**overrides: Any) -> SourceConfig:
        values: dict[str, Any] = {
            "name": "Naheed",
            "link_column_index": 4,
            "min_columns": 6,
            "min_price": Decimal("10"),
            "max_price": Decimal("1000000"),
        }
        values.update(overrides)
        return SourceConfig(**values)

    return _make


@pytest.fixture()
def source(make_source: Callable[..., SourceConfig]) -> SourceConfig:
    return make_source()


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def write_catalog(tmp_path: Path) -> Callable[[list[list[str]]], Path]:
    """
    Write a catalog CSV with the two standard header rows followed by `rows`.
    """

    def _write(rows: list[list[str]]) -> Path:
        path = tmp_path / "catalog.csv"
        lines = [
            "Product Catalog,,,,,",
            "SKU,My Price,Diamond Link,Notes,Naheed Link,Metro Link",
        ]
        lines.extend(",".join(row) for row in rows)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
