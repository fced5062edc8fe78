"""
Price scraping engine: walks a catalog for one source.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

import requests

from app.scraping.catalog import CatalogReader
from app.scraping.config.models import PriceScrapingSettings, SourceConfig
from app.scraping.fetchers import Fetcher
from app.scraping.logging_utils import log_event
from app.scraping.parsing import ExtractionChain
from app.scraping.rate_limiter import RequestPacer
from app.scraping.registry import FetcherRegistry
from app.scraping.types import NO_PRICE_SENTINEL, CatalogRow, FailureKind, ScrapeResult


class PriceScrapingEngine:
    """
    Resolves every usable catalog row to exactly one `ScrapeResult`.

    Rows are processed strictly one after another. Rows without a competitor
    link resolve to the sentinel without any network call; every other row is
    paced, fetched and extracted. No fetch or extraction problem aborts the
    walk.
    """

    def __init__(
        self,
        *,
        settings: PriceScrapingSettings,
        registry: FetcherRegistry | None = None,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings
        self._registry = registry or FetcherRegistry()
        self._session = session
        self._logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

    def run(self, *, catalog_path: str | Path, source: SourceConfig) -> list[ScrapeResult]:
        extractor = ExtractionChain.for_source(source, logger=self._logger)
        pacer = RequestPacer(
            delay_seconds=self._settings.request_delay_seconds,
            warmup_rows=source.warmup_rows
            if source.warmup_rows is not None
            else self._settings.warmup_rows,
            sleep=self._sleep,
        )
        catalog_rows = CatalogReader(source=source, logger=self._logger).read(catalog_path)
        fetcher = self._registry.create_fetcher(
            source=source,
            settings=self._settings,
            session=self._session,
            extractor=extractor,
            logger=self._logger,
            sleep=self._sleep,
        )

        results: list[ScrapeResult] = []
        try:
            for data_row_index, row in catalog_rows:
                if not row.competitor_url:
                    result = _no_price(row, FailureKind.NO_LINK)
                else:
                    pacer.wait(data_row_index=data_row_index)
                    result = self._scrape_row(
                        row=row,
                        source=source,
                        fetcher=fetcher,
                        extractor=extractor,
                    )
                results.append(result)
                log_event(
                    self._logger,
                    logging.INFO,
                    "row_scraped",
                    source=source.name,
                    row=row.row_number,
                    sku=result.sku,
                    price=result.competitor_price,
                    failure=result.failure.value if result.failure else None,
                )
        finally:
            fetcher.close()

        log_event(
            self._logger,
            logging.INFO,
            "catalog_walk_completed",
            source=source.name,
            rows=len(results),
            prices_found=sum(1 for result in results if result.has_price),
        )
        return results

    def _scrape_row(
        self,
        *,
        row: CatalogRow,
        source: SourceConfig,
        fetcher: Fetcher,
        extractor: ExtractionChain,
    ) -> ScrapeResult:
        fetched = fetcher.fetch(row.competitor_url)
        if not fetched.ok:
            log_event(
                self._logger,
                logging.WARNING,
                "row_fetch_failed",
                source=source.name,
                sku=row.sku,
                url=row.competitor_url,
                attempts=fetched.attempts,
                error=fetched.error,
            )
            return _no_price(row, fetched.failure or FailureKind.NETWORK_FAILURE)

        price = fetched.price or extractor.extract_price(fetched.content, source.name)
        if price is None:
            log_event(
                self._logger,
                logging.WARNING,
                "price_not_found",
                source=source.name,
                sku=row.sku,
                url=row.competitor_url,
            )
            self._dump_page(source=source, content=fetched.content)
            return _no_price(row, FailureKind.NO_PRICE_FOUND)

        return ScrapeResult(
            sku=row.sku,
            baseline_price=row.baseline_price,
            competitor_price=price,
            competitor_url=row.competitor_url,
        )

    def _dump_page(self, *, source: SourceConfig, content: str | None) -> None:
        if not self._settings.debug_html_dir or not content:
            return

        target = Path(self._settings.debug_html_dir) / f"{source.name.lower()}_last_page.html"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            log_event(
                self._logger,
                logging.WARNING,
                "debug_dump_failed",
                source=source.name,
                path=str(target),
                error=str(exc),
            )


def _no_price(row: CatalogRow, failure: FailureKind) -> ScrapeResult:
    return ScrapeResult(
        sku=row.sku,
        baseline_price=row.baseline_price,
        competitor_price=NO_PRICE_SENTINEL,
        competitor_url=row.competitor_url,
        failure=failure,
    )
