"""
app/services/price_scraping_service.py

Service orchestration for one source's price scraping run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from functools import lru_cache
from sqlalchemy.orm import Session

from app.domain.price_scraping import PriceScrapeSummary
from app.scraping.config import get_price_scraping_settings, get_source_config
from app.scraping.config.models import PriceScrapingSettings, SourceConfig
from app.scraping.engine import PriceScrapingEngine
from app.scraping.logging_utils import log_event
from app.scraping.storage import (
    CsvSnapshotWriter,
    PersistenceError,
    PriceStore,
    SQLAlchemyPriceStore,
)
from app.scraping.types import ScrapeResult

logger = logging.getLogger(__name__)

StoreFactory = Callable[[Session], PriceStore]


class PriceScrapingService:
    """
    Runs the catalog walk for one source, then merges and snapshots the results.

    A failed database write never discards the run: the snapshot is still
    written from the in-memory results. A run with no usable rows writes
    nothing at all.
    """

    def __init__(
        self,
        *,
        settings: PriceScrapingSettings | None = None,
        engine: PriceScrapingEngine | None = None,
        store_factory: StoreFactory | None = None,
    ) -> None:
        self._settings = settings or get_price_scraping_settings()
        self._engine = engine or PriceScrapingEngine(settings=self._settings)
        self._store_factory = store_factory or (
            lambda session: SQLAlchemyPriceStore(session=session)
        )

    def scrape(
        self,
        *,
        source: str,
        db: Session | None = None,
        catalog_path: str | None = None,
        output_dir: str | None = None,
    ) -> PriceScrapeSummary:
        source_config = get_source_config(config_path=self._settings.sources_path, name=source)
        catalog = catalog_path or self._settings.catalog_path
        log_event(
            logger,
            logging.INFO,
            "run_started",
            source=source_config.name,
            catalog=catalog,
        )

        results = self._engine.run(catalog_path=catalog, source=source_config)
        if not results:
            log_event(logger, logging.WARNING, "no_data_saved", source=source_config.name)
            return self._summarize(source_config, results, database_saved=False, output_file=None)

        errors: list[str] = []
        database_saved = False
        if db is not None:
            database_saved = self._persist(db, results, source_config, errors)

        output_file = self._write_snapshot(
            results,
            source_config,
            output_dir or self._settings.output_dir,
            errors,
        )
        summary = self._summarize(
            source_config,
            results,
            database_saved=database_saved,
            output_file=output_file,
            errors=errors,
        )
        log_event(
            logger,
            logging.INFO,
            "run_completed",
            source=summary.source,
            rows_processed=summary.rows_processed,
            prices_found=summary.prices_found,
            database_saved=summary.database_saved,
            output_file=summary.output_file,
        )
        return summary

    def _persist(
        self,
        db: Session,
        results: Sequence[ScrapeResult],
        source: SourceConfig,
        errors: list[str],
    ) -> bool:
        try:
            self._store_factory(db).persist(results, source=source)
        except PersistenceError as exc:
            errors.append(str(exc))
            log_event(
                logger,
                logging.ERROR,
                "persistence_failed",
                source=source.name,
                error=str(exc),
            )
            return False
        return True

    @staticmethod
    def _write_snapshot(
        results: Sequence[ScrapeResult],
        source: SourceConfig,
        output_dir: str,
        errors: list[str],
    ) -> str | None:
        try:
            path = CsvSnapshotWriter(output_dir=output_dir).write(results, source=source)
        except OSError as exc:
            errors.append(f"Snapshot write failed: {exc}")
            log_event(
                logger,
                logging.ERROR,
                "snapshot_failed",
                source=source.name,
                output_dir=output_dir,
                error=str(exc),
            )
            return None
        return str(path)

    @staticmethod
    def _summarize(
        source: SourceConfig,
        results: Sequence[ScrapeResult],
        *,
        database_saved: bool,
        output_file: str | None,
        errors: list[str] | None = None,
    ) -> PriceScrapeSummary:
        found = sum(1 for result in results if result.has_price)
        return PriceScrapeSummary(
            source=source.name,
            rows_processed=len(results),
            prices_found=found,
            missing_prices=len(results) - found,
            database_saved=database_saved,
            output_file=output_file,
            errors=list(errors or []),
        )


@lru_cache(maxsize=1)
def get_price_scraping_service() -> PriceScrapingService:
    """
    Build and cache price scraping service.
    """

    return PriceScrapingService()
