"""
Tabular catalog reader.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from app.scraping.config.models import SourceConfig
from app.scraping.logging_utils import log_event
from app.scraping.types import CatalogRow

HEADER_ROWS = 2
SKU_COLUMN = 0
BASELINE_PRICE_COLUMN = 1


class CatalogReader:
    """
    Reads the usable data rows of a CSV catalog for one source.

    The first two rows are headers and are always skipped. Data rows may have
    any width; a row is dropped when it is narrower than the source's minimum
    or when its SKU is blank. Each returned row carries its zero-based position
    among all data rows, which drives request pacing. Dropped rows still
    count toward that position.
    """

    def __init__(self, *, source: SourceConfig, logger: logging.Logger | None = None) -> None:
        self._source = source
        self._logger = logger or logging.getLogger(__name__)

    def read(self, catalog_path: str | Path) -> list[tuple[int, CatalogRow]]:
        """
        Parse the whole catalog before any row is handed out.

        Decoding and CSV format errors surface here as `ValueError`, before a
        single page has been fetched.
        """

        path = Path(catalog_path)
        if not path.is_file():
            raise FileNotFoundError(f"Catalog file not found: {path}")

        rows: list[tuple[int, CatalogRow]] = []
        try:
            with path.open("r", encoding="utf-8-sig", newline="") as handle:
                for line_number, cells in enumerate(csv.reader(handle), start=1):
                    if line_number <= HEADER_ROWS:
                        continue
                    row = self._parse_row(cells, line_number)
                    if row is not None:
                        rows.append((line_number - HEADER_ROWS - 1, row))
        except UnicodeDecodeError as exc:
            raise ValueError(f"Catalog must be UTF-8 encoded: {path}") from exc
        except csv.Error as exc:
            raise ValueError(f"Invalid catalog CSV format in {path}: {exc}") from exc
        return rows

    def _parse_row(self, cells: list[str], line_number: int) -> CatalogRow | None:
        if len(cells) < self._source.min_columns:
            log_event(
                self._logger,
                logging.DEBUG,
                "catalog_row_skipped",
                source=self._source.name,
                row=line_number,
                reason="too_few_columns",
                columns=len(cells),
            )
            return None

        sku = cells[SKU_COLUMN].strip()
        if not sku:
            log_event(
                self._logger,
                logging.DEBUG,
                "catalog_row_skipped",
                source=self._source.name,
                row=line_number,
                reason="empty_sku",
            )
            return None

        link_index = self._source.link_column_index
        competitor_url = cells[link_index].strip() if link_index < len(cells) else ""
        return CatalogRow(
            sku=sku,
            baseline_price=cells[BASELINE_PRICE_COLUMN].strip(),
            competitor_url=competitor_url,
            row_number=line_number,
        )
