"""
Flat-file snapshot of one run's results.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path

from app.scraping.config.models import SourceConfig
from app.scraping.types import ScrapeResult


class CsvSnapshotWriter:
    """
    Writes `SKU, my_price, <Source>_price, <Source>_link`, replacing any previous file.
    """

    def __init__(self, *, output_dir: str | Path) -> None:
        self._output_dir = Path(output_dir)

    def path_for(self, source: SourceConfig) -> Path:
        return self._output_dir / source.snapshot_filename

    def write(self, results: Sequence[ScrapeResult], *, source: SourceConfig) -> Path:
        target = self.path_for(source)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(["SKU", "my_price", source.price_column, source.link_column])
            for result in results:
                writer.writerow(
                    [
                        result.sku,
                        result.baseline_price,
                        result.competitor_price,
                        result.competitor_url,
                    ]
                )
        return target
