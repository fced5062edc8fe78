"""
Fixed-delay request pacing for sequential catalog walks.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class RequestPacer:
    """
    Sleeps a fixed delay before every scrape call past a short warm-up window.

    Rows are identified by their zero-based position among the catalog's data
    rows, so the warm-up covers the first data rows of the file regardless of
    how many of them carried a link. Past the window the delay is never
    skipped, whatever happened to the previous row.

    Positions include rows the catalog reader drops, so a narrow or SKU-less
    row near the top still consumes a warm-up slot.
    """

    def __init__(
        self,
        *,
        delay_seconds: float,
        warmup_rows: int,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._delay_seconds = max(0.0, delay_seconds)
        self._warmup_rows = max(0, warmup_rows)
        self._sleep = sleep

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    def should_wait(self, data_row_index: int) -> bool:
        return data_row_index >= self._warmup_rows and self._delay_seconds > 0

    def wait(self, *, data_row_index: int) -> float:
        """
        Sleep as needed before the scrape call for `data_row_index`.

        Returns the number of seconds slept.
        """

        if not self.should_wait(data_row_index):
            return 0.0
        self._sleep(self._delay_seconds)
        return self._delay_seconds
