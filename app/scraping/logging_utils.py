"""
Structured logging helpers for price scraping runs.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

RUN_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


@contextmanager
def run_log_file(logger: logging.Logger, path: str | None) -> Iterator[logging.Logger]:
    """
    Attach a file handler to `logger` for the duration of one run.

    The handler is appended to (never truncates) and is always detached and
    closed on exit, so log state never outlives the run that created it.
    """

    if not path:
        yield logger
        return

    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(RUN_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    try:
        yield logger
    finally:
        logger.removeHandler(handler)
        handler.close()
