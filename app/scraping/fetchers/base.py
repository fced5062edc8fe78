"""
Fetcher abstraction with an explicit bounded retry loop.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING

from app.scraping.config.models import PriceScrapingSettings, SourceConfig
from app.scraping.logging_utils import log_event
from app.scraping.types import FailureKind, FetchResult, FetchStatus

if TYPE_CHECKING:
    import requests

    from app.scraping.parsing import ExtractionChain


class Fetcher(ABC):
    """
    Retrieves page content for one URL, retrying transient failures.

    Subclasses implement `_attempt`, which performs exactly one try and
    classifies its outcome. `fetch` never raises for network or automation
    problems; exhausting the attempts yields a terminal `FetchResult`.

    Every fetcher takes the same keyword arguments so the registry can build
    any of them uniformly. `session` and `extractor` are kept only by the
    subclasses that use them.
    """

    def __init__(
        self,
        *,
        settings: PriceScrapingSettings,
        source: SourceConfig,
        session: requests.Session | None = None,
        extractor: ExtractionChain | None = None,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.source = source
        self._logger = logger or logging.getLogger(__name__)
        self._sleep = sleep

    def fetch(self, url: str, *, max_retries: int | None = None) -> FetchResult:
        attempts_allowed = max(1, self.settings.max_retries if max_retries is None else max_retries)
        last_failure = FetchResult.retryable(f"No attempt made for {url}")

        for attempt in range(1, attempts_allowed + 1):
            result = self._attempt(url)
            if result.ok:
                return replace(result, attempts=attempt)

            log_event(
                self._logger,
                logging.WARNING,
                "fetch_attempt_failed",
                source=self.source.name,
                url=url,
                attempt=attempt,
                max_attempts=attempts_allowed,
                status_code=result.status_code,
                error=result.error,
            )
            if result.status is FetchStatus.TERMINAL_FAILURE:
                return replace(result, attempts=attempt)

            last_failure = result
            if attempt < attempts_allowed:
                self._sleep(self.settings.retry_delay_seconds)

        log_event(
            self._logger,
            logging.ERROR,
            "fetch_exhausted",
            source=self.source.name,
            url=url,
            attempts=attempts_allowed,
        )
        return replace(
            FetchResult.terminal(
                f"Failed to fetch {url} after {attempts_allowed} attempts: {last_failure.error}",
                failure=last_failure.failure or FailureKind.NETWORK_FAILURE,
                status_code=last_failure.status_code,
            ),
            attempts=attempts_allowed,
        )

    def close(self) -> None:
        """
        Release resources held across calls.
        """

    @abstractmethod
    def _attempt(self, url: str) -> FetchResult:
        """
        Perform one try and classify it as success, retryable or terminal.
        """
