"""
requests-based page fetcher.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import requests

from app.scraping.config.models import PriceScrapingSettings, SourceConfig
from app.scraping.fetchers.base import Fetcher
from app.scraping.types import FetchResult

if TYPE_CHECKING:
    from app.scraping.parsing import ExtractionChain

# Malformed URLs never succeed on retry.
FATAL_REQUEST_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
)


def build_request_headers(settings: PriceScrapingSettings, source: SourceConfig) -> dict[str, str]:
    """
    Browser-like header set sent with every page request.
    """

    headers = {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Referer": settings.referer,
        "Cache-Control": "max-age=0",
    }
    headers.update(source.headers)
    return headers


class HttpFetcher(Fetcher):
    """
    One GET per attempt through a shared `requests.Session`.

    The session keeps connections and cookies across calls; nothing from a
    failed attempt's body is reused. Redirects are followed and gzip/deflate
    bodies are decoded by requests.

    The timeout is a `(connect, read)` pair. The read value bounds each wait for
    bytes from the socket, not the whole download, so a server that trickles
    its body can hold an attempt past the read timeout.
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
        super().__init__(
            settings=settings,
            source=source,
            session=session,
            extractor=extractor,
            logger=logger,
            sleep=sleep,
        )
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.request_headers = build_request_headers(settings, source)
        self.timeout = (settings.connect_timeout_seconds, settings.read_timeout_seconds)

    def _attempt(self, url: str) -> FetchResult:
        try:
            response = self.session.get(
                url,
                headers=self.request_headers,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except FATAL_REQUEST_ERRORS as exc:
            return FetchResult.terminal(f"Invalid URL {url}: {exc}")
        except requests.RequestException as exc:
            return FetchResult.retryable(f"{type(exc).__name__}: {exc}")

        if response.status_code >= 400:
            return FetchResult.retryable(
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        body = response.text
        if not body or not body.strip():
            return FetchResult.retryable("Empty response body", status_code=response.status_code)

        return FetchResult.success(body, status_code=response.status_code)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
