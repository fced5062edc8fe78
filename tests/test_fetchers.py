"""
tests/test_fetchers.py

HTTP and rendering fetcher tests. The network is replaced by a mocked
`requests.Session` and the browser by a fake WebDriver.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from unittest import mock

import pytest
import requests
from selenium.common.exceptions import NoSuchElementException, WebDriverException
from urllib3.exceptions import MaxRetryError

from app.scraping.config.models import PriceScrapingSettings, RenderingConfig, SourceConfig
from app.scraping.fetchers import HttpFetcher, RenderingFetcher
from app.scraping.types import FailureKind, FetchStatus

URL = "https://www.naheed.pk/product-1"


def _response(status_code: int = 200, text: str = "<html>Rs. 1,500</html>") -> mock.Mock:
    return mock.Mock(status_code=status_code, text=text)


def _session(*outcomes: object) -> mock.Mock:
    session = mock.Mock(spec=requests.Session)
    session.get.side_effect = list(outcomes)
    return session


# ---------------------------------------------------------------------------
# HttpFetcher
# ---------------------------------------------------------------------------


class TestHttpFetcher:
    def _fetcher(
        self,
        settings: PriceScrapingSettings,
        source: SourceConfig,
        session: mock.Mock,
        sleeps: list[float],
    ) -> HttpFetcher:
        return HttpFetcher(settings=settings, source=source, session=session, sleep=sleeps.append)

    def test_fails_twice_then_succeeds(self, settings, source, sleeps) -> None:
        session = _session(
            requests.ConnectionError("connection refused"),
            requests.Timeout("read timed out"),
            _response(text="<html>ok</html>"),
        )

        result = self._fetcher(settings, source, session, sleeps).fetch(URL, max_retries=3)

        assert result.ok
        assert result.content == "<html>ok</html>"
        assert result.error is None
        assert result.attempts == 3
        assert sleeps == [2.0, 2.0]

    def test_exhaustion_is_terminal_not_raised(self, settings, source, sleeps) -> None:
        session = _session(*[requests.ConnectionError("down")] * 3)

        result = self._fetcher(settings, source, session, sleeps).fetch(URL)

        assert result.status is FetchStatus.TERMINAL_FAILURE
        assert result.failure is FailureKind.NETWORK_FAILURE
        assert result.attempts == 3
        assert session.get.call_count == 3
        assert len(sleeps) == 2

    def test_http_error_status_is_retried(self, settings, source, sleeps) -> None:
        session = _session(_response(status_code=503), _response(status_code=200))

        result = self._fetcher(settings, source, session, sleeps).fetch(URL)

        assert result.ok
        assert result.status_code == 200
        assert session.get.call_count == 2

    def test_persistent_http_error_keeps_status_code(self, settings, source, sleeps) -> None:
        session = _session(*[_response(status_code=404)] * 3)

        result = self._fetcher(settings, source, session, sleeps).fetch(URL)

        assert not result.ok
        assert result.status_code == 404

    def test_empty_body_is_retried(self, settings, source, sleeps) -> None:
        session = _session(_response(text="   "), _response(text="<html>Rs. 900</html>"))

        result = self._fetcher(settings, source, session, sleeps).fetch(URL)

        assert result.ok
        assert result.attempts == 2

    def test_invalid_url_is_not_retried(self, settings, source, sleeps) -> None:
        session = _session(requests.exceptions.MissingSchema("No scheme supplied"))

        result = self._fetcher(settings, source, session, sleeps).fetch("naheed.pk/product")

        assert result.status is FetchStatus.TERMINAL_FAILURE
        assert session.get.call_count == 1
        assert sleeps == []

    def test_request_shape(self, settings, make_source, sleeps) -> None:
        source = make_source(headers={"Accept-Language": "en-PK"})
        session = _session(_response())

        self._fetcher(settings, source, session, sleeps).fetch(URL)

        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == (15.0, 30.0)
        assert kwargs["allow_redirects"] is True
        headers = kwargs["headers"]
        assert headers["User-Agent"] == settings.user_agent
        assert headers["Referer"] == settings.referer
        assert headers["Connection"] == "keep-alive"
        assert headers["Accept-Encoding"] == "gzip, deflate"
        assert headers["Accept-Language"] == "en-PK"

    def test_injected_session_is_left_open(self, settings, source, sleeps) -> None:
        session = _session()

        self._fetcher(settings, source, session, sleeps).close()

        session.close.assert_not_called()


# ---------------------------------------------------------------------------
# RenderingFetcher
# ---------------------------------------------------------------------------


class FakeElement:
    def __init__(self, text: str) -> None:
        self.text = text


class FakeDriver:
    def __init__(
        self,
        *,
        price_text: str | None = None,
        variant_texts: tuple[str, ...] = (),
        page_source: str = "<html></html>",
        get_error: Exception | None = None,
    ) -> None:
        self.title = "Product"
        self.page_source = page_source
        self.visited: list[str] = []
        self.quit_calls = 0
        self._price_text = price_text
        self._variant_texts = variant_texts
        self._get_error = get_error

    def get(self, url: str) -> None:
        self.visited.append(url)
        if self._get_error is not None:
            raise self._get_error

    def find_element(self, by: str, value: str) -> FakeElement:
        if self._price_text is None:
            raise NoSuchElementException(value)
        return FakeElement(self._price_text)

    def find_elements(self, by: str, value: str) -> list[FakeElement]:
        return [FakeElement(text) for text in self._variant_texts]

    def quit(self) -> None:
        self.quit_calls += 1


@pytest.fixture()
def metro(make_source: Callable[..., SourceConfig]) -> SourceConfig:
    return make_source(
        name="Metro",
        link_column_index=4,
        min_columns=5,
        fetcher_type="rendering",
        min_price=Decimal("1"),
        max_price=Decimal("100000"),
        rendering=RenderingConfig(
            price_selector="p.details-price",
            fallback_selector="p.variant-price",
            settle_seconds=5.0,
            wait_timeout_seconds=0.01,
        ),
    )


class TestRenderingFetcher:
    def _fetcher(self, settings, source, driver_factory, sleeps) -> RenderingFetcher:
        return RenderingFetcher(
            settings=settings,
            source=source,
            sleep=sleeps.append,
            driver_factory=driver_factory,
        )

    def test_reads_primary_price_element(self, settings, metro, sleeps) -> None:
        driver = FakeDriver(price_text="Rs. 1,299")

        result = self._fetcher(settings, metro, lambda: driver, sleeps).fetch(URL)

        assert result.ok
        assert result.price == "1299.00"
        assert driver.visited == [URL]
        assert sleeps == [5.0]
        assert driver.quit_calls == 1

    def test_lowest_variant_price_on_timeout(self, settings, metro, sleeps) -> None:
        driver = FakeDriver(variant_texts=("Rs. 1,499", "Rs. 999", "Out of stock"))

        result = self._fetcher(settings, metro, lambda: driver, sleeps).fetch(URL)

        assert result.price == "999.00"
        assert driver.quit_calls == 1

    def test_hands_page_source_to_extraction_when_nothing_rendered(
        self, settings, metro, sleeps
    ) -> None:
        page = '<meta property="product:price:amount" content="450">'
        driver = FakeDriver(page_source=page)

        result = self._fetcher(settings, metro, lambda: driver, sleeps).fetch(URL)

        assert result.ok
        assert result.price is None
        assert result.content == page

    def test_automation_error_is_terminal_and_session_quit(self, settings, metro, sleeps) -> None:
        driver = FakeDriver(get_error=WebDriverException("session crashed"))
        factory = mock.Mock(return_value=driver)

        result = self._fetcher(settings, metro, factory, sleeps).fetch(URL)

        assert result.status is FetchStatus.TERMINAL_FAILURE
        assert result.failure is FailureKind.AUTOMATION_FAILURE
        assert factory.call_count == 1
        assert driver.quit_calls == 1

    def test_unreachable_automation_server(self, settings, metro, sleeps) -> None:
        factory = mock.Mock(side_effect=MaxRetryError(None, settings.webdriver_url))

        result = self._fetcher(settings, metro, factory, sleeps).fetch(URL)

        assert result.failure is FailureKind.AUTOMATION_FAILURE
        assert settings.webdriver_url in (result.error or "")

    def test_requires_rendering_config(self, settings, source) -> None:
        with pytest.raises(ValueError):
            RenderingFetcher(settings=settings, source=source)
