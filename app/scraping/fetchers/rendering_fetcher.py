"""
Remote WebDriver fetcher for pages whose price is rendered client-side.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from decimal import Decimal
from typing import TYPE_CHECKING

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait
from urllib3.exceptions import HTTPError as TransportError

from app.scraping.config.models import PriceScrapingSettings, SourceConfig
from app.scraping.fetchers.base import Fetcher
from app.scraping.logging_utils import log_event
from app.scraping.parsing import ExtractionChain
from app.scraping.types import FailureKind, FetchResult

if TYPE_CHECKING:
    import requests

DriverFactory = Callable[[], WebDriver]


class RenderingFetcher(Fetcher):
    """
    Drives one browser session per URL against a remote automation server.

    After a fixed settle delay the fetcher waits (bounded) for the source's
    primary price element. If it never appears, every element matching the
    broader fallback selector is read and the lowest valid price wins, which
    covers variant listings. When neither yields a price the rendered page
    source is returned so the regular extraction chain can try it.

    The session is quit on every exit path. Automation and connection errors
    are terminal for the URL; they are never retried.
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
        driver_factory: DriverFactory | None = None,
    ) -> None:
        super().__init__(
            settings=settings,
            source=source,
            session=session,
            extractor=extractor,
            logger=logger,
            sleep=sleep,
        )
        if source.rendering is None:
            raise ValueError(f"Source '{source.name}' has no rendering config.")
        self.rendering = source.rendering
        self._extractor = extractor or ExtractionChain.for_source(source, logger=logger)
        self._driver_factory = driver_factory or self._create_remote_driver

    def _create_remote_driver(self) -> WebDriver:
        options = webdriver.ChromeOptions()
        options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument(f"--user-agent={self.settings.user_agent}")
        return webdriver.Remote(command_executor=self.settings.webdriver_url, options=options)

    def _attempt(self, url: str) -> FetchResult:
        driver: WebDriver | None = None
        try:
            driver = self._driver_factory()
            driver.get(url)
            self._sleep(self.rendering.settle_seconds)
            log_event(
                self._logger,
                logging.DEBUG,
                "page_rendered",
                source=self.source.name,
                url=url,
                title=driver.title,
            )

            price = self._read_price(driver)
            if price is not None:
                return FetchResult.success(price, price=price)
            return FetchResult.success(driver.page_source or "")
        except (WebDriverException, TransportError, OSError) as exc:
            return FetchResult.terminal(
                f"Browser automation failed at {self.settings.webdriver_url}: {exc}",
                failure=FailureKind.AUTOMATION_FAILURE,
            )
        finally:
            if driver is not None:
                self._quit(driver)

    def _read_price(self, driver: WebDriver) -> str | None:
        try:
            element = WebDriverWait(driver, self.rendering.wait_timeout_seconds).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, self.rendering.price_selector))
            )
        except TimeoutException:
            return self._lowest_price(driver)
        return self._extractor.extract_from_text(element.text)

    def _lowest_price(self, driver: WebDriver) -> str | None:
        prices: list[Decimal] = []
        for element in driver.find_elements(By.CSS_SELECTOR, self.rendering.fallback_selector):
            price = self._extractor.extract_from_text(element.text)
            if price is not None:
                prices.append(Decimal(price))

        if not prices:
            return None
        log_event(
            self._logger,
            logging.DEBUG,
            "lowest_variant_price",
            source=self.source.name,
            candidates=len(prices),
        )
        return self._extractor.validator.format(min(prices))

    def _quit(self, driver: WebDriver) -> None:
        try:
            driver.quit()
        except (WebDriverException, TransportError, OSError) as exc:
            log_event(
                self._logger,
                logging.WARNING,
                "browser_quit_failed",
                source=self.source.name,
                error=str(exc),
            )
