"""
Fetcher class registry and factory.
"""

from __future__ import annotations

import importlib
import logging
import time
from collections.abc import Callable, Mapping

import requests

from app.scraping.config.models import PriceScrapingSettings, SourceConfig
from app.scraping.fetchers import Fetcher, HttpFetcher, RenderingFetcher
from app.scraping.parsing import ExtractionChain


class FetcherRegistry:
    """
    Fetcher registry supporting built-ins and dynamic import paths.
    """

    def __init__(self, registrations: Mapping[str, type[Fetcher]] | None = None) -> None:
        builtins: dict[str, type[Fetcher]] = {
            "http": HttpFetcher,
            "rendering": RenderingFetcher,
        }
        if registrations:
            builtins.update(registrations)
        self._registrations = builtins

    def register(self, *, fetcher_type: str, fetcher_class: type[Fetcher]) -> None:
        self._registrations[fetcher_type.strip().lower()] = fetcher_class

    def create_fetcher(
        self,
        *,
        source: SourceConfig,
        settings: PriceScrapingSettings,
        session: requests.Session | None,
        extractor: ExtractionChain,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Fetcher:
        fetcher_class = self._resolve_fetcher_class(source)
        return fetcher_class(
            settings=settings,
            source=source,
            session=session,
            extractor=extractor,
            logger=logger,
            sleep=sleep,
        )

    def _resolve_fetcher_class(self, source: SourceConfig) -> type[Fetcher]:
        if ":" in source.fetcher_type:
            return self._load_dynamic_class(source.fetcher_type)

        resolved = self._registrations.get(source.fetcher_type.strip().lower())
        if resolved is None:
            allowed = ", ".join(sorted(self._registrations.keys()))
            raise ValueError(
                f"Unknown fetcher_type='{source.fetcher_type}' for source='{source.name}'. "
                f"Allowed types: {allowed}."
            )
        return resolved

    @staticmethod
    def _load_dynamic_class(path: str) -> type[Fetcher]:
        module_path, class_name = path.split(":", 1)
        if not module_path or not class_name:
            raise ValueError(f"Invalid fetcher_type '{path}'. Use 'module.path:ClassName'.")

        module = importlib.import_module(module_path)
        loaded = getattr(module, class_name, None)
        if loaded is None:
            raise ValueError(f"Unable to resolve fetcher class '{path}'.")
        if not isinstance(loaded, type) or not issubclass(loaded, Fetcher):
            raise ValueError(f"Class '{path}' must inherit from Fetcher.")
        return loaded
