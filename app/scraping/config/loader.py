"""
Environment + JSON config loader for price scraping.
"""

from __future__ import annotations

import json
import os
import re
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path

from db.config import load_env_files

from app.scraping.config.models import (
    PriceScrapingSettings,
    RenderingConfig,
    SelectorSpec,
    SourceConfig,
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SOURCE_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


@lru_cache(maxsize=1)
def get_price_scraping_settings() -> PriceScrapingSettings:
    """
    Return cached price scraping settings from environment variables.
    """

    load_env_files()
    return PriceScrapingSettings(
        sources_path=str(
            _resolve_path(
                _get_str_env("PRICE_SCRAPE_SOURCES_PATH", "app/scraping/config/sources.json")
            )
        ),
        catalog_path=_get_str_env("PRICE_SCRAPE_CATALOG_PATH", "catalog.csv"),
        output_dir=_get_str_env("PRICE_SCRAPE_OUTPUT_DIR", "."),
        user_agent=_get_str_env("PRICE_SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        referer=_get_str_env("PRICE_SCRAPE_REFERER", "https://www.google.com/"),
        connect_timeout_seconds=min(
            15.0,
            max(1.0, _get_float_env("PRICE_SCRAPE_CONNECT_TIMEOUT_SECONDS", 15.0)),
        ),
        read_timeout_seconds=min(
            30.0,
            max(1.0, _get_float_env("PRICE_SCRAPE_READ_TIMEOUT_SECONDS", 30.0)),
        ),
        max_retries=max(1, _get_int_env("PRICE_SCRAPE_MAX_RETRIES", 3)),
        retry_delay_seconds=max(0.0, _get_float_env("PRICE_SCRAPE_RETRY_DELAY_SECONDS", 2.0)),
        request_delay_seconds=max(
            0.0,
            _get_float_env("PRICE_SCRAPE_REQUEST_DELAY_SECONDS", 5.0),
        ),
        warmup_rows=max(0, _get_int_env("PRICE_SCRAPE_WARMUP_ROWS", 2)),
        webdriver_url=_get_str_env("PRICE_SCRAPE_WEBDRIVER_URL", "http://localhost:4444/wd/hub"),
        debug_html_dir=_get_optional_str_env("PRICE_SCRAPE_DEBUG_HTML_DIR"),
        log_file=_get_optional_str_env("PRICE_SCRAPE_LOG_FILE"),
    )


def load_source_configs(*, config_path: str) -> list[SourceConfig]:
    """
    Load source configurations from a JSON file.
    """

    path = _resolve_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Source config file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    sources = raw_data.get("sources", [])
    if not isinstance(sources, list):
        raise ValueError("Invalid source config: 'sources' must be a list.")

    parsed: list[SourceConfig] = []
    for entry in sources:
        if not isinstance(entry, dict):
            continue
        parsed.append(parse_source_config(entry))
    return parsed


def get_source_config(*, config_path: str, name: str) -> SourceConfig:
    """
    Return the enabled source named `name` (case-insensitive).
    """

    wanted = name.strip().lower()
    configs = load_source_configs(config_path=config_path)
    for config in configs:
        if config.name.lower() == wanted and config.enabled:
            return config

    allowed = ", ".join(sorted(config.name for config in configs if config.enabled))
    raise ValueError(f"Unknown or disabled source '{name}'. Available sources: {allowed}.")


def parse_source_config(entry: dict) -> SourceConfig:
    name = str(entry.get("name", "")).strip()
    if not SOURCE_NAME_PATTERN.match(name):
        raise ValueError(
            f"Invalid source name '{name}': use letters, digits and underscores, "
            "starting with a letter."
        )

    link_column_index = _optional_int(entry.get("link_column"))
    if link_column_index is None or link_column_index < 0:
        raise ValueError(f"Source '{name}' needs a non-negative 'link_column'.")

    min_columns = _optional_int(entry.get("min_columns"))
    if min_columns is None:
        min_columns = link_column_index + 1
    min_columns = max(min_columns, 2)

    min_price = _optional_decimal(entry.get("min_price"), Decimal("10"))
    max_price = _optional_decimal(entry.get("max_price"), Decimal("1000000"))
    if min_price < 0 or max_price < min_price:
        raise ValueError(f"Source '{name}' has an invalid price range {min_price}..{max_price}.")

    return SourceConfig(
        name=name,
        link_column_index=link_column_index,
        min_columns=min_columns,
        fetcher_type=_optional_str(entry.get("fetcher")) or "http",
        selectors=_normalize_selectors(entry.get("selectors", [])),
        patterns=_normalize_patterns(entry.get("patterns", [])),
        script_patterns=_normalize_patterns(entry.get("script_patterns", [])),
        use_default_selectors=_optional_bool(entry.get("use_default_selectors"), True),
        min_price=min_price,
        max_price=max_price,
        warmup_rows=_optional_int(entry.get("warmup_rows")),
        output_file=_optional_str(entry.get("output_file")),
        rendering=_normalize_rendering(entry.get("rendering")),
        headers=_normalize_headers(entry.get("headers", {})),
        enabled=_optional_bool(entry.get("enabled"), True),
    )


def _normalize_selectors(selectors: object) -> list[SelectorSpec]:
    if not isinstance(selectors, list):
        return []

    normalized: list[SelectorSpec] = []
    for item in selectors:
        if isinstance(item, str) and item.strip():
            normalized.append(SelectorSpec(css=item.strip()))
        elif isinstance(item, dict):
            css = _optional_str(item.get("css"))
            if css is None:
                continue
            normalized.append(SelectorSpec(css=css, attribute=_optional_str(item.get("attribute"))))
    return normalized


def _normalize_patterns(patterns: object) -> list[str]:
    if not isinstance(patterns, list):
        return []

    normalized: list[str] = []
    for item in patterns:
        if not isinstance(item, str) or not item.strip():
            continue
        try:
            re.compile(item)
        except re.error as exc:
            raise ValueError(f"Invalid price pattern {item!r}: {exc}") from exc
        normalized.append(item)
    return normalized


def _normalize_rendering(rendering: object) -> RenderingConfig | None:
    if not isinstance(rendering, dict):
        return None

    price_selector = _optional_str(rendering.get("price_selector"))
    fallback_selector = _optional_str(rendering.get("fallback_selector"))
    if price_selector is None or fallback_selector is None:
        raise ValueError("Rendering config needs both 'price_selector' and 'fallback_selector'.")

    settle = _optional_float(rendering.get("settle_seconds"))
    timeout = _optional_float(rendering.get("wait_timeout_seconds"))
    return RenderingConfig(
        price_selector=price_selector,
        fallback_selector=fallback_selector,
        settle_seconds=max(0.0, settle) if settle is not None else 5.0,
        wait_timeout_seconds=max(1.0, timeout) if timeout is not None else 20.0,
    )


def _normalize_headers(headers: object) -> dict[str, str]:
    if not isinstance(headers, dict):
        return {}

    normalized: dict[str, str] = {}
    for key, value in headers.items():
        if not isinstance(key, str) or not isinstance(value, str):
            continue
        if key.strip() and value.strip():
            normalized[key.strip()] = value.strip()
    return normalized


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _optional_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_decimal(value: object, default: Decimal) -> Decimal:
    if value is None:
        return default
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return default


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
