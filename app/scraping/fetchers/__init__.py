"""
Fetcher exports.
"""

from app.scraping.fetchers.base import Fetcher
from app.scraping.fetchers.http_fetcher import HttpFetcher, build_request_headers
from app.scraping.fetchers.rendering_fetcher import RenderingFetcher

__all__ = ["Fetcher", "HttpFetcher", "RenderingFetcher", "build_request_headers"]
