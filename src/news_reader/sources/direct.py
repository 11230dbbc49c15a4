from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..cache import ResponseCache
from ..config import CACHE_TTL, DEFAULT_LANGUAGE, HTTP_TIMEOUT, NEWS_API_URL
from ..datamodels import Page
from ..normalizer import normalize_page
from ..proxy import NewsProxy
from ..upstream import NewsApiClient
from .base import ArticleSource

logger = logging.getLogger("news_reader")


class DirectSource(ArticleSource):
    """Runs the caching proxy in-process, without a backend server."""

    def __init__(self, config: Dict[str, Any], proxy: Optional[NewsProxy] = None):
        super().__init__(config)
        self.proxy = proxy or self._create_proxy()

    def _create_proxy(self) -> NewsProxy:
        client = NewsApiClient(
            api_key=self.config.get("api_key"),
            base_url=self.config.get("base_url") or NEWS_API_URL,
            language=self.config.get("language", DEFAULT_LANGUAGE),
            timeout=self.config.get("timeout", HTTP_TIMEOUT),
        )
        cache = ResponseCache(
            ttl=self.config.get("cache_ttl", CACHE_TTL),
            max_entries=self.config.get("cache_max_entries", 1),
        )
        return NewsProxy(client, cache)

    def fetch_page(self, query: str, page: int) -> Page:
        result = self.proxy.get(query, page)
        logger.debug("Page %d served with cache status %s", page, result.cache_status)
        return normalize_page(result.payload, page)
