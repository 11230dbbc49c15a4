from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from .cache import CacheKey, ResponseCache
from .config import DEFAULT_QUERY
from .errors import UpstreamRateLimited
from .upstream import NewsApiClient

logger = logging.getLogger("news_reader")


@dataclass
class ProxyResult:
    payload: Dict[str, Any]
    cached: bool = False
    stale: bool = False

    @property
    def cache_status(self) -> str:
        if self.stale:
            return "STALE"
        return "HIT" if self.cached else "MISS"


def normalize_query(query: str) -> str:
    normalized = " ".join((query or "").split()).lower()
    return normalized or DEFAULT_QUERY


class NewsProxy:
    """Serves upstream search pages through a response cache.

    A fresh entry short-circuits the upstream call. A rate-limited upstream
    call is answered from whatever the cache still holds; every other
    failure propagates and leaves the cache alone.
    """

    def __init__(self, client: NewsApiClient, cache: ResponseCache):
        self.client = client
        self.cache = cache

    def get(self, query: str, page: int = 1) -> ProxyResult:
        key: CacheKey = (normalize_query(query), page)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Serving %s from cache", key)
            return ProxyResult(payload=cached, cached=True)

        try:
            response = self.client.search(key[0], page)
        except UpstreamRateLimited:
            entry = self.cache.fallback(key)
            if entry is None:
                logger.warning("Rate limited on %s with nothing cached", key)
                raise
            logger.warning("Rate limited on %s, serving stale entry %s", key, entry.key)
            return ProxyResult(payload=entry.payload, cached=True, stale=True)

        payload = response.model_dump(mode="json", exclude_none=True)
        self.cache.set(key, payload)
        return ProxyResult(payload=payload)
