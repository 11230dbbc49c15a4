from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from news_reader.cache import ResponseCache
from news_reader.errors import NetworkTimeout, UpstreamRateLimited, UpstreamUnauthorized
from news_reader.proxy import NewsProxy, normalize_query
from news_reader.schemas import UpstreamResponse


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream():
    return MagicMock()


@pytest.fixture
def proxy(upstream, clock):
    return NewsProxy(upstream, ResponseCache(ttl=300, clock=clock))


def ok(payload):
    return UpstreamResponse.model_validate(payload)


def test_normalize_query():
    assert normalize_query("  Machine   Learning ") == "machine learning"
    assert normalize_query("") == "technology"
    assert normalize_query("   ") == "technology"


def test_miss_then_hit(proxy, upstream, payload_factory):
    upstream.search.return_value = ok(payload_factory(count=2))
    first = proxy.get("Tech", 1)
    second = proxy.get(" tech ", 1)
    assert first.cache_status == "MISS"
    assert second.cache_status == "HIT"
    assert second.payload == first.payload
    upstream.search.assert_called_once_with("tech", 1)


def test_expired_entry_is_refreshed(proxy, upstream, clock, payload_factory):
    upstream.search.return_value = ok(payload_factory(count=2))
    proxy.get("tech", 1)
    clock.now += 301
    proxy.get("tech", 1)
    assert upstream.search.call_count == 2


def test_rate_limit_serves_cached_payload(proxy, upstream, clock, payload_factory):
    upstream.search.return_value = ok(payload_factory(count=3))
    stored = proxy.get("tech", 1).payload
    clock.now += 1000
    upstream.search.side_effect = UpstreamRateLimited()

    result = proxy.get("tech", 1)
    assert result.payload == stored
    assert result.stale is True
    assert result.cache_status == "STALE"


def test_rate_limit_serves_entry_for_another_key(proxy, upstream, payload_factory):
    upstream.search.return_value = ok(payload_factory(count=3, prefix="other"))
    stored = proxy.get("other", 2).payload
    upstream.search.side_effect = UpstreamRateLimited()
    assert proxy.get("tech", 1).payload == stored


def test_rate_limit_without_cache_propagates(proxy, upstream):
    upstream.search.side_effect = UpstreamRateLimited()
    with pytest.raises(UpstreamRateLimited):
        proxy.get("tech", 1)


@pytest.mark.parametrize("error", [UpstreamUnauthorized(), NetworkTimeout()])
def test_other_errors_propagate_and_keep_cache(proxy, upstream, clock, payload_factory, error):
    upstream.search.return_value = ok(payload_factory(count=1))
    stored = proxy.get("tech", 1).payload
    clock.now += 301
    upstream.search.side_effect = error
    with pytest.raises(type(error)):
        proxy.get("tech", 1)
    assert proxy.cache.fallback(("tech", 1)).payload == stored
