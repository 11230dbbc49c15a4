from __future__ import annotations

from typing import Any, Dict, Type

from .base import ArticleSource
from .direct import DirectSource
from .proxy import ProxySource

AVAILABLE_SOURCES: Dict[str, Type[ArticleSource]] = {
    "proxy": ProxySource,
    "direct": DirectSource,
}


def get_source(config: Dict[str, Any]) -> ArticleSource:
    """Build the article source selected by ``config["source"]``."""
    source_name = config.get("source", "proxy")
    source_config = config.get("sources", {}).get(source_name, {})
    source_class = AVAILABLE_SOURCES.get(source_name)
    if not source_class:
        raise ValueError(f"Unknown source: {source_name}")
    return source_class(source_config)
