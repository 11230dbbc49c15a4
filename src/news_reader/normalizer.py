from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from .config import (
    PLACEHOLDER_AUTHOR,
    PLACEHOLDER_DESCRIPTION,
    PLACEHOLDER_IMAGE_URL,
    PLACEHOLDER_SOURCE,
    PLACEHOLDER_TITLE,
)
from .datamodels import Article, Page
from .schemas import RawArticle, UpstreamResponse

logger = logging.getLogger("news_reader")


def normalize_article(
    raw: Union[RawArticle, Dict[str, Any]],
    page: int,
    index: int,
    fetched_at: Optional[float] = None,
) -> Article:
    """Build an Article from one upstream record.

    Pure apart from the clock: pass ``fetched_at`` to get the same
    synthesized id on every call.
    """
    if not isinstance(raw, RawArticle):
        raw = RawArticle.model_validate(raw)
    if fetched_at is None:
        fetched_at = time.time()

    description = _clean_text(raw.description) or PLACEHOLDER_DESCRIPTION
    source_name = (raw.source.name if raw.source else None) or PLACEHOLDER_SOURCE
    return Article(
        id=raw.id or synthesize_id(fetched_at, page, index),
        title=_clean_text(raw.title) or PLACEHOLDER_TITLE,
        description=description,
        content=_clean_text(raw.content) or description,
        url=raw.url or "",
        image_url=raw.urlToImage or PLACEHOLDER_IMAGE_URL,
        published_at=_parse_timestamp(raw.publishedAt),
        author=_clean_text(raw.author) or PLACEHOLDER_AUTHOR,
        source_name=source_name.strip() or PLACEHOLDER_SOURCE,
    )


def normalize_page(
    payload: Union[UpstreamResponse, Dict[str, Any]],
    page: int,
    fetched_at: Optional[float] = None,
) -> Page:
    if not isinstance(payload, UpstreamResponse):
        payload = UpstreamResponse.model_validate(payload)
    if fetched_at is None:
        fetched_at = time.time()
    articles: List[Article] = [
        normalize_article(raw, page, index, fetched_at)
        for index, raw in enumerate(payload.articles)
    ]
    return Page(articles=articles, total_results=payload.totalResults)


def synthesize_id(fetched_at: float, page: int, index: int) -> str:
    return f"{int(fetched_at * 1000)}-{page}-{index}"


def _clean_text(text: Optional[str]) -> str:
    if not text:
        return ""
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "lxml").get_text(" ")
    return " ".join(text.split())


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unparseable publishedAt %r", value)
        return None
