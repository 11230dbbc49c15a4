from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


# --- Data models ---
@dataclass(frozen=True)
class Article:
    id: str
    title: str
    description: str
    content: str
    url: str
    image_url: str
    published_at: Optional[datetime]
    author: str
    source_name: str


@dataclass(frozen=True)
class QueryFilters:
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    source_name: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.date_from or self.date_to or self.source_name)

    def matches(self, article: Article) -> bool:
        """Source equality and an inclusive publish-date range."""
        if self.source_name and article.source_name != self.source_name:
            return False
        if self.date_from or self.date_to:
            if article.published_at is None:
                return False
            published = article.published_at.date()
            if self.date_from and published < self.date_from:
                return False
            if self.date_to and published > self.date_to:
                return False
        return True


@dataclass
class QueryState:
    search_term: str = ""
    page_number: int = 1
    filters: QueryFilters = field(default_factory=QueryFilters)


@dataclass
class Page:
    articles: List[Article]
    total_results: int

    @property
    def raw_count(self) -> int:
        return len(self.articles)


class FetchStatus(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
