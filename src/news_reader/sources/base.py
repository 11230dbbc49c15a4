from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..datamodels import Page


class ArticleSource(ABC):
    """Abstract base class for a provider of normalized article pages."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    @abstractmethod
    def fetch_page(self, query: str, page: int) -> Page:
        """Return one normalized page for ``query``.

        Raises a :class:`~news_reader.errors.NewsError` on any failure.
        """
        pass
