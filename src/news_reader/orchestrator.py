from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import List, Optional, Set

from .config import MAX_RESULTS, PAGE_SIZE
from .datamodels import Article, FetchStatus, Page, QueryFilters, QueryState
from .errors import NewsError
from .sources.base import ArticleSource

logger = logging.getLogger("news_reader")


@dataclass(frozen=True)
class _Request:
    generation: int
    term: str
    filters: QueryFilters
    page: int
    is_new_search: bool


class FetchOrchestrator:
    """Turns a search term and filters into a growing list of articles.

    Pages are requested one at a time from an :class:`ArticleSource`. Every
    request is tagged with the generation of the query session it belongs
    to; ``search`` and ``set_filters`` start a new generation, so a response
    that arrives for an older one is dropped instead of being merged into
    the new results.

    State is only mutated under ``_lock``; the network call itself runs
    outside it so the UI can start a new search while a page is loading.
    Filters apply to each page as it arrives and are not re-applied to
    pages already accumulated.
    """

    def __init__(
        self,
        source: ArticleSource,
        page_size: int = PAGE_SIZE,
        max_results: int = MAX_RESULTS,
    ):
        self.source = source
        self.page_size = page_size
        self.max_results = max_results
        self.query = QueryState()

        self.loading = False
        self.error: Optional[str] = None
        self.has_more = True
        self.current_page = 1
        self.total_results = 0
        self.status = FetchStatus.IDLE

        self._articles: List[Article] = []
        self._seen_ids: Set[str] = set()
        self._source_names: Set[str] = set()
        self._raw_count = 0
        self._generation = 0
        self._lock = threading.RLock()

    # --- read-only views ---
    @property
    def articles(self) -> List[Article]:
        with self._lock:
            return list(self._articles)

    @property
    def search_term(self) -> str:
        return self.query.search_term

    @property
    def filters(self) -> QueryFilters:
        return self.query.filters

    @property
    def sources(self) -> List[str]:
        """Source names seen since the last search, for the source filter."""
        with self._lock:
            return sorted(self._source_names)

    @property
    def can_load_more(self) -> bool:
        return (
            not self.loading
            and self.has_more
            and self.current_page * self.page_size < self.max_results
        )

    @property
    def limit_reached(self) -> bool:
        if self.has_more or self.error:
            return False
        return (
            self._raw_count >= self.max_results
            or self.current_page * self.page_size >= self.max_results
        )

    # --- operations ---
    def search(self, term: str) -> bool:
        with self._lock:
            self.query = QueryState(search_term=term, filters=self.query.filters)
            self._source_names.clear()
            self._reset()
            request = self._begin(1, is_new_search=True)
        return self._complete(request)

    def set_filters(self, **changes) -> bool:
        """Merge ``changes`` into the filters and restart the search.

        A ``None`` value clears that filter.
        """
        with self._lock:
            self.query = QueryState(
                search_term=self.query.search_term,
                filters=replace(self.query.filters, **changes),
            )
            self._reset()
            request = self._begin(1, is_new_search=True)
        return self._complete(request)

    def clear_filters(self) -> bool:
        return self.set_filters(date_from=None, date_to=None, source_name=None)

    def retry(self) -> bool:
        return self.search(self.query.search_term)

    def fetch_page(self, page: int, is_new_search: bool = False) -> bool:
        with self._lock:
            request = self._begin(page, is_new_search)
        return self._complete(request)

    def load_more(self) -> bool:
        with self._lock:
            if not self.can_load_more:
                return False
            request = self._begin(self.current_page + 1, is_new_search=False)
        return self._complete(request)

    # --- internals ---
    def _reset(self) -> None:
        self._generation += 1
        self._clear_results()
        self.has_more = True
        self.current_page = 1
        self.total_results = 0
        self.error = None

    def _clear_results(self) -> None:
        self._articles = []
        self._seen_ids = set()
        self._raw_count = 0

    def _begin(self, page: int, is_new_search: bool) -> Optional[_Request]:
        if (page - 1) * self.page_size >= self.max_results:
            logger.debug("Page %d is past the %d result ceiling", page, self.max_results)
            self.has_more = False
            return None
        self.loading = True
        self.error = None
        self.status = FetchStatus.LOADING
        return _Request(
            generation=self._generation,
            term=self.query.search_term,
            filters=self.query.filters,
            page=page,
            is_new_search=is_new_search,
        )

    def _complete(self, request: Optional[_Request]) -> bool:
        if request is None:
            return False
        try:
            result = self.source.fetch_page(request.term, request.page)
        except NewsError as e:
            self._fail(request, e)
            return False
        except Exception as e:
            logger.exception("Article source failed unexpectedly: %s", e)
            self._fail(request, NewsError(str(e)))
            return False
        return self._apply(request, result)

    def _is_stale(self, request: _Request) -> bool:
        if request.generation != self._generation:
            logger.debug(
                "Dropping page %d for %r (generation %d, current %d)",
                request.page,
                request.term,
                request.generation,
                self._generation,
            )
            return True
        return False

    def _fail(self, request: _Request, error: NewsError) -> None:
        with self._lock:
            if self._is_stale(request):
                return
            logger.error("Fetching page %d for %r failed: %s", request.page, request.term, error)
            self.loading = False
            self.error = error.user_message
            self.has_more = False
            self.status = FetchStatus.ERROR
            if request.is_new_search:
                self._clear_results()

    def _apply(self, request: _Request, result: Page) -> bool:
        with self._lock:
            if self._is_stale(request):
                return False
            if request.is_new_search:
                self._clear_results()

            added = 0
            for article in result.articles:
                self._source_names.add(article.source_name)
                if article.id in self._seen_ids or not request.filters.matches(article):
                    continue
                self._seen_ids.add(article.id)
                self._articles.append(article)
                added += 1

            self._raw_count += result.raw_count
            self.total_results = result.total_results
            self.has_more = result.raw_count == self.page_size and self._raw_count < min(
                result.total_results, self.max_results
            )
            self.current_page = 1 if request.is_new_search else request.page
            self.query.page_number = self.current_page
            self.loading = False
            self.status = FetchStatus.READY
            logger.info(
                "Page %d for %r: %d raw, %d shown, %d total, has_more=%s",
                request.page,
                request.term,
                result.raw_count,
                added,
                len(self._articles),
                self.has_more,
            )
            return True
