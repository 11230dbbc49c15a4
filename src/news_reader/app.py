from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Callable, List, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.worker import Worker, WorkerState
from textual.widgets import Header, Input, Static

from .config import DEFAULT_QUERY, HTTP_TIMEOUT, UI_DEFAULTS
from .datamodels import Article, FetchStatus, QueryFilters
from .favorites import FavoritesStore
from .messages import LoadMoreRequested
from .orchestrator import FetchOrchestrator
from .screens import (
    ArticleViewScreen,
    ErrorScreen,
    FavoritesScreen,
    FiltersScreen,
    UploadsScreen,
)
from .sources.base import ArticleSource
from .sources.manager import get_source
from .uploads import UploadClient
from .widgets import ArticleItem, ArticleListView, FeedMessage, StatusBar

logger = logging.getLogger("news_reader")

FETCH_WORKER = "articles_loader"
LIMIT_MESSAGE = "Result limit reached. Refine your search to see other articles."
EMPTY_MESSAGE = "No news found. Try changing the search or the filters."


def describe_filters(filters: QueryFilters) -> str:
    parts = []
    if filters.source_name:
        parts.append(f"source: {filters.source_name}")
    if filters.date_from:
        parts.append(f"from {filters.date_from.isoformat()}")
    if filters.date_to:
        parts.append(f"to {filters.date_to.isoformat()}")
    return "Filters: " + ", ".join(parts) if parts else ""


class NewsReaderApp(App):
    TITLE = "News Reader"
    SUB_TITLE = "Search, scroll and keep the news you like"

    CSS_PATH = "app.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "retry", "Retry"),
        Binding("f", "toggle_favorite", "Favorite"),
        Binding("F", "show_favorites", "Show Favorites"),
        Binding("u", "show_uploads", "Uploads"),
        Binding("ctrl+f", "show_filters", "Filters"),
        Binding("/", "focus_search", "Search"),
    ]

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        source: Optional[ArticleSource] = None,
        initial_query: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.config = config or {}
        self.source_error: Optional[str] = None
        if source is None:
            try:
                source = get_source(self.config)
            except ValueError as e:
                logger.error("Could not create article source: %s", e)
                self.source_error = str(e)
        self.source = source
        self.initial_query = initial_query or self.config.get("default_query") or DEFAULT_QUERY
        self.favorites = FavoritesStore()
        proxy_config = self.config.get("sources", {}).get("proxy", {})
        self.uploads = UploadClient(
            proxy_config.get("base_url"), timeout=proxy_config.get("timeout", HTTP_TIMEOUT)
        )
        self.orchestrator = FetchOrchestrator(source) if source else None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(placeholder="Search news...", id="search-input")
        yield Static("", id="filters-summary")
        yield FeedMessage("", id="feed-message")
        yield ArticleListView(id="articles-list", is_loading=self._is_loading)
        yield StatusBar()

    def on_mount(self) -> None:
        if self.orchestrator is None:
            self.push_screen(
                ErrorScreen(
                    "No article source configured",
                    f"{self.source_error}\n\nCheck `source` in `~/.config/news_reader/config.json`.",
                )
            )
            return

        keybindings_text = self.config.get("ui", {}).get(
            "statusbar_keybindings", UI_DEFAULTS["statusbar_keybindings"]
        )
        self.query_one(StatusBar).set_keybindings(keybindings_text)
        self.query_one(FeedMessage).clear()
        self.query_one("#search-input", Input).value = self.initial_query
        self.start_search(self.initial_query)
        self.query_one(ArticleListView).focus()

    def _is_loading(self) -> bool:
        return bool(self.orchestrator and self.orchestrator.loading)

    # --- fetching ---
    def _run_fetch(self, call: Callable[[], bool], description: str) -> None:
        self.query_one(StatusBar).loading_status = description
        self.run_worker(call, name=FETCH_WORKER, thread=True)

    def start_search(self, term: str) -> None:
        self.query_one(ArticleListView).clear()
        self.query_one(FeedMessage).clear()
        self._run_fetch(lambda: self.orchestrator.search(term), f"Searching '{term or DEFAULT_QUERY}'...")

    def apply_filters(self, filters: QueryFilters) -> None:
        self.query_one(ArticleListView).clear()
        self.query_one(FeedMessage).clear()
        self._run_fetch(
            lambda: self.orchestrator.set_filters(**asdict(filters)), "Applying filters..."
        )

    def on_load_more_requested(self, message: LoadMoreRequested) -> None:
        if self.orchestrator is None or not self.orchestrator.can_load_more:
            return
        page = self.orchestrator.current_page + 1
        self._run_fetch(self.orchestrator.load_more, f"Loading page {page}...")

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if getattr(event.worker, "name", None) != FETCH_WORKER:
            return
        if event.state is WorkerState.ERROR:
            logger.error("Article worker failed: %s", getattr(event.worker, "error", None))
            self.query_one(FeedMessage).show_error("Failed to load news.")
        if event.state in (WorkerState.SUCCESS, WorkerState.ERROR):
            self._render_articles()

    # --- rendering ---
    def _render_articles(self) -> None:
        orchestrator = self.orchestrator
        articles: List[Article] = orchestrator.articles
        list_view = self.query_one(ArticleListView)
        shown = [item.article.id for item in list_view.article_items()]

        if shown != [a.id for a in articles[: len(shown)]]:
            list_view.clear()
            shown = []
        for article in articles[len(shown):]:
            list_view.append(ArticleItem(article, self.favorites.is_favorite(article)))

        feed_message = self.query_one(FeedMessage)
        if orchestrator.error:
            feed_message.show_error(f"{orchestrator.error} Press r to retry.")
        elif orchestrator.limit_reached:
            feed_message.show_info(LIMIT_MESSAGE)
        elif orchestrator.status is FetchStatus.READY and not articles:
            feed_message.show_info(EMPTY_MESSAGE)
        else:
            feed_message.clear()

        self.query_one("#filters-summary", Static).update(describe_filters(orchestrator.filters))
        status = self.query_one(StatusBar)
        if orchestrator.loading:
            status.loading_status = "Loading..."
        else:
            status.loading_status = f"{len(articles)} article(s), {orchestrator.total_results} found"
        list_view.sync_trigger()

    def _refresh_favorite_marks(self, _: Any = None) -> None:
        for item in self.query_one(ArticleListView).article_items():
            item.set_favorite(self.favorites.is_favorite(item.article))

    # --- events & actions ---
    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search-input" and self.orchestrator is not None:
            self.start_search(event.value.strip())
            self.query_one(ArticleListView).focus()

    def on_list_view_selected(self, event: ArticleListView.Selected) -> None:
        if isinstance(event.item, ArticleItem):
            self.push_screen(
                ArticleViewScreen(event.item.article, self.favorites),
                self._refresh_favorite_marks,
            )

    def action_retry(self) -> None:
        if self.orchestrator is not None and not self.orchestrator.loading:
            self.query_one(ArticleListView).clear()
            self._run_fetch(self.orchestrator.retry, "Retrying...")

    def action_toggle_favorite(self) -> None:
        list_view = self.query_one(ArticleListView)
        if not list_view.has_focus:
            return
        item = list_view.highlighted_child
        if not isinstance(item, ArticleItem):
            return
        item.set_favorite(self.favorites.toggle(item.article))

    def action_show_favorites(self) -> None:
        self.push_screen(FavoritesScreen(self.favorites), self._refresh_favorite_marks)

    def action_show_uploads(self) -> None:
        self.push_screen(UploadsScreen(self.uploads))

    def action_show_filters(self) -> None:
        if self.orchestrator is None:
            return
        self.push_screen(
            FiltersScreen(self.orchestrator.filters, self.orchestrator.sources),
            self._on_filters_closed,
        )

    def _on_filters_closed(self, filters: Optional[QueryFilters]) -> None:
        if filters is None or filters == self.orchestrator.filters:
            return
        self.apply_filters(filters)

    def action_focus_search(self) -> None:
        """Focus the search input."""
        self.query_one("#search-input", Input).focus()
