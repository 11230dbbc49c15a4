from __future__ import annotations

from typing import Callable, List

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.reactive import reactive
from textual.widgets import ListItem, ListView, Static
from rich.text import Text

from .datamodels import Article
from .messages import LoadMoreRequested
from .scroll import InfiniteScrollTrigger

FAVORITE_MARK = "★"


def format_published(article: Article) -> str:
    if article.published_at is None:
        return ""
    return article.published_at.strftime("%Y-%m-%d")


# --- UI Widgets ---
class ArticleItem(ListItem):
    def __init__(self, article: Article, favorite: bool = False):
        super().__init__()
        self.article = article
        self.favorite = favorite

    def compose(self) -> ComposeResult:
        with Horizontal(classes="article-container"):
            yield Static(self._mark(), classes="article-favorite")
            yield Static(format_published(self.article), classes="article-date")
            yield Static(self.article.source_name, classes="article-source")
            yield Static(self.article.title, classes="article-title")

    def _mark(self) -> str:
        return FAVORITE_MARK if self.favorite else " "

    def set_favorite(self, favorite: bool) -> None:
        self.favorite = favorite
        self.query_one(".article-favorite", Static).update(self._mark())


class ArticleListView(ListView):
    """Article list that asks for more items when its end becomes visible."""

    def __init__(self, *children: ListItem, is_loading: Callable[[], bool], **kwargs):
        super().__init__(*children, **kwargs)
        self.trigger = InfiniteScrollTrigger(self._request_more, is_loading=is_loading)

    def _request_more(self) -> None:
        self.post_message(LoadMoreRequested())

    def article_items(self) -> List[ArticleItem]:
        return [c for c in self.children if isinstance(c, ArticleItem)]

    def sync_trigger(self) -> None:
        """Point the trigger at the current last item after a re-render."""
        items = self.article_items()
        self.trigger.observe(items[-1].article.id if items else None)
        self.trigger.rearm()
        self.call_after_refresh(self.check_sentinel)

    def check_sentinel(self) -> None:
        items = self.article_items()
        if not items:
            return
        last = items[-1]
        viewport_bottom = self.scroll_y + self.scrollable_content_region.height
        visible = viewport_bottom >= self.virtual_size.height - last.outer_size.height
        self.trigger.set_visible(last.article.id, visible)

    def watch_scroll_y(self, old_value: float, new_value: float) -> None:
        super().watch_scroll_y(old_value, new_value)
        self.check_sentinel()

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        self.call_after_refresh(self.check_sentinel)


class FeedMessage(Static):
    def show_error(self, message: str) -> None:
        self.display = True
        self.update(Text(message, style="bold red"))

    def show_info(self, message: str) -> None:
        self.display = True
        self.update(Text(message, style="italic"))

    def clear(self) -> None:
        self.update("")
        self.display = False


class StatusBar(Static):
    loading_status = reactive("")
    keybinding_hint = reactive("")

    def on_mount(self) -> None:
        self.update_display()

    def set_keybindings(self, hint: str) -> None:
        """Set the keybinding hint text."""
        self.keybinding_hint = hint

    def update_display(self) -> None:
        """Update the status bar display."""
        status_items = []
        if self.loading_status:
            status_items.append(self.loading_status)

        if self.keybinding_hint:
            status_items.append(self.keybinding_hint)

        self.update(" | ".join(status_items))

    def watch_loading_status(self, loading_status: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()
