from __future__ import annotations

import logging
import webbrowser
from datetime import date
from typing import List, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.worker import Worker, WorkerState
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Markdown,
    Select,
)

from .datamodels import Article, QueryFilters
from .favorites import FavoritesStore, favorite_key
from .schemas import FileOut
from .uploads import UploadClient
from .widgets import StatusBar, format_published

logger = logging.getLogger("news_reader")


def article_markdown(article: Article) -> str:
    byline = " · ".join(
        part for part in (article.source_name, article.author, format_published(article)) if part
    )
    parts = [f"# {article.title}", f"*{byline}*", article.description]
    if article.content and article.content != article.description:
        parts.append(article.content)
    if article.url:
        parts.append(f"[Read the full article]({article.url})")
    return "\n\n".join(parts)


class ArticleViewScreen(Screen):
    BINDINGS = [
        Binding("escape,q,b,left", "close", "Back"),
        Binding("o", "open_in_browser", "Open in browser"),
        Binding("f", "toggle_favorite", "Favorite"),
        Binding("down", "scroll_down", "Scroll Down"),
        Binding("up", "scroll_up", "Scroll Up"),
    ]

    def __init__(self, article: Article, favorites: FavoritesStore):
        super().__init__()
        self.article = article
        self.favorites = favorites

    def compose(self) -> ComposeResult:
        yield Header()
        yield StatusBar()
        yield VerticalScroll(
            Markdown(article_markdown(self.article), id="article-markdown"),
            id="article-scroll",
        )

    def on_mount(self) -> None:
        self.title = self.article.title
        self.query_one("#article-scroll").focus()
        self._update_sub_title()
        self.query_one(StatusBar).set_keybindings(
            "[b cyan]o[/] open  [b cyan]f[/] favorite  [b cyan]esc[/] back"
        )

    def _update_sub_title(self) -> None:
        word_count = len(self.article.content.split())
        time_to_read = max(1, round(word_count / 200))
        mark = "★ " if self.favorites.is_favorite(self.article) else ""
        self.sub_title = f"{mark}~{time_to_read} min read"

    def action_close(self) -> None:
        self.dismiss()

    def action_open_in_browser(self) -> None:
        if self.article.url:
            webbrowser.open(self.article.url)

    def action_toggle_favorite(self) -> None:
        added = self.favorites.toggle(self.article)
        self.app.notify("Added to favorites." if added else "Removed from favorites.")
        self._update_sub_title()

    def action_scroll_down(self) -> None:
        self.query_one("#article-scroll").scroll_down()

    def action_scroll_up(self) -> None:
        self.query_one("#article-scroll").scroll_up()


class ErrorScreen(Screen):
    BINDINGS = [Binding("q", "app.quit", "Quit")]

    def __init__(self, title: str, message: str):
        super().__init__()
        self.title = title
        self.message = message

    def compose(self) -> ComposeResult:
        yield Header()
        yield Label(self.title, classes="error-title")
        yield Markdown(self.message)
        yield Footer()


class FavoritesScreen(Screen):
    BINDINGS = [
        Binding("escape,q,b,left", "close", "Back"),
        Binding("d", "delete_favorite", "Delete"),
    ]

    def __init__(self, favorites: FavoritesStore):
        super().__init__()
        self.favorites = favorites

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()
        yield DataTable(id="favorites-table")

    def on_mount(self) -> None:
        self.title = "Favorites"
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.add_column("Date", key="date")
        table.add_column("Source", key="source")
        table.add_column("Title", key="title")
        self._populate()

    def on_screen_resume(self) -> None:
        self._populate()

    def _populate(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for article in self.favorites:
            table.add_row(
                format_published(article), article.source_name, article.title, key=favorite_key(article)
            )
        if not len(self.favorites):
            self.sub_title = "No favorite articles yet"
        else:
            self.sub_title = f"{len(self.favorites)} article(s)"

    def _selected(self) -> Optional[Article]:
        table = self.query_one(DataTable)
        if not table.is_valid_row_index(table.cursor_row):
            return None
        key = str(table.ordered_rows[table.cursor_row].key.value)
        return next((a for a in self.favorites if favorite_key(a) == key), None)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        article = self._selected()
        if article:
            self.app.push_screen(ArticleViewScreen(article, self.favorites))

    def action_close(self) -> None:
        self.dismiss()

    def action_delete_favorite(self) -> None:
        """Remove the selected article from favorites."""
        article = self._selected()
        if article is None:
            return
        self.favorites.remove(favorite_key(article))
        self._populate()
        self.app.notify("Removed from favorites.")


class FiltersScreen(Screen):
    """Edit the source and publish-date filters.

    Dismisses with the new :class:`QueryFilters`, or ``None`` when cancelled.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, filters: QueryFilters, sources: List[str]):
        super().__init__()
        self.filters = filters
        self.sources = sources

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()
        with Vertical(id="filters-form"):
            yield Label("Source", classes="settings-label")
            yield Select(
                [(name, name) for name in self.sources],
                id="source-select",
                prompt="All sources",
            )
            yield Label("Published from (YYYY-MM-DD)", classes="settings-label")
            yield Input(placeholder="e.g. 2024-01-31", id="date-from")
            yield Label("Published to (YYYY-MM-DD)", classes="settings-label")
            yield Input(placeholder="e.g. 2024-02-29", id="date-to")
            with Horizontal(classes="settings-buttons"):
                yield Button("Apply", id="apply-filters", classes="settings-button")
                yield Button("Clear", id="clear-filters", classes="settings-button")

    def on_mount(self) -> None:
        self.title = "Filters"
        if self.filters.source_name in self.sources:
            self.query_one("#source-select", Select).value = self.filters.source_name
        if self.filters.date_from:
            self.query_one("#date-from", Input).value = self.filters.date_from.isoformat()
        if self.filters.date_to:
            self.query_one("#date-to", Input).value = self.filters.date_to.isoformat()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "apply-filters":
            self.apply_filters()
        elif event.button.id == "clear-filters":
            self.dismiss(QueryFilters())

    def apply_filters(self) -> None:
        try:
            date_from = _parse_date(self.query_one("#date-from", Input).value)
            date_to = _parse_date(self.query_one("#date-to", Input).value)
        except ValueError:
            self.app.notify("Dates must look like YYYY-MM-DD.", severity="error")
            return
        if date_from and date_to and date_from > date_to:
            self.app.notify("The start date is after the end date.", severity="error")
            return

        source = selected_source(self.query_one("#source-select", Select).value)
        self.dismiss(QueryFilters(date_from=date_from, date_to=date_to, source_name=source))

    def action_cancel(self) -> None:
        self.dismiss(None)


class UploadsScreen(Screen):
    """Files stored on the backend: upload by path, open, delete."""

    BINDINGS = [
        Binding("escape", "close", "Back"),
        Binding("d", "delete_file", "Delete"),
        Binding("o", "open_file", "Open in browser"),
        Binding("ctrl+r", "refresh_files", "Refresh"),
    ]

    def __init__(self, uploads: UploadClient):
        super().__init__()
        self.uploads = uploads

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()
        yield Input(placeholder="Path of a file to upload, then Enter", id="upload-path")
        yield DataTable(id="files-table")

    def on_mount(self) -> None:
        self.title = "Uploads"
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.add_column("File", key="filename")
        table.add_column("Size", key="size")
        self.action_refresh_files()

    def _run(self, work, name: str) -> None:
        self.run_worker(work, name=name, thread=True, exit_on_error=False)

    def action_refresh_files(self) -> None:
        self.sub_title = "Loading..."
        self._run(self.uploads.list_files, "files_loader")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        path = event.value.strip()
        if not path:
            return
        event.input.value = ""
        self._run(lambda: self.uploads.upload(path), "file_upload")

    def action_delete_file(self) -> None:
        filename = self._selected()
        if filename:
            self._run(lambda: self.uploads.delete(filename), "file_delete")

    def action_open_file(self) -> None:
        filename = self._selected()
        if filename:
            webbrowser.open(self.uploads.file_url(filename))

    def action_close(self) -> None:
        self.dismiss()

    def _selected(self) -> Optional[str]:
        table = self.query_one(DataTable)
        if not table.is_valid_row_index(table.cursor_row):
            return None
        return str(table.ordered_rows[table.cursor_row].key.value)

    def _populate(self, files: List[FileOut]) -> None:
        table = self.query_one(DataTable)
        table.clear()
        for item in files:
            table.add_row(item.filename, format_size(item.size), key=item.filename)
        self.sub_title = f"{len(files)} file(s)" if files else "No uploaded files"

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        name = event.worker.name
        if name not in ("files_loader", "file_upload", "file_delete"):
            return
        if event.state is WorkerState.ERROR:
            error = event.worker.error
            logger.error("%s failed: %s", name, error)
            self.sub_title = ""
            self.app.notify(str(error), severity="error")
        elif event.state is WorkerState.SUCCESS:
            if name == "files_loader":
                self._populate(event.worker.result)
                return
            self.app.notify("File uploaded." if name == "file_upload" else "File deleted.")
            self.action_refresh_files()


def _parse_date(value: str) -> Optional[date]:
    value = value.strip()
    if not value:
        return None
    return date.fromisoformat(value)


def selected_source(value: object) -> Optional[str]:
    # Options are source names; the blank marker differs between Textual releases.
    return value if isinstance(value, str) and value else None


def format_size(size: int) -> str:
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"
