"""Full-screen wishlist browser."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import ClassVar

from rich.console import RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.widgets import Static
from textual.worker import get_current_worker

from metacollector.models.failure import KnownError
from metacollector.services.export import write_wishlist
from metacollector.session.machine import initial_state, mark_clean, transition
from metacollector.session.state import (
    Event,
    RefreshCompleted,
    RefreshFailed,
    Resize,
    SessionData,
    SessionState,
    SetStatus,
)
from metacollector.session.view import ViewModel, project
from metacollector.ui.keymap import UiAction, translate_key

logger = logging.getLogger(__name__)

SnapshotLoader = Callable[[], SessionData]

HELP_TEXT = (
    "tab switch  j/k move  g/G top/bottom  / search  enter mark  "
    "s card  t stats  w export  r refresh  q quit"
)


def render_rows(view: ViewModel) -> Table:
    """Table of the visible rows, cursor row highlighted."""
    table = Table(box=None, expand=True, pad_edge=False)
    table.add_column("", width=1)
    table.add_column("Card", ratio=3, no_wrap=True)
    table.add_column("Type", ratio=2, no_wrap=True, style="dim")
    table.add_column("Score", justify="right")
    table.add_column("Owned", justify="right")
    table.add_column("Missing", justify="right")

    for row in view.rows:
        missing = str(row.deficit) if row.deficit else ""
        table.add_row(
            "*" if row.marked else "",
            row.name,
            row.type_line,
            f"{row.score:.3f}",
            f"{row.owned}/{row.required}",
            missing,
            style="reverse" if row.selected else None,
        )
    return table


def render_overlay(view: ViewModel) -> RenderableType | None:
    """Card detail or statistics panel, if one is open."""
    if view.detail is not None:
        detail = view.detail
        body = Text()
        body.append(f"{detail.mana_cost}\n" if detail.mana_cost else "")
        body.append(f"{detail.type_line}\n")
        body.append(f"Colors: {''.join(detail.colors) or 'colorless'}\n")
        body.append(f"Legal in {view.format_name}: {'yes' if detail.legal else 'no'}\n")
        body.append(
            f"Owned {detail.owned} of {detail.required}, missing {detail.deficit}\n"
        )
        body.append(f"Playability {detail.score:.3f}\n")
        if detail.image_url:
            body.append(detail.image_url, style=f"link {detail.image_url}")
        return Panel(body, title=detail.name, subtitle="esc to close")

    if view.stats:
        table = Table(box=None, expand=True)
        table.add_column("Cards")
        table.add_column("Owned", justify="right")
        table.add_column("", justify="right")
        for line in view.stats:
            table.add_row(line.label, f"{line.owned}/{line.total}", f"{line.percent:.1f}%")
        return Panel(table, title="Collection progress", subtitle="esc to close")

    return None


def render_header(view: ViewModel) -> str:
    shown = f"{view.filtered_rows}/{view.total_rows}"
    header = f"{view.title} - {view.format_name} {view.dataset} ({shown})"
    if view.filter_text:
        header += f"  filter: {view.filter_text}"
    if view.marked_count:
        header += f"  marked: {view.marked_count}"
    return header


class RowList(Static, can_focus=True):
    """The list area. Owns keyboard focus and forwards keys to the app."""

    def on_key(self, event: events.Key) -> None:
        app = self.app
        if isinstance(app, MetaCollectorApp) and app.handle_key(event.key, event.character):
            event.stop()
            event.prevent_default()

    def on_resize(self, event: events.Resize) -> None:
        app = self.app
        if isinstance(app, MetaCollectorApp):
            # One line goes to the table header
            app.dispatch(Resize(max(1, event.size.height - 1)))


class MetaCollectorApp(App[int]):
    """
    Interactive browser for the meta catalog and wishlist.

    All session changes go through dispatch(), which runs the session
    transition and repaints. Refreshes run in a worker thread and come back
    as RefreshCompleted / RefreshFailed events.
    """

    CSS: ClassVar[str] = """
    #header {
        height: 1;
        background: $accent;
    }
    #rows {
        height: 1fr;
    }
    #status {
        height: 1;
        background: $panel;
    }
    #help {
        height: 1;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        data: SessionData,
        loader: SnapshotLoader,
        export_path: Path,
        title: str = "Meta Collector",
        viewport_rows: int = 20,
        match_type_tags: bool = True,
    ) -> None:
        super().__init__()
        self.loader = loader
        self.export_path = export_path
        self.app_title = title
        self.state: SessionState = initial_state(data, viewport_rows, match_type_tags)

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        yield RowList(id="rows")
        yield Static(id="status")
        yield Static(HELP_TEXT, id="help")

    def on_mount(self) -> None:
        self.query_one("#rows", RowList).focus()
        for warning in self.state.data.warnings:
            logger.info("Snapshot warning: %s", warning)
        if self.state.data.warnings:
            self.dispatch(
                SetStatus(f"{len(self.state.data.warnings)} entries skipped, see the log")
            )
        self.paint()

    # =========================================================================
    # EVENT LOOP
    # =========================================================================

    def handle_key(self, key: str, character: str | None) -> bool:
        """Translate and apply a key press. Returns True if the key was used."""
        action = translate_key(key, character, self.state)
        if action is None:
            return False
        if action is UiAction.EXPORT_WISHLIST:
            self.export_wishlist()
        else:
            self.dispatch(action)
        return True

    def dispatch(self, event: Event) -> None:
        """Apply one session event, start any refresh it asks for, and repaint."""
        previous = self.state
        self.state = transition(previous, event)

        if not self.state.running:
            self.exit(0)
            return

        token = self.state.refresh_token
        if token is not None and token != previous.refresh_token:
            self.run_refresh(token)

        if self.state.dirty:
            self.paint()

    def paint(self) -> None:
        view = project(self.state, self.app_title)
        overlay = render_overlay(view)
        self.query_one("#header", Static).update(render_header(view))
        self.query_one("#rows", RowList).update(overlay or render_rows(view))
        self.query_one("#status", Static).update(view.prompt or view.status)
        self.state = mark_clean(self.state)

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def export_wishlist(self) -> None:
        try:
            count = write_wishlist(self.state.data, self.export_path, self.state.marked)
        except OSError as e:
            logger.error("Export to %s failed: %s", self.export_path, e)
            self.dispatch(SetStatus(f"Export failed: {e}"))
            return
        self.dispatch(SetStatus(f"Wrote {count} cards to {self.export_path}"))

    @work(thread=True, exclusive=True, group="refresh")
    def run_refresh(self, token: int) -> None:
        """Build a new snapshot off the UI thread."""
        worker = get_current_worker()
        try:
            data = self.loader()
        except KnownError as e:
            logger.error("Refresh %d failed: %s", token, e.user_message())
            result: Event = RefreshFailed(token, e.user_message())
        else:
            result = RefreshCompleted(token, data)

        if not worker.is_cancelled:
            self.call_from_thread(self.dispatch, result)
