"""
Session state and events.

The interactive session is a single immutable SessionState value threaded
through a pure transition function (see machine.py). Every keystroke becomes
an Event; every Event produces a new SessionState.

INVARIANTS:
- SessionState has exactly one owner, the input loop. Nothing mutates it in
  the background; refresh results re-enter as ordinary events.
- `filtered` always indexes into `data.rows(dataset)`.
- `cursor` is None exactly when `filtered` is empty, otherwise it lies in
  [0, len(filtered) - 1].
"""

from dataclasses import dataclass, field
from enum import Enum

from metacollector.models.card import CardCatalog, CardIdentity, CardInfo
from metacollector.models.failure import ValidationWarning
from metacollector.models.wishlist import WishlistRow


class Mode(str, Enum):
    """Top-level interaction mode."""

    BROWSING = "browsing"
    SEARCHING = "searching"
    CONFIRMING = "confirming"


class Dataset(str, Enum):
    """Row set shown in the list."""

    FULL_CATALOG = "catalog"
    WISHLIST = "wishlist"

    def next(self) -> "Dataset":
        members = list(Dataset)
        return members[(members.index(self) + 1) % len(members)]


class Overlay(str, Enum):
    """Dismissible panels drawn over the list."""

    NONE = "none"
    CARD_DETAIL = "card_detail"
    STATS = "stats"


class Command(str, Enum):
    """Named commands delivered by the input layer."""

    SWITCH_DATASET = "switch-dataset"
    MOVE_DOWN = "move-down"
    MOVE_UP = "move-up"
    JUMP_TOP = "jump-top"
    JUMP_BOTTOM = "jump-bottom"
    PAGE_DOWN = "page-down"
    PAGE_UP = "page-up"
    ENTER_SEARCH = "enter-search"
    COMMIT_SEARCH = "commit-search"
    CANCEL_SEARCH = "cancel-search"
    DELETE_CHAR = "delete-char"
    SELECT = "select"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    SHOW_CARD = "show-card"
    SHOW_STATS = "show-stats"
    DISMISS_OVERLAY = "dismiss-overlay"
    REFRESH = "refresh"
    CANCEL_REFRESH = "cancel-refresh"
    QUIT = "quit"


@dataclass(frozen=True)
class SessionData:
    """
    Immutable snapshot of everything the session browses.

    Attributes:
        format_name: Format the data was built for
        catalog: Card catalog, for names, types and details
        catalog_rows: Every meta card, ordered ignoring the collection
        wishlist_rows: Cards with a deficit, in acquisition order
        warnings: Records dropped or overwritten while building the snapshot
    """

    format_name: str
    catalog: CardCatalog
    catalog_rows: tuple[WishlistRow, ...] = ()
    wishlist_rows: tuple[WishlistRow, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()

    def rows(self, dataset: Dataset) -> tuple[WishlistRow, ...]:
        if dataset is Dataset.WISHLIST:
            return self.wishlist_rows
        return self.catalog_rows

    def info(self, identity: CardIdentity) -> CardInfo | None:
        return self.catalog.get(identity)

    def display_name(self, identity: CardIdentity) -> str:
        info = self.catalog.get(identity)
        return info.display_name if info is not None else identity.name


# =============================================================================
# PARAMETERISED EVENTS
# =============================================================================


@dataclass(frozen=True, slots=True)
class InsertText:
    """Characters typed into the search prompt."""

    text: str


@dataclass(frozen=True, slots=True)
class Resize:
    """The list viewport now shows `rows` rows."""

    rows: int


@dataclass(frozen=True, slots=True)
class SetStatus:
    """Replace the status line."""

    message: str


@dataclass(frozen=True, slots=True)
class RefreshCompleted:
    """A refresh started with `token` produced new data."""

    token: int
    data: SessionData


@dataclass(frozen=True, slots=True)
class RefreshFailed:
    """A refresh started with `token` failed."""

    token: int
    message: str


Event = Command | InsertText | Resize | SetStatus | RefreshCompleted | RefreshFailed


@dataclass(frozen=True, slots=True)
class SessionState:
    """
    Complete state of one interactive session.

    Attributes:
        data: Snapshot being browsed
        mode: Browsing, searching or confirming an action
        dataset: Which row set is listed
        filter_text: Committed ("sticky") filter
        query: Query the current `filtered` list was built from
        pending_query: Text typed since entering search mode
        search_origin: Identity under the cursor when search mode was entered
        filtered: Indices into data.rows(dataset) that match `query`
        cursor: Position in `filtered`, None when it is empty
        scroll: First visible position in `filtered`
        viewport_rows: Number of visible rows
        match_type_tags: Whether searches also look at type lines
        pending_target: Card awaiting confirmation in CONFIRMING mode
        marked: Cards confirmed for wishlist export
        overlay: Panel drawn over the list
        overlay_target: Card shown by the detail overlay
        status: Transient status line
        refresh_token: Token of the refresh in flight, if any
        last_token: Last token handed out
        running: False once the user quit
        dirty: View model must be rebuilt before the next render
    """

    data: SessionData
    mode: Mode = Mode.BROWSING
    dataset: Dataset = Dataset.FULL_CATALOG
    filter_text: str = ""
    query: str = ""
    pending_query: str = ""
    search_origin: CardIdentity | None = None
    filtered: tuple[int, ...] = ()
    cursor: int | None = None
    scroll: int = 0
    viewport_rows: int = 20
    match_type_tags: bool = True
    pending_target: CardIdentity | None = None
    marked: frozenset[CardIdentity] = field(default_factory=frozenset)
    overlay: Overlay = Overlay.NONE
    overlay_target: CardIdentity | None = None
    status: str = ""
    refresh_token: int | None = None
    last_token: int = 0
    running: bool = True
    dirty: bool = True

    @property
    def rows(self) -> tuple[WishlistRow, ...]:
        """Rows of the active dataset, unfiltered."""
        return self.data.rows(self.dataset)

    @property
    def visible_rows(self) -> list[WishlistRow]:
        """Rows of the active dataset that pass the filter, in list order."""
        rows = self.rows
        return [rows[i] for i in self.filtered]

    @property
    def current_row(self) -> WishlistRow | None:
        if self.cursor is None:
            return None
        return self.rows[self.filtered[self.cursor]]

    @property
    def current_identity(self) -> CardIdentity | None:
        row = self.current_row
        return row.identity if row is not None else None

    @property
    def refreshing(self) -> bool:
        return self.refresh_token is not None
