"""
Render projection.

project(state) turns a SessionState into a ViewModel: plain values the
presentation layer can paint without knowing anything about the session
internals. Projection never changes state.
"""

from pydantic import BaseModel, Field

from metacollector.analysis.stats import calculate_stats
from metacollector.session.state import Mode, Overlay, SessionState


class RowView(BaseModel):
    """One visible list row."""

    position: int
    name: str
    type_line: str = ""
    score: float
    required: int
    owned: int
    deficit: int
    marked: bool = False
    selected: bool = False


class CardDetailView(BaseModel):
    """Contents of the card detail overlay."""

    name: str
    printing: str = ""
    mana_cost: str = ""
    type_line: str = ""
    colors: list[str] = Field(default_factory=list)
    legal: bool = True
    required: int = 0
    owned: int = 0
    deficit: int = 0
    score: float = 0.0
    image_url: str | None = None


class StatLine(BaseModel):
    """One line of the statistics overlay."""

    label: str
    owned: int
    total: int
    percent: float


class ViewModel(BaseModel):
    """Everything needed to paint one frame."""

    title: str
    format_name: str
    dataset: str
    mode: str
    filter_text: str = ""
    prompt: str | None = None
    rows: list[RowView] = Field(default_factory=list)
    cursor: int | None = None
    total_rows: int = 0
    filtered_rows: int = 0
    marked_count: int = 0
    status: str = ""
    refreshing: bool = False
    overlay: str = Overlay.NONE.value
    detail: CardDetailView | None = None
    stats: list[StatLine] = Field(default_factory=list)


def _detail(state: SessionState) -> CardDetailView | None:
    identity = state.overlay_target
    if identity is None:
        return None

    data = state.data
    row = next((r for r in data.catalog_rows if r.identity == identity), None)
    info = data.info(identity)

    detail = CardDetailView(name=data.display_name(identity), printing=identity.printing)
    if info is not None:
        detail.mana_cost = info.mana_cost
        detail.type_line = info.type_line
        detail.colors = list(info.colors)
        detail.legal = info.is_legal_in(data.format_name)
        detail.image_url = info.image_url
    if row is not None:
        detail.required = row.required
        detail.owned = row.owned
        detail.deficit = row.deficit
        detail.score = row.score
    return detail


def _stats(state: SessionState) -> list[StatLine]:
    stats = calculate_stats(state.data.catalog_rows, state.data.catalog)
    return [
        StatLine(
            label=label,
            owned=progress.owned,
            total=progress.total,
            percent=round(progress.fraction * 100, 1),
        )
        for label, progress in stats.lines()
    ]


def project(state: SessionState, title: str = "") -> ViewModel:
    """
    Build the view model for the current state.

    Args:
        state: Session state to render
        title: Application title shown in the header

    Returns:
        ViewModel with only the rows inside the viewport
    """
    data = state.data
    rows = state.rows
    window = state.filtered[state.scroll : state.scroll + state.viewport_rows]

    row_views = []
    for offset, index in enumerate(window):
        row = rows[index]
        position = state.scroll + offset
        info = data.info(row.identity)
        row_views.append(
            RowView(
                position=position,
                name=data.display_name(row.identity),
                type_line=info.type_line if info is not None else "",
                score=row.score,
                required=row.required,
                owned=row.owned,
                deficit=row.deficit,
                marked=row.identity in state.marked,
                selected=position == state.cursor,
            )
        )

    prompt = None
    if state.mode is Mode.SEARCHING:
        prompt = f"/{state.pending_query}"
    elif state.mode is Mode.CONFIRMING:
        prompt = state.status

    view = ViewModel(
        title=title,
        format_name=data.format_name,
        dataset=state.dataset.value,
        mode=state.mode.value,
        filter_text=state.filter_text,
        prompt=prompt,
        rows=row_views,
        cursor=state.cursor,
        total_rows=len(rows),
        filtered_rows=len(state.filtered),
        marked_count=len(state.marked),
        status=state.status,
        refreshing=state.refreshing,
        overlay=state.overlay.value,
    )
    if state.overlay is Overlay.CARD_DETAIL:
        view.detail = _detail(state)
    elif state.overlay is Overlay.STATS:
        view.stats = _stats(state)
    return view
