from metacollector.session.machine import initial_state, mark_clean, transition
from metacollector.session.search import compile_query, filter_rows
from metacollector.session.state import (
    Command,
    Dataset,
    Event,
    InsertText,
    Mode,
    Overlay,
    RefreshCompleted,
    RefreshFailed,
    Resize,
    SessionData,
    SessionState,
    SetStatus,
)
from metacollector.session.view import CardDetailView, RowView, StatLine, ViewModel, project

__all__ = [
    "CardDetailView",
    "Command",
    "Dataset",
    "Event",
    "InsertText",
    "Mode",
    "Overlay",
    "RefreshCompleted",
    "RefreshFailed",
    "Resize",
    "RowView",
    "SessionData",
    "SessionState",
    "SetStatus",
    "StatLine",
    "ViewModel",
    "compile_query",
    "filter_rows",
    "initial_state",
    "mark_clean",
    "project",
    "transition",
]
