"""
Session state machine.

    transition(state, event) -> state

Modes:
    BROWSING   --enter-search-->  SEARCHING   --commit/cancel-search-->  BROWSING
    BROWSING   --select-------->  CONFIRMING  --confirm/cancel--------->  BROWSING
    any mode   --quit---------->  stopped

Overlays (card detail, stats) and refreshes sit on top of the current mode
and never change dataset, filter or cursor on their own.

INVARIANT: whenever the filtered list is rebuilt, the cursor stays on the
same card if that card is still listed, otherwise it moves to the top.

Commands that make no sense in the current state raise InputNoOp inside
their handler; transition() absorbs it and returns the state unchanged.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from metacollector.models.card import CardIdentity
from metacollector.models.failure import InputNoOp
from metacollector.session.search import filter_rows
from metacollector.session.state import (
    Command,
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

logger = logging.getLogger(__name__)


def initial_state(
    data: SessionData,
    viewport_rows: int = 20,
    match_type_tags: bool = True,
) -> SessionState:
    """Browsing the full catalog, unfiltered, cursor on the first row."""
    state = SessionState(
        data=data,
        viewport_rows=max(1, viewport_rows),
        match_type_tags=match_type_tags,
    )
    return _refilter(state, "", follow=None)


def transition(state: SessionState, event: Event) -> SessionState:
    """
    Apply one input event.

    Returns:
        The next state, marked dirty; or `state` itself when the event was
        not applicable.
    """
    try:
        handler = _handler_for(state, event)
        next_state = handler(state, event)
    except InputNoOp as e:
        logger.debug("Ignoring %s in %s mode: %s", event, state.mode.value, e)
        return state
    return replace(next_state, dirty=True)


def mark_clean(state: SessionState) -> SessionState:
    """State after its view model has been rendered."""
    if not state.dirty:
        return state
    return replace(state, dirty=False)


# =============================================================================
# CURSOR AND FILTER HELPERS
# =============================================================================


def _clamp_scroll(scroll: int, cursor: int | None, count: int, viewport: int) -> int:
    if cursor is None:
        return 0
    if cursor < scroll:
        scroll = cursor
    elif cursor >= scroll + viewport:
        scroll = cursor - viewport + 1
    return max(0, min(scroll, max(0, count - viewport)))


def _with_cursor(state: SessionState, cursor: int | None) -> SessionState:
    scroll = _clamp_scroll(state.scroll, cursor, len(state.filtered), state.viewport_rows)
    return replace(state, cursor=cursor, scroll=scroll)


def _refilter(
    state: SessionState,
    query: str,
    follow: CardIdentity | None,
) -> SessionState:
    """
    Rebuild the filtered list for `query` on the active dataset.

    The cursor follows `follow` if it is still listed, otherwise it resets
    to the top (or to None for an empty list).
    """
    rows = state.rows
    filtered = filter_rows(rows, query, state.data.catalog, state.match_type_tags)

    cursor: int | None = 0 if filtered else None
    if follow is not None:
        for position, index in enumerate(filtered):
            if rows[index].identity == follow:
                cursor = position
                break

    return _with_cursor(replace(state, query=query, filtered=filtered), cursor)


def _require_mode(state: SessionState, *modes: Mode) -> None:
    if state.mode not in modes:
        raise InputNoOp(f"not available while {state.mode.value}")


def _require_no_overlay(state: SessionState) -> None:
    if state.overlay is not Overlay.NONE:
        raise InputNoOp(f"{state.overlay.value} overlay is open")


def _require_cursor(state: SessionState) -> int:
    if state.cursor is None:
        raise InputNoOp("no row under cursor")
    return state.cursor


# =============================================================================
# NAVIGATION
# =============================================================================


def _move(state: SessionState, offset: int) -> SessionState:
    _require_no_overlay(state)
    _require_mode(state, Mode.BROWSING, Mode.SEARCHING)
    cursor = _require_cursor(state)
    target = max(0, min(cursor + offset, len(state.filtered) - 1))
    if target == cursor:
        raise InputNoOp("already at boundary")
    return _with_cursor(state, target)


def _move_down(state: SessionState, _event: Event) -> SessionState:
    return _move(state, 1)


def _move_up(state: SessionState, _event: Event) -> SessionState:
    return _move(state, -1)


def _page_down(state: SessionState, _event: Event) -> SessionState:
    return _move(state, state.viewport_rows)


def _page_up(state: SessionState, _event: Event) -> SessionState:
    return _move(state, -state.viewport_rows)


def _jump_top(state: SessionState, _event: Event) -> SessionState:
    cursor = _require_cursor(state)
    return _move(state, -cursor)


def _jump_bottom(state: SessionState, _event: Event) -> SessionState:
    cursor = _require_cursor(state)
    return _move(state, len(state.filtered) - 1 - cursor)


def _switch_dataset(state: SessionState, _event: Event) -> SessionState:
    _require_no_overlay(state)
    _require_mode(state, Mode.BROWSING)

    switched = replace(state, dataset=state.dataset.next(), scroll=0)
    filter_text = state.filter_text
    if filter_text and not filter_rows(
        switched.rows, filter_text, state.data.catalog, state.match_type_tags
    ):
        filter_text = ""

    switched = _refilter(replace(switched, filter_text=filter_text), filter_text, follow=None)
    return replace(switched, status=f"Showing {switched.dataset.value}")


# =============================================================================
# SEARCH
# =============================================================================


def _enter_search(state: SessionState, _event: Event) -> SessionState:
    _require_no_overlay(state)
    _require_mode(state, Mode.BROWSING)
    return replace(
        state,
        mode=Mode.SEARCHING,
        pending_query="",
        search_origin=state.current_identity,
    )


def _edit_query(state: SessionState, pending_query: str) -> SessionState:
    edited = replace(state, pending_query=pending_query)
    return _refilter(edited, pending_query, follow=state.current_identity)


def _insert_text(state: SessionState, event: InsertText) -> SessionState:
    _require_mode(state, Mode.SEARCHING)
    text = "".join(ch for ch in event.text if ch.isprintable())
    if not text:
        raise InputNoOp("nothing printable to insert")
    return _edit_query(state, state.pending_query + text)


def _delete_char(state: SessionState, _event: Event) -> SessionState:
    _require_mode(state, Mode.SEARCHING)
    if not state.pending_query:
        raise InputNoOp("query is empty")
    return _edit_query(state, state.pending_query[:-1])


def _commit_search(state: SessionState, _event: Event) -> SessionState:
    _require_mode(state, Mode.SEARCHING)
    committed = replace(
        state,
        mode=Mode.BROWSING,
        filter_text=state.pending_query,
        pending_query="",
        search_origin=None,
    )
    if committed.query != state.pending_query:
        committed = _refilter(committed, state.pending_query, follow=state.current_identity)
    return committed


def _cancel_search(state: SessionState, _event: Event) -> SessionState:
    _require_mode(state, Mode.SEARCHING)
    restored = replace(state, mode=Mode.BROWSING, pending_query="", search_origin=None)
    return _refilter(restored, state.filter_text, follow=state.search_origin)


# =============================================================================
# SELECTION
# =============================================================================


def _select(state: SessionState, _event: Event) -> SessionState:
    _require_no_overlay(state)
    _require_mode(state, Mode.BROWSING)
    row = state.current_row
    if row is None:
        raise InputNoOp("no row under cursor")

    if row.deficit == 0 and row.identity not in state.marked:
        raise InputNoOp(f"nothing missing of {row.identity}")

    name = state.data.display_name(row.identity)
    if row.identity in state.marked:
        prompt = f"Remove {name} from the wishlist export? (y/n)"
    else:
        prompt = f"Add {name} to the wishlist export? (y/n)"
    return replace(state, mode=Mode.CONFIRMING, pending_target=row.identity, status=prompt)


def _confirm(state: SessionState, _event: Event) -> SessionState:
    _require_mode(state, Mode.CONFIRMING)
    target = state.pending_target
    if target is None:
        return replace(state, mode=Mode.BROWSING)

    name = state.data.display_name(target)
    if target in state.marked:
        marked = state.marked - {target}
        status = f"Removed {name} from the wishlist export"
    else:
        marked = state.marked | {target}
        status = f"Added {name} to the wishlist export"
    return replace(
        state, mode=Mode.BROWSING, pending_target=None, marked=marked, status=status
    )


def _cancel(state: SessionState, _event: Event) -> SessionState:
    _require_mode(state, Mode.CONFIRMING)
    return replace(state, mode=Mode.BROWSING, pending_target=None, status="")


# =============================================================================
# OVERLAYS
# =============================================================================


def _show_card(state: SessionState, _event: Event) -> SessionState:
    if state.overlay is Overlay.CARD_DETAIL:
        return _dismiss_overlay(state, _event)
    _require_no_overlay(state)
    _require_mode(state, Mode.BROWSING)
    identity = state.current_identity
    if identity is None:
        raise InputNoOp("no row under cursor")
    return replace(state, overlay=Overlay.CARD_DETAIL, overlay_target=identity)


def _show_stats(state: SessionState, _event: Event) -> SessionState:
    if state.overlay is Overlay.STATS:
        return _dismiss_overlay(state, _event)
    _require_no_overlay(state)
    _require_mode(state, Mode.BROWSING)
    return replace(state, overlay=Overlay.STATS, overlay_target=None)


def _dismiss_overlay(state: SessionState, _event: Event) -> SessionState:
    if state.overlay is Overlay.NONE:
        raise InputNoOp("no overlay to dismiss")
    return replace(state, overlay=Overlay.NONE, overlay_target=None)


# =============================================================================
# REFRESH
# =============================================================================


def _refresh(state: SessionState, _event: Event) -> SessionState:
    if state.refreshing:
        raise InputNoOp("refresh already running")
    token = state.last_token + 1
    return replace(
        state,
        refresh_token=token,
        last_token=token,
        status=f"Refreshing {state.data.format_name} data...",
    )


def _cancel_refresh(state: SessionState, _event: Event) -> SessionState:
    if not state.refreshing:
        raise InputNoOp("no refresh running")
    return replace(state, refresh_token=None, status="Refresh cancelled")


def _refresh_completed(state: SessionState, event: RefreshCompleted) -> SessionState:
    if event.token != state.refresh_token:
        raise InputNoOp(f"stale refresh result {event.token}")

    data = event.data
    follow = state.current_identity
    swapped = replace(state, data=data, refresh_token=None)

    swapped = _refilter(swapped, state.query, follow=follow)

    known = {row.identity for row in data.catalog_rows}
    missing = {row.identity for row in data.catalog_rows if row.deficit > 0}
    swapped = replace(swapped, marked=state.marked & missing)

    if swapped.overlay_target is not None and swapped.overlay_target not in known:
        swapped = replace(swapped, overlay=Overlay.NONE, overlay_target=None)
    if swapped.mode is Mode.CONFIRMING and swapped.pending_target not in known:
        swapped = replace(swapped, mode=Mode.BROWSING, pending_target=None)

    return replace(
        swapped,
        status=f"Refreshed: {len(data.wishlist_rows)} cards missing from the meta",
    )


def _refresh_failed(state: SessionState, event: RefreshFailed) -> SessionState:
    if event.token != state.refresh_token:
        raise InputNoOp(f"stale refresh failure {event.token}")
    return replace(state, refresh_token=None, status=f"Refresh failed: {event.message}")


# =============================================================================
# MISC
# =============================================================================


def _quit(state: SessionState, _event: Event) -> SessionState:
    return replace(state, running=False, refresh_token=None)


def _resize(state: SessionState, event: Resize) -> SessionState:
    rows = max(1, event.rows)
    if rows == state.viewport_rows:
        raise InputNoOp("viewport unchanged")
    resized = replace(state, viewport_rows=rows)
    return _with_cursor(resized, resized.cursor)


def _set_status(state: SessionState, event: SetStatus) -> SessionState:
    return replace(state, status=event.message)


# Event handlers take the event class they are registered under
Handler = Callable[[SessionState, Any], SessionState]

_COMMAND_HANDLERS: dict[Command, Handler] = {
    Command.SWITCH_DATASET: _switch_dataset,
    Command.MOVE_DOWN: _move_down,
    Command.MOVE_UP: _move_up,
    Command.JUMP_TOP: _jump_top,
    Command.JUMP_BOTTOM: _jump_bottom,
    Command.PAGE_DOWN: _page_down,
    Command.PAGE_UP: _page_up,
    Command.ENTER_SEARCH: _enter_search,
    Command.COMMIT_SEARCH: _commit_search,
    Command.CANCEL_SEARCH: _cancel_search,
    Command.DELETE_CHAR: _delete_char,
    Command.SELECT: _select,
    Command.CONFIRM: _confirm,
    Command.CANCEL: _cancel,
    Command.SHOW_CARD: _show_card,
    Command.SHOW_STATS: _show_stats,
    Command.DISMISS_OVERLAY: _dismiss_overlay,
    Command.REFRESH: _refresh,
    Command.CANCEL_REFRESH: _cancel_refresh,
    Command.QUIT: _quit,
}

_EVENT_HANDLERS: dict[type, Handler] = {
    InsertText: _insert_text,
    Resize: _resize,
    SetStatus: _set_status,
    RefreshCompleted: _refresh_completed,
    RefreshFailed: _refresh_failed,
}


def _handler_for(state: SessionState, event: Event) -> Handler:
    if not state.running:
        raise InputNoOp("session has ended")
    if isinstance(event, Command):
        return _COMMAND_HANDLERS[event]
    handler = _EVENT_HANDLERS.get(type(event))
    if handler is None:
        raise InputNoOp(f"unknown event {event!r}")
    return handler
