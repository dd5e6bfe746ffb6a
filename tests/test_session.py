from dataclasses import replace

import pytest

from metacollector.models.card import CardIdentity
from metacollector.session.machine import initial_state, mark_clean, transition
from metacollector.session.state import (
    Command,
    Dataset,
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


def names(state: SessionState) -> list[str]:
    return [row.identity.name for row in state.visible_rows]


def run(state: SessionState, *events) -> SessionState:
    for event in events:
        state = transition(state, event)
    return state


def type_text(state: SessionState, text: str) -> SessionState:
    return run(state, *(InsertText(ch) for ch in text))


@pytest.fixture
def state(session_data: SessionData) -> SessionState:
    return mark_clean(initial_state(session_data))


class TestInitialState:
    def test_browsing_full_catalog(self, state: SessionState) -> None:
        """Session starts browsing the full catalog, cursor on top."""
        assert state.mode is Mode.BROWSING
        assert state.dataset is Dataset.FULL_CATALOG
        assert names(state) == ["Bolt", "Shock", "Bog Wraith"]
        assert state.cursor == 0

    def test_empty_data_has_no_cursor(self, session_data: SessionData) -> None:
        """An empty list has no cursor."""
        empty = replace(session_data, catalog_rows=(), wishlist_rows=())

        assert initial_state(empty).cursor is None


class TestNavigation:
    def test_move_down_and_up(self, state: SessionState) -> None:
        """Cursor moves one row at a time."""
        moved = transition(state, Command.MOVE_DOWN)

        assert moved.cursor == 1
        assert moved.dirty
        assert transition(moved, Command.MOVE_UP).cursor == 0

    def test_move_up_at_top_is_noop(self, state: SessionState) -> None:
        """No wraparound at the top; the state is returned unchanged."""
        assert transition(state, Command.MOVE_UP) is state

    def test_move_down_at_bottom_is_noop(self, state: SessionState) -> None:
        """No wraparound at the bottom."""
        bottom = transition(state, Command.JUMP_BOTTOM)

        assert bottom.cursor == 2
        assert transition(bottom, Command.MOVE_DOWN) is bottom

    def test_jump_top(self, state: SessionState) -> None:
        """Jump to the first row."""
        assert run(state, Command.JUMP_BOTTOM, Command.JUMP_TOP).cursor == 0

    def test_page_moves_clamp(self, state: SessionState) -> None:
        """Paging clamps to the list ends."""
        small = transition(state, Resize(2))

        paged = transition(small, Command.PAGE_DOWN)
        assert paged.cursor == 2
        assert transition(paged, Command.PAGE_UP).cursor == 0

    def test_scroll_follows_cursor(self, state: SessionState) -> None:
        """Scroll keeps the cursor inside the viewport."""
        small = transition(state, Resize(2))

        bottom = transition(small, Command.JUMP_BOTTOM)
        assert bottom.scroll == 1
        assert transition(bottom, Command.JUMP_TOP).scroll == 0

    def test_resize_same_size_is_noop(self, state: SessionState) -> None:
        """Resizing to the current size changes nothing."""
        assert transition(state, Resize(state.viewport_rows)) is state


class TestSwitchDataset:
    def test_cycles(self, state: SessionState) -> None:
        """Tab cycles catalog -> wishlist -> catalog."""
        wishlist = transition(state, Command.SWITCH_DATASET)

        assert wishlist.dataset is Dataset.WISHLIST
        assert names(wishlist) == ["Bolt", "Bog Wraith"]
        assert transition(wishlist, Command.SWITCH_DATASET).dataset is Dataset.FULL_CATALOG

    def test_resets_cursor(self, state: SessionState) -> None:
        """Switching puts the cursor on the first row."""
        moved = run(state, Command.JUMP_BOTTOM, Command.SWITCH_DATASET)

        assert moved.cursor == 0

    def test_keeps_matching_filter(self, state: SessionState) -> None:
        """A filter that still matches is kept."""
        filtered = type_text(transition(state, Command.ENTER_SEARCH), "wraith")
        filtered = transition(filtered, Command.COMMIT_SEARCH)

        switched = transition(filtered, Command.SWITCH_DATASET)

        assert switched.filter_text == "wraith"
        assert names(switched) == ["Bog Wraith"]

    def test_clears_filter_without_matches(self, state: SessionState) -> None:
        """A filter matching nothing in the new dataset is cleared."""
        filtered = type_text(transition(state, Command.ENTER_SEARCH), "shock")
        filtered = transition(filtered, Command.COMMIT_SEARCH)

        switched = transition(filtered, Command.SWITCH_DATASET)

        assert switched.filter_text == ""
        assert names(switched) == ["Bolt", "Bog Wraith"]

    def test_not_while_searching(self, state: SessionState) -> None:
        """Tab does nothing in search mode."""
        searching = transition(state, Command.ENTER_SEARCH)

        assert transition(searching, Command.SWITCH_DATASET) is searching


class TestSearch:
    def test_typing_filters(self, state: SessionState) -> None:
        """Typing 'bo' keeps Bolt and Bog Wraith."""
        searching = type_text(transition(state, Command.ENTER_SEARCH), "bo")

        assert searching.mode is Mode.SEARCHING
        assert searching.pending_query == "bo"
        assert names(searching) == ["Bolt", "Bog Wraith"]

    def test_cancel_restores_list_and_cursor(self, state: SessionState) -> None:
        """Cancelling restores the prior list and the card under the cursor."""
        on_shock = transition(state, Command.MOVE_DOWN)
        searching = type_text(transition(on_shock, Command.ENTER_SEARCH), "bo")

        cancelled = transition(searching, Command.CANCEL_SEARCH)

        assert cancelled.mode is Mode.BROWSING
        assert names(cancelled) == ["Bolt", "Shock", "Bog Wraith"]
        assert cancelled.current_identity == CardIdentity("Shock")

    def test_cursor_follows_identity(self, state: SessionState) -> None:
        """The card under the cursor stays selected while it matches."""
        on_wraith = transition(state, Command.JUMP_BOTTOM)

        searching = type_text(transition(on_wraith, Command.ENTER_SEARCH), "bo")

        assert searching.current_identity == CardIdentity("Bog Wraith")
        assert searching.cursor == 1

    def test_cursor_resets_when_card_filtered_out(self, state: SessionState) -> None:
        """The cursor goes to the top when its card no longer matches."""
        on_shock = transition(state, Command.MOVE_DOWN)

        searching = type_text(transition(on_shock, Command.ENTER_SEARCH), "bo")

        assert searching.cursor == 0
        assert searching.current_identity == CardIdentity("Bolt")

    def test_no_matches_clears_cursor(self, state: SessionState) -> None:
        """An empty result has no cursor; movement is ignored."""
        searching = type_text(transition(state, Command.ENTER_SEARCH), "zzz")

        assert searching.cursor is None
        assert transition(searching, Command.MOVE_DOWN) is searching

    def test_delete_char(self, state: SessionState) -> None:
        """Backspace widens the filter again."""
        searching = type_text(transition(state, Command.ENTER_SEARCH), "bog")

        widened = transition(searching, Command.DELETE_CHAR)

        assert widened.pending_query == "bo"
        assert names(widened) == ["Bolt", "Bog Wraith"]

    def test_delete_on_empty_is_noop(self, state: SessionState) -> None:
        """Nothing to delete, nothing changes."""
        searching = transition(state, Command.ENTER_SEARCH)

        assert transition(searching, Command.DELETE_CHAR) is searching

    def test_commit_makes_filter_sticky(self, state: SessionState) -> None:
        """Committed filters survive leaving search mode."""
        searching = type_text(transition(state, Command.ENTER_SEARCH), "bo")

        committed = transition(searching, Command.COMMIT_SEARCH)

        assert committed.mode is Mode.BROWSING
        assert committed.filter_text == "bo"
        assert names(committed) == ["Bolt", "Bog Wraith"]

    def test_cancel_restores_previous_sticky_filter(self, state: SessionState) -> None:
        """Cancelling a second search brings back the committed filter."""
        committed = transition(
            type_text(transition(state, Command.ENTER_SEARCH), "bo"), Command.COMMIT_SEARCH
        )
        searching = type_text(transition(committed, Command.ENTER_SEARCH), "shock")

        cancelled = transition(searching, Command.CANCEL_SEARCH)

        assert cancelled.filter_text == "bo"
        assert names(cancelled) == ["Bolt", "Bog Wraith"]

    def test_commit_empty_query_clears_filter(self, state: SessionState) -> None:
        """Committing without typing removes the sticky filter."""
        committed = transition(
            type_text(transition(state, Command.ENTER_SEARCH), "bo"), Command.COMMIT_SEARCH
        )

        cleared = run(committed, Command.ENTER_SEARCH, Command.COMMIT_SEARCH)

        assert cleared.filter_text == ""
        assert names(cleared) == ["Bolt", "Shock", "Bog Wraith"]

    def test_invalid_regex_keeps_browsing(self, state: SessionState) -> None:
        """A broken pattern filters literally instead of failing."""
        searching = type_text(transition(state, Command.ENTER_SEARCH), "re:(")

        assert searching.mode is Mode.SEARCHING
        assert names(searching) == []

    def test_text_ignored_outside_search(self, state: SessionState) -> None:
        """Typed text means nothing while browsing."""
        assert transition(state, InsertText("b")) is state

    def test_non_printable_text_ignored(self, state: SessionState) -> None:
        """Control characters are not inserted."""
        searching = transition(state, Command.ENTER_SEARCH)

        assert transition(searching, InsertText("\x1b")) is searching


class TestConfirmingAction:
    def test_select_asks_for_confirmation(self, state: SessionState) -> None:
        """Select moves to confirming with the row as target."""
        confirming = transition(state, Command.SELECT)

        assert confirming.mode is Mode.CONFIRMING
        assert confirming.pending_target == CardIdentity("Bolt")
        assert "Bolt" in confirming.status

    def test_confirm_marks(self, state: SessionState) -> None:
        """Confirming marks the card for export."""
        marked = run(state, Command.SELECT, Command.CONFIRM)

        assert marked.mode is Mode.BROWSING
        assert marked.marked == frozenset({CardIdentity("Bolt")})
        assert marked.pending_target is None

    def test_confirm_again_unmarks(self, state: SessionState) -> None:
        """Confirming a marked card removes the mark."""
        unmarked = run(state, Command.SELECT, Command.CONFIRM, Command.SELECT, Command.CONFIRM)

        assert unmarked.marked == frozenset()

    def test_cancel(self, state: SessionState) -> None:
        """Cancel returns to browsing without marking."""
        cancelled = run(state, Command.SELECT, Command.CANCEL)

        assert cancelled.mode is Mode.BROWSING
        assert cancelled.marked == frozenset()

    def test_select_on_empty_list_is_noop(self, state: SessionState) -> None:
        """Nothing under the cursor, nothing to select."""
        empty = transition(
            type_text(transition(state, Command.ENTER_SEARCH), "zzz"), Command.COMMIT_SEARCH
        )

        assert transition(empty, Command.SELECT) is empty

    def test_navigation_blocked_while_confirming(self, state: SessionState) -> None:
        """The cursor stays on the target until the question is answered."""
        confirming = transition(state, Command.SELECT)

        assert transition(confirming, Command.MOVE_DOWN) is confirming

    def test_select_owned_card_is_noop(self, state: SessionState) -> None:
        """A card the collection already covers has nothing to export."""
        on_shock = transition(state, Command.MOVE_DOWN)

        assert on_shock.current_identity == CardIdentity("Shock")
        assert transition(on_shock, Command.SELECT) is on_shock

    def test_owned_card_mark_can_be_removed(self, state: SessionState) -> None:
        """An existing mark on a covered card can still be taken off."""
        marked = replace(state, marked=frozenset({CardIdentity("Shock")}))

        unmarked = run(marked, Command.MOVE_DOWN, Command.SELECT, Command.CONFIRM)

        assert unmarked.marked == frozenset()
        assert "Removed Shock" in unmarked.status


class TestOverlays:
    def test_show_card(self, state: SessionState) -> None:
        """Card detail opens over the current row."""
        shown = run(state, Command.MOVE_DOWN, Command.SHOW_CARD)

        assert shown.overlay is Overlay.CARD_DETAIL
        assert shown.overlay_target == CardIdentity("Shock")

    def test_dismiss_restores_exact_state(self, state: SessionState) -> None:
        """Dismissing leaves dataset, filter and cursor as they were."""
        before = transition(state, Command.MOVE_DOWN)

        after = run(before, Command.SHOW_CARD, Command.DISMISS_OVERLAY)

        assert after.overlay is Overlay.NONE
        assert after.cursor == before.cursor
        assert after.dataset == before.dataset
        assert after.filtered == before.filtered

    def test_show_card_toggles(self, state: SessionState) -> None:
        """Pressing show-card again closes the overlay."""
        assert run(state, Command.SHOW_CARD, Command.SHOW_CARD).overlay is Overlay.NONE

    def test_show_stats(self, state: SessionState) -> None:
        """Stats overlay opens and closes."""
        shown = transition(state, Command.SHOW_STATS)

        assert shown.overlay is Overlay.STATS
        assert transition(shown, Command.SHOW_STATS).overlay is Overlay.NONE

    def test_overlay_blocks_navigation(self, state: SessionState) -> None:
        """List commands are ignored while an overlay is open."""
        shown = transition(state, Command.SHOW_CARD)

        assert transition(shown, Command.MOVE_DOWN) is shown
        assert transition(shown, Command.SWITCH_DATASET) is shown

    def test_dismiss_without_overlay_is_noop(self, state: SessionState) -> None:
        """Nothing to dismiss."""
        assert transition(state, Command.DISMISS_OVERLAY) is state


class TestRefresh:
    @pytest.fixture
    def new_data(self, session_data: SessionData) -> SessionData:
        """Same catalog with Shock gone from the meta."""
        rows = tuple(r for r in session_data.catalog_rows if r.identity.name != "Shock")
        return replace(session_data, catalog_rows=rows)

    def test_refresh_hands_out_tokens(self, state: SessionState) -> None:
        """Each refresh gets a fresh, increasing token."""
        first = transition(state, Command.REFRESH)
        assert first.refresh_token == 1

        cancelled = transition(first, Command.CANCEL_REFRESH)
        second = transition(cancelled, Command.REFRESH)

        assert cancelled.refresh_token is None
        assert second.refresh_token == 2

    def test_refresh_while_running_is_noop(self, state: SessionState) -> None:
        """Only one refresh at a time."""
        refreshing = transition(state, Command.REFRESH)

        assert transition(refreshing, Command.REFRESH) is refreshing

    def test_completed_swaps_data(self, state: SessionState, new_data: SessionData) -> None:
        """A matching result replaces the snapshot."""
        refreshing = transition(state, Command.REFRESH)

        done = transition(refreshing, RefreshCompleted(refreshing.refresh_token, new_data))

        assert done.data is new_data
        assert done.refresh_token is None
        assert names(done) == ["Bolt", "Bog Wraith"]

    def test_completed_keeps_cursor_identity(
        self, state: SessionState, new_data: SessionData
    ) -> None:
        """The cursor follows its card into the new snapshot."""
        refreshing = run(state, Command.JUMP_BOTTOM, Command.REFRESH)

        done = transition(refreshing, RefreshCompleted(1, new_data))

        assert done.current_identity == CardIdentity("Bog Wraith")

    def test_completed_drops_vanished_marks(
        self, state: SessionState, new_data: SessionData
    ) -> None:
        """Marks on cards no longer in the meta are dropped."""
        marked = replace(state, marked=frozenset({CardIdentity("Shock"), CardIdentity("Bolt")}))

        done = transition(transition(marked, Command.REFRESH), RefreshCompleted(1, new_data))

        assert done.marked == frozenset({CardIdentity("Bolt")})

    def test_completed_drops_marks_on_covered_cards(
        self, state: SessionState, session_data: SessionData
    ) -> None:
        """Cards the collection now covers lose their export mark."""
        rows = tuple(
            replace(r, owned=r.required) if r.identity.name == "Bolt" else r
            for r in session_data.catalog_rows
        )
        covered = replace(session_data, catalog_rows=rows)
        marked = run(state, Command.SELECT, Command.CONFIRM, Command.REFRESH)

        done = transition(marked, RefreshCompleted(1, covered))

        assert done.marked == frozenset()

    def test_stale_result_ignored(self, state: SessionState, new_data: SessionData) -> None:
        """Results for a cancelled refresh are dropped."""
        cancelled = run(state, Command.REFRESH, Command.CANCEL_REFRESH)

        assert transition(cancelled, RefreshCompleted(1, new_data)) is cancelled

    def test_old_token_ignored_after_restart(
        self, state: SessionState, new_data: SessionData
    ) -> None:
        """Only the latest refresh can complete."""
        restarted = run(state, Command.REFRESH, Command.CANCEL_REFRESH, Command.REFRESH)

        assert transition(restarted, RefreshCompleted(1, new_data)) is restarted
        assert transition(restarted, RefreshCompleted(2, new_data)).data is new_data

    def test_failure_keeps_data(self, state: SessionState) -> None:
        """A failed refresh reports and keeps browsing the old snapshot."""
        refreshing = run(state, Command.MOVE_DOWN, Command.REFRESH)

        failed = transition(refreshing, RefreshFailed(1, "HTTP 503"))

        assert failed.data is state.data
        assert failed.cursor == 1
        assert failed.refresh_token is None
        assert "HTTP 503" in failed.status

    def test_refresh_allowed_in_overlay(self, state: SessionState) -> None:
        """Refresh can start while the stats overlay is open."""
        shown = transition(state, Command.SHOW_STATS)

        assert transition(shown, Command.REFRESH).refresh_token == 1


class TestQuit:
    @pytest.mark.parametrize(
        "setup",
        [
            [],
            [Command.ENTER_SEARCH],
            [Command.SELECT],
            [Command.SHOW_CARD],
        ],
    )
    def test_quit_from_any_state(self, state: SessionState, setup) -> None:
        """Quit ends the session from every mode."""
        quit_state = transition(run(state, *setup), Command.QUIT)

        assert not quit_state.running

    def test_quit_cancels_refresh(self, state: SessionState) -> None:
        """Quitting abandons a running refresh."""
        quit_state = run(state, Command.REFRESH, Command.QUIT)

        assert quit_state.refresh_token is None

    def test_nothing_after_quit(self, state: SessionState) -> None:
        """Events after quit are ignored."""
        quit_state = transition(state, Command.QUIT)

        assert transition(quit_state, Command.MOVE_DOWN) is quit_state


class TestStatus:
    def test_set_status(self, state: SessionState) -> None:
        """Status messages replace the status line."""
        assert transition(state, SetStatus("Saved")).status == "Saved"

    def test_mark_clean(self, state: SessionState) -> None:
        """Rendering clears the dirty flag."""
        dirty = transition(state, Command.MOVE_DOWN)

        assert dirty.dirty
        assert not mark_clean(dirty).dirty

    @pytest.mark.parametrize("event", [object(), "move-down", None])
    def test_unregistered_event_is_noop(self, state: SessionState, event) -> None:
        """Events without a handler leave the state untouched."""
        assert transition(state, event) is state
