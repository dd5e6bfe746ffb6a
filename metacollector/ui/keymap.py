"""
Key translation.

Turns textual key names into session events. The session never sees raw
keys; which command a key means depends on the mode (Enter commits a search
but selects a row while browsing), so translation looks at the state.
"""

from enum import Enum

from metacollector.session.state import Command, Event, InsertText, Mode, Overlay, SessionState


class UiAction(str, Enum):
    """Actions handled by the application itself rather than the session."""

    EXPORT_WISHLIST = "export-wishlist"


# Keys that mean the same thing while browsing and while an overlay is open
_GLOBAL_KEYS: dict[str, Command] = {
    "q": Command.QUIT,
    "r": Command.REFRESH,
    "s": Command.SHOW_CARD,
    "t": Command.SHOW_STATS,
}

_BROWSING_KEYS: dict[str, Command] = {
    "tab": Command.SWITCH_DATASET,
    "j": Command.MOVE_DOWN,
    "down": Command.MOVE_DOWN,
    "k": Command.MOVE_UP,
    "up": Command.MOVE_UP,
    "g": Command.JUMP_TOP,
    "home": Command.JUMP_TOP,
    "G": Command.JUMP_BOTTOM,
    "end": Command.JUMP_BOTTOM,
    "pagedown": Command.PAGE_DOWN,
    "ctrl+d": Command.PAGE_DOWN,
    "pageup": Command.PAGE_UP,
    "ctrl+u": Command.PAGE_UP,
    "/": Command.ENTER_SEARCH,
    "enter": Command.SELECT,
}

_SEARCHING_KEYS: dict[str, Command] = {
    "enter": Command.COMMIT_SEARCH,
    "backspace": Command.DELETE_CHAR,
    "down": Command.MOVE_DOWN,
    "up": Command.MOVE_UP,
}

_CONFIRMING_KEYS: dict[str, Command] = {
    "y": Command.CONFIRM,
    "enter": Command.CONFIRM,
    "n": Command.CANCEL,
    "escape": Command.CANCEL,
    "q": Command.QUIT,
}


def translate_key(
    key: str,
    character: str | None,
    state: SessionState,
) -> Event | UiAction | None:
    """
    Map a key press to a session event or application action.

    Args:
        key: Textual key name ("j", "enter", "ctrl+d", ...)
        character: Printable character of the key, if any
        state: Current session state

    Returns:
        Event for the session, UiAction for the application, or None if the
        key means nothing here
    """
    if key == "ctrl+c":
        return Command.QUIT

    # Printable keys are matched by character so shifted letters work
    name = character if character and character.isprintable() else key

    if state.mode is Mode.SEARCHING:
        if key == "escape":
            return Command.CANCEL_SEARCH
        if key in _SEARCHING_KEYS:
            return _SEARCHING_KEYS[key]
        if character and character.isprintable():
            return InsertText(character)
        return None

    if state.mode is Mode.CONFIRMING:
        return _CONFIRMING_KEYS.get(name)

    if key == "escape":
        if state.refreshing:
            return Command.CANCEL_REFRESH
        if state.overlay is not Overlay.NONE:
            return Command.DISMISS_OVERLAY
        return None

    if name in _GLOBAL_KEYS:
        return _GLOBAL_KEYS[name]
    if state.overlay is not Overlay.NONE:
        return None

    if name == "w":
        return UiAction.EXPORT_WISHLIST
    return _BROWSING_KEYS.get(name)
