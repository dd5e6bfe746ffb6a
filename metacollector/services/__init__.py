"""
Meta Collector services.

Data loading, snapshot building and output for the interactive session and
the deck check command.
"""

from metacollector.services.deck_check import (
    CheckStatus,
    DeckCheckLine,
    check_deck,
    print_deck_check,
)
from metacollector.services.export import format_wishlist, select_export_entries, write_wishlist
from metacollector.services.provider import DataProvider, WebDataProvider
from metacollector.services.snapshot import build_session_data, deck_card_names, load_snapshot

__all__ = [
    "CheckStatus",
    "DataProvider",
    "DeckCheckLine",
    "WebDataProvider",
    "build_session_data",
    "check_deck",
    "deck_card_names",
    "format_wishlist",
    "load_snapshot",
    "print_deck_check",
    "select_export_entries",
    "write_wishlist",
]
