from metacollector.parsers.collection_import import (
    load_collection,
    parse_collection_text,
)
from metacollector.parsers.deck_list import load_deck_file, parse_deck_text
from metacollector.parsers.scryfall import fetch_catalog, parse_card

__all__ = [
    "fetch_catalog",
    "load_collection",
    "load_deck_file",
    "parse_card",
    "parse_collection_text",
    "parse_deck_text",
]
