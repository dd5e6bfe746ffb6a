"""
Session data snapshots.

A snapshot is everything the interactive session browses, built in one go
from the provider and the collection file. Refreshing builds a new snapshot
instead of touching the current one.
"""

import logging
from pathlib import Path

from metacollector.analysis.playability import compute_scores
from metacollector.analysis.reconciliation import build_catalog_rows, build_wishlist
from metacollector.config import RequiredCopiesPolicy, settings
from metacollector.models.collection import Collection
from metacollector.models.deck import DeckList, build_corpus
from metacollector.models.failure import ValidationWarning
from metacollector.parsers.collection_import import load_collection
from metacollector.services.provider import DataProvider
from metacollector.session.state import SessionData

logger = logging.getLogger(__name__)


def deck_card_names(decklists: list[DeckList]) -> list[str]:
    """Every card name played by the decklists, in first-seen order."""
    names: dict[str, None] = {}
    for decklist in decklists:
        for name in decklist.total_copies():
            names.setdefault(name)
    return list(names)


def build_session_data(
    format_name: str,
    decklists: list[DeckList],
    provider: DataProvider,
    collection: Collection,
    collection_warnings: list[ValidationWarning] | None = None,
    copy_cap: int | None = None,
    policy: RequiredCopiesPolicy | None = None,
    exclude_basic_lands: bool | None = None,
) -> SessionData:
    """
    Run the engines over fetched decklists and a collection.

    Args:
        format_name: Format being browsed
        decklists: Scraped meta decklists
        provider: Source of card metadata
        collection: Owned cards
        collection_warnings: Warnings from loading the collection
        copy_cap: Copies per deck counted toward playability
        policy: How required copies combine across decks
        exclude_basic_lands: Leave basic lands out of the rows

    Returns:
        SessionData ready for initial_state()

    Raises:
        DataFetchError: If card metadata cannot be fetched
        ConfigurationError: If deck weights are invalid
    """
    copy_cap = copy_cap if copy_cap is not None else settings.copy_cap
    policy = policy or settings.required_policy
    if exclude_basic_lands is None:
        exclude_basic_lands = settings.exclude_basic_lands

    catalog = provider.fetch_catalog(format_name, deck_card_names(decklists))
    corpus = build_corpus(decklists, catalog, format_name)
    scores = compute_scores(corpus, cap=copy_cap)

    catalog_rows = build_catalog_rows(
        collection, corpus, scores, policy, catalog, exclude_basic_lands
    )
    wishlist_rows = build_wishlist(collection, corpus, scores, policy, catalog, exclude_basic_lands)
    logger.info(
        "%s snapshot: %d meta cards, %d wanted", format_name, len(catalog_rows), len(wishlist_rows)
    )

    return SessionData(
        format_name=format_name,
        catalog=catalog,
        catalog_rows=tuple(catalog_rows),
        wishlist_rows=tuple(wishlist_rows),
        warnings=tuple(collection_warnings or ()) + corpus.warnings,
    )


def load_snapshot(
    format_name: str,
    provider: DataProvider,
    collection_path: Path | None = None,
) -> SessionData:
    """
    Fetch the meta, load the collection and build a snapshot.

    The collection file is re-read every time, so a refresh picks up edits.

    Raises:
        DataFetchError: If the provider fails
        ConfigurationError: If the collection or deck weights are invalid
    """
    collection, warnings = load_collection(collection_path or settings.collection_path)
    decklists = provider.fetch_meta_decks(format_name)
    return build_session_data(format_name, decklists, provider, collection, warnings)
