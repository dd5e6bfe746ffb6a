"""
Wishlist reconciliation.

Diffs a collection against the copies the meta requires and ranks what is
missing by acquisition priority.

Sort order of the wishlist (highest priority first):
1. Playability score, descending
2. Deficit, descending
3. Card identity, ascending (stable output for identical input)

Every call recomputes from scratch. Inputs are immutable snapshots a few
thousand cards large, so there is no incremental state to invalidate.
"""

from collections.abc import Iterable

from metacollector.analysis.playability import PlayabilityScores
from metacollector.config import RequiredCopiesPolicy
from metacollector.models.card import BASIC_LAND_NAMES, CardCatalog, CardIdentity
from metacollector.models.collection import Collection
from metacollector.models.deck import MetaCorpus
from metacollector.models.wishlist import WishlistExportEntry, WishlistRow


def required_copies(
    corpus: MetaCorpus,
    policy: RequiredCopiesPolicy = RequiredCopiesPolicy.MAX,
) -> dict[CardIdentity, int]:
    """
    Copies of each card the meta asks for.

    Args:
        corpus: Meta decks for one format
        policy: MAX takes the most demanding single deck, SUM adds all decks

    Returns:
        Dict mapping identity to required copies, in first-seen order
    """
    required: dict[CardIdentity, int] = {}
    for deck in corpus.decks:
        for entry in deck.entries:
            current = required.get(entry.identity, 0)
            if policy is RequiredCopiesPolicy.SUM:
                required[entry.identity] = current + entry.copies
            else:
                required[entry.identity] = max(current, entry.copies)
    return required


def wishlist_sort_key(row: WishlistRow) -> tuple[float, int, CardIdentity]:
    """Acquisition priority: score, then deficit, then identity."""
    return (-row.score, -row.deficit, row.identity)


def catalog_sort_key(row: WishlistRow) -> tuple[float, int, CardIdentity]:
    """Meta relevance ignoring the collection: score, then required, then identity."""
    return (-row.score, -row.required, row.identity)


def _is_basic_land(identity: CardIdentity, catalog: CardCatalog | None) -> bool:
    info = catalog.get(identity) if catalog is not None else None
    if info is not None:
        return info.is_basic_land
    return identity.name in BASIC_LAND_NAMES


def _build_rows(
    collection: Collection,
    corpus: MetaCorpus,
    scores: PlayabilityScores,
    policy: RequiredCopiesPolicy,
    catalog: CardCatalog | None,
    exclude_basic_lands: bool,
) -> list[WishlistRow]:
    rows: list[WishlistRow] = []
    for identity, required in required_copies(corpus, policy).items():
        if exclude_basic_lands and _is_basic_land(identity, catalog):
            continue
        rows.append(
            WishlistRow(
                identity=identity,
                required=required,
                owned=collection.get_quantity(identity),
                score=scores.get(identity, 0.0),
            )
        )
    return rows


def build_catalog_rows(
    collection: Collection,
    corpus: MetaCorpus,
    scores: PlayabilityScores,
    policy: RequiredCopiesPolicy = RequiredCopiesPolicy.MAX,
    catalog: CardCatalog | None = None,
    exclude_basic_lands: bool = False,
) -> list[WishlistRow]:
    """
    Rows for every card of the meta, including the ones already owned.

    Ordered by catalog_sort_key so the collection does not affect placement.
    """
    rows = _build_rows(collection, corpus, scores, policy, catalog, exclude_basic_lands)
    rows.sort(key=catalog_sort_key)
    return rows


def build_wishlist(
    collection: Collection,
    corpus: MetaCorpus,
    scores: PlayabilityScores,
    policy: RequiredCopiesPolicy = RequiredCopiesPolicy.MAX,
    catalog: CardCatalog | None = None,
    exclude_basic_lands: bool = False,
) -> list[WishlistRow]:
    """
    Build the ranked wishlist of cards the collection is missing.

    Args:
        collection: Owned quantities
        corpus: Meta decks for the format
        scores: Playability scores computed from the same corpus
        policy: How copies combine across decks
        catalog: Card catalog, used to recognise basic lands
        exclude_basic_lands: Leave basic lands off the wishlist

    Returns:
        Rows with deficit > 0, highest acquisition priority first
    """
    rows = _build_rows(collection, corpus, scores, policy, catalog, exclude_basic_lands)
    wishlist = [row for row in rows if row.deficit > 0]
    wishlist.sort(key=wishlist_sort_key)
    return wishlist


def export_wishlist(
    rows: Iterable[WishlistRow],
    catalog: CardCatalog | None = None,
) -> list[WishlistExportEntry]:
    """
    Convert wishlist rows into export entries, preserving wishlist order.

    Rows without a deficit are skipped. Rows arriving out of order are
    re-sorted so the export always follows wishlist priority.
    """
    entries: list[WishlistExportEntry] = []
    for row in sorted((r for r in rows if r.deficit > 0), key=wishlist_sort_key):
        info = catalog.get(row.identity) if catalog is not None else None
        name = info.display_name if info is not None else row.identity.name
        entries.append(WishlistExportEntry(name=name, deficit=row.deficit, score=row.score))
    return entries
