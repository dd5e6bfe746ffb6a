"""
Wishlist export.

Writes the wishlist as a plain decklist ("<deficit> <name>" per line), which
card shops and deck sites accept as a want list.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from metacollector.analysis.reconciliation import export_wishlist
from metacollector.models.card import CardIdentity
from metacollector.models.wishlist import WishlistExportEntry
from metacollector.session.state import SessionData

logger = logging.getLogger(__name__)


def format_wishlist(entries: Iterable[WishlistExportEntry]) -> str:
    """Render export entries as decklist text, one card per line."""
    return "".join(f"{entry.deficit} {entry.name}\n" for entry in entries)


def select_export_entries(
    data: SessionData,
    marked: Iterable[CardIdentity] = (),
) -> list[WishlistExportEntry]:
    """
    Pick the wishlist entries to export.

    Marked cards restrict the export to themselves; with nothing marked the
    whole wishlist is exported. Search filters never apply.
    """
    wanted = frozenset(marked)
    rows = data.wishlist_rows
    if wanted:
        rows = tuple(row for row in rows if row.identity in wanted)
    return export_wishlist(rows, data.catalog)


def write_wishlist(
    data: SessionData,
    path: Path,
    marked: Iterable[CardIdentity] = (),
) -> int:
    """
    Write the wishlist to a file.

    Args:
        data: Snapshot holding the wishlist
        path: Output file, overwritten
        marked: Cards to restrict the export to

    Returns:
        Number of lines written

    Raises:
        OSError: If the file cannot be written
    """
    entries = select_export_entries(data, marked)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_wishlist(entries), encoding="utf-8")
    logger.info("Exported %d wishlist entries to %s", len(entries), path)
    return len(entries)
