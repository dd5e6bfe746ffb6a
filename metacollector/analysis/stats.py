"""
Collection completion statistics.

Measures how much of the most played part of the meta the collection
already covers, overall and per color.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from metacollector.models.card import CardCatalog, CardInfo
from metacollector.models.wishlist import WishlistRow

WUBRG = ("W", "U", "B", "R", "G")

COLOR_NAMES = {
    "W": "White",
    "U": "Blue",
    "B": "Black",
    "R": "Red",
    "G": "Green",
}


@dataclass(frozen=True, slots=True)
class Progress:
    """Owned copies (capped at required) out of required copies."""

    owned: int = 0
    total: int = 0

    @property
    def fraction(self) -> float:
        return self.owned / self.total if self.total else 1.0


@dataclass(frozen=True, slots=True)
class CollectionStats:
    """Completion progress for the top of the meta."""

    top_20: Progress
    top_50: Progress
    top_150: Progress
    top_20_by_color: dict[str, Progress]
    top_10_colorless: Progress
    top_20_multicolor: Progress
    top_10_lands: Progress

    def lines(self) -> list[tuple[str, Progress]]:
        """Labelled progress values, in display order."""
        result = [
            ("Top 20", self.top_20),
            ("Top 50", self.top_50),
            ("Top 150", self.top_150),
        ]
        result.extend(
            (f"Top 20 {COLOR_NAMES[color]} cards", progress)
            for color, progress in self.top_20_by_color.items()
        )
        result.extend(
            [
                ("Top 10 colorless", self.top_10_colorless),
                ("Top 20 multicolor", self.top_20_multicolor),
                ("Top 10 land", self.top_10_lands),
            ]
        )
        return result


def _top(
    rows: Sequence[WishlistRow],
    count: int,
    matches: Callable[[WishlistRow], bool],
) -> Progress:
    owned = 0
    total = 0
    for row in [r for r in rows if matches(r)][:count]:
        owned += min(row.owned, row.required)
        total += row.required
    return Progress(owned=owned, total=total)


def calculate_stats(rows: Sequence[WishlistRow], catalog: CardCatalog) -> CollectionStats:
    """
    Calculate completion statistics.

    Args:
        rows: Catalog rows ordered by meta relevance (see build_catalog_rows)
        catalog: Card catalog for colors and types

    Returns:
        CollectionStats for the leading rows of each category
    """

    def info(row: WishlistRow) -> CardInfo | None:
        return catalog.get(row.identity)

    def colors(row: WishlistRow) -> tuple[str, ...]:
        card = info(row)
        return card.colors if card is not None else ()

    def is_land(row: WishlistRow) -> bool:
        card = info(row)
        return card is not None and card.is_land

    return CollectionStats(
        top_20=_top(rows, 20, lambda _: True),
        top_50=_top(rows, 50, lambda _: True),
        top_150=_top(rows, 150, lambda _: True),
        top_20_by_color={
            color: _top(rows, 20, lambda r, c=color: colors(r) == (c,)) for color in WUBRG
        },
        top_10_colorless=_top(rows, 10, lambda r: not colors(r) and not is_land(r)),
        top_20_multicolor=_top(rows, 20, lambda r: len(colors(r)) > 1),
        top_10_lands=_top(rows, 10, is_land),
    )
