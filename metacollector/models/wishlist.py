from dataclasses import dataclass

from metacollector.models.card import CardIdentity


@dataclass(frozen=True, slots=True)
class WishlistRow:
    """
    Requirement vs. ownership for one card of the meta.

    Attributes:
        identity: The card
        required: Copies the meta asks for
        owned: Copies in the collection
        score: Playability score (0.0-1.0)
    """

    identity: CardIdentity
    required: int
    owned: int
    score: float

    @property
    def deficit(self) -> int:
        """Copies still missing."""
        return max(0, self.required - self.owned)

    @property
    def is_complete(self) -> bool:
        """True if the collection covers the requirement."""
        return self.deficit == 0


@dataclass(frozen=True, slots=True)
class WishlistExportEntry:
    """One line of an exported wishlist."""

    name: str
    deficit: int
    score: float
