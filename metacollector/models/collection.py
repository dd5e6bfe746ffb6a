import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from metacollector.models.card import CardIdentity
from metacollector.models.failure import FailureKind, ValidationWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OwnedEntry:
    """A card and the number of copies owned."""

    identity: CardIdentity
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(
                f"Owned entry '{self.identity}' has invalid quantity {self.quantity} (must be >= 0)"
            )


@dataclass(frozen=True)
class Collection:
    """
    A user's card collection.

    Holds at most one quantity per identity. Lookups for a printing-specific
    identity fall back to the plain name, so a collection recorded by name
    answers for every printing of the card.
    """

    quantities: dict[CardIdentity, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.quantities)

    def __iter__(self) -> Iterator[OwnedEntry]:
        for identity, quantity in self.quantities.items():
            yield OwnedEntry(identity, quantity)

    def get_quantity(self, identity: CardIdentity) -> int:
        """Get quantity owned of a specific card (0 if unknown)."""
        if identity in self.quantities:
            return self.quantities[identity]
        if identity.printing:
            return self.quantities.get(CardIdentity(identity.name), 0)
        return 0

    def owns(self, identity: CardIdentity, quantity: int = 1) -> bool:
        """Check if collection contains at least `quantity` of a card."""
        return self.get_quantity(identity) >= quantity

    def total_cards(self) -> int:
        """Total number of cards in collection."""
        return sum(self.quantities.values())

    def unique_cards(self) -> int:
        """Number of unique cards in collection."""
        return sum(1 for qty in self.quantities.values() if qty > 0)


def build_collection(
    entries: Iterable[OwnedEntry],
) -> tuple[Collection, list[ValidationWarning]]:
    """
    Build a collection from owned entries.

    A later entry for an identity already seen overwrites the earlier
    quantity; every overwrite is reported as a DUPLICATE_ENTRY warning.

    Returns:
        (collection, warnings)
    """
    quantities: dict[CardIdentity, int] = {}
    warnings: list[ValidationWarning] = []

    for entry in entries:
        if entry.identity in quantities:
            warning = ValidationWarning(
                kind=FailureKind.DUPLICATE_ENTRY,
                card_name=str(entry.identity),
                message=(
                    f"listed more than once, using the later quantity "
                    f"{entry.quantity} instead of {quantities[entry.identity]}"
                ),
            )
            logger.warning("Collection duplicate %s", warning)
            warnings.append(warning)
        quantities[entry.identity] = entry.quantity

    return Collection(quantities=quantities), warnings
