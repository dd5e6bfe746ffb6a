"""
Meta deck models and corpus ingestion.

Decklists arrive from the scraper keyed by raw card names. Ingestion
resolves every name against the card catalog and produces immutable
MetaDecks keyed by CardIdentity.

INVARIANT: every identity inside a MetaCorpus resolves in the catalog it was
built against. Unresolvable entries are dropped and reported as
ValidationWarnings, never counted under a guessed identity.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from metacollector.models.card import CardCatalog, CardIdentity
from metacollector.models.failure import FailureKind, ValidationWarning

logger = logging.getLogger(__name__)

# Weight for decks whose source reports no meta share
DEFAULT_DECK_WEIGHT = 1.0


@dataclass
class DeckList:
    """
    A competitive decklist as scraped, before identity resolution.

    Attributes:
        name: Deck archetype name (e.g., "Mono-Red Aggro")
        archetype: Play style category
        format: Format the list was played in (pauper, legacy, ...)
        cards: Maindeck cards {name: quantity}
        sideboard: Sideboard cards {name: quantity}
        meta_share: Fraction of the meta this deck represents (0.0-1.0)
        source_url: Where this deck list came from
    """

    name: str
    archetype: str  # aggro, midrange, control, combo
    format: str
    cards: dict[str, int] = field(default_factory=dict)
    sideboard: dict[str, int] = field(default_factory=dict)
    meta_share: float | None = None
    source_url: str | None = None

    def maindeck_count(self) -> int:
        """Total cards in maindeck."""
        return sum(self.cards.values())

    def all_cards(self) -> set[str]:
        """All unique card names in deck including sideboard."""
        return set(self.cards.keys()) | set(self.sideboard.keys())

    def total_copies(self) -> dict[str, int]:
        """Copies of each card across maindeck and sideboard, in list order."""
        totals: dict[str, int] = {}
        for section in (self.cards, self.sideboard):
            for card_name, qty in section.items():
                totals[card_name] = totals.get(card_name, 0) + qty
        return totals


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """A card and the number of copies a deck plays."""

    identity: CardIdentity
    copies: int

    def __post_init__(self) -> None:
        if self.copies < 1:
            raise ValueError(
                f"Deck entry '{self.identity}' has invalid count {self.copies} (must be >= 1)"
            )


@dataclass(frozen=True, slots=True)
class MetaDeck:
    """
    A resolved meta deck.

    Attributes:
        name: Deck archetype name
        weight: Source weight (meta share); higher means more influential
        format_name: Format tag
        entries: Cards in list order, one entry per identity
    """

    name: str
    weight: float
    format_name: str
    entries: tuple[DeckEntry, ...] = ()

    def copies_of(self, identity: CardIdentity) -> int:
        """Copies of a card in this deck (0 if absent)."""
        for entry in self.entries:
            if entry.identity == identity:
                return entry.copies
        return 0


@dataclass(frozen=True, slots=True)
class MetaCorpus:
    """
    All meta decks for one format.

    Attributes:
        format_name: Format every deck belongs to
        decks: The decks, in source order
        warnings: Entries dropped while building the corpus
    """

    format_name: str
    decks: tuple[MetaDeck, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()

    def __iter__(self) -> Iterator[MetaDeck]:
        return iter(self.decks)

    def __len__(self) -> int:
        return len(self.decks)

    def identities(self) -> list[CardIdentity]:
        """Every identity played by any deck, in first-seen order."""
        seen: dict[CardIdentity, None] = {}
        for deck in self.decks:
            for entry in deck.entries:
                seen.setdefault(entry.identity)
        return list(seen)


def build_corpus(
    decklists: Iterable[DeckList],
    catalog: CardCatalog,
    format_name: str,
) -> MetaCorpus:
    """
    Resolve scraped decklists into a MetaCorpus.

    Names that resolve to the same identity within one deck (for example a
    double-faced card listed by both spellings) are merged by summing their
    copies. Names the catalog cannot resolve are dropped with a warning.

    Args:
        decklists: Scraped decklists
        catalog: Card catalog for the format
        format_name: Format of the corpus

    Returns:
        MetaCorpus holding only resolvable entries
    """
    decks: list[MetaDeck] = []
    warnings: list[ValidationWarning] = []

    for decklist in decklists:
        copies: dict[CardIdentity, int] = {}
        for card_name, qty in decklist.total_copies().items():
            if qty < 1:
                continue
            identity = catalog.resolve(card_name)
            if identity is None:
                warning = ValidationWarning(
                    kind=FailureKind.UNRESOLVED_CARD,
                    card_name=card_name,
                    message=f"not found in the {format_name} card catalog (deck {decklist.name})",
                )
                logger.warning("Dropping deck entry %s", warning)
                warnings.append(warning)
                continue
            copies[identity] = copies.get(identity, 0) + qty

        if not copies:
            logger.debug("Skipping deck %s: no resolvable cards", decklist.name)
            continue

        weight = decklist.meta_share if decklist.meta_share is not None else DEFAULT_DECK_WEIGHT
        decks.append(
            MetaDeck(
                name=decklist.name,
                weight=weight,
                format_name=format_name,
                entries=tuple(DeckEntry(identity, qty) for identity, qty in copies.items()),
            )
        )

    logger.info(
        "Built %s corpus: %d decks, %d dropped entries", format_name, len(decks), len(warnings)
    )
    return MetaCorpus(format_name=format_name, decks=tuple(decks), warnings=tuple(warnings))
