"""
Playability scoring.

A card's playability is the weighted number of copies the meta plays:

    total(card) = sum over decks containing card of weight(deck) * min(copies, cap)

Totals are normalized by the largest total so the most played card scores
exactly 1.0. The cap keeps 4-of staples and basic lands from drowning out
everything else.

INVARIANT: compute_scores is a pure function of its inputs. The same corpus
always yields the same scores, which keeps the wishlist order deterministic.
"""

from collections.abc import Mapping
from types import MappingProxyType

from metacollector.config import DEFAULT_COPY_CAP
from metacollector.models.card import CardIdentity
from metacollector.models.deck import MetaCorpus
from metacollector.models.failure import ConfigurationError, FailureKind

PlayabilityScores = Mapping[CardIdentity, float]


def compute_scores(corpus: MetaCorpus, cap: int = DEFAULT_COPY_CAP) -> PlayabilityScores:
    """
    Compute normalized playability scores for every card in a corpus.

    Args:
        corpus: Meta decks for one format
        cap: Maximum copies per deck that count toward a card's total

    Returns:
        Read-only mapping of identity -> score in [0.0, 1.0]. The mapping is
        a fresh snapshot; callers replace it wholesale when the corpus
        changes.

    Raises:
        ConfigurationError: If a deck has a non-positive weight or cap < 1
    """
    if cap < 1:
        raise ConfigurationError(
            kind=FailureKind.INVALID_WEIGHT,
            message=f"Copy cap must be at least 1, got {cap}",
        )

    totals: dict[CardIdentity, float] = {}
    for deck in corpus.decks:
        if not deck.weight > 0:
            raise ConfigurationError(
                kind=FailureKind.INVALID_WEIGHT,
                message=f"Deck '{deck.name}' has non-positive weight {deck.weight}",
                detail="meta deck weights must be derived from a positive meta share",
            )
        for entry in deck.entries:
            contribution = deck.weight * min(entry.copies, cap)
            totals[entry.identity] = totals.get(entry.identity, 0.0) + contribution

    highest = max(totals.values(), default=0.0)
    if highest <= 0:
        return MappingProxyType({identity: 0.0 for identity in totals})

    return MappingProxyType({identity: total / highest for identity, total in totals.items()})
