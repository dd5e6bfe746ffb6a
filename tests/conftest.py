import pytest

from metacollector.analysis.playability import compute_scores
from metacollector.analysis.reconciliation import build_catalog_rows, build_wishlist
from metacollector.models.card import CardCatalog, CardIdentity, CardInfo, parse_type_tags
from metacollector.models.collection import Collection
from metacollector.models.deck import DeckEntry, MetaCorpus, MetaDeck
from metacollector.session.state import SessionData


def _make_card(
    name: str,
    type_line: str = "Instant",
    colors: tuple[str, ...] = ("R",),
    mana_cost: str = "{R}",
    legalities: dict[str, str] | None = None,
) -> CardInfo:
    """CardInfo with sensible defaults for tests."""
    return CardInfo(
        identity=CardIdentity.from_name(name),
        display_name=name,
        mana_cost=mana_cost,
        type_line=type_line,
        type_tags=parse_type_tags(type_line),
        colors=colors,
        legalities=legalities or {},
    )


def _make_deck(name: str, weight: float, cards: dict[str, int]) -> MetaDeck:
    """MetaDeck from a {name: copies} mapping."""
    return MetaDeck(
        name=name,
        weight=weight,
        format_name="pauper",
        entries=tuple(DeckEntry(CardIdentity(card), copies) for card, copies in cards.items()),
    )


@pytest.fixture
def make_card():
    return _make_card


@pytest.fixture
def make_deck():
    return _make_deck


@pytest.fixture
def bolt() -> CardIdentity:
    return CardIdentity("Bolt")


@pytest.fixture
def shock() -> CardIdentity:
    return CardIdentity("Shock")


@pytest.fixture
def wraith() -> CardIdentity:
    return CardIdentity("Bog Wraith")


@pytest.fixture
def catalog() -> CardCatalog:
    """Small pauper catalog: two burn spells, a creature and a basic land."""
    return CardCatalog.from_cards(
        [
            _make_card("Bolt"),
            _make_card("Shock"),
            _make_card("Bog Wraith", "Creature — Wraith", ("B",), "{3}{B}"),
            _make_card("Mountain", "Basic Land — Mountain", (), ""),
        ],
        format_name="pauper",
    )


@pytest.fixture
def corpus() -> MetaCorpus:
    """DeckA (weight 2) plays Bolt; DeckB (weight 1) plays Bolt and Shock."""
    return MetaCorpus(
        format_name="pauper",
        decks=(
            _make_deck("DeckA", 2.0, {"Bolt": 1}),
            _make_deck("DeckB", 1.0, {"Bolt": 1, "Shock": 1}),
        ),
    )


@pytest.fixture
def session_corpus() -> MetaCorpus:
    """Corpus playing Bolt, Shock and Bog Wraith, scored in that order."""
    return MetaCorpus(
        format_name="pauper",
        decks=(
            _make_deck("Burn", 3.0, {"Bolt": 4, "Shock": 2}),
            _make_deck("Wraiths", 1.0, {"Bog Wraith": 4, "Shock": 2}),
        ),
    )


@pytest.fixture
def session_data(catalog: CardCatalog, session_corpus: MetaCorpus) -> SessionData:
    """Snapshot with 3 catalog rows (Bolt, Shock, Bog Wraith) and Shock owned."""
    collection = Collection({CardIdentity("Shock"): 4})
    scores = compute_scores(session_corpus)
    return SessionData(
        format_name="pauper",
        catalog=catalog,
        catalog_rows=tuple(build_catalog_rows(collection, session_corpus, scores, catalog=catalog)),
        wishlist_rows=tuple(build_wishlist(collection, session_corpus, scores, catalog=catalog)),
    )
