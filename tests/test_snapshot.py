from collections.abc import Iterable
from pathlib import Path

import pytest

from metacollector.models.card import CardCatalog, CardIdentity
from metacollector.models.collection import Collection
from metacollector.models.deck import DeckList
from metacollector.models.failure import ConfigurationError, FailureKind
from metacollector.services.snapshot import build_session_data, deck_card_names, load_snapshot


class FakeProvider:
    """Provider serving fixed decklists and catalog."""

    def __init__(self, decklists: list[DeckList], catalog: CardCatalog) -> None:
        self.decklists = decklists
        self.catalog = catalog
        self.requested: list[str] = []

    def fetch_meta_decks(self, format_name: str) -> list[DeckList]:
        return self.decklists

    def fetch_catalog(self, format_name: str, names: Iterable[str]) -> CardCatalog:
        self.requested = list(names)
        return self.catalog


@pytest.fixture
def decklists() -> list[DeckList]:
    return [
        DeckList(
            name="Burn",
            archetype="aggro",
            format="pauper",
            cards={"Bolt": 4, "Shock": 2, "Mountain": 16},
            meta_share=0.3,
        ),
        DeckList(
            name="Wraiths",
            archetype="midrange",
            format="pauper",
            cards={"Bog Wraith": 4},
            sideboard={"Shock": 2, "Unknown Card": 1},
            meta_share=0.1,
        ),
    ]


@pytest.fixture
def provider(decklists: list[DeckList], catalog: CardCatalog) -> FakeProvider:
    return FakeProvider(decklists, catalog)


def names(rows) -> list[str]:
    return [row.identity.name for row in rows]


class TestDeckCardNames:
    def test_first_seen_order(self, decklists: list[DeckList]) -> None:
        """Maindeck and sideboard names, each once."""
        assert deck_card_names(decklists) == [
            "Bolt",
            "Shock",
            "Mountain",
            "Bog Wraith",
            "Unknown Card",
        ]


class TestBuildSessionData:
    def test_rows(self, decklists: list[DeckList], provider: FakeProvider) -> None:
        """Catalog rows hold every meta card, the wishlist only the missing ones."""
        data = build_session_data(
            "pauper", decklists, provider, Collection({CardIdentity("Shock"): 4})
        )

        assert names(data.catalog_rows) == ["Bolt", "Shock", "Bog Wraith"]
        assert names(data.wishlist_rows) == ["Bolt", "Bog Wraith"]
        assert provider.requested == deck_card_names(decklists)

    def test_unresolved_cards_warn(self, decklists: list[DeckList], provider: FakeProvider) -> None:
        """Collection warnings come first, then dropped deck entries."""
        data = build_session_data("pauper", decklists, provider, Collection())

        assert [w.kind for w in data.warnings] == [FailureKind.UNRESOLVED_CARD]
        assert data.warnings[0].card_name == "Unknown Card"

    def test_basic_lands_included_on_request(
        self, decklists: list[DeckList], provider: FakeProvider
    ) -> None:
        data = build_session_data(
            "pauper", decklists, provider, Collection(), exclude_basic_lands=False
        )

        assert "Mountain" in names(data.catalog_rows)


class TestLoadSnapshot:
    def test_reads_collection_file(self, tmp_path: Path, provider: FakeProvider) -> None:
        """The collection file is read and its warnings are kept."""
        path = tmp_path / "collection.txt"
        path.write_text("4 Shock\nnot a line\n", encoding="utf-8")

        data = load_snapshot("pauper", provider, collection_path=path)

        assert data.format_name == "pauper"
        assert names(data.wishlist_rows) == ["Bolt", "Bog Wraith"]
        assert [w.kind for w in data.warnings] == [
            FailureKind.PARSE_ERROR,
            FailureKind.UNRESOLVED_CARD,
        ]

    def test_missing_collection(self, tmp_path: Path, provider: FakeProvider) -> None:
        """Without a collection every meta card is wanted."""
        data = load_snapshot("pauper", provider, collection_path=tmp_path / "missing.txt")

        assert names(data.wishlist_rows) == ["Bolt", "Shock", "Bog Wraith"]

    def test_unreadable_collection(self, tmp_path: Path, provider: FakeProvider) -> None:
        """A collection that cannot be read fails before the meta is fetched."""
        path = tmp_path / "collection.txt"
        path.write_bytes(b"4 Lim\xe9 Bolt\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_snapshot("pauper", provider, collection_path=path)

        assert exc_info.value.kind == FailureKind.INVALID_INPUT
        assert provider.requested == []
