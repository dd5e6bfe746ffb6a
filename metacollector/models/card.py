"""
Card identity and catalog models.

INVARIANTS:
- CardIdentity is the only key used to join catalog, meta corpus and
  collection data. Cosmetic variants (foil, alternate art) share an identity.
- CardCatalog holds at most one CardInfo per identity and is immutable once
  built. A refresh builds a new catalog instead of patching the old one.
"""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

BASIC_LAND_NAMES = frozenset(
    {
        "Plains",
        "Island",
        "Swamp",
        "Mountain",
        "Forest",
        "Wastes",
        "Snow-Covered Plains",
        "Snow-Covered Island",
        "Snow-Covered Swamp",
        "Snow-Covered Mountain",
        "Snow-Covered Forest",
    }
)

# Decklist sites drop the accents on a handful of names
_ACCENT_FIXES = {
    "Lorien Revealed": "Lórien Revealed",
    "Troll of Khazad-dum": "Troll of Khazad-dûm",
}

LEGAL_STATUSES = frozenset({"legal", "restricted"})

_TYPE_SEPARATORS = re.compile(r"\s*(?:—|//)\s*|\s+-\s+|\s+")


def canonical_name(raw: str) -> str:
    """
    Normalize a card name as found in decklists and exports.

    Double-faced and split cards are reduced to their front face
    ("Fable of the Mirror-Breaker // Reflection of Kiki-Jiki" becomes
    "Fable of the Mirror-Breaker"), surrounding whitespace is removed and
    known accent-stripped spellings are repaired.
    """
    name = raw.strip()
    slash = name.find("/")
    if slash > 0:
        name = name[:slash].strip()
    return _ACCENT_FIXES.get(name, name)


def parse_type_tags(type_line: str) -> tuple[str, ...]:
    """Split a type line ("Basic Land — Mountain") into its words."""
    return tuple(tag for tag in _TYPE_SEPARATORS.split(type_line) if tag)


@dataclass(frozen=True, slots=True, order=True)
class CardIdentity:
    """
    Immutable key for a logical card.

    Attributes:
        name: Canonical card name (front face for double-faced cards)
        printing: Set/printing disambiguator, empty when the name is enough
    """

    name: str
    printing: str = ""

    @classmethod
    def from_name(cls, raw: str, printing: str = "") -> "CardIdentity":
        """Build an identity from a raw name, applying name canonicalization."""
        return cls(name=canonical_name(raw), printing=printing.strip().lower())

    def __str__(self) -> str:
        if self.printing:
            return f"{self.name} ({self.printing.upper()})"
        return self.name


@dataclass(frozen=True, slots=True)
class CardInfo:
    """
    Printable card attributes.

    Attributes:
        identity: Key of this card
        display_name: Full name as printed (both faces for double-faced cards)
        mana_cost: Mana cost descriptor (e.g., "{1}{R}")
        type_line: Full type line (e.g., "Creature — Goblin Scout")
        type_tags: Words of the type line, used for searching and filtering
        colors: Color letters (W, U, B, R, G)
        legalities: Format -> legality status, as reported by Scryfall
        image_url: Large image of the front face, if known
    """

    identity: CardIdentity
    display_name: str
    mana_cost: str = ""
    type_line: str = ""
    type_tags: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    legalities: dict[str, str] = field(default_factory=dict)
    image_url: str | None = None

    @property
    def is_basic_land(self) -> bool:
        if self.type_tags:
            return "Basic" in self.type_tags
        return self.identity.name in BASIC_LAND_NAMES

    @property
    def is_land(self) -> bool:
        return "Land" in self.type_tags

    def is_legal_in(self, format_name: str) -> bool:
        """
        Check format legality.

        Cards without legality data for the format are assumed legal; the
        catalog only excludes what it knows to be illegal.
        """
        status = self.legalities.get(format_name)
        return status is None or status in LEGAL_STATUSES


@dataclass(frozen=True)
class CardCatalog:
    """
    Deduplicated set of known cards for one format.

    Usage:
        catalog = CardCatalog.from_cards(infos, format_name="pauper")
        identity = catalog.resolve("Lightning Bolt")
        info = catalog.get(identity)
    """

    format_name: str
    cards: dict[CardIdentity, CardInfo] = field(default_factory=dict)
    by_name: dict[str, CardIdentity] = field(default_factory=dict)

    @classmethod
    def from_cards(cls, cards: Iterable[CardInfo], format_name: str = "") -> "CardCatalog":
        """
        Build a catalog, keeping the first CardInfo seen for each identity.
        """
        by_identity: dict[CardIdentity, CardInfo] = {}
        by_name: dict[str, CardIdentity] = {}
        for info in cards:
            if info.identity in by_identity:
                continue
            by_identity[info.identity] = info
            by_name.setdefault(info.identity.name.casefold(), info.identity)
        return cls(format_name=format_name, cards=by_identity, by_name=by_name)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[CardInfo]:
        return iter(self.cards.values())

    def __contains__(self, identity: object) -> bool:
        return identity in self.cards

    def get(self, identity: CardIdentity) -> CardInfo | None:
        return self.cards.get(identity)

    def resolve(self, name: str, printing: str = "") -> CardIdentity | None:
        """
        Resolve a raw card name to a catalog identity.

        Falls back to a name-only, case-insensitive match when the exact
        printing is unknown. Cards the catalog knows to be illegal in its
        format do not resolve.

        Returns:
            The catalog identity, or None if the card is unknown or illegal
        """
        wanted = CardIdentity.from_name(name, printing)
        identity: CardIdentity | None = wanted if wanted in self.cards else None
        if identity is None:
            identity = self.by_name.get(wanted.name.casefold())
        if identity is None:
            return None

        info = self.cards[identity]
        if self.format_name and not info.is_legal_in(self.format_name):
            return None
        return identity
