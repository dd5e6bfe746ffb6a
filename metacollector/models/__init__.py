from metacollector.models.card import (
    BASIC_LAND_NAMES,
    CardCatalog,
    CardIdentity,
    CardInfo,
    canonical_name,
    parse_type_tags,
)
from metacollector.models.collection import Collection, OwnedEntry, build_collection
from metacollector.models.deck import DeckEntry, DeckList, MetaCorpus, MetaDeck, build_corpus
from metacollector.models.failure import (
    ConfigurationError,
    DataFetchError,
    FailureKind,
    InputNoOp,
    KnownError,
    ValidationWarning,
)
from metacollector.models.wishlist import WishlistExportEntry, WishlistRow

__all__ = [
    "BASIC_LAND_NAMES",
    "CardCatalog",
    "CardIdentity",
    "CardInfo",
    "Collection",
    "ConfigurationError",
    "DataFetchError",
    "DeckEntry",
    "DeckList",
    "FailureKind",
    "InputNoOp",
    "KnownError",
    "MetaCorpus",
    "MetaDeck",
    "OwnedEntry",
    "ValidationWarning",
    "WishlistExportEntry",
    "WishlistRow",
    "build_collection",
    "build_corpus",
    "canonical_name",
    "parse_type_tags",
]
