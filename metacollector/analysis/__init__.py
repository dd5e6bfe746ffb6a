from metacollector.analysis.playability import PlayabilityScores, compute_scores
from metacollector.analysis.reconciliation import (
    build_catalog_rows,
    build_wishlist,
    catalog_sort_key,
    export_wishlist,
    required_copies,
    wishlist_sort_key,
)
from metacollector.analysis.stats import CollectionStats, Progress, calculate_stats

__all__ = [
    "CollectionStats",
    "PlayabilityScores",
    "Progress",
    "build_catalog_rows",
    "build_wishlist",
    "calculate_stats",
    "catalog_sort_key",
    "compute_scores",
    "export_wishlist",
    "required_copies",
    "wishlist_sort_key",
]
