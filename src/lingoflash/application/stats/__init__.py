# Application Stats Package
from .library_stats import LibraryStats, compute_library_stats, next_review_label

__all__ = ["LibraryStats", "compute_library_stats", "next_review_label"]
