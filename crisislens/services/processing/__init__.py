"""
Processing stage for CrisisLens.

- Heuristic scoring (crisis type, location, urgency, relevance)
- Fingerprint deduplication
- Priority ranking
- Multi-source aggregation
"""
from .scoring import (
    classify_crisis_type,
    compute_urgency,
    extract_location,
    is_crisis_related,
)
from .dedup import deduplicate, fingerprint, remove_cross_source_duplicates
from .ranker import PriorityConfig, PriorityRanker

__all__ = [
    # Scoring
    "classify_crisis_type",
    "compute_urgency",
    "extract_location",
    "is_crisis_related",
    # Dedup
    "deduplicate",
    "fingerprint",
    "remove_cross_source_duplicates",
    # Ranking
    "PriorityConfig",
    "PriorityRanker",
]
