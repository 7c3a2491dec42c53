"""
Synthesis stage for CrisisLens.

- Urgency trend inference (hourly buckets, per-type direction)
- InsightsEngine: metrics, recommendations and executive summary
"""
from .trends import compute_trends, trend_direction
from .insights import InsightsEngine

__all__ = [
    "compute_trends",
    "trend_direction",
    "InsightsEngine",
]
