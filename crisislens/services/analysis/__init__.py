"""
Analysis stage for CrisisLens.

- Capability interfaces for analysis and summary delegates
- Validation and repair of delegate output
- Offline (heuristic) and OpenAI-backed analysts
- Batch pacing policies
- Enricher orchestrating batched, failure-isolated analysis
"""
from .base import AnalysisCapability, SummaryCapability
from .validator import AnalysisValidator
from .heuristic_analyst import HeuristicAnalyst
from .openai_analyst import OpenAIAnalyst
from .pacing import FixedDelayPacing, NoPacing, PacingPolicy, TokenBucketPacing
from .enricher import EnrichOptions, Enricher

__all__ = [
    # Capabilities
    "AnalysisCapability",
    "SummaryCapability",
    # Validation
    "AnalysisValidator",
    # Analysts
    "HeuristicAnalyst",
    "OpenAIAnalyst",
    # Pacing
    "PacingPolicy",
    "FixedDelayPacing",
    "TokenBucketPacing",
    "NoPacing",
    # Enrichment
    "EnrichOptions",
    "Enricher",
]
