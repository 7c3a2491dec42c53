"""
Error taxonomy for CrisisLens.

Failures scoped to one source or one event are absorbed where they happen;
only orchestration faults escalate to the aggregator's top-level fallback.
"""
from typing import Any, Dict, Optional


class CrisisLensError(Exception):
    """Base exception for all CrisisLens errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SourceUnavailable(CrisisLensError):
    """A connector failed or exceeded its deadline."""

    def __init__(self, source: str, message: str, **kwargs):
        super().__init__(f"{source}: {message}", **kwargs)
        self.source = source


class AnalysisFailure(CrisisLensError):
    """The analysis delegate failed for a single event."""
    pass


class SummaryFailure(CrisisLensError):
    """The summary delegate failed to produce an executive summary."""
    pass


class CriticalAggregationFailure(CrisisLensError):
    """Unexpected fault inside aggregation orchestration."""
    pass


class AggregationInProgress(CrisisLensError):
    """An aggregation run is already in flight."""
    pass


class ConfigurationError(CrisisLensError):
    """Environment settings failed validation."""
    pass
