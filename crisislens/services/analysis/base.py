"""
Capability interfaces consumed by the enrichment and insight stages.

The analysis and summary delegates are black boxes: any object with the
right coroutine satisfies them. Both may raise; callers isolate failures.
"""
from typing import Any, Mapping, Protocol, Sequence, Union, runtime_checkable

from crisislens.models.crisis_event import Analysis, CrisisEvent

AnalysisOutput = Union[Analysis, Mapping[str, Any]]


@runtime_checkable
class AnalysisCapability(Protocol):
    """Produces a structured severity analysis for one report."""

    async def analyze(self, text: str, location: str, crisis_type: str) -> AnalysisOutput:
        ...


@runtime_checkable
class SummaryCapability(Protocol):
    """Produces an executive summary for a set of enriched events."""

    async def summarize(self, events: Sequence[CrisisEvent]) -> str:
        ...
