"""
Batch enrichment of crisis events with severity analyses.

Events are analyzed in fixed-size batches: calls within a batch run
concurrently and are reassembled in submission order, and the pacing policy
runs between batches. A failure for one event yields a conservative
placeholder analysis for that event only.
"""
import asyncio
import dataclasses
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from crisislens.core.config import (
    DEFAULT_ANALYSIS_TIMEOUT_SECONDS,
    DEFAULT_BATCH_SIZE,
)
from crisislens.core.exceptions import AnalysisFailure
from crisislens.models.crisis_event import Analysis, CrisisEvent
from crisislens.services.processing.scoring import compute_urgency
from .base import AnalysisCapability
from .pacing import FixedDelayPacing, PacingPolicy
from .profiles import placeholder_risk_level
from .validator import AnalysisValidator

logger = logging.getLogger(__name__)

PLACEHOLDER_CONFIDENCE = 0.3
PLACEHOLDER_CASUALTIES = "Unknown - automated analysis unavailable, manual assessment required"


@dataclass
class EnrichOptions:
    """Options for one enrich() call."""
    batch_size: int = DEFAULT_BATCH_SIZE
    include_timing: bool = True

    def __post_init__(self):
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int):
            raise ValueError(f"batch_size must be an integer, got {self.batch_size!r}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be > 0, got {self.batch_size}")


class Enricher:
    """
    Attaches an Analysis to each event using the analysis delegate.

    Usage:
        enricher = Enricher(HeuristicAnalyst())
        enriched = await enricher.enrich(result.data, EnrichOptions(batch_size=5))
    """

    def __init__(
        self,
        analyst: AnalysisCapability,
        validator: Optional[AnalysisValidator] = None,
        pacing: Optional[PacingPolicy] = None,
        analysis_timeout_seconds: Optional[float] = DEFAULT_ANALYSIS_TIMEOUT_SECONDS,
    ):
        """
        Args:
            analyst: Delegate implementing analyze(text, location, crisis_type)
            validator: Repairs delegate output before use
            pacing: Policy awaited before every batch after the first
            analysis_timeout_seconds: Per-call deadline; None disables it
        """
        self.analyst = analyst
        self.validator = validator or AnalysisValidator()
        self.pacing = pacing or FixedDelayPacing()
        self.analysis_timeout_seconds = analysis_timeout_seconds
        self._logger = logging.getLogger(f"{__name__}.Enricher")

    async def enrich(
        self,
        events: Sequence[CrisisEvent],
        options: Optional[EnrichOptions] = None,
    ) -> List[CrisisEvent]:
        """
        Return enriched copies of events, same length and order as the input.

        Never raises; per-event failures become placeholder analyses.
        """
        options = options or EnrichOptions()
        events = list(events)
        if not events:
            return []

        batch_size = options.batch_size
        total_batches = (len(events) + batch_size - 1) // batch_size
        self._logger.info(
            f"[ENRICH] Analyzing {len(events)} events in {total_batches} batches of {batch_size}"
        )

        start_time = time.time()
        enriched: List[CrisisEvent] = []

        for batch_index, offset in enumerate(range(0, len(events), batch_size)):
            batch = events[offset:offset + batch_size]

            if batch_index > 0:
                try:
                    await self.pacing.before_batch(batch_index, len(batch))
                except Exception as e:
                    self._logger.warning(f"[ENRICH] Pacing policy failed: {e}")

            results = await asyncio.gather(
                *(self._enrich_one(event, options.include_timing) for event in batch),
                return_exceptions=True,
            )

            for event, result in zip(batch, results):
                # a delegate that cancels itself comes back as a CancelledError result
                if isinstance(result, BaseException):
                    self._logger.error(f"[ENRICH] Unexpected error for event {event.id}: {result}")
                    result = self._with_placeholder(event, result, options.include_timing, 0.0)
                enriched.append(result)

            self._logger.debug(f"[ENRICH] Batch {batch_index + 1}/{total_batches} complete")

        degraded = sum(1 for e in enriched if e.analysis and e.analysis.degraded)
        self._logger.info(
            f"[ENRICH] Completed {len(enriched)} events in {time.time() - start_time:.2f}s "
            f"({degraded} degraded)"
        )
        return enriched

    async def _enrich_one(self, event: CrisisEvent, include_timing: bool) -> CrisisEvent:
        started = time.perf_counter()
        try:
            raw = await self._call_analyst(event)
            analysis = self.validator.repair(raw, event.type)
        except Exception as e:
            self._logger.warning(f"[ENRICH] Analysis failed for event {event.id}: {e}")
            elapsed_ms = (time.perf_counter() - started) * 1000
            return self._with_placeholder(event, e, include_timing, elapsed_ms)

        if include_timing:
            analysis.analysis_time_ms = (time.perf_counter() - started) * 1000
            analysis.timestamp = datetime.now(timezone.utc)
        return dataclasses.replace(event, analysis=analysis)

    async def _call_analyst(self, event: CrisisEvent):
        call = self.analyst.analyze(event.text, event.location, event.type)
        if self.analysis_timeout_seconds is None:
            return await call
        try:
            return await asyncio.wait_for(call, self.analysis_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise AnalysisFailure(
                f"Analysis timed out after {self.analysis_timeout_seconds}s",
                details={"event_id": event.id},
            ) from e

    def placeholder_analysis(self, event: CrisisEvent, error: BaseException) -> Analysis:
        """Conservative analysis used when the delegate fails for an event."""
        return Analysis(
            urgency=compute_urgency(event.text, event.type, event.social),
            estimated_casualties=PLACEHOLDER_CASUALTIES,
            resources_needed=[],
            immediate_actions=[],
            risk_level=placeholder_risk_level(event.type),
            stakeholders=[],
            confidence=PLACEHOLDER_CONFIDENCE,
            degraded=True,
            error=f"{type(error).__name__}: {error}",
        )

    def _with_placeholder(
        self,
        event: CrisisEvent,
        error: BaseException,
        include_timing: bool,
        elapsed_ms: float,
    ) -> CrisisEvent:
        analysis = self.placeholder_analysis(event, error)
        if include_timing:
            analysis.analysis_time_ms = elapsed_ms
            analysis.timestamp = datetime.now(timezone.utc)
        return dataclasses.replace(event, analysis=analysis)
