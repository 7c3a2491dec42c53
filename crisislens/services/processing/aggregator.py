"""
Multi-source aggregation for CrisisLens.

Fans out to every registered connector concurrently, each raced against its
own deadline, merges the results with the baseline seed set, removes
near-duplicates and returns the top events in priority order.

aggregate() never raises: a failed or slow source contributes zero events,
and an unexpected orchestration fault falls back to the seed set.
"""
import asyncio
import copy
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from crisislens.core.config import DEFAULT_RESULT_LIMIT
from crisislens.core.exceptions import AggregationInProgress, CriticalAggregationFailure
from crisislens.data.seed_events import SEED_EVENTS
from crisislens.models.crisis_event import (
    AggregationMetadata,
    AggregationResult,
    CrisisEvent,
    SourceStatus,
)
from crisislens.services.connectors.base import BaseConnector
from .dedup import deduplicate, remove_cross_source_duplicates
from .ranker import PriorityRanker

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class RunGuard:
    """Single-flight token for aggregation runs."""

    def __init__(self):
        self.state = RunState.IDLE

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    @contextmanager
    def acquire(self) -> Iterator[None]:
        """Claim the token for the duration of the block; released on every exit."""
        if self.state is RunState.RUNNING:
            raise AggregationInProgress("Aggregation already in progress")
        self.state = RunState.RUNNING
        try:
            yield
        finally:
            self.state = RunState.IDLE


class Aggregator:
    """
    Collects, deduplicates and ranks events from all connectors.

    Usage:
        aggregator = Aggregator([RedditConnector(), ReliefWebConnector()])
        result = await aggregator.aggregate()
    """

    def __init__(
        self,
        connectors: Optional[Sequence[BaseConnector]] = None,
        seed_events: Optional[Sequence[CrisisEvent]] = None,
        result_limit: int = DEFAULT_RESULT_LIMIT,
        ranker: Optional[PriorityRanker] = None,
    ):
        self.connectors: List[BaseConnector] = list(connectors or [])
        self.seed_events: Tuple[CrisisEvent, ...] = tuple(
            SEED_EVENTS if seed_events is None else seed_events
        )
        self.result_limit = result_limit
        self.ranker = ranker or PriorityRanker()
        self._guard = RunGuard()
        self._logger = logging.getLogger(f"{__name__}.Aggregator")

    @property
    def is_running(self) -> bool:
        return self._guard.is_running

    async def aggregate(self) -> AggregationResult:
        """Run one aggregation pass. Never raises."""
        start_time = time.time()
        try:
            with self._guard.acquire():
                return await self._run(start_time)
        except AggregationInProgress:
            self._logger.warning("[AGGREGATE] Aggregation already in progress, skipping")
            return AggregationResult(
                data=[],
                metadata=AggregationMetadata(in_progress=True),
            )
        except Exception as e:
            failure = CriticalAggregationFailure(
                f"Aggregation failed: {type(e).__name__}: {e}",
                details={"exception": type(e).__name__},
            )
            self._logger.error(f"[AGGREGATE] {failure.message}", exc_info=True)
            return self._fallback_result(start_time, failure)

    async def _run(self, start_time: float) -> AggregationResult:
        self._logger.info(
            f"[AGGREGATE] Starting run: {len(self.connectors)} connectors, "
            f"{len(self.seed_events)} seed events"
        )

        outcomes = await asyncio.gather(
            *(self._fetch_source(connector) for connector in self.connectors)
        )

        merged: List[CrisisEvent] = self._seed_copies()
        statuses: List[SourceStatus] = []
        for status, events in outcomes:
            statuses.append(status)
            merged.extend(events)

        unique = remove_cross_source_duplicates(merged)
        ranked = self.ranker.rank(unique)[:max(0, self.result_limit)]

        elapsed_ms = (time.time() - start_time) * 1000
        metadata = AggregationMetadata(
            sources=statuses,
            processing_time_ms=elapsed_ms,
            last_update=datetime.now(timezone.utc),
        )
        self._logger.info(
            f"[AGGREGATE] Run completed in {elapsed_ms:.0f}ms: "
            f"sources={metadata.successful_sources}/{metadata.total_sources}, "
            f"merged={len(merged)}, unique={len(unique)}, returned={len(ranked)}"
        )
        return AggregationResult(data=ranked, metadata=metadata)

    async def _fetch_source(
        self,
        connector: BaseConnector,
    ) -> Tuple[SourceStatus, List[CrisisEvent]]:
        """Fetch one connector under its deadline; failures yield zero events."""
        start = time.time()
        connector.is_running = True
        try:
            raw_events = await asyncio.wait_for(connector.fetch(), connector.timeout_seconds)
            events = deduplicate(raw.to_crisis_event() for raw in raw_events)
        except asyncio.TimeoutError:
            error = f"timed out after {connector.timeout_seconds}s"
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
        else:
            elapsed_ms = (time.time() - start) * 1000
            connector.record_success(len(events))
            self._logger.debug(
                f"[AGGREGATE] [{connector.name}] {len(events)} events in {elapsed_ms:.0f}ms"
            )
            return SourceStatus(
                name=connector.name, success=True, count=len(events), elapsed_ms=elapsed_ms
            ), events
        finally:
            connector.is_running = False

        elapsed_ms = (time.time() - start) * 1000
        connector.record_failure(error)
        self._logger.warning(f"[AGGREGATE] [{connector.name}] Source failed: {error}")
        return SourceStatus(
            name=connector.name, success=False, count=0, elapsed_ms=elapsed_ms, error=error
        ), []

    def _seed_copies(self) -> List[CrisisEvent]:
        """Per-run copies so callers can edit results without touching the baseline."""
        return [copy.deepcopy(event) for event in self.seed_events]

    def _fallback_result(
        self,
        start_time: float,
        failure: CriticalAggregationFailure,
    ) -> AggregationResult:
        seed = self._seed_copies()
        try:
            ordered = self.ranker.rank(seed)
        except Exception as e:
            self._logger.error(f"[AGGREGATE] Ranking seed data failed: {e}")
            ordered = sorted(seed, key=lambda ev: ev.timestamp, reverse=True)

        return AggregationResult(
            data=ordered[:max(0, self.result_limit)],
            metadata=AggregationMetadata(
                processing_time_ms=(time.time() - start_time) * 1000,
                last_update=datetime.now(timezone.utc),
                fallback_used=True,
                error=failure.message,
            ),
        )

    def get_status(self) -> dict:
        """Aggregator and per-connector health for monitoring."""
        return {
            "is_running": self.is_running,
            "result_limit": self.result_limit,
            "seed_events": len(self.seed_events),
            "connectors": [c.get_status() for c in self.connectors],
        }
