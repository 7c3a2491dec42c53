"""
End-to-end pipeline for CrisisLens.

Runs aggregation, enrichment and insight synthesis in sequence and reports
per-stage timing. build_pipeline() wires connectors and analysts from
Settings.
"""
from dataclasses import dataclass, field
from typing import List, Optional
import logging
import time

from crisislens.core.config import Settings, get_settings
from crisislens.models.crisis_event import AggregationResult, CrisisEvent, Insights
from crisislens.services.analysis import (
    EnrichOptions,
    Enricher,
    FixedDelayPacing,
    HeuristicAnalyst,
    OpenAIAnalyst,
)
from crisislens.services.connectors import get_all_connectors
from crisislens.services.processing.aggregator import Aggregator
from crisislens.services.synthesis import InsightsEngine

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    """Timing and volume statistics from a pipeline run."""
    aggregated: int = 0
    enriched: int = 0
    degraded: int = 0
    sources_ok: int = 0
    sources_total: int = 0
    aggregate_ms: float = 0.0
    enrich_ms: float = 0.0
    insights_ms: float = 0.0
    total_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "aggregated": self.aggregated,
            "enriched": self.enriched,
            "degraded": self.degraded,
            "sources_ok": self.sources_ok,
            "sources_total": self.sources_total,
            "aggregate_ms": round(self.aggregate_ms, 2),
            "enrich_ms": round(self.enrich_ms, 2),
            "insights_ms": round(self.insights_ms, 2),
            "total_ms": round(self.total_ms, 2),
        }


@dataclass
class PipelineResult:
    """Result of one full pipeline run."""
    aggregation: AggregationResult
    events: List[CrisisEvent]
    insights: Insights
    stats: PipelineStats = field(default_factory=PipelineStats)

    def to_dict(self) -> dict:
        return {
            "events": [e.to_dict() for e in self.events],
            "metadata": self.aggregation.metadata.to_dict(),
            "insights": self.insights.to_dict(),
            "stats": self.stats.to_dict(),
        }


class CrisisPipeline:
    """
    Orchestrates aggregation -> enrichment -> insights.

    Pipeline stages:
    1. Aggregation: Fetch, deduplicate and rank events from all connectors
    2. Enrichment: Attach a severity analysis to each event
    3. Insights: Metrics, trends, recommendations and executive summary
    """

    def __init__(
        self,
        aggregator: Aggregator,
        enricher: Enricher,
        insights: InsightsEngine,
        enrich_options: Optional[EnrichOptions] = None,
    ):
        self.aggregator = aggregator
        self.enricher = enricher
        self.insights = insights
        self.enrich_options = enrich_options or EnrichOptions()
        self._logger = logging.getLogger(f"{__name__}.CrisisPipeline")

    async def run(self) -> PipelineResult:
        stats = PipelineStats()
        start = time.time()

        aggregation = await self.aggregator.aggregate()
        stats.aggregate_ms = (time.time() - start) * 1000
        stats.aggregated = len(aggregation.data)
        stats.sources_ok = aggregation.metadata.successful_sources
        stats.sources_total = aggregation.metadata.total_sources

        stage = time.time()
        events = await self.enricher.enrich(aggregation.data, self.enrich_options)
        stats.enrich_ms = (time.time() - stage) * 1000
        stats.enriched = len(events)
        stats.degraded = sum(1 for e in events if e.analysis and e.analysis.degraded)

        stage = time.time()
        insights = await self.insights.synthesize(events)
        stats.insights_ms = (time.time() - stage) * 1000
        stats.total_ms = (time.time() - start) * 1000

        self._logger.info(
            f"[PIPELINE] Completed in {stats.total_ms:.0f}ms: "
            f"events={stats.enriched}, degraded={stats.degraded}, "
            f"sources={stats.sources_ok}/{stats.sources_total}"
        )
        return PipelineResult(
            aggregation=aggregation,
            events=events,
            insights=insights,
            stats=stats,
        )


def build_pipeline(settings: Optional[Settings] = None) -> CrisisPipeline:
    """
    Wire a pipeline from settings.

    Offline mode uses the bundled demo connectors and the heuristic analyst.
    Without an OpenAI key the heuristic analyst is used for both analysis
    and summaries.
    """
    settings = settings or get_settings()

    connectors = get_all_connectors(
        news_api_key=settings.news_api_key,
        offline=settings.offline,
    )

    if settings.offline or not settings.openai_api_key:
        analyst = HeuristicAnalyst()
    else:
        analyst = OpenAIAnalyst(api_key=settings.openai_api_key, model=settings.openai_model)

    logger.info(
        f"[PIPELINE] Built with {len(connectors)} connectors, "
        f"analyst={type(analyst).__name__}, offline={settings.offline}"
    )

    return CrisisPipeline(
        aggregator=Aggregator(connectors, result_limit=settings.result_limit),
        enricher=Enricher(
            analyst,
            pacing=FixedDelayPacing(settings.batch_delay_seconds or 0.0),
            analysis_timeout_seconds=settings.analysis_timeout_seconds,
        ),
        insights=InsightsEngine(summarizer=analyst),
        enrich_options=EnrichOptions(
            batch_size=settings.batch_size,
            include_timing=settings.include_timing,
        ),
    )
