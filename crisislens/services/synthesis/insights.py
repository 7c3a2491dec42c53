"""
Situational insight synthesis for CrisisLens.

Turns a set of enriched events into aggregate metrics, urgency trends,
ordered response recommendations and an executive summary. The summary
comes from the summary delegate when one is configured, with a local
template built from the metrics as fallback.
"""
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple
import math

from crisislens.core.exceptions import SummaryFailure
from crisislens.core.logging import get_logger
from crisislens.models.crisis_event import (
    CrisisEvent,
    Insights,
    Metrics,
    Trend,
)
from crisislens.services.analysis.base import SummaryCapability
from .trends import compute_trends

logger = get_logger(__name__)

DEFAULT_SUMMARY = "No crisis events currently detected. Monitoring systems active."
DEFAULT_RECOMMENDATIONS = [
    "Maintain standard monitoring protocols",
    "Review emergency response readiness",
    "Conduct routine system checks",
]
FAILURE_RECOMMENDATIONS = [
    "Review active events manually until automated synthesis recovers",
    "Maintain standard monitoring protocols",
    "Verify analysis pipeline health",
]

CRITICAL_URGENCY = 8
HIGH_RISK_AVERAGE = 7
TOP_RESOURCES = 3
COMMAND_CENTER_MIN_CRITICAL = 3
MULTI_REGION_MIN_LOCATIONS = 5

SUMMARY_SOURCE_DELEGATE = "delegate"
SUMMARY_SOURCE_LOCAL = "local"
SUMMARY_SOURCE_DEFAULT = "default"


def _round1(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


class InsightsEngine:
    """
    Synthesizes Insights from enriched events.

    Usage:
        engine = InsightsEngine(summarizer=OpenAIAnalyst(api_key=...))
        insights = await engine.synthesize(enriched_events)
    """

    def __init__(self, summarizer: Optional[SummaryCapability] = None):
        self.summarizer = summarizer
        self._logger = get_logger(f"{__name__}.InsightsEngine")

    async def synthesize(
        self,
        events: Sequence[CrisisEvent],
        now: Optional[datetime] = None,
    ) -> Insights:
        """Build Insights for the given events. Never raises."""
        events = list(events)
        if not events:
            return self.default_insights()

        try:
            metrics = self.compute_metrics(events)
            trends = self.compute_trends(events, now)
            recommendations = self.generate_recommendations(events)
            summary, source = await self._summarize(events, metrics, trends)
        except Exception as e:
            self._logger.error(f"[INSIGHTS] Synthesis failed: {e}", exc_info=True)
            return self._failure_insights(events, e)

        self._logger.info(
            f"[INSIGHTS] {metrics.total_events} events, avg urgency {metrics.average_urgency}, "
            f"{len(recommendations)} recommendations, summary={source}"
        )
        return Insights(
            executive_summary=summary,
            metrics=metrics,
            recommendations=recommendations,
            trends=trends,
            summary_source=source,
        )

    def compute_metrics(self, events: Sequence[CrisisEvent]) -> Metrics:
        urgencies = [e.urgency for e in events if e.urgency is not None]
        average = _round1(sum(urgencies) / len(urgencies)) if urgencies else 0.0

        return Metrics(
            total_events=len(events),
            average_urgency=average,
            type_counts=dict(Counter(e.type or "unknown" for e in events)),
            location_counts=dict(Counter(e.location or "Unknown" for e in events)),
            source_counts=dict(Counter(e.source or "Unknown" for e in events)),
        )

    def compute_trends(
        self,
        events: Sequence[CrisisEvent],
        now: Optional[datetime] = None,
    ) -> Trend:
        return compute_trends(events, now)

    def generate_recommendations(self, events: Sequence[CrisisEvent]) -> List[str]:
        """
        Ordered response recommendations.

        1. Deploy to the location of the most urgent critical event
        2. Coordinate across multiple high-risk locations
        3. Prioritize the most requested resources
        4. Communication strategy scaled to the situation
        """
        recommendations = []

        critical = [e for e in events if (e.urgency or 0) >= CRITICAL_URGENCY]
        if critical:
            top = max(critical, key=lambda e: e.urgency)
            recommendations.append(f"Immediate deployment of emergency resources to {top.location}")

        high_risk = self.high_risk_locations(events)
        if len(high_risk) >= 2:
            recommendations.append(
                f"Coordinate response efforts across {len(high_risk)} high-risk areas"
            )

        resources = self.top_resources(events)
        if resources:
            recommendations.append(f"Prioritize distribution of {', '.join(resources)}")

        communication = self._communication_recommendation(events, len(critical))
        if communication:
            recommendations.append(communication)

        return recommendations

    def high_risk_locations(self, events: Sequence[CrisisEvent]) -> List[str]:
        """Locations whose mean urgency is at least 7, highest first."""
        totals: Dict[str, List[float]] = {}
        for event in events:
            totals.setdefault(event.location or "Unknown", []).append(event.urgency or 0)

        averages = [
            (location, sum(values) / len(values))
            for location, values in totals.items()
        ]
        averages = [item for item in averages if item[1] >= HIGH_RISK_AVERAGE]
        averages.sort(key=lambda item: item[1], reverse=True)
        return [location for location, _ in averages]

    def top_resources(self, events: Sequence[CrisisEvent], limit: int = TOP_RESOURCES) -> List[str]:
        # Counter.most_common keeps first-seen order among equal counts
        counts: Counter = Counter()
        for event in events:
            if event.analysis:
                counts.update(event.analysis.resources_needed)
        return [resource for resource, _ in counts.most_common(limit)]

    def _communication_recommendation(
        self,
        events: Sequence[CrisisEvent],
        critical_count: int,
    ) -> Optional[str]:
        unique_locations = len({e.location for e in events})
        if critical_count >= COMMAND_CENTER_MIN_CRITICAL:
            return "Establish emergency communication command center for coordinated response"
        if unique_locations >= MULTI_REGION_MIN_LOCATIONS:
            return "Implement multi-region communication strategy with local coordinators"
        if critical_count > 0:
            return "Maintain regular situation updates through all available channels"
        return None

    async def _summarize(
        self,
        events: Sequence[CrisisEvent],
        metrics: Metrics,
        trends: Trend,
    ) -> Tuple[str, str]:
        if self.summarizer is None:
            return self.local_summary(events, metrics, trends), SUMMARY_SOURCE_LOCAL

        try:
            summary = await self.summarizer.summarize(events)
            if not summary or not summary.strip():
                raise SummaryFailure("Summary delegate returned empty text")
            return summary.strip(), SUMMARY_SOURCE_DELEGATE
        except Exception as e:
            self._logger.warning(f"[INSIGHTS] Summary delegate failed, using local summary: {e}")
            return self.local_summary(events, metrics, trends), SUMMARY_SOURCE_LOCAL

    def local_summary(
        self,
        events: Sequence[CrisisEvent],
        metrics: Metrics,
        trends: Trend,
    ) -> str:
        """Deterministic summary built from metrics and trends."""
        critical = sum(1 for e in events if (e.urgency or 0) >= CRITICAL_URGENCY)
        parts = [
            f"{metrics.total_events} crisis events monitored across "
            f"{len(metrics.location_counts)} locations.",
            f"Average urgency {metrics.average_urgency}/10 with {critical} critical events.",
        ]

        if metrics.type_counts:
            crisis_type, count = max(metrics.type_counts.items(), key=lambda item: item[1])
            parts.append(f"Most reported crisis type: {crisis_type.replace('_', ' ')} ({count}).")
        if metrics.location_counts:
            location, count = max(metrics.location_counts.items(), key=lambda item: item[1])
            parts.append(f"Most affected location: {location} ({count}).")

        parts.append(f"Overall urgency trend is {trends.overall.value}.")
        return " ".join(parts)

    def default_insights(self) -> Insights:
        """Canned insights for an empty event set."""
        return Insights(
            executive_summary=DEFAULT_SUMMARY,
            metrics=Metrics(),
            recommendations=list(DEFAULT_RECOMMENDATIONS),
            trends=Trend(),
            summary_source=SUMMARY_SOURCE_DEFAULT,
        )

    def _failure_insights(self, events: Sequence[CrisisEvent], error: Exception) -> Insights:
        try:
            metrics = self.compute_metrics(events)
        except Exception as e:
            self._logger.error(f"[INSIGHTS] Metrics failed: {e}")
            metrics = Metrics(total_events=len(events))

        return Insights(
            executive_summary=(
                f"{metrics.total_events} crisis events detected. "
                "Automated synthesis unavailable; review events directly."
            ),
            metrics=metrics,
            recommendations=list(FAILURE_RECOMMENDATIONS),
            trends=Trend(),
            summary_source=SUMMARY_SOURCE_LOCAL,
            last_updated=datetime.now(timezone.utc),
            error=f"{type(error).__name__}: {error}",
        )
