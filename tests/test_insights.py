"""Tests for trend inference and insight synthesis."""

from unittest.mock import AsyncMock, Mock

import pytest

from crisislens.core.exceptions import SummaryFailure
from crisislens.models.crisis_event import TrendDirection
from crisislens.services.synthesis import InsightsEngine, compute_trends, trend_direction
from crisislens.services.synthesis.insights import DEFAULT_RECOMMENDATIONS, DEFAULT_SUMMARY
from crisislens.services.synthesis.trends import hourly_series


class TestTrendDirection:
    @pytest.mark.parametrize(
        "values,expected",
        [
            ([5, 5, 7], TrendDirection.INCREASING),
            ([7, 7, 5], TrendDirection.DECREASING),
            ([5, 5, 5], TrendDirection.STABLE),
            ([5, 5.5], TrendDirection.STABLE),
            ([5], TrendDirection.STABLE),
            ([], TrendDirection.STABLE),
        ],
    )
    def test_direction(self, values, expected):
        assert trend_direction(values) is expected

    def test_window_uses_latest_values(self):
        assert trend_direction([1, 8, 8, 8], window=3) is TrendDirection.STABLE


class TestComputeTrends:
    def _series(self, make_event, urgencies, crisis_type="flood"):
        # Oldest first: hours_ago counts down to 1
        count = len(urgencies)
        return [
            make_event(id=str(i), type=crisis_type, hours_ago=count - i, urgency=u)
            for i, u in enumerate(urgencies)
        ]

    def test_overall_increasing(self, make_event, now):
        trends = compute_trends(self._series(make_event, [5, 5, 7]), now)
        assert trends.overall is TrendDirection.INCREASING
        assert trends.by_type["flood"].direction is TrendDirection.INCREASING

    def test_overall_decreasing(self, make_event, now):
        trends = compute_trends(self._series(make_event, [7, 7, 5]), now)
        assert trends.overall is TrendDirection.DECREASING

    def test_overall_stable(self, make_event, now):
        trends = compute_trends(self._series(make_event, [5, 5, 5]), now)
        assert trends.overall is TrendDirection.STABLE

    def test_hourly_buckets(self, make_event, now):
        events = [
            make_event(id="a", hours_ago=0.5, urgency=4),
            make_event(id="b", hours_ago=0.9, urgency=6),
            make_event(id="c", hours_ago=2.5, urgency=8),
            make_event(id="d", hours_ago=2.5),
        ]
        hourly = hourly_series(events, now)
        assert [(p.hours_ago, p.avg_urgency) for p in hourly] == [(0, 5), (2, 8)]

    def test_type_counts_include_unanalyzed(self, make_event, now):
        events = [
            make_event(id="a", type="storm", urgency=6),
            make_event(id="b", type="storm"),
        ]
        storm = compute_trends(events, now).by_type["storm"]
        assert storm.count == 2
        assert storm.avg_urgency == 6


class TestInsightsEngine:
    @pytest.mark.asyncio
    async def test_empty_input_returns_defaults(self):
        insights = await InsightsEngine().synthesize([])

        assert insights.executive_summary == DEFAULT_SUMMARY
        assert insights.recommendations == DEFAULT_RECOMMENDATIONS
        assert insights.summary_source == "default"
        assert insights.total_events == 0
        assert insights.trends.overall is TrendDirection.STABLE

    def test_metrics(self, make_event):
        events = [
            make_event(id="a", urgency=7, location="X", source="S1"),
            make_event(id="b", urgency=8, location="X", source="S2", type="storm"),
            make_event(id="c", urgency=8, location="Y", source="S1"),
        ]
        metrics = InsightsEngine().compute_metrics(events)

        assert metrics.total_events == 3
        assert metrics.average_urgency == 7.7
        assert metrics.type_counts == {"flood": 2, "storm": 1}
        assert metrics.location_counts == {"X": 2, "Y": 1}
        assert metrics.source_counts == {"S1": 2, "S2": 1}

    def test_average_rounds_half_up(self, make_event):
        events = [make_event(id="a", urgency=7), make_event(id="b", urgency=8)]
        assert InsightsEngine().compute_metrics(events).average_urgency == 7.5

    def test_critical_event_recommends_deployment_to_its_location(self, make_event):
        events = [
            make_event(id="a", urgency=9, location="X"),
            make_event(id="b", urgency=4, location="Y"),
        ]
        recommendations = InsightsEngine().generate_recommendations(events)
        assert any("X" in r for r in recommendations)
        assert recommendations[0] == "Immediate deployment of emergency resources to X"

    def test_recommendation_order(self, make_event):
        events = [
            make_event(id="a", urgency=9, location="X", resources=["Water", "Medical"]),
            make_event(id="b", urgency=8, location="Y", resources=["Water", "Shelter"]),
            make_event(id="c", urgency=3, location="Z", resources=["Medical"]),
        ]
        recommendations = InsightsEngine().generate_recommendations(events)

        assert recommendations == [
            "Immediate deployment of emergency resources to X",
            "Coordinate response efforts across 2 high-risk areas",
            "Prioritize distribution of Water, Medical, Shelter",
            "Maintain regular situation updates through all available channels",
        ]

    def test_command_center_for_many_critical_events(self, make_event):
        events = [make_event(id=str(i), urgency=9, location="X") for i in range(3)]
        recommendations = InsightsEngine().generate_recommendations(events)
        assert recommendations[-1].startswith("Establish emergency communication command center")

    @pytest.mark.asyncio
    async def test_delegate_summary_used(self, make_event):
        summarizer = AsyncMock()
        summarizer.summarize.return_value = "Delegate summary"

        insights = await InsightsEngine(summarizer).synthesize([make_event(urgency=5)])

        assert insights.executive_summary == "Delegate summary"
        assert insights.summary_source == "delegate"

    @pytest.mark.asyncio
    async def test_summary_falls_back_to_local(self, make_event):
        summarizer = AsyncMock()
        summarizer.summarize.side_effect = SummaryFailure("quota exceeded")

        insights = await InsightsEngine(summarizer).synthesize([make_event(urgency=5)])

        assert insights.summary_source == "local"
        assert "1 crisis events monitored" in insights.executive_summary
        assert insights.error is None

    @pytest.mark.asyncio
    async def test_blank_delegate_summary_falls_back(self, make_event):
        summarizer = AsyncMock()
        summarizer.summarize.return_value = "   "

        insights = await InsightsEngine(summarizer).synthesize([make_event(urgency=5)])

        assert insights.summary_source == "local"

    @pytest.mark.asyncio
    async def test_synthesis_failure_is_absorbed(self, make_event, monkeypatch):
        engine = InsightsEngine()
        monkeypatch.setattr(engine, "generate_recommendations", Mock(side_effect=KeyError("x")))

        insights = await engine.synthesize([make_event(urgency=5)])

        assert insights.error is not None
        assert insights.total_events == 1
        assert insights.recommendations
