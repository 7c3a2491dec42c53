"""Tests for batched enrichment and pacing."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from crisislens.core.exceptions import AnalysisFailure
from crisislens.models.crisis_event import Analysis, RiskLevel
from crisislens.services.analysis import (
    EnrichOptions,
    Enricher,
    FixedDelayPacing,
    HeuristicAnalyst,
    NoPacing,
    TokenBucketPacing,
)


class RecordingPacing:
    def __init__(self):
        self.calls = []

    async def before_batch(self, batch_index, batch_size):
        self.calls.append((batch_index, batch_size))


class ScriptedAnalyst:
    """Returns per-text results; exceptions in the script are raised."""

    def __init__(self, script, delays=None):
        self.script = script
        self.delays = delays or {}
        self.calls = []

    async def analyze(self, text, location, crisis_type):
        self.calls.append(text)
        await asyncio.sleep(self.delays.get(text, 0))
        result = self.script[text]
        if isinstance(result, BaseException):
            raise result
        return result


def _analysis(urgency):
    return {
        "urgency": urgency,
        "estimated_casualties": "Unknown",
        "resources_needed": ["Water"],
        "immediate_actions": ["Assess"],
        "risk_level": "High",
        "stakeholders": ["Red Cross"],
        "confidence": 0.9,
    }


class TestEnrichOptions:
    @pytest.mark.parametrize("bad", [0, -1, 2.5, True, "5"])
    def test_invalid_batch_size(self, bad):
        with pytest.raises(ValueError):
            EnrichOptions(batch_size=bad)

    def test_defaults(self):
        options = EnrichOptions()
        assert options.batch_size == 5
        assert options.include_timing


class TestEnricher:
    @pytest.mark.asyncio
    async def test_order_preserved_across_batches(self, make_event):
        events = [make_event(id=str(i), text=f"report {i}") for i in range(7)]
        # Earlier events in a batch finish last
        delays = {f"report {i}": 0.01 * (7 - i) for i in range(7)}
        analyst = ScriptedAnalyst({e.text: _analysis(5) for e in events}, delays)
        enricher = Enricher(analyst, pacing=NoPacing())

        enriched = await enricher.enrich(events, EnrichOptions(batch_size=3))

        assert [e.id for e in enriched] == [e.id for e in events]
        assert all(e.analysis is not None for e in enriched)

    @pytest.mark.asyncio
    async def test_input_events_not_mutated(self, make_event):
        events = [make_event(id="a", text="report a")]
        analyst = ScriptedAnalyst({"report a": _analysis(6)})

        enriched = await Enricher(analyst, pacing=NoPacing()).enrich(events)

        assert events[0].analysis is None
        assert enriched[0].analysis.urgency == 6

    @pytest.mark.asyncio
    async def test_failure_yields_placeholder_for_that_event_only(self, make_event):
        events = [
            make_event(id="ok", text="report ok", type="flood"),
            make_event(id="bad", text="Critical quake, people trapped", type="earthquake"),
        ]
        analyst = ScriptedAnalyst({
            "report ok": _analysis(7),
            "Critical quake, people trapped": AnalysisFailure("model unavailable"),
        })

        enriched = await Enricher(analyst, pacing=NoPacing()).enrich(events)

        ok, bad = enriched
        assert not ok.analysis.degraded
        assert bad.analysis.degraded
        assert bad.analysis.confidence == 0.3
        assert bad.analysis.risk_level is RiskLevel.HIGH
        assert "model unavailable" in bad.analysis.error
        assert 1 <= bad.analysis.urgency <= 10

    @pytest.mark.asyncio
    async def test_placeholder_never_critical(self, make_event):
        events = [make_event(id="x", text="Critical emergency: casualties", type="tsunami")]
        analyst = ScriptedAnalyst({events[0].text: RuntimeError("boom")})

        enriched = await Enricher(analyst, pacing=NoPacing()).enrich(events)

        assert enriched[0].analysis.risk_level is not RiskLevel.CRITICAL

    @pytest.mark.asyncio
    async def test_delegate_cancellation_becomes_placeholder(self, make_event):
        events = [
            make_event(id="a", text="report a"),
            make_event(id="b", text="report b"),
        ]
        analyst = ScriptedAnalyst({
            "report a": asyncio.CancelledError(),
            "report b": _analysis(6),
        })

        enriched = await Enricher(analyst, pacing=NoPacing()).enrich(events)

        assert [e.id for e in enriched] == ["a", "b"]
        assert enriched[0].analysis.degraded
        assert "CancelledError" in enriched[0].analysis.error
        assert enriched[1].analysis.urgency == 6

    @pytest.mark.asyncio
    async def test_timeout_becomes_placeholder(self, make_event):
        events = [make_event(id="slow", text="slow report")]
        analyst = ScriptedAnalyst({"slow report": _analysis(5)}, {"slow report": 1.0})
        enricher = Enricher(analyst, pacing=NoPacing(), analysis_timeout_seconds=0.05)

        enriched = await enricher.enrich(events)

        assert enriched[0].analysis.degraded
        assert "timed out" in enriched[0].analysis.error

    @pytest.mark.asyncio
    async def test_out_of_range_output_is_clamped(self, make_event):
        events = [make_event(id="a", text="report a")]
        raw = _analysis(15)
        raw["confidence"] = 1.7
        analyst = ScriptedAnalyst({"report a": raw})

        enriched = await Enricher(analyst, pacing=NoPacing()).enrich(events)

        analysis = enriched[0].analysis
        assert analysis.urgency == 10
        assert analysis.confidence == 1.0
        assert analysis.degraded

    @pytest.mark.asyncio
    async def test_pacing_runs_between_batches_only(self, make_event):
        events = [make_event(id=str(i), text=f"r{i}") for i in range(5)]
        analyst = ScriptedAnalyst({e.text: _analysis(5) for e in events})
        pacing = RecordingPacing()

        await Enricher(analyst, pacing=pacing).enrich(events, EnrichOptions(batch_size=2))

        assert pacing.calls == [(1, 2), (2, 1)]

    @pytest.mark.asyncio
    async def test_pacing_failure_does_not_abort(self, make_event):
        events = [make_event(id=str(i), text=f"r{i}") for i in range(2)]
        analyst = ScriptedAnalyst({e.text: _analysis(5) for e in events})
        pacing = AsyncMock()
        pacing.before_batch.side_effect = RuntimeError("limiter down")

        enriched = await Enricher(analyst, pacing=pacing).enrich(events, EnrichOptions(batch_size=1))

        assert len(enriched) == 2
        pacing.before_batch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timing_flag(self, make_event):
        events = [make_event(id="a", text="report a")]
        analyst = ScriptedAnalyst({"report a": _analysis(5)})
        enricher = Enricher(analyst, pacing=NoPacing())

        timed = await enricher.enrich(events, EnrichOptions(include_timing=True))
        untimed = await enricher.enrich(events, EnrichOptions(include_timing=False))

        assert timed[0].analysis.analysis_time_ms is not None
        assert timed[0].analysis.timestamp is not None
        assert untimed[0].analysis.analysis_time_ms is None
        assert untimed[0].analysis.timestamp is None

    @pytest.mark.asyncio
    async def test_empty_input(self):
        assert await Enricher(HeuristicAnalyst()).enrich([]) == []

    @pytest.mark.asyncio
    async def test_heuristic_analyst_end_to_end(self, make_event):
        events = [make_event(id="q", text="Major earthquake, casualties feared", type="earthquake")]

        enriched = await Enricher(HeuristicAnalyst(), pacing=NoPacing()).enrich(events)

        analysis = enriched[0].analysis
        assert isinstance(analysis, Analysis)
        assert analysis.urgency == 10
        assert analysis.risk_level is RiskLevel.CRITICAL
        assert "Search and rescue teams" in analysis.resources_needed
        assert not analysis.degraded


class TestPacing:
    def test_fixed_delay_rejects_negative(self):
        with pytest.raises(ValueError):
            FixedDelayPacing(-1)

    @pytest.mark.asyncio
    async def test_fixed_delay_sleeps(self, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr("crisislens.services.analysis.pacing.asyncio.sleep", sleep)

        await FixedDelayPacing(0.5).before_batch(1, 5)

        sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    async def test_token_bucket_waits_when_empty(self, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr("crisislens.services.analysis.pacing.asyncio.sleep", sleep)
        bucket = TokenBucketPacing(rate_per_second=10, capacity=5)

        await bucket.before_batch(1, 5)
        sleep.assert_not_awaited()

        await bucket.before_batch(2, 5)
        sleep.assert_awaited_once()
        waited = sleep.await_args.args[0]
        assert 0 < waited <= 0.5

    def test_token_bucket_validation(self):
        with pytest.raises(ValueError):
            TokenBucketPacing(rate_per_second=0, capacity=1)
        with pytest.raises(ValueError):
            TokenBucketPacing(rate_per_second=1, capacity=0)
