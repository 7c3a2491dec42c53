"""Tests for fingerprint deduplication and priority ranking."""

from datetime import timedelta

from crisislens.services.processing.dedup import (
    deduplicate,
    fingerprint,
    remove_cross_source_duplicates,
)
from crisislens.services.processing.ranker import PriorityConfig, PriorityRanker


class TestFingerprint:
    def test_case_insensitive(self):
        assert fingerprint("Flood In Kerala") == fingerprint("flood in kerala")

    def test_only_leading_slice_counts(self):
        base = "x" * 150
        assert fingerprint(base + " tail one") == fingerprint(base + " tail two")
        assert fingerprint(base[:100] + "A", 100) == fingerprint(base[:100] + "B", 100)
        assert fingerprint(base[:99] + "A", 100) != fingerprint(base[:99] + "B", 100)


class TestDeduplicate:
    def test_keeps_first_occurrence(self, make_event):
        events = [
            make_event(id="a", text="Flooding in the lower district"),
            make_event(id="b", text="FLOODING IN THE LOWER DISTRICT"),
            make_event(id="c", text="Wildfire near the ridge"),
        ]
        assert [e.id for e in deduplicate(events)] == ["a", "c"]

    def test_cross_source_drops_repeated_ids(self, make_event):
        events = [
            make_event(id="same", text="First report"),
            make_event(id="same", text="Entirely different text"),
        ]
        assert [e.text for e in remove_cross_source_duplicates(events)] == ["First report"]

    def test_cross_source_is_idempotent(self, make_event):
        events = [
            make_event(id=str(i), text=text)
            for i, text in enumerate(["one", "two", "ONE", "three", "two"])
        ]
        once = remove_cross_source_duplicates(events)
        assert [e.id for e in once] == ["0", "1", "3"]
        assert remove_cross_source_duplicates(once) == once


class TestPriorityRanker:
    def test_score_components(self, make_event, now):
        ranker = PriorityRanker()
        event = make_event(type="earthquake", verified=True, source="Reuters", hours_ago=1)
        # verified 2 + critical 3 + recent 2 + trusted 1
        assert ranker.score(event, now) == 8

    def test_recency_windows(self, make_event, now):
        ranker = PriorityRanker()
        assert ranker.score(make_event(type="other", hours_ago=3), now) == 2
        assert ranker.score(make_event(type="other", hours_ago=12), now) == 1
        assert ranker.score(make_event(type="other", hours_ago=48), now) == 0

    def test_high_impact_tier(self, make_event, now):
        ranker = PriorityRanker()
        assert ranker.score(make_event(type="wildfire", hours_ago=48), now) == 2

    def test_rank_orders_by_score_then_newest(self, make_event, now):
        events = [
            make_event(id="old-other", type="other", hours_ago=30),
            make_event(id="new-other", type="other", hours_ago=29),
            make_event(id="quake", type="earthquake", hours_ago=30),
        ]
        ranked = PriorityRanker().rank(events, now)
        assert [e.id for e in ranked] == ["quake", "new-other", "old-other"]

    def test_rank_does_not_modify_input(self, make_event, now):
        events = [make_event(id="a", type="other"), make_event(id="b", type="earthquake")]
        PriorityRanker().rank(events, now)
        assert [e.id for e in events] == ["a", "b"]

    def test_custom_config(self, make_event, now):
        config = PriorityConfig(verified_bonus=10, recency_bonuses={})
        ranker = PriorityRanker(config)
        assert ranker.score(make_event(type="other", verified=True), now) == 10

    def test_get_top_events(self, make_event, now):
        events = [
            make_event(id=str(i), type="other", hours_ago=30 + i) for i in range(5)
        ]
        top = PriorityRanker().get_top_events(events, 2, now)
        assert [e.id for e in top] == ["0", "1"]
        assert PriorityRanker().get_top_events(events, -1, now) == []

    def test_future_timestamps_count_as_recent(self, make_event, now):
        event = make_event(type="other")
        event.timestamp = now + timedelta(hours=2)
        assert PriorityRanker().score(event, now) == 2
