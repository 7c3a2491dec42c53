"""
Urgency trend inference.

Events are bucketed by whole hours of age. Direction compares the earliest
and latest values of a short chronological window against a fixed
stability band.
"""
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence
import statistics

from crisislens.core.logging import get_logger
from crisislens.models.crisis_event import (
    CrisisEvent,
    HourlyPoint,
    Trend,
    TrendDirection,
    TypeTrend,
    ensure_utc,
)

logger = get_logger(__name__)

STABLE_THRESHOLD = 0.5
OVERALL_WINDOW = 3


def trend_direction(
    values: Sequence[float],
    window: Optional[int] = None,
) -> TrendDirection:
    """
    Direction of a chronological series (oldest first).

    With a window, only the last `window` values are considered. The
    earliest and latest values are compared; a change within the stability
    band is stable. Fewer than two values is stable.
    """
    series = list(values)[-window:] if window else list(values)
    if len(series) < 2:
        return TrendDirection.STABLE

    delta = series[-1] - series[0]
    if delta > STABLE_THRESHOLD:
        return TrendDirection.INCREASING
    if delta < -STABLE_THRESHOLD:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def hours_ago(timestamp: datetime, now: datetime) -> int:
    """Whole hours between timestamp and now; future timestamps count as 0."""
    seconds = (now - ensure_utc(timestamp)).total_seconds()
    return max(0, int(seconds // 3600))


def hourly_series(events: Sequence[CrisisEvent], now: datetime) -> List[HourlyPoint]:
    """Average urgency per hour bucket, most recent first; unanalyzed buckets omitted."""
    buckets: Dict[int, List[float]] = defaultdict(list)
    for event in events:
        urgency = event.urgency
        if urgency is None:
            continue
        buckets[hours_ago(event.timestamp, now)].append(urgency)

    return [
        HourlyPoint(hours_ago=hour, avg_urgency=statistics.mean(values))
        for hour, values in sorted(buckets.items())
    ]


def type_trends(events: Sequence[CrisisEvent]) -> Dict[str, TypeTrend]:
    grouped: Dict[str, List[CrisisEvent]] = defaultdict(list)
    for event in events:
        grouped[event.type or "unknown"].append(event)

    result = {}
    for crisis_type, group in grouped.items():
        analyzed = sorted(
            (e for e in group if e.urgency is not None),
            key=lambda e: e.timestamp,
        )
        urgencies = [e.urgency for e in analyzed]
        result[crisis_type] = TypeTrend(
            count=len(group),
            avg_urgency=statistics.mean(urgencies) if urgencies else 0.0,
            direction=trend_direction(urgencies),
        )
    return result


def compute_trends(
    events: Sequence[CrisisEvent],
    now: Optional[datetime] = None,
) -> Trend:
    """
    Build the hourly series, overall direction and per-type trends.

    Overall direction compares the three most recent hourly buckets,
    oldest to newest. Older buckets never drive the headline trend, even
    when the window holds more than three hours of data.
    """
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    hourly = hourly_series(events, now)

    chronological = [point.avg_urgency for point in reversed(hourly)]
    overall = trend_direction(chronological, window=OVERALL_WINDOW)

    logger.debug(
        f"[INSIGHTS] Trends: {len(hourly)} hourly buckets, overall={overall.value}"
    )
    return Trend(overall=overall, hourly=hourly, by_type=type_trends(events))
