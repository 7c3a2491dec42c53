"""
Priority ranking for aggregated crisis events.

Scores events on verification, crisis type tier, recency and source trust,
then orders them by score with newer events first on ties.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set
import logging

from crisislens.models.crisis_event import CrisisEvent, ensure_utc

logger = logging.getLogger(__name__)

CRITICAL_TYPES = {"earthquake", "tsunami", "cyclone", "nuclear"}
HIGH_IMPACT_TYPES = {"flood", "wildfire", "hurricane", "structural_collapse"}


@dataclass
class PriorityConfig:
    """Configuration for priority scoring."""
    verified_bonus: int = 2
    critical_type_bonus: int = 3
    high_impact_type_bonus: int = 2

    # Recency windows in hours, checked in order
    recency_bonuses: Dict[float, int] = field(default_factory=lambda: {
        6.0: 2,
        24.0: 1,
    })

    trusted_source_bonus: int = 1
    trusted_sources: Set[str] = field(default_factory=lambda: {
        "Reuters",
        "BBC News",
        "Associated Press",
        "Emergency Alert System",
    })

    critical_types: Set[str] = field(default_factory=lambda: set(CRITICAL_TYPES))
    high_impact_types: Set[str] = field(default_factory=lambda: set(HIGH_IMPACT_TYPES))


class PriorityRanker:
    """
    Orders events for presentation.

    Scoring factors:
    - Verification: verified sources score higher
    - Crisis type: critical tier above high-impact tier
    - Recency: recent reports get a bonus
    - Source trust: wire services and official alerts get a bonus
    """

    def __init__(self, config: Optional[PriorityConfig] = None):
        self.config = config or PriorityConfig()
        self._logger = logging.getLogger(f"{__name__}.PriorityRanker")

    def score(self, event: CrisisEvent, now: Optional[datetime] = None) -> int:
        cfg = self.config
        now = ensure_utc(now) if now else datetime.now(timezone.utc)
        score = 0

        if event.verified:
            score += cfg.verified_bonus

        if event.type in cfg.critical_types:
            score += cfg.critical_type_bonus
        elif event.type in cfg.high_impact_types:
            score += cfg.high_impact_type_bonus

        age_hours = (now - event.timestamp).total_seconds() / 3600
        for window, bonus in sorted(cfg.recency_bonuses.items()):
            if age_hours < window:
                score += bonus
                break

        if event.source in cfg.trusted_sources:
            score += cfg.trusted_source_bonus

        return score

    def rank(
        self,
        events: List[CrisisEvent],
        now: Optional[datetime] = None,
    ) -> List[CrisisEvent]:
        """
        Sort events by priority score, ties broken by timestamp descending.

        Args:
            events: Events to order (not modified)
            now: Reference time for recency; defaults to the current time

        Returns:
            New list in priority order
        """
        now = ensure_utc(now) if now else datetime.now(timezone.utc)
        scored = [(self.score(e, now), e) for e in events]
        scored.sort(key=lambda pair: (-pair[0], -pair[1].timestamp.timestamp()))

        if scored:
            self._logger.debug(
                f"[RANK] Ranked {len(scored)} events, top score {scored[0][0]}"
            )
        return [e for _, e in scored]

    def get_top_events(
        self,
        events: List[CrisisEvent],
        limit: int,
        now: Optional[datetime] = None,
    ) -> List[CrisisEvent]:
        return self.rank(events, now)[:max(0, limit)]
