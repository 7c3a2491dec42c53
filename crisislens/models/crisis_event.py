"""
Core data structures for the CrisisLens pipeline.

CrisisEvent is created by a connector (or the seed set) and only ever gains
an Analysis through the Enricher, which returns a copy rather than mutating
the original.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO string, epoch seconds or datetime into an aware datetime."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str) and value:
        try:
            return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            pass
    return datetime.now(timezone.utc)


class RiskLevel(Enum):
    """Risk classification attached to an analysis."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TrendDirection(Enum):
    """Direction of urgency movement over time."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass
class Coordinates:
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class SocialMetrics:
    """Engagement signals from social sources, used as a bounded urgency boost."""
    shares: int = 0
    likes: int = 0
    comments: int = 0

    def to_dict(self) -> dict:
        return {"shares": self.shares, "likes": self.likes, "comments": self.comments}


@dataclass
class Analysis:
    """Structured severity analysis for one event."""
    urgency: int
    estimated_casualties: str
    resources_needed: List[str] = field(default_factory=list)
    immediate_actions: List[str] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.MEDIUM
    stakeholders: List[str] = field(default_factory=list)
    confidence: float = 0.5
    analysis_time_ms: Optional[float] = None
    timestamp: Optional[datetime] = None
    degraded: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "urgency": self.urgency,
            "estimated_casualties": self.estimated_casualties,
            "resources_needed": list(self.resources_needed),
            "immediate_actions": list(self.immediate_actions),
            "risk_level": self.risk_level.value,
            "stakeholders": list(self.stakeholders),
            "confidence": round(self.confidence, 3),
            "analysis_time_ms": round(self.analysis_time_ms, 2) if self.analysis_time_ms is not None else None,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "degraded": self.degraded,
            "error": self.error,
        }


@dataclass
class CrisisEvent:
    """A single situational report after normalization."""
    id: str
    text: str
    source: str
    timestamp: datetime
    location: str
    type: str
    verified: bool = False
    coordinates: Optional[Coordinates] = None
    analysis: Optional[Analysis] = None
    url: Optional[str] = None
    social: Optional[SocialMetrics] = None

    def __post_init__(self):
        self.timestamp = ensure_utc(self.timestamp)

    @property
    def urgency(self) -> Optional[int]:
        """Urgency from the attached analysis, if any."""
        if self.analysis is None or isinstance(self.analysis.urgency, bool):
            return None
        if isinstance(self.analysis.urgency, (int, float)):
            return self.analysis.urgency
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
            "location": self.location,
            "type": self.type,
            "verified": self.verified,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "url": self.url,
            "social": self.social.to_dict() if self.social else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrisisEvent":
        """Create from a dictionary (API payloads, cached JSON)."""
        coords = data.get("coordinates")
        social = data.get("social")
        return cls(
            id=str(data["id"]),
            text=data.get("text", ""),
            source=data.get("source", "Unknown"),
            timestamp=parse_timestamp(data.get("timestamp")),
            location=data.get("location") or "Location Unknown",
            type=data.get("type") or "other",
            verified=bool(data.get("verified", False)),
            coordinates=Coordinates(lat=coords["lat"], lng=coords["lng"]) if coords else None,
            url=data.get("url"),
            social=SocialMetrics(**social) if social else None,
        )


@dataclass
class SourceStatus:
    """Outcome of one connector call within an aggregation run."""
    name: str
    success: bool
    count: int = 0
    elapsed_ms: float = 0.0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "success": self.success,
            "count": self.count,
            "elapsed_ms": round(self.elapsed_ms, 2),
            "error": self.error,
        }


@dataclass
class AggregationMetadata:
    """Run statistics attached to every AggregationResult."""
    sources: List[SourceStatus] = field(default_factory=list)
    processing_time_ms: float = 0.0
    last_update: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    in_progress: bool = False
    fallback_used: bool = False
    error: Optional[str] = None

    @property
    def total_sources(self) -> int:
        return len(self.sources)

    @property
    def successful_sources(self) -> int:
        return sum(1 for s in self.sources if s.success)

    def source_counts(self) -> Dict[str, int]:
        return {s.name: s.count for s in self.sources}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sources": [s.to_dict() for s in self.sources],
            "total_sources": self.total_sources,
            "successful_sources": self.successful_sources,
            "source_counts": self.source_counts(),
            "processing_time_ms": round(self.processing_time_ms, 2),
            "last_update": self.last_update.isoformat(),
            "in_progress": self.in_progress,
            "fallback_used": self.fallback_used,
            "error": self.error,
        }


@dataclass
class AggregationResult:
    """Priority-ordered events plus run metadata."""
    data: List[CrisisEvent]
    metadata: AggregationMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [e.to_dict() for e in self.data],
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class Metrics:
    total_events: int = 0
    average_urgency: float = 0.0
    type_counts: Dict[str, int] = field(default_factory=dict)
    location_counts: Dict[str, int] = field(default_factory=dict)
    source_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_events": self.total_events,
            "average_urgency": self.average_urgency,
            "type_counts": dict(self.type_counts),
            "location_counts": dict(self.location_counts),
            "source_counts": dict(self.source_counts),
        }


@dataclass
class HourlyPoint:
    hours_ago: int
    avg_urgency: float

    def to_dict(self) -> dict:
        return {"hours_ago": self.hours_ago, "avg_urgency": round(self.avg_urgency, 2)}


@dataclass
class TypeTrend:
    count: int
    avg_urgency: float
    direction: TrendDirection

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "avg_urgency": round(self.avg_urgency, 2),
            "direction": self.direction.value,
        }


@dataclass
class Trend:
    overall: TrendDirection = TrendDirection.STABLE
    hourly: List[HourlyPoint] = field(default_factory=list)
    by_type: Dict[str, TypeTrend] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall.value,
            "hourly": [p.to_dict() for p in self.hourly],
            "by_type": {k: v.to_dict() for k, v in self.by_type.items()},
        }


@dataclass
class Insights:
    """Aggregate situational intelligence synthesized from enriched events."""
    executive_summary: str
    metrics: Metrics
    recommendations: List[str]
    trends: Trend
    summary_source: str = "local"
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None

    @property
    def total_events(self) -> int:
        return self.metrics.total_events

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executive_summary": self.executive_summary,
            "summary_source": self.summary_source,
            "metrics": self.metrics.to_dict(),
            "recommendations": list(self.recommendations),
            "trends": self.trends.to_dict(),
            "last_updated": self.last_updated.isoformat(),
            "total_events": self.total_events,
            "error": self.error,
        }
