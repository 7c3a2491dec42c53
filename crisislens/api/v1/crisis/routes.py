"""
Crisis API routes for CrisisLens.

Provides endpoints for:
- GET /events - Aggregate, deduplicate and rank events from all sources
- POST /enrich - Attach severity analyses to supplied events
- POST /insights - Synthesize metrics, trends and recommendations
- GET /briefing - Run the full aggregate -> enrich -> insights pipeline
- GET /sources - Connector health and aggregator status
"""
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from crisislens.models.crisis_event import Coordinates, CrisisEvent, SocialMetrics
from crisislens.services.analysis import AnalysisValidator, EnrichOptions
from crisislens.services.pipeline import CrisisPipeline, build_pipeline
from crisislens.services.processing.scoring import classify_crisis_type, extract_location

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/crisis", tags=["crisis"])

# Global pipeline instance (lazy init)
_pipeline: Optional[CrisisPipeline] = None
_validator = AnalysisValidator()


def get_pipeline() -> CrisisPipeline:
    """Get or create the pipeline instance."""
    global _pipeline
    if _pipeline is None:
        _pipeline = build_pipeline()
    return _pipeline


# Pydantic models for request/response
class CoordinatesModel(BaseModel):
    lat: float
    lng: float


class SocialMetricsModel(BaseModel):
    shares: int = 0
    likes: int = 0
    comments: int = 0


class CrisisEventModel(BaseModel):
    """Event as supplied by API clients. Location and type are inferred when absent."""
    id: Union[str, int]
    text: str
    source: str = "Unknown"
    timestamp: Optional[datetime] = None
    location: Optional[str] = None
    type: Optional[str] = None
    verified: bool = False
    coordinates: Optional[CoordinatesModel] = None
    url: Optional[str] = None
    social: Optional[SocialMetricsModel] = None
    analysis: Optional[Dict[str, Any]] = None

    def to_event(self) -> CrisisEvent:
        crisis_type = self.type or classify_crisis_type(self.text)
        return CrisisEvent(
            id=str(self.id),
            text=self.text,
            source=self.source,
            timestamp=self.timestamp or datetime.now().astimezone(),
            location=self.location or extract_location(self.text),
            type=crisis_type,
            verified=self.verified,
            coordinates=Coordinates(**self.coordinates.model_dump()) if self.coordinates else None,
            analysis=_validator.repair(self.analysis, crisis_type) if self.analysis else None,
            url=self.url,
            social=SocialMetrics(**self.social.model_dump()) if self.social else None,
        )


class EnrichRequest(BaseModel):
    """Request body for enrichment."""
    events: List[CrisisEventModel]
    batch_size: int = Field(5, ge=1)
    include_timing: bool = True


class InsightsRequest(BaseModel):
    """Request body for insight synthesis."""
    events: List[CrisisEventModel]


class EventsResponse(BaseModel):
    events: List[dict]
    count: int
    metadata: Optional[dict] = None


@router.get("/events", response_model=EventsResponse)
async def get_events(pipeline: CrisisPipeline = Depends(get_pipeline)):
    """
    Aggregate events from all sources.

    Returns up to result_limit events in priority order. Source failures
    are reported per source in metadata; the call itself does not fail.
    """
    result = await pipeline.aggregator.aggregate()
    if result.metadata.in_progress:
        raise HTTPException(status_code=409, detail="Aggregation already in progress")

    logger.info(
        f"[API] /events: {len(result.data)} events, "
        f"sources={result.metadata.successful_sources}/{result.metadata.total_sources}"
    )
    data = result.to_dict()
    return EventsResponse(events=data["data"], count=len(result.data), metadata=data["metadata"])


@router.post("/enrich", response_model=EventsResponse)
async def enrich_events(
    request: EnrichRequest,
    pipeline: CrisisPipeline = Depends(get_pipeline),
):
    """Analyze the supplied events; output order matches input order."""
    start_time = time.time()
    options = EnrichOptions(batch_size=request.batch_size, include_timing=request.include_timing)
    events = [e.to_event() for e in request.events]

    enriched = await pipeline.enricher.enrich(events, options)

    logger.info(
        f"[API] /enrich: {len(enriched)} events in {(time.time() - start_time):.2f}s"
    )
    return EventsResponse(events=[e.to_dict() for e in enriched], count=len(enriched))


@router.post("/insights")
async def synthesize_insights(
    request: InsightsRequest,
    pipeline: CrisisPipeline = Depends(get_pipeline),
):
    """Synthesize insights from already-enriched events."""
    events = [e.to_event() for e in request.events]
    insights = await pipeline.insights.synthesize(events)
    return insights.to_dict()


@router.get("/briefing")
async def get_briefing(pipeline: CrisisPipeline = Depends(get_pipeline)):
    """
    Run the full pipeline.

    Aggregates current events, enriches them and returns events, source
    metadata, insights and per-stage timing.
    """
    result = await pipeline.run()
    if result.aggregation.metadata.in_progress:
        raise HTTPException(status_code=409, detail="Aggregation already in progress")
    return result.to_dict()


@router.get("/sources")
async def get_sources(pipeline: CrisisPipeline = Depends(get_pipeline)):
    """Connector health and aggregator status."""
    return pipeline.aggregator.get_status()
