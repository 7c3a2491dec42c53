"""
Base connector class and raw event structure for CrisisLens.

All connectors inherit from BaseConnector and implement fetch().
Connectors pull reports from one external source and return RawEvent
objects; the aggregator normalizes them into CrisisEvent.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
import hashlib
import logging
import re

from crisislens.models.crisis_event import (
    Coordinates,
    CrisisEvent,
    SocialMetrics,
    ensure_utc,
)
from crisislens.services.processing.scoring import (
    classify_crisis_type,
    extract_location,
    is_crisis_related,
)
from .config import MAX_TEXT_CHARS

logger = logging.getLogger(__name__)


@dataclass
class RawEvent:
    """
    Report as delivered by a connector.

    Only text, source and timestamp are required. Location and type are
    inferred from the text when the connector does not supply them.
    """
    text: str
    source: str
    timestamp: datetime
    verified: bool = False
    coordinates: Optional[Coordinates] = None
    id: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    url: Optional[str] = None
    social: Optional[SocialMetrics] = None

    @property
    def event_id(self) -> str:
        """Connector-supplied id, or a stable hash of source and text."""
        if self.id:
            return self.id
        content = f"{self.source}:{self.text}"
        return hashlib.md5(content.encode()).hexdigest()

    def to_crisis_event(self) -> CrisisEvent:
        return CrisisEvent(
            id=self.event_id,
            text=self.text,
            source=self.source,
            timestamp=ensure_utc(self.timestamp),
            location=self.location or extract_location(self.text),
            type=self.type or classify_crisis_type(self.text),
            verified=self.verified,
            coordinates=self.coordinates,
            url=self.url,
            social=self.social,
        )


class BaseConnector(ABC):
    """
    Abstract base class for all source connectors.

    Subclasses must implement:
    - fetch() -> List[RawEvent]: Fetch reports from the source
    - name (property) -> str: Human-readable connector name

    fetch() may raise; the aggregator isolates failures per connector and
    records them through record_success() / record_failure().
    """

    timeout_seconds: float = 10.0

    def __init__(self, timeout_seconds: Optional[float] = None):
        self._logger = logging.getLogger(f"connectors.{self.__class__.__name__}")
        if timeout_seconds is not None:
            self.timeout_seconds = timeout_seconds
        self.is_running = False
        self.last_run: Optional[datetime] = None
        self.last_run_items: int = 0
        self.last_error: Optional[str] = None
        self.error_count: int = 0
        self.consecutive_failures: int = 0

    @abstractmethod
    async def fetch(self) -> List[RawEvent]:
        """Fetch crisis reports from this source."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this connector (e.g., 'Reddit')."""
        pass

    @property
    def source_type(self) -> str:
        """Source type identifier. Defaults to class name."""
        return self.__class__.__name__.replace("Connector", "").lower()

    def record_success(self, items: int):
        self.last_run = datetime.now(timezone.utc)
        self.last_run_items = items
        self.last_error = None
        self.consecutive_failures = 0

    def record_failure(self, error: str):
        self.last_run = datetime.now(timezone.utc)
        self.last_run_items = 0
        self.last_error = error
        self.error_count += 1
        self.consecutive_failures += 1

    def get_status(self) -> dict:
        """Return connector status for monitoring."""
        if self.consecutive_failures >= 3:
            health = "unhealthy"
        elif self.consecutive_failures >= 1:
            health = "degraded"
        else:
            health = "healthy"

        return {
            "name": self.name,
            "source_type": self.source_type,
            "timeout_seconds": self.timeout_seconds,
            "is_running": self.is_running,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_run_items": self.last_run_items,
            "last_error": self.last_error,
            "error_count": self.error_count,
            "consecutive_failures": self.consecutive_failures,
            "health": health,
        }

    def truncate_text(self, text: str, max_length: int = MAX_TEXT_CHARS) -> str:
        """Truncate text to max_length, preserving word boundaries."""
        if not text or len(text) <= max_length:
            return text or ""
        truncated = text[:max_length].rsplit(" ", 1)[0]
        return truncated + "..."

    def clean_text(self, text: str) -> str:
        """Clean text by removing markup, citations and extra whitespace."""
        if not text:
            return ""
        # Remove HTML tags
        text = re.sub(r"<[^>]+>", "", text)
        # Remove bracketed citations and markdown link labels
        text = re.sub(r"\[.*?\]", "", text)
        # Unwrap bold markdown
        text = re.sub(r"\*\*([^*]+)\*\*", r"\1", text)
        text = re.sub(r"\s+", " ", text)
        text = re.sub(r"\.{2,}", ".", text)
        return text.strip()

    def is_relevant(self, text: str) -> bool:
        return is_crisis_related(text)
