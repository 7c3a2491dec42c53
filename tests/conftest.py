"""Shared fixtures for CrisisLens tests."""

from datetime import datetime, timedelta, timezone

import pytest

from crisislens.models.crisis_event import Analysis, CrisisEvent, RiskLevel
from crisislens.services.connectors.base import RawEvent

NOW = datetime(2024, 12, 14, 16, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_event():
    """Factory for CrisisEvents with sensible defaults."""

    def _make(
        id="e1",
        text="Flooding reported downtown",
        source="Test Source",
        hours_ago=1.0,
        location="Testville",
        type="flood",
        verified=False,
        urgency=None,
        resources=None,
        **kwargs,
    ):
        analysis = None
        if urgency is not None:
            analysis = Analysis(
                urgency=urgency,
                estimated_casualties="Unknown",
                resources_needed=list(resources or []),
                risk_level=RiskLevel.HIGH,
                confidence=0.8,
            )
        return CrisisEvent(
            id=id,
            text=text,
            source=source,
            timestamp=NOW - timedelta(hours=hours_ago),
            location=location,
            type=type,
            verified=verified,
            analysis=analysis,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_raw():
    """Factory for RawEvents as a connector would return them."""

    def _make(text, source="Static", hours_ago=0.5, **kwargs):
        return RawEvent(
            text=text,
            source=source,
            timestamp=datetime.now(timezone.utc) - timedelta(hours=hours_ago),
            **kwargs,
        )

    return _make
