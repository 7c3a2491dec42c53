"""
Baseline seed set and offline demo feeds.

SEED_EVENTS is the fixed baseline every aggregation starts from and the
fallback returned when orchestration fails. It is shared and must never be
mutated; the enricher attaches analyses to copies.

The mock feeds reproduce typical social and wire reports with timestamps
relative to the time of the call, for offline mode and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from crisislens.models.crisis_event import Coordinates, CrisisEvent, SocialMetrics
from crisislens.services.connectors.base import RawEvent


def _utc(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


SEED_EVENTS: Tuple[CrisisEvent, ...] = (
    CrisisEvent(
        id="1",
        text=(
            "Major 7.2 magnitude earthquake strikes Turkey-Syria border. Buildings collapsed "
            "in Ankara and Gaziantep. Rescue teams deployed immediately. Death toll rising rapidly."
        ),
        source="Emergency Alert System",
        timestamp=_utc("2024-12-14T10:30:00"),
        location="Turkey-Syria Border",
        type="earthquake",
        verified=True,
        coordinates=Coordinates(lat=36.7783, lng=37.0017),
    ),
    CrisisEvent(
        id="2",
        text=(
            "Severe flooding in Kerala after unprecedented monsoon rains. Water levels rising in "
            "Kochi and Thiruvananthapuram. Roads completely blocked, rescue operations underway "
            "in coastal areas."
        ),
        source="Indian Meteorological Department",
        timestamp=_utc("2024-12-14T11:45:00"),
        location="Kerala, India",
        type="flood",
        verified=True,
        coordinates=Coordinates(lat=10.8505, lng=76.2711),
    ),
    CrisisEvent(
        id="3",
        text=(
            "Wildfire spreading rapidly across 15,000 hectares in California mountains. "
            "Evacuation orders issued for 3 communities. Strong winds hampering firefighting efforts."
        ),
        source="CAL FIRE",
        timestamp=_utc("2024-12-14T12:15:00"),
        location="California, USA",
        type="wildfire",
        verified=True,
        coordinates=Coordinates(lat=34.0522, lng=-118.2437),
    ),
    CrisisEvent(
        id="4",
        text=(
            "Cyclone Remal intensifies to Category 4. Storm surge warning issued for Bangladesh "
            "and West Bengal coast. Fishing boats advised to return immediately."
        ),
        source="Bangladesh Weather Service",
        timestamp=_utc("2024-12-14T13:20:00"),
        location="Bay of Bengal",
        type="cyclone",
        verified=True,
        coordinates=Coordinates(lat=21.0, lng=89.0),
    ),
    CrisisEvent(
        id="5",
        text=(
            "Building collapse in Mumbai construction site. Multiple workers trapped under debris. "
            "Emergency services and NDRF teams on scene. Traffic diverted from area."
        ),
        source="Mumbai Fire Brigade",
        timestamp=_utc("2024-12-14T14:30:00"),
        location="Mumbai, India",
        type="structural_collapse",
        verified=False,
        coordinates=Coordinates(lat=19.0760, lng=72.8777),
    ),
    CrisisEvent(
        id="6",
        text=(
            "Flash floods reported in Uttarakhand after cloud burst near Kedarnath. Pilgrimage "
            "route blocked. Helicopter rescue operations initiated for stranded tourists."
        ),
        source="Uttarakhand Disaster Management",
        timestamp=_utc("2024-12-14T15:10:00"),
        location="Uttarakhand, India",
        type="flood",
        verified=True,
        coordinates=Coordinates(lat=30.7333, lng=79.0667),
    ),
)


def get_seed_events() -> List[CrisisEvent]:
    """New list over the shared seed events."""
    return list(SEED_EVENTS)


def mock_social_feed(now: Optional[datetime] = None) -> List[RawEvent]:
    """Unverified community reports with engagement counts."""
    now = now or datetime.now(timezone.utc)
    return [
        RawEvent(
            id="reddit_mock_1",
            text=(
                "Major earthquake just hit Turkey-Syria border region. Feeling strong tremors here "
                "in Gaziantep. Buildings shaking, people running outside. Anyone else feeling this?"
            ),
            source="r/Turkey",
            timestamp=now - timedelta(hours=1),
            location="Turkey-Syria Border",
            type="earthquake",
            social=SocialMetrics(likes=1247, comments=89),
        ),
        RawEvent(
            id="reddit_mock_2",
            text=(
                "Live thread: Massive flooding in Kerala, India. Rivers overflowing, many villages "
                "cut off. Rescue operations ongoing. Please share any information about affected areas."
            ),
            source="r/india",
            timestamp=now - timedelta(hours=5),
            location="Kerala, India",
            type="flood",
            social=SocialMetrics(likes=892, comments=156),
        ),
        RawEvent(
            id="reddit_mock_3",
            text=(
                "California wildfire update: Fire has spread to 12,000 acres overnight. My "
                "neighborhood got evacuation notice. Air quality extremely poor. Stay safe everyone."
            ),
            source="r/California",
            timestamp=now - timedelta(hours=3),
            location="California, USA",
            type="wildfire",
            social=SocialMetrics(likes=634, comments=73),
        ),
        RawEvent(
            id="reddit_mock_4",
            text=(
                "Breaking: Super Typhoon approaching Philippines with 280 km/h winds. Category 5 "
                "storm. Government issuing mass evacuation orders for coastal provinces."
            ),
            source="r/Philippines",
            timestamp=now - timedelta(hours=7),
            location="Philippines",
            type="cyclone",
            social=SocialMetrics(likes=1834, comments=203),
        ),
        RawEvent(
            id="reddit_mock_5",
            text=(
                "Building collapsed in Mumbai construction site. Workers trapped inside. Emergency "
                "services on scene. This is the third incident this month in the city."
            ),
            source="r/mumbai",
            timestamp=now - timedelta(hours=2),
            location="Mumbai, India",
            type="structural_collapse",
            social=SocialMetrics(likes=445, comments=67),
        ),
    ]


def mock_news_feed(now: Optional[datetime] = None) -> List[RawEvent]:
    """Verified wire-style reports with coordinates."""
    now = now or datetime.now(timezone.utc)
    return [
        RawEvent(
            id="wire_mock_1",
            text=(
                "BREAKING: Major 7.1 earthquake hits central Turkey. Buildings collapsed in Ankara. "
                "People trapped under rubble. Emergency services responding."
            ),
            source="Reuters",
            timestamp=now - timedelta(hours=2),
            location="Ankara, Turkey",
            type="earthquake",
            verified=True,
            coordinates=Coordinates(lat=39.9334, lng=32.8597),
        ),
        RawEvent(
            id="wire_mock_2",
            text=(
                "Severe flooding in Mumbai after record rainfall. Multiple areas submerged. Need "
                "immediate evacuation support in Dharavi area."
            ),
            source="BBC News",
            timestamp=now - timedelta(hours=1),
            location="Mumbai, India",
            type="flood",
            verified=True,
            coordinates=Coordinates(lat=19.0760, lng=72.8777),
        ),
        RawEvent(
            id="wire_mock_3",
            text=(
                "Wildfire approaching residential areas in Northern California. Mandatory evacuation "
                "orders issued for Paradise and surrounding communities. High winds making "
                "containment difficult."
            ),
            source="Associated Press",
            timestamp=now - timedelta(hours=3),
            location="Paradise, California",
            type="wildfire",
            verified=True,
            coordinates=Coordinates(lat=39.7596, lng=-121.6219),
        ),
    ]
