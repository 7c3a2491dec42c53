"""
ReliefWeb API connector for CrisisLens.

Collects humanitarian situation reports and flash updates from UN OCHA's
ReliefWeb. Reports come from humanitarian agencies and are treated as
verified.

API Documentation: https://reliefweb.int/help/api
No API key required - free public API.
"""
import aiohttp
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import logging

from crisislens.core.exceptions import SourceUnavailable
from crisislens.models.crisis_event import Coordinates, parse_timestamp
from crisislens.services.processing.scoring import classify_crisis_type
from .base import BaseConnector, RawEvent
from .config import (
    RELIEFWEB_API_BASE,
    RELIEFWEB_APPNAME,
    RELIEFWEB_DAYS_BACK,
    RELIEFWEB_MAX_REPORTS,
    RELIEFWEB_REPORT_TYPES,
    RELIEFWEB_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

# ReliefWeb disaster type names -> crisis type tags
DISASTER_TYPE_MAP = {
    "earthquake": "earthquake",
    "tsunami": "tsunami",
    "tropical cyclone": "cyclone",
    "flood": "flood",
    "flash flood": "flood",
    "wild fire": "wildfire",
    "land slide": "landslide",
    "mud slide": "landslide",
    "volcano": "volcanic",
    "severe local storm": "storm",
    "storm surge": "storm",
    "drought": "drought",
    "technological disaster": "structural_collapse",
}


class ReliefWebConnector(BaseConnector):
    """
    ReliefWeb API connector for humanitarian crisis reports.

    Features:
    - Fetches recent situation reports and flash updates
    - Maps ReliefWeb disaster types onto crisis type tags
    - Uses the primary country for location and coordinates
    """

    timeout_seconds = RELIEFWEB_TIMEOUT_SECONDS

    def __init__(
        self,
        max_reports: int = RELIEFWEB_MAX_REPORTS,
        days_back: int = RELIEFWEB_DAYS_BACK,
        report_types: Optional[List[str]] = None,
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(timeout_seconds)
        self.max_reports = max_reports
        self.days_back = days_back
        self.report_types = report_types or RELIEFWEB_REPORT_TYPES

    @property
    def name(self) -> str:
        return "ReliefWeb"

    @property
    def source_type(self) -> str:
        return "reliefweb"

    def _build_payload(self) -> Dict[str, Any]:
        since = datetime.now(timezone.utc) - timedelta(days=self.days_back)
        return {
            "limit": self.max_reports,
            "preset": "latest",
            "fields": {
                "include": [
                    "id", "title", "body", "url", "date.created",
                    "source", "primary_country", "disaster_type",
                ]
            },
            "filter": {
                "operator": "AND",
                "conditions": [
                    {
                        "field": "date.created",
                        "value": {"from": since.strftime("%Y-%m-%dT%H:%M:%S+00:00")},
                    },
                    {
                        "field": "format.name",
                        "value": self.report_types,
                        "operator": "OR",
                    },
                ],
            },
            "sort": ["date.created:desc"],
        }

    async def fetch(self) -> List[RawEvent]:
        """Fetch humanitarian reports from ReliefWeb."""
        url = f"{RELIEFWEB_API_BASE}/reports?appname={RELIEFWEB_APPNAME}"

        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                json=self._build_payload(),
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"Accept": "application/json"},
            ) as response:
                if response.status != 200:
                    text = await response.text()
                    self._logger.debug(f"[CONNECT] [{self.name}] Response: {text[:500]}")
                    raise SourceUnavailable(self.name, f"HTTP {response.status}")
                data = await response.json()

        reports = data.get("data") or []
        events = []
        for report in reports:
            event = self._report_to_event(report)
            if event:
                events.append(event)

        self._logger.info(
            f"[CONNECT] [{self.name}] {len(events)} of {data.get('totalCount', len(reports))} reports"
        )
        return events

    def _map_disaster_type(self, fields: Dict[str, Any], text: str) -> str:
        for disaster_type in fields.get("disaster_type") or []:
            mapped = DISASTER_TYPE_MAP.get((disaster_type.get("name") or "").lower())
            if mapped:
                return mapped
        return classify_crisis_type(text)

    def _report_to_event(self, report: Dict[str, Any]) -> Optional[RawEvent]:
        """Convert ReliefWeb report to RawEvent."""
        fields = report.get("fields") or {}
        title = fields.get("title")
        if not title:
            return None

        body = self.clean_text(fields.get("body") or "")
        text = self.clean_text(title)
        if body:
            text = f"{text}. {body[:300]}"
        text = self.truncate_text(text)

        sources = fields.get("source") or []
        source_name = next((s["name"] for s in sources if s.get("name")), "ReliefWeb")

        country = fields.get("primary_country") or {}
        country_location = country.get("location") or {}
        coordinates = None
        if "lat" in country_location and "lon" in country_location:
            coordinates = Coordinates(lat=country_location["lat"], lng=country_location["lon"])

        return RawEvent(
            id=f"reliefweb_{report.get('id')}" if report.get("id") else None,
            text=text,
            source=source_name,
            timestamp=parse_timestamp((fields.get("date") or {}).get("created")),
            verified=True,
            coordinates=coordinates,
            location=country.get("name"),
            type=self._map_disaster_type(fields, text),
            url=fields.get("url") or report.get("href"),
        )
