"""
Offline analyst.

Deterministic stand-in for the model-backed delegate: severity analyses are
built from per-type reference profiles with urgency scored from the report
text, and the executive summary is a fixed briefing template.
"""
import logging
from typing import List, Sequence

from crisislens.models.crisis_event import Analysis, CrisisEvent
from crisislens.services.processing.scoring import compute_urgency
from .profiles import get_reference_profile, risk_level_for_urgency

logger = logging.getLogger(__name__)

# Priority lines in the summary, in display order
PRIORITY_LINES = [
    ("earthquake", "CRITICAL: Earthquake response operations - Mass casualty event requiring international aid coordination"),
    ("tsunami", "CRITICAL: Tsunami warning - Coastal evacuation to high ground"),
    ("cyclone", "CRITICAL: Cyclone impact - Coastal evacuation and storm surge management"),
    ("hurricane", "HIGH: Hurricane landfall - Shelter operations and power restoration"),
    ("flood", "HIGH: Flood response - Evacuation and relief operations in progress"),
    ("wildfire", "HIGH: Wildfire containment - Air support and evacuation coordination"),
    ("structural_collapse", "HIGH: Building collapse - Urban search and rescue operations"),
]


class HeuristicAnalyst:
    """
    Implements both analysis and summary capabilities without network access.

    Used in offline mode, when no model API key is configured, and in tests.
    """

    def __init__(self):
        self._logger = logging.getLogger(f"{__name__}.HeuristicAnalyst")

    async def analyze(self, text: str, location: str, crisis_type: str) -> Analysis:
        profile = get_reference_profile(crisis_type)
        urgency = compute_urgency(text, crisis_type)
        return Analysis(
            urgency=urgency,
            estimated_casualties=profile["estimated_casualties"],
            resources_needed=profile["resources_needed"],
            immediate_actions=profile["immediate_actions"],
            risk_level=risk_level_for_urgency(urgency),
            stakeholders=profile["stakeholders"],
            confidence=profile["confidence"],
        )

    async def summarize(self, events: Sequence[CrisisEvent]) -> str:
        crisis_types = {e.type for e in events}
        locations: List[str] = []
        for event in events:
            if event.location not in locations:
                locations.append(event.location)
        high_urgency = sum(1 for e in events if (e.urgency or 0) >= 8)

        priority = [f"- {line}" for crisis_type, line in PRIORITY_LINES if crisis_type in crisis_types]
        if not priority:
            priority = ["- MONITOR: No critical-tier events; continue routine assessment"]

        first = locations[0] if locations else "affected areas"
        second = locations[1] if len(locations) > 1 else "affected areas"

        self._logger.debug(f"[SUMMARY] Templated summary for {len(events)} events")
        return "\n".join([
            "CRISIS INTELLIGENCE EXECUTIVE SUMMARY",
            "",
            "CURRENT SITUATION:",
            f"{len(events)} active crisis events detected across {len(locations)} regions. "
            f"{high_urgency} events classified as high priority requiring immediate response.",
            "",
            "PRIORITY EVENTS:",
            *priority,
            "",
            "RESOURCE ALLOCATION PRIORITY:",
            f"1. Deploy emergency response teams to {first} and {second}",
            "2. Activate international aid protocols for large-scale disasters",
            "3. Coordinate with local authorities for evacuation and relief support",
            "4. Establish emergency communication networks",
            "",
            "ESTIMATED RESPONSE TIMELINE:",
            "- Initial deployment: 2-4 hours",
            "- Full operational capacity: 6-12 hours",
            "- Relief operations: 24-72 hours",
        ])
