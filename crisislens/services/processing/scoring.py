"""
Heuristic text scoring for crisis reports.

Keyword and pattern matchers for crisis type, location, urgency and crisis
relatedness. All functions are pure and synchronous; they are best-effort
matchers, not semantic understanding, and can be swapped without touching
callers as long as the signatures hold.
"""
import math
import re
from typing import Dict, List, Optional

from crisislens.models.crisis_event import SocialMetrics

DEFAULT_CRISIS_TYPE = "other"
UNKNOWN_LOCATION = "Location Unknown"

# Evaluated in order; the first type with any keyword hit wins
CRISIS_TYPE_KEYWORDS: Dict[str, List[str]] = {
    "earthquake": ["earthquake", "quake", "seismic", "tremor", "richter", "tectonic"],
    "tsunami": ["tsunami", "tidal wave", "sea surge"],
    "cyclone": ["cyclone", "super cyclone"],
    "hurricane": ["hurricane", "typhoon", "tropical storm"],
    "tornado": ["tornado", "twister", "funnel cloud"],
    "flood": ["flood", "deluge", "inundation", "overflow", "waterlog"],
    "structural_collapse": [
        "building collapse", "structure collapse", "collapsed", "building fall",
        "infrastructure failure",
    ],
    "wildfire": ["wildfire", "forest fire", "bushfire", "blaze", "fire", "flames", "burning"],
    "landslide": ["landslide", "mudslide", "rockslide", "avalanche", "slope failure"],
    "volcanic": ["volcano", "volcanic", "eruption", "lava", "ash cloud"],
    "storm": ["storm", "thunderstorm", "hailstorm", "severe weather"],
    "drought": ["drought", "water shortage", "dry spell"],
}

# Base urgency by crisis type
TYPE_URGENCY: Dict[str, int] = {
    "tsunami": 9,
    "cyclone": 9,
    "earthquake": 8,
    "hurricane": 8,
    "tornado": 8,
    "volcanic": 8,
    "wildfire": 7,
    "flood": 7,
    "landslide": 7,
    "structural_collapse": 7,
    "storm": 6,
    "drought": 5,
    "other": 5,
}

URGENCY_TERMS: Dict[str, int] = {
    "critical": 3,
    "immediate": 2,
    "urgent": 2,
    "emergency": 2,
    "severe": 1,
    "major": 1,
    "massive": 1,
}

IMPACT_TERMS: Dict[str, int] = {
    "casualties": 3,
    "dead": 3,
    "deaths": 3,
    "trapped": 2,
    "injured": 2,
    "missing": 2,
    "evacuate": 2,
    "destroyed": 1,
    "damaged": 1,
}

# Social signal caps
MAX_SHARE_BOOST = 2.0
MAX_LIKE_BOOST = 1.0
SHARES_PER_POINT = 1000.0
LIKES_PER_POINT = 2000.0

CRISIS_INDICATOR_CATEGORIES: List[List[str]] = [
    ["emergency", "crisis", "disaster", "catastrophe"],
    ["earthquake", "flood", "hurricane", "wildfire", "tsunami"],
    ["casualties", "injured", "trapped", "missing", "dead"],
    ["evacuation", "rescue", "emergency services", "relief"],
    ["collapsed", "damaged", "destroyed", "blocked"],
    ["massive", "severe", "devastating", "critical"],
]
MIN_INDICATOR_CATEGORIES = 2

_PLACE = r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)"

# Tried in priority order; first match wins
LOCATION_PATTERNS: List[re.Pattern] = [
    # "near Tokyo, Japan"
    re.compile(r"\b(?i:in|at|near|from)\s+" + _PLACE + r",\s*([A-Z][a-z]+)"),
    # "in Kerala"
    re.compile(r"\b(?i:in|at|near|from)\s+" + _PLACE),
    # "Manila hit by ..."
    re.compile(r"\b" + _PLACE + r"\s+(?:hit|struck|affected|damaged)\b"),
]

GAZETTEER: List[str] = [
    "Mexico City", "New York", "São Paulo",
    "California", "Florida", "Texas", "Tokyo", "London", "Paris", "Sydney",
    "Mumbai", "Delhi", "Chennai", "Kolkata", "Bangalore", "Hyderabad", "Kerala",
    "Beijing", "Shanghai", "Istanbul", "Cairo", "Manila", "Jakarta", "Bangkok", "Seoul",
    "India", "China", "United States", "Japan", "Indonesia", "Philippines",
    "Turkey", "Iran", "Pakistan", "Bangladesh", "Myanmar", "Thailand", "Nepal",
    "Italy", "Greece", "Australia", "Chile", "Mexico",
]


def classify_crisis_type(text: str) -> str:
    """Return the first crisis type whose keywords appear in the text."""
    lower = (text or "").lower()
    for crisis_type, keywords in CRISIS_TYPE_KEYWORDS.items():
        if any(keyword in lower for keyword in keywords):
            return crisis_type
    return DEFAULT_CRISIS_TYPE


def extract_location(text: str) -> str:
    """Best-effort place name from free text."""
    if not text:
        return UNKNOWN_LOCATION

    for pattern in LOCATION_PATTERNS:
        match = pattern.search(text)
        if match:
            groups = [g for g in match.groups() if g]
            return ", ".join(groups)

    lower = text.lower()
    for place in GAZETTEER:
        if place.lower() in lower:
            return place

    return UNKNOWN_LOCATION


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_urgency(value: float) -> int:
    return max(1, min(10, _round_half_up(value)))


def compute_urgency(
    text: str,
    crisis_type: str,
    social: Optional[SocialMetrics] = None,
) -> int:
    """
    Score urgency on a 1-10 scale.

    Base value by crisis type, plus additive keyword hits from the urgency
    and impact tables, plus a capped boost from social engagement.
    """
    lower = (text or "").lower()
    score: float = TYPE_URGENCY.get(crisis_type, TYPE_URGENCY[DEFAULT_CRISIS_TYPE])

    score += sum(weight for term, weight in URGENCY_TERMS.items() if term in lower)
    score += sum(weight for term, weight in IMPACT_TERMS.items() if term in lower)

    if social is not None:
        if social.shares:
            score += min(MAX_SHARE_BOOST, social.shares / SHARES_PER_POINT)
        if social.likes:
            score += min(MAX_LIKE_BOOST, social.likes / LIKES_PER_POINT)

    return clamp_urgency(score)


def is_crisis_related(text: str) -> bool:
    """True when the text hits at least two distinct indicator categories."""
    lower = (text or "").lower()
    hits = sum(
        1 for category in CRISIS_INDICATOR_CATEGORIES
        if any(term in lower for term in category)
    )
    return hits >= MIN_INDICATOR_CATEGORIES
