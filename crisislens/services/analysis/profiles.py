"""
Reference analysis profiles per crisis type.

Used by the offline analyst as its output template and by the validator to
fill fields missing from delegate output.
"""
from typing import Any, Dict

from crisislens.models.crisis_event import RiskLevel
from crisislens.services.processing.ranker import CRITICAL_TYPES, HIGH_IMPACT_TYPES

REFERENCE_PROFILES: Dict[str, Dict[str, Any]] = {
    "earthquake": {
        "urgency": 9,
        "estimated_casualties": "High - Potentially 500+ casualties, thousands affected",
        "resources_needed": ["Search and rescue teams", "Medical supplies", "Heavy machinery", "Temporary shelter"],
        "immediate_actions": [
            "Deploy emergency response teams", "Establish field hospitals",
            "Coordinate international aid", "Assess structural damage",
        ],
        "risk_level": RiskLevel.CRITICAL,
        "stakeholders": ["Emergency Services", "International Aid Organizations", "Local Government", "Military Forces"],
        "confidence": 0.91,
    },
    "tsunami": {
        "urgency": 9,
        "estimated_casualties": "Very High - Low-lying coastal communities at extreme risk",
        "resources_needed": ["Rescue boats", "Medical supplies", "Temporary shelter", "Clean water supplies"],
        "immediate_actions": [
            "Evacuate coastal zones to high ground", "Issue public warnings",
            "Prepare search and rescue", "Secure ports and harbours",
        ],
        "risk_level": RiskLevel.CRITICAL,
        "stakeholders": ["Tsunami Warning Center", "Coast Guard", "Emergency Management", "Military"],
        "confidence": 0.9,
    },
    "cyclone": {
        "urgency": 9,
        "estimated_casualties": "Very High - Coastal populations at extreme risk",
        "resources_needed": ["Storm shelters", "Rescue boats", "Emergency supplies", "Communication equipment"],
        "immediate_actions": ["Mass evacuation", "Secure infrastructure", "Prepare relief operations", "Weather monitoring"],
        "risk_level": RiskLevel.CRITICAL,
        "stakeholders": ["National Weather Service", "Coast Guard", "Emergency Management", "Military"],
        "confidence": 0.93,
    },
    "hurricane": {
        "urgency": 8,
        "estimated_casualties": "High - Widespread wind and surge damage expected",
        "resources_needed": ["Storm shelters", "Emergency supplies", "Power restoration crews", "Communication equipment"],
        "immediate_actions": ["Mass evacuation", "Secure infrastructure", "Pre-position relief supplies", "Weather monitoring"],
        "risk_level": RiskLevel.HIGH,
        "stakeholders": ["National Weather Service", "Emergency Management", "Utility Companies", "Red Cross"],
        "confidence": 0.9,
    },
    "tornado": {
        "urgency": 8,
        "estimated_casualties": "Moderate - Localized severe damage along the track",
        "resources_needed": ["Search and rescue teams", "Medical teams", "Debris removal", "Temporary shelter"],
        "immediate_actions": ["Search damaged structures", "Treat injured", "Restore access routes", "Issue shelter warnings"],
        "risk_level": RiskLevel.HIGH,
        "stakeholders": ["National Weather Service", "Fire Department", "Emergency Medical Services", "Local Government"],
        "confidence": 0.85,
    },
    "flood": {
        "urgency": 7,
        "estimated_casualties": "Moderate - 200+ evacuations needed, infrastructure damage",
        "resources_needed": ["Boats and rescue equipment", "Emergency shelters", "Clean water supplies", "Sanitation facilities"],
        "immediate_actions": [
            "Continue evacuation operations", "Set up relief camps",
            "Monitor water levels", "Prevent disease outbreak",
        ],
        "risk_level": RiskLevel.HIGH,
        "stakeholders": ["Coast Guard", "State Disaster Management", "Red Cross", "Health Department"],
        "confidence": 0.86,
    },
    "structural_collapse": {
        "urgency": 8,
        "estimated_casualties": "Moderate - 10-50 people potentially trapped",
        "resources_needed": ["Heavy rescue equipment", "Medical teams", "Structural engineers", "Specialized tools"],
        "immediate_actions": ["Search and rescue", "Structural assessment", "Medical response", "Area isolation"],
        "risk_level": RiskLevel.HIGH,
        "stakeholders": ["Fire Department", "Emergency Medical Services", "Building Authorities", "Police"],
        "confidence": 0.82,
    },
    "wildfire": {
        "urgency": 8,
        "estimated_casualties": "Moderate - 1000+ evacuated, property damage significant",
        "resources_needed": ["Firefighting aircraft", "Ground crews", "Evacuation support", "Air quality monitoring"],
        "immediate_actions": ["Contain fire spread", "Complete evacuations", "Establish firebreaks", "Monitor air quality"],
        "risk_level": RiskLevel.HIGH,
        "stakeholders": ["Fire Department", "Forest Service", "Local Authorities", "Environmental Agencies"],
        "confidence": 0.88,
    },
    "landslide": {
        "urgency": 7,
        "estimated_casualties": "Moderate - Buried homes and blocked routes",
        "resources_needed": ["Heavy machinery", "Search and rescue teams", "Medical supplies", "Geotechnical engineers"],
        "immediate_actions": ["Search buried structures", "Clear access roads", "Evacuate unstable slopes"],
        "risk_level": RiskLevel.HIGH,
        "stakeholders": ["Disaster Management Authority", "Geological Survey", "Public Works", "Local Administration"],
        "confidence": 0.8,
    },
    "volcanic": {
        "urgency": 8,
        "estimated_casualties": "Variable - Exclusion zone population at risk",
        "resources_needed": ["Respiratory protection", "Evacuation transport", "Temporary shelter", "Air quality monitoring"],
        "immediate_actions": ["Enforce exclusion zone", "Evacuate at-risk communities", "Monitor ash dispersion"],
        "risk_level": RiskLevel.HIGH,
        "stakeholders": ["Volcano Observatory", "Civil Aviation Authority", "Emergency Management", "Local Government"],
        "confidence": 0.84,
    },
    "storm": {
        "urgency": 6,
        "estimated_casualties": "Low to moderate - Localized damage and outages",
        "resources_needed": ["Power restoration crews", "Debris removal", "Emergency supplies"],
        "immediate_actions": ["Issue weather warnings", "Clear blocked roads", "Restore utilities"],
        "risk_level": RiskLevel.MEDIUM,
        "stakeholders": ["National Weather Service", "Utility Companies", "Public Works"],
        "confidence": 0.8,
    },
    "drought": {
        "urgency": 5,
        "estimated_casualties": "Low immediate risk - Long-term food and water insecurity",
        "resources_needed": ["Clean water supplies", "Food aid", "Agricultural support"],
        "immediate_actions": ["Water rationing", "Distribute food aid", "Monitor health indicators"],
        "risk_level": RiskLevel.MEDIUM,
        "stakeholders": ["Water Authority", "Agriculture Department", "World Food Programme"],
        "confidence": 0.78,
    },
    "other": {
        "urgency": 5,
        "estimated_casualties": "Unknown - Situation assessment required",
        "resources_needed": ["Emergency response teams", "Medical supplies", "Specialized equipment"],
        "immediate_actions": ["Assess situation", "Deploy resources", "Establish communication"],
        "risk_level": RiskLevel.MEDIUM,
        "stakeholders": ["Emergency Services", "Local Government", "Relief Organizations"],
        "confidence": 0.7,
    },
}


def get_reference_profile(crisis_type: str) -> Dict[str, Any]:
    """Copy of the profile for a crisis type, falling back to 'other'."""
    profile = REFERENCE_PROFILES.get(crisis_type) or REFERENCE_PROFILES["other"]
    return {
        key: list(value) if isinstance(value, list) else value
        for key, value in profile.items()
    }


def risk_level_for_urgency(urgency: int) -> RiskLevel:
    if urgency >= 8:
        return RiskLevel.CRITICAL
    if urgency >= 6:
        return RiskLevel.HIGH
    if urgency >= 4:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def placeholder_risk_level(crisis_type: str) -> RiskLevel:
    """Conservative risk for events without a real analysis; never Critical."""
    if crisis_type in CRITICAL_TYPES:
        return RiskLevel.HIGH
    if crisis_type in HIGH_IMPACT_TYPES:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
