"""
Validation and repair of delegate analysis output.

Delegates return loosely structured data (often parsed from model output).
Every result passes through AnalysisValidator.repair() before it is attached
to an event, so downstream code can rely on clamped numbers, known risk
levels and clean string lists.
"""
import logging
import math
import re
from dataclasses import fields
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from crisislens.core.exceptions import AnalysisFailure
from crisislens.models.crisis_event import Analysis, RiskLevel, parse_timestamp
from .profiles import get_reference_profile, risk_level_for_urgency

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "urgency",
    "estimated_casualties",
    "resources_needed",
    "immediate_actions",
    "risk_level",
    "stakeholders",
]
LIST_FIELDS = ["resources_needed", "immediate_actions", "stakeholders"]

# Delegates following the JSON prompt answer in camelCase
KEY_ALIASES = {
    "estimatedCasualties": "estimated_casualties",
    "resourcesNeeded": "resources_needed",
    "immediateActions": "immediate_actions",
    "riskLevel": "risk_level",
    "analysisTimeMs": "analysis_time_ms",
}

MISSING_FIELD_CONFIDENCE_FACTOR = 0.9
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


class AnalysisValidator:
    """
    Normalizes an Analysis or mapping into a well-formed Analysis.

    Repairs:
    - Missing required fields (filled from the crisis type's reference profile)
    - Urgency outside 1-10 or non-numeric
    - Confidence outside 0-1 or non-numeric
    - Unrecognized risk levels (derived from urgency)
    - List fields holding non-strings or blanks
    """

    def __init__(self):
        self._logger = logging.getLogger(f"{__name__}.AnalysisValidator")

    def repair(
        self,
        raw: Union[Analysis, Mapping[str, Any]],
        crisis_type: str,
    ) -> Analysis:
        """
        Return a valid Analysis for the given delegate output.

        Args:
            raw: Delegate output (Analysis instance or mapping)
            crisis_type: Crisis type used to pick the reference profile

        Returns:
            Analysis with degraded=True if anything had to be repaired

        Raises:
            AnalysisFailure: If raw is neither an Analysis nor a mapping
        """
        data = self._normalize_keys(raw)
        profile = get_reference_profile(crisis_type)
        repairs: List[str] = []

        missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
        for name in missing:
            data[name] = profile[name]
        if missing:
            repairs.append(f"missing fields: {', '.join(missing)}")

        urgency, note = self._coerce_urgency(data["urgency"], profile["urgency"])
        if note:
            repairs.append(note)

        confidence, note = self._coerce_confidence(data.get("confidence"), profile["confidence"])
        if note:
            repairs.append(note)
        if missing:
            confidence *= MISSING_FIELD_CONFIDENCE_FACTOR

        risk_level, note = self._coerce_risk_level(data["risk_level"], urgency)
        if note:
            repairs.append(note)

        lists: Dict[str, List[str]] = {}
        for name in LIST_FIELDS:
            lists[name], note = self._coerce_list(data[name], name)
            if note:
                repairs.append(note)

        casualties = data["estimated_casualties"]
        if not isinstance(casualties, str):
            casualties = str(casualties)
            repairs.append("estimated_casualties coerced to text")

        if repairs:
            self._logger.debug(f"[VALIDATE] Repaired {crisis_type} analysis: {'; '.join(repairs)}")

        return Analysis(
            urgency=urgency,
            estimated_casualties=casualties,
            resources_needed=lists["resources_needed"],
            immediate_actions=lists["immediate_actions"],
            risk_level=risk_level,
            stakeholders=lists["stakeholders"],
            confidence=confidence,
            analysis_time_ms=data.get("analysis_time_ms"),
            timestamp=parse_timestamp(data["timestamp"]) if data.get("timestamp") else None,
            degraded=bool(data.get("degraded")) or bool(repairs),
            error=data.get("error"),
        )

    def _normalize_keys(self, raw: Union[Analysis, Mapping[str, Any]]) -> Dict[str, Any]:
        if isinstance(raw, Analysis):
            return {f.name: getattr(raw, f.name) for f in fields(raw)}
        if isinstance(raw, Mapping):
            return {KEY_ALIASES.get(key, key): value for key, value in raw.items()}
        raise AnalysisFailure(
            f"Unrecognized analysis output: {type(raw).__name__}",
            details={"type": type(raw).__name__},
        )

    def _to_number(self, value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value) if math.isfinite(value) else None
        if isinstance(value, str):
            match = _NUMBER.search(value)
            return float(match.group()) if match else None
        return None

    def _coerce_urgency(self, value: Any, fallback: int) -> Tuple[int, Optional[str]]:
        number = self._to_number(value)
        if number is None:
            return fallback, f"urgency {value!r} not numeric"
        urgency = max(1, min(10, int(math.floor(number + 0.5))))
        if isinstance(value, (int, float)) and urgency == value:
            return urgency, None
        return urgency, f"urgency {value!r} -> {urgency}"

    def _coerce_confidence(self, value: Any, fallback: float) -> Tuple[float, Optional[str]]:
        if value is None:
            return fallback, None
        number = self._to_number(value)
        if number is None:
            return fallback, f"confidence {value!r} not numeric"
        confidence = max(0.0, min(1.0, number))
        if isinstance(value, (int, float)) and confidence == value:
            return confidence, None
        return confidence, f"confidence {value!r} -> {confidence}"

    def _coerce_risk_level(self, value: Any, urgency: int) -> Tuple[RiskLevel, Optional[str]]:
        if isinstance(value, RiskLevel):
            return value, None
        if isinstance(value, str):
            for level in RiskLevel:
                if level.value.lower() == value.strip().lower():
                    return level, None
        derived = risk_level_for_urgency(urgency)
        return derived, f"risk_level {value!r} -> {derived.value}"

    def _coerce_list(self, value: Any, name: str) -> Tuple[List[str], Optional[str]]:
        if isinstance(value, str):
            items = [value.strip()] if value.strip() else []
            return items, f"{name} coerced to list"
        if not isinstance(value, (list, tuple)):
            return [], f"{name} {type(value).__name__} dropped"

        items = [str(v).strip() for v in value if v is not None and str(v).strip()]
        clean = len(items) == len(value) and all(
            isinstance(v, str) and v == item for v, item in zip(value, items)
        )
        return items, None if clean else f"{name} cleaned"
