"""
OpenAI-backed crisis analyst.

Implements both capabilities with chat completions: a JSON-only severity
analysis per report and a leadership executive summary over a set of
events. Errors are raised as AnalysisFailure / SummaryFailure; the caller
decides how to degrade.
"""
import json
import logging
import re
from typing import Any, Dict, Optional, Sequence

from openai import AsyncOpenAI

from crisislens.core.config import DEFAULT_OPENAI_MODEL
from crisislens.core.exceptions import AnalysisFailure, SummaryFailure
from crisislens.models.crisis_event import CrisisEvent
from .profiles import risk_level_for_urgency

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = """You are a crisis analysis AI expert. Analyze crisis reports and extract structured information.

RESPOND ONLY IN VALID JSON FORMAT with these exact fields:
{
  "urgency": number (1-10, where 10 is most critical),
  "estimatedCasualties": "string description",
  "resourcesNeeded": ["array", "of", "resources"],
  "immediateActions": ["array", "of", "actions"],
  "riskLevel": "Critical|High|Medium|Low",
  "stakeholders": ["array", "of", "organizations"],
  "confidence": number (0.0-1.0)
}

Consider factors like:
- Scale of disaster
- Population density
- Infrastructure damage
- Environmental conditions
- Response capacity"""

SUMMARY_SYSTEM_PROMPT = """You are a senior crisis intelligence analyst for emergency response leadership.

Create a concise, actionable executive summary that includes:
1. Current situation overview
2. Priority events requiring immediate attention
3. Resource allocation recommendations
4. Next actions for leadership
5. Estimated response timeline

Keep it professional, clear, and decision-focused. Maximum 300 words."""

ANALYSIS_MAX_TOKENS = 500
ANALYSIS_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 400
SUMMARY_TEMPERATURE = 0.2

# Used when the reply carries no parseable JSON
UNSTRUCTURED_CONFIDENCE = 0.75
UNSTRUCTURED_DEFAULT_URGENCY = 8

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_URGENCY = re.compile(r"urgency[:\s\"]*(\d+)", re.I)


class OpenAIAnalyst:
    """
    Analysis and summary delegate backed by the OpenAI chat API.

    Usage:
        analyst = OpenAIAnalyst(api_key=settings.openai_api_key)
        raw = await analyst.analyze(text, location, crisis_type)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_OPENAI_MODEL,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key
        self.model = model
        self._client = client
        self._logger = logging.getLogger(f"{__name__}.OpenAIAnalyst")

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy initialization of the OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def _complete(self, system: str, user: str, max_tokens: int, temperature: float) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    async def analyze(self, text: str, location: str, crisis_type: str) -> Dict[str, Any]:
        """
        Request a structured analysis for one report.

        Returns the parsed mapping as produced by the model; validation and
        repair happen in the caller.

        Raises:
            AnalysisFailure: On API errors or an empty reply
        """
        prompt = (
            "Analyze this crisis situation:\n\n"
            f'CRISIS REPORT: "{text}"\n'
            f"LOCATION: {location}\n"
            f"TYPE: {crisis_type}\n\n"
            "Provide structured analysis in JSON format only."
        )
        try:
            content = await self._complete(
                ANALYSIS_SYSTEM_PROMPT, prompt, ANALYSIS_MAX_TOKENS, ANALYSIS_TEMPERATURE
            )
        except Exception as e:
            raise AnalysisFailure(
                f"OpenAI analysis request failed: {type(e).__name__}: {e}",
                details={"model": self.model},
            ) from e

        if not content:
            raise AnalysisFailure("Empty response from OpenAI", details={"model": self.model})

        parsed = self._extract_json(content)
        if parsed is None:
            self._logger.warning("[ANALYZE] No JSON in model reply, using unstructured parse")
            return self._parse_unstructured(content)
        return parsed

    def _extract_json(self, content: str) -> Optional[Dict[str, Any]]:
        match = _JSON_OBJECT.search(content)
        if not match:
            return None
        try:
            parsed = json.loads(match.group())
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None

    def _parse_unstructured(self, content: str) -> Dict[str, Any]:
        """Pull what we can out of a free-text reply."""
        match = _URGENCY.search(content)
        urgency = int(match.group(1)) if match else UNSTRUCTURED_DEFAULT_URGENCY
        urgency = max(1, min(10, urgency))
        return {
            "urgency": urgency,
            "estimated_casualties": "Analysis in progress - AI response being processed",
            "resources_needed": ["Emergency response teams", "Medical supplies", "Specialized equipment"],
            "immediate_actions": ["Assess situation", "Deploy resources", "Establish communication"],
            "risk_level": risk_level_for_urgency(urgency).value,
            "stakeholders": ["Emergency Services", "Local Government", "Relief Organizations"],
            "confidence": UNSTRUCTURED_CONFIDENCE,
            "degraded": True,
        }

    async def summarize(self, events: Sequence[CrisisEvent]) -> str:
        """
        Generate an executive summary for leadership.

        Raises:
            SummaryFailure: On API errors or an empty reply
        """
        reports = "\n\n".join(
            f"{e.location}: {e.type.upper()} - {e.text}" for e in events
        )
        prompt = f"Generate an executive summary from these {len(events)} crisis reports:\n\n{reports}"

        try:
            summary = await self._complete(
                SUMMARY_SYSTEM_PROMPT, prompt, SUMMARY_MAX_TOKENS, SUMMARY_TEMPERATURE
            )
        except Exception as e:
            raise SummaryFailure(
                f"OpenAI summary request failed: {type(e).__name__}: {e}",
                details={"model": self.model},
            ) from e

        if not summary:
            raise SummaryFailure("Empty summary from OpenAI", details={"model": self.model})

        self._logger.info(f"[SUMMARY] Executive summary generated ({len(summary)} chars)")
        return summary
