"""Tests for the OpenAI-backed analyst with a mocked client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from crisislens.core.exceptions import AnalysisFailure, SummaryFailure
from crisislens.services.analysis import OpenAIAnalyst


def _client(content=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        message = SimpleNamespace(content=content)
        response = SimpleNamespace(choices=[SimpleNamespace(message=message)])
        client.chat.completions.create = AsyncMock(return_value=response)
    return client


class TestOpenAIAnalyst:
    @pytest.mark.asyncio
    async def test_analyze_parses_json_reply(self):
        reply = 'Here you go:\n{"urgency": 9, "riskLevel": "Critical", "confidence": 0.9}'
        client = _client(reply)
        analyst = OpenAIAnalyst(api_key="test", model="gpt-test", client=client)

        result = await analyst.analyze("Quake in Lima", "Lima", "earthquake")

        assert result == {"urgency": 9, "riskLevel": "Critical", "confidence": 0.9}
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert "Quake in Lima" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_analyze_unstructured_reply(self):
        analyst = OpenAIAnalyst(client=_client("Urgency: 6. Situation is developing."))

        result = await analyst.analyze("text", "loc", "flood")

        assert result["urgency"] == 6
        assert result["risk_level"] == "High"
        assert result["confidence"] == 0.75
        assert result["degraded"] is True

    @pytest.mark.asyncio
    async def test_analyze_api_error(self):
        analyst = OpenAIAnalyst(client=_client(error=RuntimeError("rate limited")))

        with pytest.raises(AnalysisFailure, match="rate limited"):
            await analyst.analyze("text", "loc", "flood")

    @pytest.mark.asyncio
    async def test_analyze_empty_reply(self):
        analyst = OpenAIAnalyst(client=_client(""))

        with pytest.raises(AnalysisFailure):
            await analyst.analyze("text", "loc", "flood")

    @pytest.mark.asyncio
    async def test_summarize(self, make_event):
        client = _client("  Two events require attention.  ")
        analyst = OpenAIAnalyst(client=client)
        events = [make_event(id="a", location="Lima"), make_event(id="b", location="Dhaka")]

        summary = await analyst.summarize(events)

        assert summary == "Two events require attention."
        prompt = client.chat.completions.create.await_args.kwargs["messages"][1]["content"]
        assert "Lima: FLOOD" in prompt and "Dhaka" in prompt

    @pytest.mark.asyncio
    async def test_summarize_error(self, make_event):
        analyst = OpenAIAnalyst(client=_client(error=ConnectionError("offline")))

        with pytest.raises(SummaryFailure):
            await analyst.summarize([make_event()])

    def test_client_is_lazy(self):
        analyst = OpenAIAnalyst(api_key="test")
        assert analyst._client is None
