"""Tests for the insights agent. The Gemini model is always faked."""

import asyncio
import json

import pytest

from investtrack.agents import (
    GENERIC_FAILURE,
    InsightsAgent,
    InsightsError,
    build_portfolio_summary,
    build_prompt,
    parse_insights,
)
from investtrack.config import GeminiSettings
from investtrack.models.audit import AuditEventType


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text=None, error=None):
        self._text = text
        self._error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self._error:
            raise self._error
        return FakeResponse(self._text)


def unconfigured():
    return GeminiSettings(api_key=None)


class TestPortfolioSummary:

    def test_totals(self, sample_state):
        summary = build_portfolio_summary(sample_state)
        assert summary["totalCustomers"] == 2
        assert summary["activeInvestments"] == 2
        assert summary["totalInvested"] == 230000
        assert summary["totalCollected"] == 28000
        assert summary["investments"][0] == {
            "title": "Shop Expansion",
            "status": "active",
            "amountInvested": 150000,
            "expectedReturnRate": 12,
            "totalPaid": 20000,
        }

    def test_no_personal_details(self, sample_state):
        text = json.dumps(build_portfolio_summary(sample_state))
        assert "Ayesha" not in text
        assert "0300-1234567" not in text
        assert "example.com" not in text

    def test_prompt_mentions_currency_and_keys(self, sample_state):
        prompt = build_prompt(build_portfolio_summary(sample_state), currency_code="PKR")
        assert "Pakistani Rupees (PKR)" in prompt
        for key in ('"summary"', '"riskAssessment"', '"opportunities"'):
            assert key in prompt


class TestParseInsights:

    def test_lists_joined(self):
        result = parse_insights(json.dumps({
            "summary": "Healthy.",
            "riskAssessment": ["Concentration on one customer", "Late payments"],
            "opportunities": ["Raise rates"],
        }))
        assert result.summary == "Healthy."
        assert result.risk_assessment == "Concentration on one customer. Late payments"
        assert result.opportunities == "Raise rates"

    def test_missing_keys_fall_back(self):
        result = parse_insights("{}")
        assert result.summary == "Unable to generate summary."
        assert result.risk_assessment == "No risks identified."
        assert result.opportunities == "No specific opportunities found."

    @pytest.mark.parametrize("text", ["", "   ", "not json", "[1, 2]"])
    def test_unusable_reply(self, text):
        with pytest.raises(InsightsError):
            parse_insights(text)


class TestInsightsAgent:

    def test_generates_result(self, sample_state, audit_logger):
        model = FakeModel(json.dumps({
            "summary": "Two active loans.",
            "riskAssessment": "Low repayment so far.",
            "opportunities": ["Collect monthly"],
        }))
        agent = InsightsAgent(settings=unconfigured(), model=model, audit_logger=audit_logger)

        result = asyncio.run(agent.generate_insights(sample_state))

        assert result.summary == "Two active loans."
        assert result.opportunities == "Collect monthly"
        assert result.timestamp is not None
        assert len(model.prompts) == 1
        assert audit_logger.recent_events[0].event_type is AuditEventType.INSIGHTS_GENERATED

    def test_missing_api_key(self, sample_state, audit_logger):
        agent = InsightsAgent(settings=unconfigured(), audit_logger=audit_logger)
        assert not agent.is_available

        with pytest.raises(InsightsError) as excinfo:
            asyncio.run(agent.generate_insights(sample_state))

        assert str(excinfo.value) == GENERIC_FAILURE
        assert audit_logger.recent_events[0].event_type is AuditEventType.INSIGHTS_FAILED

    def test_network_error_becomes_generic(self, sample_state):
        agent = InsightsAgent(
            settings=unconfigured(),
            model=FakeModel(error=TimeoutError("deadline exceeded")),
        )
        with pytest.raises(InsightsError) as excinfo:
            asyncio.run(agent.generate_insights(sample_state))

        assert str(excinfo.value) == GENERIC_FAILURE
        assert "deadline exceeded" in excinfo.value.detail
        assert isinstance(excinfo.value.__cause__, TimeoutError)

    def test_empty_reply(self, sample_state):
        agent = InsightsAgent(settings=unconfigured(), model=FakeModel(""))
        with pytest.raises(InsightsError):
            asyncio.run(agent.generate_insights(sample_state))
