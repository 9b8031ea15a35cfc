"""
Portfolio Insights Agent

DESIGN DECISION: The model only ever sees a reduced projection of the
portfolio: counts, totals and per-investment figures. Names of
customers, phone numbers, emails, notes and images never leave the
machine.

CRITICAL BOUNDARIES:
- CAN: Summarize performance, point out risks, suggest improvements
- CANNOT: Change any data; the result is display-only
- MUST: Fail loudly with one generic error rather than show partial output

The response is requested as JSON (response_mime_type), so no
fence-stripping or brace-hunting is needed on the way back.
"""

import json
from decimal import Decimal
from typing import Any, Optional

import google.generativeai as genai
import structlog

from investtrack.audit import AuditLogger
from investtrack.config import GeminiSettings, get_settings
from investtrack.models.audit import AuditEventBuilder
from investtrack.models.portfolio import (
    AIAnalysisResult,
    AppState,
    InvestmentStatus,
    decimal_to_number,
)
from investtrack.queries import sum_received


logger = structlog.get_logger(__name__)

GENERIC_FAILURE = "Failed to generate insights. Check API Key or connection."

DEFAULT_SUMMARY = "Unable to generate summary."
DEFAULT_RISKS = "No risks identified."
DEFAULT_OPPORTUNITIES = "No specific opportunities found."


class InsightsError(Exception):
    """
    Insights could not be produced.

    str(error) is always the generic user-facing message; the underlying
    cause is kept on `detail` and chained as __cause__.
    """

    def __init__(self, detail: str):
        super().__init__(GENERIC_FAILURE)
        self.detail = detail


def build_portfolio_summary(state: AppState) -> dict[str, Any]:
    """The projection of the portfolio that is sent to the model."""
    return {
        "totalCustomers": len(state.customers),
        "activeInvestments": sum(
            1 for i in state.investments if i.status is InvestmentStatus.ACTIVE
        ),
        "totalInvested": decimal_to_number(
            sum((i.amount_invested for i in state.investments), Decimal("0"))
        ),
        "totalCollected": decimal_to_number(sum_received(state.payments)),
        "investments": [
            {
                "title": inv.title,
                "status": inv.status.value,
                "amountInvested": decimal_to_number(inv.amount_invested),
                "expectedReturnRate": decimal_to_number(inv.expected_return_rate),
                "totalPaid": decimal_to_number(
                    sum_received(state.payments_for(inv.id))
                ),
            }
            for inv in state.investments
        ],
    }


CURRENCY_NAMES = {"PKR": "Pakistani Rupees"}


def build_prompt(summary: dict[str, Any], currency_code: Optional[str] = None) -> str:
    currency_code = currency_code or get_settings().app.currency_code
    currency = CURRENCY_NAMES.get(currency_code)
    currency = f"{currency} ({currency_code})" if currency else currency_code
    return f"""You are a senior financial investment analyst. All monetary values are in {currency}. Analyze the following investment portfolio JSON data.

Data:
{json.dumps(summary, indent=2)}

Provide a structured analysis in JSON format with the following keys:
- "summary": A brief executive summary of the portfolio performance (max 50 words).
- "riskAssessment": Identify 2-3 potential risks (e.g., low repayment rates on specific investments, concentration risk).
- "opportunities": Suggest 2-3 actionable tips to improve profitability or cash flow.

Do not use markdown formatting. Return raw JSON."""


def _as_text(value: Any, default: str) -> str:
    if isinstance(value, list):
        return ". ".join(str(item) for item in value) or default
    return str(value) if value else default


def parse_insights(text: str) -> AIAnalysisResult:
    """
    Turn the model's JSON reply into a display-ready result.

    Raises:
        InsightsError: If the reply is empty or not a JSON object
    """
    if not text or not text.strip():
        raise InsightsError("Empty response from model")
    try:
        data = json.loads(text)
    except ValueError as e:
        raise InsightsError(f"Response is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise InsightsError("Response is not a JSON object")

    return AIAnalysisResult(
        summary=_as_text(data.get("summary"), DEFAULT_SUMMARY),
        risk_assessment=_as_text(data.get("riskAssessment"), DEFAULT_RISKS),
        opportunities=_as_text(data.get("opportunities"), DEFAULT_OPPORTUNITIES),
    )


class InsightsAgent:
    """
    Generates a short analysis of the portfolio with Gemini.

    One call, no retries. Pressing the button twice simply starts two
    independent requests.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            settings: Gemini settings; defaults to the cached settings
            model: Anything with `generate_content_async(prompt)`; built
                from settings when omitted
            audit_logger: Receives success and failure events
        """
        self._settings = settings or get_settings().gemini
        self._audit_logger = audit_logger or AuditLogger()
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
                "response_mime_type": "application/json",
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    async def generate_insights(self, state: AppState) -> AIAnalysisResult:
        """
        Analyze the portfolio.

        Raises:
            InsightsError: On a missing API key, a failed request, or an
                unusable response
        """
        try:
            if self._model is None:
                raise InsightsError("Gemini API key is not configured")

            prompt = build_prompt(build_portfolio_summary(state))
            try:
                response = await self._model.generate_content_async(prompt)
                text = response.text
            except Exception as e:
                raise InsightsError(f"{type(e).__name__}: {e}") from e

            result = parse_insights(text)
        except InsightsError as e:
            logger.error("insights_failed", detail=e.detail)
            self._audit_logger.log(AuditEventBuilder.insights_failed(e.detail))
            raise

        self._audit_logger.log(
            AuditEventBuilder.insights_generated(len(state.investments))
        )
        return result
