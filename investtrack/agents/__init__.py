"""AI agents."""

from investtrack.agents.insights import (
    GENERIC_FAILURE,
    InsightsAgent,
    InsightsError,
    build_portfolio_summary,
    build_prompt,
    parse_insights,
)

__all__ = [
    "GENERIC_FAILURE",
    "InsightsAgent",
    "InsightsError",
    "build_portfolio_summary",
    "build_prompt",
    "parse_insights",
]
