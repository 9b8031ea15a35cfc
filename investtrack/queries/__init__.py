"""Portfolio query package."""

from investtrack.queries.portfolio import (
    CustomerReport,
    DashboardSummary,
    InvestmentProgress,
    MonthlyIncome,
    PortfolioQueries,
    TransactionRow,
    sum_lent,
    sum_received,
)

__all__ = [
    "CustomerReport",
    "DashboardSummary",
    "InvestmentProgress",
    "MonthlyIncome",
    "PortfolioQueries",
    "TransactionRow",
    "sum_lent",
    "sum_received",
]
