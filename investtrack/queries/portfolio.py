"""
Portfolio Queries

DESIGN DECISION: Every number the UI displays is computed here, from the
state the store holds, and nowhere else. Pages only format results.

Conventions used throughout:
- "Received" means the sum of non-LEND payments (money coming back).
- "Expected total" of an investment is principal x (1 + rate / 100).
- Balances due are never shown negative.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from investtrack.config import get_settings
from investtrack.models.portfolio import (
    AppState,
    Customer,
    Investment,
    InvestmentStatus,
    Payment,
    PaymentDirection,
    PaymentType,
)


UNKNOWN = "Unknown"
ZERO = Decimal("0")


class DashboardSummary(BaseModel):
    """Headline figures for the dashboard cards."""

    total_invested: Decimal
    total_received: Decimal
    net_position: Decimal
    net_return_percent: Optional[Decimal] = Field(
        default=None,
        description="Net position as a percentage of invested; None when negative"
    )
    total_expected_return: Decimal
    projected_profit: Decimal
    investment_count: int
    active_investment_count: int
    customer_count: int


class MonthlyIncome(BaseModel):
    """Money received in one calendar month."""

    year: int
    month: int
    label: str
    amount: Decimal


class InvestmentProgress(BaseModel):
    """Repayment progress of one investment."""

    investment: Investment
    received: Decimal
    lent: Decimal
    expected_total: Decimal
    percentage: Decimal = Field(description="Received as % of expected, capped at 100")
    balance_due: Decimal


class CustomerReport(BaseModel):
    """Everything owed by and repaid from one customer."""

    customer: Customer
    investments: list[InvestmentProgress]
    total_principal: Decimal
    total_repaid: Decimal
    total_expected: Decimal
    balance_due: Decimal


class TransactionRow(BaseModel):
    """A payment joined with the names it should be displayed with."""

    payment: Payment
    investment_title: str
    customer_name: str
    direction: PaymentDirection


def sum_received(payments: Iterable[Payment]) -> Decimal:
    """Total of incoming payments (everything except LEND)."""
    return sum((p.amount for p in payments if p.type is not PaymentType.LEND), ZERO)


def sum_lent(payments: Iterable[Payment]) -> Decimal:
    """Total of outgoing LEND payments."""
    return sum((p.amount for p in payments if p.type is PaymentType.LEND), ZERO)


class PortfolioQueries:
    """
    Read-only calculations over one AppState snapshot.

    Construct a new instance per render; it holds no state of its own.
    """

    def __init__(self, state: AppState):
        self._state = state

    def dashboard(self) -> DashboardSummary:
        state = self._state
        total_invested = sum((i.amount_invested for i in state.investments), ZERO)
        total_received = sum_received(state.payments)
        total_expected = sum((i.expected_total for i in state.investments), ZERO)
        net_position = total_received - total_invested

        net_return_percent = None
        if net_position >= 0:
            net_return_percent = (
                net_position / total_invested * 100 if total_invested else ZERO
            )

        return DashboardSummary(
            total_invested=total_invested,
            total_received=total_received,
            net_position=net_position,
            net_return_percent=net_return_percent,
            total_expected_return=total_expected,
            projected_profit=total_expected - total_invested,
            investment_count=len(state.investments),
            active_investment_count=sum(
                1 for i in state.investments if i.status is InvestmentStatus.ACTIVE
            ),
            customer_count=len(state.customers),
        )

    def monthly_income(
        self,
        today: Optional[date] = None,
        months: Optional[int] = None,
    ) -> list[MonthlyIncome]:
        """
        Money received per month, oldest first, ending with the
        current month.
        """
        today = today or date.today()
        months = months or get_settings().app.income_stream_months

        buckets: dict[tuple[int, int], Decimal] = {}
        year, month = today.year, today.month
        for _ in range(months):
            buckets[(year, month)] = ZERO
            month -= 1
            if month == 0:
                year, month = year - 1, 12

        for payment in self._state.payments:
            key = (payment.date.year, payment.date.month)
            if key in buckets and payment.type is not PaymentType.LEND:
                buckets[key] += payment.amount

        return [
            MonthlyIncome(
                year=y,
                month=m,
                label=date(y, m, 1).strftime("%b"),
                amount=amount,
            )
            for (y, m), amount in sorted(buckets.items())
        ]

    def investment_progress(self, investment: Investment) -> InvestmentProgress:
        payments = self._state.payments_for(investment.id)
        received = sum_received(payments)
        expected = investment.expected_total

        percentage = ZERO
        if expected > 0:
            percentage = min(received / expected * 100, Decimal("100"))

        return InvestmentProgress(
            investment=investment,
            received=received,
            lent=sum_lent(payments),
            expected_total=expected,
            percentage=percentage,
            balance_due=max(expected - received, ZERO),
        )

    def all_progress(self) -> list[InvestmentProgress]:
        return [self.investment_progress(i) for i in self._state.investments]

    def customer_report(self, customer: Customer) -> CustomerReport:
        progress = [
            self.investment_progress(i) for i in self._state.investments_for(customer.id)
        ]
        total_repaid = sum((p.received for p in progress), ZERO)
        total_expected = sum((p.expected_total for p in progress), ZERO)

        return CustomerReport(
            customer=customer,
            investments=progress,
            total_principal=sum((p.investment.amount_invested for p in progress), ZERO),
            total_repaid=total_repaid,
            total_expected=total_expected,
            balance_due=max(total_expected - total_repaid, ZERO),
        )

    def _transaction_row(self, payment: Payment) -> TransactionRow:
        investment = self._state.get_investment(payment.investment_id)
        customer = self._state.get_customer(investment.customer_id if investment else None)
        return TransactionRow(
            payment=payment,
            investment_title=investment.title if investment else UNKNOWN,
            customer_name=customer.name if customer else UNKNOWN,
            direction=payment.direction,
        )

    def transaction_rows_in_order(self) -> list[TransactionRow]:
        """All payments in stored order, with investment and customer names."""
        return [self._transaction_row(p) for p in self._state.payments]

    def transaction_history(self) -> list[TransactionRow]:
        """All payments, newest first, with investment and customer names."""
        ordered = sorted(self._state.payments, key=lambda p: p.date, reverse=True)
        return [self._transaction_row(p) for p in ordered]

    def search_customers(self, term: str = "") -> list[Customer]:
        """Customers whose name (any case) or phone contains the term."""
        term = term.strip()
        if not term:
            return list(self._state.customers)
        lowered = term.lower()
        return [
            c for c in self._state.customers
            if lowered in c.name.lower() or term in c.phone
        ]
