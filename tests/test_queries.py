"""Tests for dashboard and report calculations."""

from datetime import date
from decimal import Decimal

from investtrack.models.portfolio import (
    AppState,
    Customer,
    Investment,
    Payment,
    PaymentDirection,
    PaymentType,
)
from investtrack.queries import PortfolioQueries, sum_lent, sum_received


class TestTotals:

    def test_received_excludes_lend(self):
        payments = [
            Payment(investment_id="i", amount=Decimal("100")),
            Payment(investment_id="i", amount=Decimal("50"), type=PaymentType.LEND),
        ]
        assert sum_received(payments) == Decimal("100")
        assert sum_lent(payments) == Decimal("50")

    def test_customer_with_two_repayments(self):
        """150000 at 12% with 15000 and 5000 repaid."""
        state = AppState(
            customers=[Customer(id="c1", name="C1", phone="1")],
            investments=[Investment(
                id="i1", customer_id="c1", title="I1",
                amount_invested=Decimal("150000"), expected_return_rate=Decimal("12"),
            )],
            payments=[
                Payment(investment_id="i1", amount=Decimal("15000")),
                Payment(investment_id="i1", amount=Decimal("5000")),
            ],
        )
        queries = PortfolioQueries(state)
        summary = queries.dashboard()

        assert summary.total_received == Decimal("20000")
        assert summary.total_expected_return == Decimal("168000")
        assert summary.projected_profit == Decimal("18000")

        report = queries.customer_report(state.customers[0])
        assert report.total_repaid == Decimal("20000")
        assert report.total_expected == Decimal("168000")
        assert report.balance_due == Decimal("148000")


class TestDashboard:

    def test_counts_and_net_position(self, sample_state):
        summary = PortfolioQueries(sample_state).dashboard()
        assert summary.total_invested == Decimal("230000")
        assert summary.total_received == Decimal("28000")
        assert summary.net_position == Decimal("-202000")
        assert summary.investment_count == 2
        assert summary.customer_count == 2

    def test_net_return_hidden_when_negative(self, sample_state):
        assert PortfolioQueries(sample_state).dashboard().net_return_percent is None

    def test_net_return_when_positive(self):
        state = AppState(
            investments=[Investment(id="i", customer_id="c", title="t", amount_invested=Decimal("1000"))],
            payments=[Payment(investment_id="i", amount=Decimal("1100"))],
        )
        assert PortfolioQueries(state).dashboard().net_return_percent == Decimal("10")

    def test_empty_portfolio(self):
        summary = PortfolioQueries(AppState()).dashboard()
        assert summary.total_invested == 0
        assert summary.net_return_percent == 0


class TestMonthlyIncome:

    def test_six_months_oldest_first(self, sample_state):
        months = PortfolioQueries(sample_state).monthly_income(today=date(2024, 4, 15))

        assert [(m.year, m.month) for m in months] == [
            (2023, 11), (2023, 12), (2024, 1), (2024, 2), (2024, 3), (2024, 4),
        ]
        assert [m.label for m in months] == ["Nov", "Dec", "Jan", "Feb", "Mar", "Apr"]
        assert [m.amount for m in months] == [0, 0, 0, Decimal("15000"), Decimal("5000"), Decimal("8000")]

    def test_same_month_of_another_year_not_counted(self):
        state = AppState(payments=[
            Payment(investment_id="i", amount=Decimal("999"), date=date(2023, 4, 10)),
            Payment(investment_id="i", amount=Decimal("10"), date=date(2024, 4, 10)),
        ])
        months = PortfolioQueries(state).monthly_income(today=date(2024, 4, 30))
        assert months[-1].amount == Decimal("10")

    def test_lend_not_counted_as_income(self):
        state = AppState(payments=[
            Payment(investment_id="i", amount=Decimal("500"), date=date(2024, 4, 1), type=PaymentType.LEND),
        ])
        months = PortfolioQueries(state).monthly_income(today=date(2024, 4, 2), months=1)
        assert months[0].amount == 0


class TestProgress:

    def test_percentage_is_capped(self):
        inv = Investment(id="i", customer_id="c", title="t", amount_invested=Decimal("100"))
        state = AppState(
            investments=[inv],
            payments=[Payment(investment_id="i", amount=Decimal("250"))],
        )
        progress = PortfolioQueries(state).investment_progress(inv)
        assert progress.percentage == Decimal("100")
        assert progress.balance_due == 0

    def test_zero_expected_total(self):
        inv = Investment(id="i", customer_id="c", title="t", amount_invested=Decimal("0"))
        progress = PortfolioQueries(AppState(investments=[inv])).investment_progress(inv)
        assert progress.percentage == 0

    def test_lent_tracked_separately(self, sample_state):
        sample_state.payments.append(
            Payment(investment_id="i1", amount=Decimal("7000"), type=PaymentType.LEND)
        )
        progress = PortfolioQueries(sample_state).investment_progress(
            sample_state.get_investment("i1")
        )
        assert progress.received == Decimal("20000")
        assert progress.lent == Decimal("7000")


class TestTransactionHistory:

    def test_newest_first_with_names(self, sample_state):
        rows = PortfolioQueries(sample_state).transaction_history()
        assert [r.payment.id for r in rows] == ["p3", "p2", "p1"]
        assert rows[0].investment_title == "Rickshaw"
        assert rows[0].customer_name == "Bilal Ahmed"
        assert rows[0].direction is PaymentDirection.IN

    def test_orphan_payment_shows_unknown(self):
        state = AppState(payments=[Payment(investment_id="gone", amount=Decimal("1"))])
        row = PortfolioQueries(state).transaction_history()[0]
        assert row.investment_title == "Unknown"
        assert row.customer_name == "Unknown"


class TestCustomerSearch:

    def test_name_is_case_insensitive(self, sample_state):
        found = PortfolioQueries(sample_state).search_customers("AYESHA")
        assert [c.id for c in found] == ["c1"]

    def test_phone_substring(self, sample_state):
        found = PortfolioQueries(sample_state).search_customers("7654")
        assert [c.id for c in found] == ["c2"]

    def test_blank_returns_all(self, sample_state):
        assert len(PortfolioQueries(sample_state).search_customers("  ")) == 2
