"""Shared fixtures: in-memory storage and a small sample portfolio."""

from datetime import date
from decimal import Decimal

import pytest

from investtrack.audit import AuditLogger
from investtrack.models.portfolio import (
    AppState,
    Customer,
    Investment,
    Payment,
    PaymentType,
)
from investtrack.services.storage import AppDataRepository, InMemoryStorage
from investtrack.store import PortfolioStore


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def repository(storage, audit_logger):
    return AppDataRepository(storage, audit_logger=audit_logger)


@pytest.fixture
def sample_state():
    """C1 with I1 (150000 at 12%) and two repayments; C2 with I2 and one payment."""
    return AppState(
        customers=[
            Customer(id="c1", name="Ayesha Khan", phone="0300-1234567", email="ayesha@example.com"),
            Customer(id="c2", name="Bilal Ahmed", phone="0321-7654321"),
        ],
        investments=[
            Investment(
                id="i1",
                customer_id="c1",
                title="Shop Expansion",
                amount_invested=Decimal("150000"),
                expected_return_rate=Decimal("12"),
                start_date=date(2024, 1, 1),
                end_date=date(2024, 12, 31),
            ),
            Investment(
                id="i2",
                customer_id="c2",
                title="Rickshaw",
                amount_invested=Decimal("80000"),
                expected_return_rate=Decimal("10"),
                start_date=date(2024, 3, 1),
                end_date=date(2025, 3, 1),
            ),
        ],
        payments=[
            Payment(id="p1", investment_id="i1", amount=Decimal("15000"),
                    date=date(2024, 2, 1), type=PaymentType.INSTALLMENT),
            Payment(id="p2", investment_id="i1", amount=Decimal("5000"),
                    date=date(2024, 3, 1), type=PaymentType.DOWN_PAYMENT),
            Payment(id="p3", investment_id="i2", amount=Decimal("8000"),
                    date=date(2024, 4, 1), type=PaymentType.INSTALLMENT),
        ],
    )


@pytest.fixture
def store(repository, sample_state, audit_logger):
    return PortfolioStore("owner@example.com", repository, sample_state, audit_logger)
