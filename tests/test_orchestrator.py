"""End-to-end flows with in-memory storage and a fake AI model."""

import asyncio
import json
from datetime import date
from decimal import Decimal

import pytest

from investtrack.agents import InsightsAgent
from investtrack.config import GeminiSettings
from investtrack.models.audit import AuditEventType
from investtrack.models.portfolio import Customer, Investment, SecuritySettings
from investtrack.orchestrator import (
    AuthenticationError,
    BackupFormatError,
    create_app_components,
)
from investtrack.security import LockState
from investtrack.services.storage import InMemoryStorage


class FakeModel:
    async def generate_content_async(self, prompt):
        class Response:
            text = json.dumps({"summary": "ok", "riskAssessment": [], "opportunities": "grow"})
        return Response()


@pytest.fixture
def components():
    storage = InMemoryStorage()
    agent = InsightsAgent(settings=GeminiSettings(api_key=None), model=FakeModel())
    return storage, create_app_components(storage=storage, insights_agent=agent)


class TestSessionFlow:

    def test_login_opens_empty_portfolio(self, components):
        _, (session_flow, _, _) = components
        store = session_flow.login("owner@example.com", "secret1")
        assert store.user_id == "owner@example.com"
        assert store.counts() == {"customers": 0, "investments": 0, "payments": 0}

    def test_bad_login(self, components):
        _, (session_flow, _, _) = components
        with pytest.raises(AuthenticationError):
            session_flow.login("owner", "secret1")

    def test_restore_after_restart(self, components):
        storage, (session_flow, _, _) = components
        store = session_flow.login("owner@example.com", "secret1")
        store.add_customer(Customer(name="Ayesha", phone="0300"))

        session_flow2, _, _ = create_app_components(storage=storage)
        restored = session_flow2.restore()

        assert restored.state == store.state

    def test_no_restore_after_logout(self, components):
        _, (session_flow, _, _) = components
        session_flow.login("owner@example.com", "secret1")
        session_flow.logout()
        assert session_flow.restore() is None

    def test_lock_starts_locked_when_enabled(self, components):
        _, (session_flow, _, _) = components
        store = session_flow.login("owner@example.com", "secret1")
        assert session_flow.create_lock(store).state is LockState.UNLOCKED

        store.update_security(SecuritySettings(enabled=True, pin="2468"))
        app_lock = session_flow.create_lock(store)
        assert app_lock.state is LockState.LOCKED
        for digit in "2468":
            app_lock.press(digit)
        assert app_lock.state is LockState.UNLOCKED


class TestDataTransferFlow:

    def test_preparing_backup_does_not_stamp(self, components):
        _, (session_flow, transfer_flow, _) = components
        store = session_flow.login("owner@example.com", "secret1")

        filename, content = transfer_flow.export_backup(store, on=date(2024, 7, 9))

        assert filename == "InvestTrack_Backup_2024-07-09.json"
        assert json.loads(content)["backup"]["lastBackupDate"] is None
        assert store.state.backup.last_backup_date is None

    def test_download_stamps_last_backup(self, components):
        _, (session_flow, transfer_flow, _) = components
        store = session_flow.login("owner@example.com", "secret1")
        filename, _ = transfer_flow.export_backup(store)

        transfer_flow.record_backup_downloaded(store, filename)

        assert store.state.backup.last_backup_date is not None
        assert store.audit_logger.recent_events[1].event_type is AuditEventType.BACKUP_EXPORTED

    def test_import_replaces_state(self, components, sample_state):
        _, (session_flow, transfer_flow, _) = components
        store = session_flow.login("owner@example.com", "secret1")

        transfer_flow.import_backup(store, sample_state.to_json())

        assert store.state == sample_state

    def test_rejected_import_changes_nothing(self, components):
        _, (session_flow, transfer_flow, _) = components
        store = session_flow.login("owner@example.com", "secret1")
        store.add_customer(Customer(name="Keep me", phone="1"))
        before = store.state

        with pytest.raises(BackupFormatError):
            transfer_flow.import_backup(store, '{"customers": []}')

        assert store.state == before
        assert store.audit_logger.recent_events[0].event_type is AuditEventType.BACKUP_REJECTED

    def test_csv_export(self, components):
        _, (session_flow, transfer_flow, _) = components
        store = session_flow.login("owner@example.com", "secret1")
        customer = store.add_customer(Customer(name="Ayesha", phone="0300"))
        investment = store.add_investment(Investment(
            customer_id=customer.id, title="Loan", amount_invested=Decimal("1000")
        ))
        store.add_funds(investment.id, Decimal("500"), on=date(2024, 1, 2))

        filename, content = transfer_flow.export_csv(store)

        assert filename == "transactions_export.csv"
        assert content.split("\n")[1] == "2024-01-02,lend,500,OUT,Loan,Ayesha"


class TestInsightsFlow:

    def test_analyze(self, components):
        _, (session_flow, _, insights_flow) = components
        store = session_flow.login("owner@example.com", "secret1")

        result = asyncio.run(insights_flow.analyze(store))

        assert insights_flow.is_available
        assert result.summary == "ok"
        assert result.risk_assessment == "No risks identified."
        assert result.opportunities == "grow"
