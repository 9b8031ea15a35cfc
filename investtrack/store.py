"""
Portfolio State Container

PortfolioStore is the single owner of a signed-in user's data. Pages
read `store.state` and ask the store to change it; nothing else mutates
the collections.

DESIGN DECISION: Every operation builds new collections and commits
them in one step:
1. Compute the complete next state in memory (including cascades)
2. Swap it in
3. Write the whole dataset back through the repository
4. Record an audit event

A cascading delete therefore either fully happens or doesn't happen at
all, and there is exactly one persistence write per user action.
Operations never raise for unknown IDs; they log and leave the state as
it was.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

import structlog

from investtrack.audit import AuditLogger
from investtrack.models.audit import AuditEvent, AuditEventBuilder
from investtrack.models.portfolio import (
    AppState,
    BackupSettings,
    Customer,
    Investment,
    Payment,
    PaymentType,
    SecuritySettings,
)
from investtrack.services.storage import AppDataRepository


logger = structlog.get_logger(__name__)

ADD_FUNDS_NOTE = "Additional funds added"


class PortfolioStore:
    """
    In-memory state for one user, written back on every change.

    Use PortfolioStore.open() to start from whatever is persisted.
    """

    def __init__(
        self,
        user_id: str,
        repository: AppDataRepository,
        state: Optional[AppState] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._user_id = user_id
        self._repository = repository
        self._state = state if state is not None else AppState()
        self._audit_logger = audit_logger or AuditLogger()

    @classmethod
    def open(
        cls,
        user_id: str,
        repository: AppDataRepository,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "PortfolioStore":
        """Load a user's saved state, or start empty on first use."""
        loaded = repository.load(user_id)
        store = cls(user_id, repository, loaded, audit_logger)
        store._audit_logger.log(AuditEventBuilder.data_loaded(
            user_id=user_id,
            found=loaded is not None,
            counts=store.counts(),
        ))
        return store

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def counts(self) -> dict[str, int]:
        return {
            "customers": len(self._state.customers),
            "investments": len(self._state.investments),
            "payments": len(self._state.payments),
        }

    def _commit(self, state: AppState, *events: AuditEvent) -> None:
        self._state = state
        self._repository.save(self._user_id, state)
        for event in events:
            self._audit_logger.log(event)

    def _replace(self, **collections) -> AppState:
        return self._state.model_copy(update=collections)

    def _ignore_unknown(self, entity_type: str, entity_id: str) -> None:
        logger.warning("unknown_record", entity_type=entity_type, entity_id=entity_id)
        self._audit_logger.log(AuditEventBuilder.record_updated(
            entity_type=entity_type,
            entity_id=entity_id,
            found=False,
        ))

    # =========================================================================
    # CUSTOMERS
    # =========================================================================

    def add_customer(self, customer: Customer) -> Customer:
        self._commit(
            self._replace(customers=[*self._state.customers, customer]),
            AuditEventBuilder.record_added("customer", customer.id, customer.name),
        )
        return customer

    def update_customer(self, customer: Customer) -> bool:
        if self._state.get_customer(customer.id) is None:
            self._ignore_unknown("customer", customer.id)
            return False
        self._commit(
            self._replace(customers=[
                customer if c.id == customer.id else c for c in self._state.customers
            ]),
            AuditEventBuilder.record_updated("customer", customer.id, found=True),
        )
        return True

    def delete_customer(self, customer_id: str) -> dict[str, int]:
        """
        Delete a customer with all their investments and those
        investments' payments.

        Returns:
            Number of records removed per collection
        """
        owned = {i.id for i in self._state.investments if i.customer_id == customer_id}

        customers = [c for c in self._state.customers if c.id != customer_id]
        investments = [i for i in self._state.investments if i.customer_id != customer_id]
        payments = [p for p in self._state.payments if p.investment_id not in owned]

        removed = {
            "customers": len(self._state.customers) - len(customers),
            "investments": len(self._state.investments) - len(investments),
            "payments": len(self._state.payments) - len(payments),
        }
        self._commit(
            self._replace(customers=customers, investments=investments, payments=payments),
            AuditEventBuilder.record_deleted("customer", customer_id, removed),
        )
        return removed

    # =========================================================================
    # INVESTMENTS
    # =========================================================================

    def add_investment(self, investment: Investment) -> Investment:
        self._commit(
            self._replace(investments=[*self._state.investments, investment]),
            AuditEventBuilder.record_added("investment", investment.id, investment.title),
        )
        return investment

    def update_investment(self, investment: Investment) -> bool:
        if self._state.get_investment(investment.id) is None:
            self._ignore_unknown("investment", investment.id)
            return False
        self._commit(
            self._replace(investments=[
                investment if i.id == investment.id else i for i in self._state.investments
            ]),
            AuditEventBuilder.record_updated("investment", investment.id, found=True),
        )
        return True

    def delete_investment(self, investment_id: str) -> dict[str, int]:
        """Delete an investment and every payment recorded against it."""
        investments = [i for i in self._state.investments if i.id != investment_id]
        payments = [p for p in self._state.payments if p.investment_id != investment_id]

        removed = {
            "investments": len(self._state.investments) - len(investments),
            "payments": len(self._state.payments) - len(payments),
        }
        self._commit(
            self._replace(investments=investments, payments=payments),
            AuditEventBuilder.record_deleted("investment", investment_id, removed),
        )
        return removed

    def add_funds(
        self,
        investment_id: str,
        amount: Decimal,
        on: Optional[date] = None,
    ) -> Optional[Payment]:
        """
        Give more money to an existing investment.

        Raises the principal by `amount` and records the disbursement
        as a LEND payment, both in the same commit.

        Returns:
            The recorded payment, or None if the investment doesn't exist
        """
        investment = self._state.get_investment(investment_id)
        if investment is None:
            self._ignore_unknown("investment", investment_id)
            return None

        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        grown = investment.model_copy(
            update={"amount_invested": investment.amount_invested + amount}
        )
        payment = Payment(
            investment_id=investment_id,
            amount=amount,
            date=on or date.today(),
            type=PaymentType.LEND,
            notes=ADD_FUNDS_NOTE,
        )
        self._commit(
            self._replace(
                investments=[grown if i.id == investment_id else i for i in self._state.investments],
                payments=[*self._state.payments, payment],
            ),
            AuditEventBuilder.funds_added(investment_id, payment.id, str(amount)),
        )
        return payment

    # =========================================================================
    # PAYMENTS
    # =========================================================================

    def add_payment(self, payment: Payment) -> Payment:
        self._commit(
            self._replace(payments=[*self._state.payments, payment]),
            AuditEventBuilder.record_added(
                "payment", payment.id, f"{payment.type.value} {payment.amount}"
            ),
        )
        return payment

    def update_payment(self, payment: Payment) -> bool:
        if self._state.get_payment(payment.id) is None:
            self._ignore_unknown("payment", payment.id)
            return False
        self._commit(
            self._replace(payments=[
                payment if p.id == payment.id else p for p in self._state.payments
            ]),
            AuditEventBuilder.record_updated("payment", payment.id, found=True),
        )
        return True

    def delete_payment(self, payment_id: str) -> dict[str, int]:
        payments = [p for p in self._state.payments if p.id != payment_id]
        removed = {"payments": len(self._state.payments) - len(payments)}
        self._commit(
            self._replace(payments=payments),
            AuditEventBuilder.record_deleted("payment", payment_id, removed),
        )
        return removed

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def update_security(self, security: SecuritySettings) -> None:
        # Never put the PIN itself in the log
        changes = security.model_dump(mode="json", exclude={"pin"})
        changes["pin_changed"] = security.pin != self._state.security.pin
        self._commit(
            self._replace(security=security),
            AuditEventBuilder.settings_updated("security", changes),
        )

    def update_backup(self, backup: BackupSettings) -> None:
        self._commit(
            self._replace(backup=backup),
            AuditEventBuilder.settings_updated("backup", backup.model_dump(mode="json")),
        )

    def record_backup(self, at: Optional[datetime] = None) -> BackupSettings:
        """Stamp the time of a completed manual backup."""
        backup = self._state.backup.model_copy(
            update={"last_backup_date": at or datetime.now(timezone.utc)}
        )
        self.update_backup(backup)
        return backup

    def replace_state(self, state: AppState) -> None:
        """Overwrite everything, e.g. when restoring a backup file."""
        self._commit(
            state,
            AuditEventBuilder.backup_imported({
                "customers": len(state.customers),
                "investments": len(state.investments),
                "payments": len(state.payments),
            }),
        )
