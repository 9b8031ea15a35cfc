"""
Main Orchestrator for InvestTrack

This module ties together all the components and defines the
end-to-end flows for:
1. Session (sign in → load portfolio → lock if enabled → sign out)
2. Data transfer (backup export/import, CSV export)
3. Insights (portfolio → reduced summary → Gemini → display)

DESIGN DECISION: The orchestrator enforces the boundaries:
- A portfolio is only opened for a signed-in user
- An import is validated in full before anything is replaced
- Every step is audited

Pages talk to these flows and to the PortfolioStore they hand out;
they never construct storage or agents themselves.
"""

from datetime import date
from pathlib import Path
from typing import Optional

import structlog

from investtrack.agents import InsightsAgent, InsightsError
from investtrack.audit import AuditLogger, create_correlation_id
from investtrack.auth import AuthenticationError, SessionManager
from investtrack.models.audit import AuditEventBuilder
from investtrack.models.portfolio import AIAnalysisResult, AppState
from investtrack.security import AppLock
from investtrack.services.backup import (
    CSV_FILENAME,
    BackupFormatError,
    backup_filename,
    export_backup,
    export_transactions_csv,
    parse_backup,
)
from investtrack.services.storage import (
    AppDataRepository,
    InMemoryStorage,
    KeyValueStorageInterface,
    LocalFileStorage,
)
from investtrack.store import PortfolioStore


logger = structlog.get_logger(__name__)


class SessionFlow:
    """
    Orchestrates sign-in and sign-out.

    Flow:
    1. Login → credentials checked, session keys written
    2. Open → the user's saved portfolio is loaded (or starts empty)
    3. Lock → if app lock is enabled, the session starts locked
    4. Logout → session keys removed
    """

    def __init__(
        self,
        sessions: SessionManager,
        repository: AppDataRepository,
        audit_logger: AuditLogger,
    ):
        self._sessions = sessions
        self._repository = repository
        self._audit_logger = audit_logger

    @property
    def current_user(self) -> Optional[str]:
        return self._sessions.current_user()

    def login(self, email: str, password: str) -> PortfolioStore:
        """
        Sign in and open the user's portfolio.

        Raises:
            AuthenticationError: With the message to display
        """
        self._audit_logger.correlation_id = create_correlation_id()
        user_id = self._sessions.login(email, password)
        return self.open_portfolio(user_id)

    def restore(self) -> Optional[PortfolioStore]:
        """Reopen the portfolio of a user still signed in from a previous run."""
        user_id = self._sessions.current_user()
        if user_id is None:
            return None
        if self._audit_logger.correlation_id is None:
            self._audit_logger.correlation_id = create_correlation_id()
        return self.open_portfolio(user_id)

    def open_portfolio(self, user_id: str) -> PortfolioStore:
        return PortfolioStore.open(user_id, self._repository, self._audit_logger)

    def create_lock(self, store: PortfolioStore) -> AppLock:
        """A lock for a freshly opened portfolio: locked when lock is enabled."""
        security = store.state.security
        return AppLock(
            pin=security.pin,
            locked=security.enabled,
            audit_logger=self._audit_logger,
        )

    def logout(self) -> None:
        self._sessions.logout()
        self._audit_logger.correlation_id = None


class DataTransferFlow:
    """
    Orchestrates backups and exports.

    Import replaces the whole local dataset, so the file is parsed and
    validated completely before the store is touched.
    """

    def __init__(self, audit_logger: AuditLogger):
        self._audit_logger = audit_logger

    def export_backup(
        self,
        store: PortfolioStore,
        on: Optional[date] = None,
    ) -> tuple[str, str]:
        """
        Produce a backup file without recording it as taken.

        Returns:
            (filename, json_content)
        """
        return backup_filename(on), export_backup(store.state)

    def record_backup_downloaded(self, store: PortfolioStore, filename: str) -> None:
        """Stamp the last-backup time once the file has actually been downloaded."""
        self._audit_logger.log(AuditEventBuilder.backup_exported(filename, store.counts()))
        store.record_backup()

    def import_backup(self, store: PortfolioStore, content) -> AppState:
        """
        Replace local data with a backup file.

        Raises:
            BackupFormatError: If the file is rejected; nothing is changed
        """
        try:
            state = parse_backup(content)
        except BackupFormatError as e:
            self._audit_logger.log(AuditEventBuilder.backup_rejected(str(e)))
            raise
        store.replace_state(state)
        return state

    def export_csv(self, store: PortfolioStore) -> tuple[str, str]:
        """
        Returns:
            (filename, csv_content)
        """
        return CSV_FILENAME, export_transactions_csv(store.state)


class InsightsFlow:
    """Runs the AI analysis for the signed-in user's portfolio."""

    def __init__(self, agent: InsightsAgent):
        self._agent = agent

    @property
    def is_available(self) -> bool:
        return self._agent.is_available

    async def analyze(self, store: PortfolioStore) -> AIAnalysisResult:
        """
        Raises:
            InsightsError: Whose message is the generic banner text
        """
        return await self._agent.generate_insights(store.state)


def create_app_components(
    data_dir: Optional[Path] = None,
    use_memory: bool = False,
    storage: Optional[KeyValueStorageInterface] = None,
    insights_agent: Optional[InsightsAgent] = None,
) -> tuple[SessionFlow, DataTransferFlow, InsightsFlow]:
    """
    Factory function to create all application components.

    Args:
        data_dir: Where the file backend keeps its data
        use_memory: Keep everything in memory (nothing survives a restart)
        storage: A ready key/value backend; overrides the two options above
        insights_agent: A preconfigured agent (tests pass one with a fake model)

    Returns:
        (session_flow, data_transfer_flow, insights_flow)
    """
    audit_logger = AuditLogger()

    if storage is None:
        storage = InMemoryStorage() if use_memory else LocalFileStorage(data_dir)
    logger.info(
        "app_components_created",
        storage_backend=type(storage).__name__,
    )

    repository = AppDataRepository(storage, audit_logger=audit_logger)
    sessions = SessionManager(storage, audit_logger=audit_logger)

    session_flow = SessionFlow(sessions, repository, audit_logger)
    transfer_flow = DataTransferFlow(audit_logger)
    insights_flow = InsightsFlow(
        insights_agent or InsightsAgent(audit_logger=audit_logger)
    )

    return session_flow, transfer_flow, insights_flow


__all__ = [
    "AuthenticationError",
    "BackupFormatError",
    "DataTransferFlow",
    "InsightsError",
    "InsightsFlow",
    "SessionFlow",
    "create_app_components",
]
