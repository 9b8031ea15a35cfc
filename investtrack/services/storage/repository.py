"""
App Data Repository

Persists one user's complete AppState as a single JSON document.

DESIGN DECISION: Storage problems never reach the user.
- A failed read (missing key, unreadable file, bad JSON, wrong shape)
  is logged and reported as "no data", so the app cold-starts empty.
- A failed write is logged and reported through the return value.

There is no schema versioning. The only migration is that records
written before the settings objects existed get default settings.
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from investtrack.audit import AuditLogger
from investtrack.config import get_settings
from investtrack.models.audit import AuditEventBuilder
from investtrack.models.portfolio import AppState
from investtrack.services.storage.interface import KeyValueStorageInterface, StorageError


logger = structlog.get_logger(__name__)


class AppDataRepository:
    """Saves and loads AppState snapshots keyed by user identifier."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key_prefix: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._key_prefix = key_prefix or get_settings().storage.data_key_prefix
        self._audit_logger = audit_logger

    def key_for(self, user_id: str) -> str:
        """Storage key holding a user's data."""
        return f"{self._key_prefix}{user_id}"

    def _report_failure(self, operation: str, key: str, error: Exception) -> None:
        logger.error(
            "storage_operation_failed",
            operation=operation,
            key=key,
            error=str(error),
        )
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.storage_error(
                operation=operation,
                key=key,
                error_message=str(error),
            ))

    def save(self, user_id: str, state: AppState) -> bool:
        """
        Serialize and write the full state.

        Returns:
            True if written, False if skipped (no user) or failed
        """
        if not user_id:
            return False

        key = self.key_for(user_id)
        try:
            self._storage.set_item(key, state.to_json())
        except StorageError as e:
            self._report_failure("save", key, e)
            return False
        return True

    def load(self, user_id: str) -> Optional[AppState]:
        """
        Read and parse a user's state.

        Returns:
            The stored state, or None if absent or unreadable
        """
        if not user_id:
            return None

        key = self.key_for(user_id)
        try:
            text = self._storage.get_item(key)
            if not text:
                return None
            return AppState.from_json(text)
        except (StorageError, ValidationError) as e:
            self._report_failure("load", key, e)
            return None

    def has_data(self, user_id: str) -> bool:
        """Check whether anything is stored for a user."""
        if not user_id:
            return False
        try:
            return bool(self._storage.get_item(self.key_for(user_id)))
        except StorageError as e:
            self._report_failure("read", self.key_for(user_id), e)
            return False
