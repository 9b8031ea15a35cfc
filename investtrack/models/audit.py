"""
Audit Models for InvestTrack

Every change to a user's portfolio is logged for audit purposes.
This provides:
1. Traceability of every create, update and cascading delete
2. Debugging information when storage or the AI service fails
3. A record of lock, unlock and login activity

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutation the state container exposes has its own event type.
    """
    # Session
    USER_LOGGED_IN = "user_logged_in"
    USER_LOGGED_OUT = "user_logged_out"
    LOGIN_REJECTED = "login_rejected"
    DATA_LOADED = "data_loaded"

    # Records
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    FUNDS_ADDED = "funds_added"

    # Settings
    SETTINGS_UPDATED = "settings_updated"

    # Backup
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_IMPORTED = "backup_imported"
    BACKUP_REJECTED = "backup_rejected"

    # App lock
    APP_LOCKED = "app_locked"
    APP_UNLOCKED = "app_unlocked"
    PIN_REJECTED = "pin_rejected"

    # AI insights
    INSIGHTS_GENERATED = "insights_generated"
    INSIGHTS_FAILED = "insights_failed"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'customer', 'investment', 'payment')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one signed-in session"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added("customer", customer.id, customer.name)
        event = AuditEventBuilder.funds_added(investment.id, payment.id, "5000")
    """

    @staticmethod
    def user_logged_in(
        email: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            entity_type="session",
            entity_id=email,
            correlation_id=correlation_id,
            description=f"Signed in as {email}",
            is_user_action=True,
        )

    @staticmethod
    def user_logged_out(
        email: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            entity_type="session",
            entity_id=email,
            correlation_id=correlation_id,
            description=f"Signed out {email}",
            is_user_action=True,
        )

    @staticmethod
    def login_rejected(
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            correlation_id=correlation_id,
            description="Sign-in rejected",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def data_loaded(
        user_id: str,
        found: bool,
        counts: dict[str, int],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOADED,
            entity_type="state",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=(
                "Loaded saved portfolio" if found else "No saved portfolio, starting empty"
            ),
            details={"found": found, **counts},
        )

    @staticmethod
    def record_added(
        entity_type: str,
        entity_id: str,
        label: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} added: {label}",
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        entity_type: str,
        entity_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            severity=AuditSeverity.INFO if found else AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=(
                f"{entity_type.capitalize()} updated"
                if found
                else f"{entity_type.capitalize()} update ignored: not found"
            ),
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        entity_type: str,
        entity_id: str,
        removed: dict[str, int],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        total = sum(removed.values())
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} deleted ({total} records removed)",
            details={"removed": removed},
            is_user_action=True,
        )

    @staticmethod
    def funds_added(
        investment_id: str,
        payment_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FUNDS_ADDED,
            entity_type="investment",
            entity_id=investment_id,
            correlation_id=correlation_id,
            description=f"Additional funds given: {amount}",
            details={
                "payment_id": payment_id,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def settings_updated(
        section: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            entity_id=section,
            correlation_id=correlation_id,
            description=f"{section.capitalize()} settings updated",
            details=changes,
            is_user_action=True,
        )

    @staticmethod
    def backup_exported(
        filename: str,
        counts: dict[str, int],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_EXPORTED,
            entity_type="backup",
            entity_id=filename,
            correlation_id=correlation_id,
            description=f"Backup exported: {filename}",
            details=counts,
            is_user_action=True,
        )

    @staticmethod
    def backup_imported(
        counts: dict[str, int],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_IMPORTED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            correlation_id=correlation_id,
            description="Local data replaced from backup file",
            details=counts,
            is_user_action=True,
        )

    @staticmethod
    def backup_rejected(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            correlation_id=correlation_id,
            description="Backup file rejected",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def app_locked(
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.APP_LOCKED,
            entity_type="lock",
            correlation_id=correlation_id,
            description=f"App locked ({reason})",
            details={"reason": reason},
        )

    @staticmethod
    def app_unlocked(
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.APP_UNLOCKED,
            entity_type="lock",
            correlation_id=correlation_id,
            description="App unlocked with PIN",
            is_user_action=True,
        )

    @staticmethod
    def pin_rejected(
        stage: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PIN_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="lock",
            correlation_id=correlation_id,
            description=f"PIN rejected during {stage}",
            details={"stage": stage},
            is_user_action=True,
        )

    @staticmethod
    def insights_generated(
        investment_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHTS_GENERATED,
            entity_type="insights",
            correlation_id=correlation_id,
            description=f"AI insights generated for {investment_count} investments",
            details={"investment_count": investment_count},
            is_user_action=True,
        )

    @staticmethod
    def insights_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHTS_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="insights",
            correlation_id=correlation_id,
            description="AI insights request failed",
            error_message=error_message,
        )

    @staticmethod
    def storage_error(
        operation: str,
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Storage {operation} failed",
            error_message=error_message,
            details={"operation": operation},
        )
