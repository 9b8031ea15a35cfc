"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. User can see a history of their recent activity

The audit logger:
- Is synchronous, like the state container that calls it
- Stamps the session correlation ID on every event
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from investtrack.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and keeps the most recent
    ones in memory for the Settings page.
    """

    def __init__(
        self,
        correlation_id: Optional[UUID] = None,
        history_size: int = 50,
    ):
        """
        Initialize audit logger.

        Args:
            correlation_id: Stamped on events that don't carry one.
            history_size: How many recent events to keep in memory.
        """
        self.correlation_id = correlation_id
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("investtrack.audit")

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Recent events, newest first."""
        return list(reversed(self._history))

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        if event.correlation_id is None and self.correlation_id is not None:
            event = event.model_copy(update={"correlation_id": self.correlation_id})

        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity is AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity is AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this when a user signs in. Pass it to the AuditLogger
    for the lifetime of that session.
    """
    return uuid4()
