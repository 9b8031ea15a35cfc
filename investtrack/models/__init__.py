"""
Data Models Package

This package contains all Pydantic models used in InvestTrack.
All data flowing through the system must conform to these schemas.
"""

from investtrack.models.portfolio import (
    AUTO_LOCK_CHOICES,
    AIAnalysisResult,
    AppState,
    BackupFrequency,
    BackupSettings,
    Customer,
    Investment,
    InvestmentStatus,
    LockType,
    Payment,
    PaymentDirection,
    PaymentType,
    SecuritySettings,
    new_id,
)
from investtrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from investtrack.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Portfolio models
    "AUTO_LOCK_CHOICES",
    "AIAnalysisResult",
    "AppState",
    "BackupFrequency",
    "BackupSettings",
    "Customer",
    "Investment",
    "InvestmentStatus",
    "LockType",
    "Payment",
    "PaymentDirection",
    "PaymentType",
    "SecuritySettings",
    "new_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
