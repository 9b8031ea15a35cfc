"""PIN app lock and idle auto-lock."""

from investtrack.security.lock import (
    INCORRECT_PIN,
    PIN_MISMATCH,
    AppLock,
    IdleTimer,
    LockState,
    PinEntryResult,
    lock_if_idle,
)

__all__ = [
    "INCORRECT_PIN",
    "PIN_MISMATCH",
    "AppLock",
    "IdleTimer",
    "LockState",
    "PinEntryResult",
    "lock_if_idle",
]
