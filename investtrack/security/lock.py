"""
PIN App Lock

A PIN pad gates the whole UI. The same pad is used both to unlock and to
choose a new PIN, so it is modelled as a small state machine:

    LOCKED ---------- correct PIN ----------> UNLOCKED
    UNLOCKED ------- begin_setup() ---------> SETUP_FIRST_ENTRY
    SETUP_FIRST_ENTRY --- 4 digits ---------> SETUP_CONFIRM
    SETUP_CONFIRM ---- same 4 digits -------> UNLOCKED (PIN committed)
    SETUP_CONFIRM ---- different digits ----> SETUP_FIRST_ENTRY
    any setup state --- cancel_setup() -----> UNLOCKED
    UNLOCKED ---------- lock() -------------> LOCKED

Entry auto-submits on the last digit; there is no enter key. The lock
never persists anything itself: a committed PIN is handed back to the
caller, which saves it through the store.
"""

import time
from enum import Enum
from typing import Callable, Optional

import structlog
from pydantic import BaseModel

from investtrack.audit import AuditLogger
from investtrack.config import get_settings
from investtrack.models.audit import AuditEventBuilder
from investtrack.models.portfolio import SecuritySettings


logger = structlog.get_logger(__name__)

INCORRECT_PIN = "Incorrect PIN"
PIN_MISMATCH = "PINs didn't match. Try again."


class LockState(str, Enum):
    LOCKED = "locked"
    SETUP_FIRST_ENTRY = "setup_first_entry"
    SETUP_CONFIRM = "setup_confirm"
    UNLOCKED = "unlocked"


class PinEntryResult(BaseModel):
    """What happened after one key press."""

    state: LockState
    digits_entered: int = 0
    error: Optional[str] = None
    committed_pin: Optional[str] = None


class AppLock:
    """PIN pad state for one session."""

    def __init__(
        self,
        pin: str = "",
        locked: bool = False,
        pin_length: Optional[int] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._pin = pin
        self._pin_length = pin_length or get_settings().app.pin_length
        self._audit_logger = audit_logger or AuditLogger()
        self._state = LockState.LOCKED if locked else LockState.UNLOCKED
        self._entry = ""
        self._first_entry = ""
        self._error: Optional[str] = None

    @property
    def state(self) -> LockState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is LockState.LOCKED

    @property
    def in_setup(self) -> bool:
        return self._state in (LockState.SETUP_FIRST_ENTRY, LockState.SETUP_CONFIRM)

    @property
    def digits_entered(self) -> int:
        return len(self._entry)

    @property
    def pin_length(self) -> int:
        return self._pin_length

    @property
    def error(self) -> Optional[str]:
        """Error from the last submission, cleared by the next key press."""
        return self._error

    def set_pin(self, pin: str) -> None:
        self._pin = pin

    def _result(self, committed_pin: Optional[str] = None) -> PinEntryResult:
        return PinEntryResult(
            state=self._state,
            digits_entered=len(self._entry),
            error=self._error,
            committed_pin=committed_pin,
        )

    def press(self, digit: str) -> PinEntryResult:
        """
        Enter one digit. The last digit submits the entry.

        Raises:
            ValueError: If `digit` is not a single decimal digit
        """
        if len(digit) != 1 or digit not in "0123456789":
            raise ValueError(f"Not a PIN digit: {digit!r}")

        if self._state is LockState.UNLOCKED:
            return self._result()

        self._error = None
        if len(self._entry) < self._pin_length:
            self._entry += digit

        if len(self._entry) < self._pin_length:
            return self._result()

        entered, self._entry = self._entry, ""
        if self._state is LockState.LOCKED:
            return self._submit_unlock(entered)
        return self._submit_setup(entered)

    def delete(self) -> PinEntryResult:
        self._entry = self._entry[:-1]
        return self._result()

    def _submit_unlock(self, entered: str) -> PinEntryResult:
        if entered == self._pin:
            self._state = LockState.UNLOCKED
            self._audit_logger.log(AuditEventBuilder.app_unlocked())
        else:
            self._error = INCORRECT_PIN
            self._audit_logger.log(AuditEventBuilder.pin_rejected("unlock"))
        return self._result()

    def _submit_setup(self, entered: str) -> PinEntryResult:
        if self._state is LockState.SETUP_FIRST_ENTRY:
            self._first_entry = entered
            self._state = LockState.SETUP_CONFIRM
            return self._result()

        if entered == self._first_entry:
            self._first_entry = ""
            self._pin = entered
            self._state = LockState.UNLOCKED
            logger.info("pin_setup_completed")
            return self._result(committed_pin=entered)

        # Mismatch starts setup over
        self._first_entry = ""
        self._state = LockState.SETUP_FIRST_ENTRY
        self._error = PIN_MISMATCH
        self._audit_logger.log(AuditEventBuilder.pin_rejected("setup"))
        return self._result()

    def begin_setup(self) -> None:
        self._entry = ""
        self._first_entry = ""
        self._error = None
        self._state = LockState.SETUP_FIRST_ENTRY

    def cancel_setup(self) -> None:
        if not self.in_setup:
            return
        self._entry = ""
        self._first_entry = ""
        self._error = None
        self._state = LockState.UNLOCKED

    def lock(self, reason: str = "manual") -> None:
        if self._state is LockState.LOCKED:
            return
        self._entry = ""
        self._first_entry = ""
        self._error = None
        self._state = LockState.LOCKED
        self._audit_logger.log(AuditEventBuilder.app_locked(reason))


class IdleTimer:
    """Time since the last user interaction."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._last_activity = clock()

    def touch(self) -> None:
        self._last_activity = self._clock()

    @property
    def idle_seconds(self) -> float:
        return self._clock() - self._last_activity

    def expired(self, auto_lock_minutes: int) -> bool:
        """True once idle for at least the given minutes. Zero never expires."""
        if auto_lock_minutes <= 0:
            return False
        return self.idle_seconds >= auto_lock_minutes * 60


def lock_if_idle(
    app_lock: AppLock,
    timer: IdleTimer,
    security: SecuritySettings,
) -> bool:
    """
    Periodic check: lock the app when auto-lock applies.

    Returns:
        True if this call locked the app
    """
    if not security.enabled or app_lock.state is not LockState.UNLOCKED:
        return False
    if not timer.expired(security.auto_lock_minutes):
        return False
    app_lock.lock(reason="idle")
    return True
