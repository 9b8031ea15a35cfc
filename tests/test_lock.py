"""Tests for the PIN app lock and idle auto-lock."""

import pytest

from investtrack.models.audit import AuditEventType
from investtrack.models.portfolio import SecuritySettings
from investtrack.security import (
    INCORRECT_PIN,
    PIN_MISMATCH,
    AppLock,
    IdleTimer,
    LockState,
    lock_if_idle,
)


def enter(app_lock, digits):
    result = None
    for digit in digits:
        result = app_lock.press(digit)
    return result


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestUnlock:

    def test_correct_pin_unlocks(self):
        app_lock = AppLock(pin="1234", locked=True)
        result = enter(app_lock, "1234")
        assert result.state is LockState.UNLOCKED
        assert result.error is None

    def test_wrong_pin_clears_entry(self, audit_logger):
        app_lock = AppLock(pin="1234", locked=True, audit_logger=audit_logger)
        result = enter(app_lock, "9999")
        assert result.state is LockState.LOCKED
        assert result.error == INCORRECT_PIN
        assert result.digits_entered == 0
        assert audit_logger.recent_events[0].event_type is AuditEventType.PIN_REJECTED

    def test_fourth_digit_submits(self):
        app_lock = AppLock(pin="1234", locked=True)
        assert enter(app_lock, "123").state is LockState.LOCKED
        assert app_lock.digits_entered == 3
        assert app_lock.press("4").state is LockState.UNLOCKED

    def test_delete_removes_last_digit(self):
        app_lock = AppLock(pin="1234", locked=True)
        enter(app_lock, "129")
        app_lock.delete()
        assert app_lock.digits_entered == 2
        assert enter(app_lock, "34").state is LockState.UNLOCKED

    def test_next_press_clears_error(self):
        app_lock = AppLock(pin="1234", locked=True)
        enter(app_lock, "0000")
        assert app_lock.press("1").error is None

    def test_non_digit_rejected(self):
        with pytest.raises(ValueError):
            AppLock(pin="1234", locked=True).press("a")


class TestSetup:

    def test_two_matching_entries_commit(self):
        app_lock = AppLock()
        app_lock.begin_setup()

        first = enter(app_lock, "4321")
        assert first.state is LockState.SETUP_CONFIRM
        assert first.committed_pin is None

        second = enter(app_lock, "4321")
        assert second.state is LockState.UNLOCKED
        assert second.committed_pin == "4321"

    def test_mismatch_resets_to_first_step(self):
        app_lock = AppLock()
        app_lock.begin_setup()
        enter(app_lock, "4321")

        result = enter(app_lock, "1111")

        assert result.state is LockState.SETUP_FIRST_ENTRY
        assert result.error == PIN_MISMATCH
        assert result.committed_pin is None

        # The first entry was forgotten: the old PIN no longer confirms
        assert enter(app_lock, "1111").state is LockState.SETUP_CONFIRM
        assert enter(app_lock, "1111").committed_pin == "1111"

    def test_cancel_commits_nothing(self):
        app_lock = AppLock(pin="1234")
        app_lock.begin_setup()
        enter(app_lock, "99")
        app_lock.cancel_setup()
        assert app_lock.state is LockState.UNLOCKED

        app_lock.lock()
        assert enter(app_lock, "1234").state is LockState.UNLOCKED

    def test_committed_pin_unlocks_later(self):
        app_lock = AppLock()
        app_lock.begin_setup()
        enter(app_lock, "5555")
        enter(app_lock, "5555")
        app_lock.lock()
        assert enter(app_lock, "5555").state is LockState.UNLOCKED

    def test_presses_ignored_when_unlocked(self):
        app_lock = AppLock(pin="1234")
        assert app_lock.press("1").digits_entered == 0


class TestIdleLock:

    def test_expires_after_minutes(self):
        clock = FakeClock()
        timer = IdleTimer(clock)
        clock.now += 4 * 60
        assert not timer.expired(5)
        clock.now += 60
        assert timer.expired(5)

    def test_zero_minutes_never_expires(self):
        clock = FakeClock()
        timer = IdleTimer(clock)
        clock.now += 10 ** 6
        assert not timer.expired(0)

    def test_touch_resets(self):
        clock = FakeClock()
        timer = IdleTimer(clock)
        clock.now += 10 * 60
        timer.touch()
        assert timer.idle_seconds == 0

    def test_lock_if_idle(self, audit_logger):
        clock = FakeClock()
        timer = IdleTimer(clock)
        app_lock = AppLock(pin="1234", audit_logger=audit_logger)
        security = SecuritySettings(enabled=True, pin="1234", auto_lock_minutes=1)

        assert lock_if_idle(app_lock, timer, security) is False
        clock.now += 61
        assert lock_if_idle(app_lock, timer, security) is True
        assert app_lock.state is LockState.LOCKED
        assert audit_logger.recent_events[0].details == {"reason": "idle"}

    def test_no_idle_lock_when_disabled(self):
        clock = FakeClock()
        timer = IdleTimer(clock)
        app_lock = AppLock(pin="1234")
        clock.now += 3600
        security = SecuritySettings(enabled=False, pin="1234", auto_lock_minutes=1)
        assert lock_if_idle(app_lock, timer, security) is False
        assert app_lock.state is LockState.UNLOCKED

    def test_no_idle_lock_during_setup(self):
        clock = FakeClock()
        timer = IdleTimer(clock)
        app_lock = AppLock(pin="1234")
        app_lock.begin_setup()
        clock.now += 3600
        security = SecuritySettings(enabled=True, pin="1234", auto_lock_minutes=1)
        assert lock_if_idle(app_lock, timer, security) is False
