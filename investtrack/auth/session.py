"""
Simulated Sign-In

There is no account server. Any well-formed email with a long enough
password is accepted, and the email becomes the key under which that
user's portfolio is stored. Two session keys in the key/value store
remember who is signed in between runs.
"""

import re
from typing import Optional

import structlog

from investtrack.audit import AuditLogger
from investtrack.config import get_settings
from investtrack.models.audit import AuditEventBuilder
from investtrack.services.storage import KeyValueStorageInterface


logger = structlog.get_logger(__name__)

AUTH_FLAG_KEY = "investTrack_isAuthenticated"
USER_EMAIL_KEY = "investTrack_userEmail"

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")


class AuthenticationError(Exception):
    """Sign-in was rejected. The message is safe to show the user."""
    pass


class SessionManager:
    """Tracks the signed-in user in the key/value store."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._min_password_length = get_settings().app.min_password_length

    def login(self, email: str, password: str) -> str:
        """
        Sign in.

        Args:
            email: Address of the form local@domain
            password: Any text of the minimum length

        Returns:
            The email, which doubles as the storage user id

        Raises:
            AuthenticationError: With the message to display
        """
        email = (email or "").strip()

        # Password length is checked before the email format
        if len(password or "") < self._min_password_length:
            reason = f"Password must be at least {self._min_password_length} characters"
        elif not EMAIL_PATTERN.match(email):
            reason = "Invalid email address"
        else:
            reason = None

        if reason is not None:
            self._audit_logger.log(AuditEventBuilder.login_rejected(reason))
            raise AuthenticationError(reason)

        self._storage.set_item(AUTH_FLAG_KEY, "true")
        self._storage.set_item(USER_EMAIL_KEY, email)
        self._audit_logger.log(AuditEventBuilder.user_logged_in(email))
        return email

    def logout(self) -> None:
        email = self.current_user()
        self._storage.remove_item(AUTH_FLAG_KEY)
        self._storage.remove_item(USER_EMAIL_KEY)
        if email:
            self._audit_logger.log(AuditEventBuilder.user_logged_out(email))
        else:
            logger.debug("logout_without_session")

    def current_user(self) -> Optional[str]:
        """The signed-in email, or None when the session keys are absent."""
        if self._storage.get_item(AUTH_FLAG_KEY) != "true":
            return None
        return self._storage.get_item(USER_EMAIL_KEY) or None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user() is not None
