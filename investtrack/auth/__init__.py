"""Simulated sign-in and session persistence."""

from investtrack.auth.session import (
    AUTH_FLAG_KEY,
    USER_EMAIL_KEY,
    AuthenticationError,
    SessionManager,
)

__all__ = [
    "AUTH_FLAG_KEY",
    "USER_EMAIL_KEY",
    "AuthenticationError",
    "SessionManager",
]
