"""Form validation."""

from investtrack.validation.validator import FormValidator

__all__ = ["FormValidator"]
