"""
Form Validation Models

Results of checking user-entered form values before they reach the store.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single problem with one form field."""

    field: str = Field(
        ...,
        description="Form field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form submission."""

    form: str = Field(
        ...,
        description="Which form was validated"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def hint(self) -> Optional[str]:
        """The single message shown when submission is blocked."""
        if self.is_valid:
            return None
        return "Please fill in all required fields."

    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]
