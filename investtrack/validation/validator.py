"""
Form Validation

DESIGN DECISION: Forms are checked here before anything reaches the
store. The store itself trusts its input and never reports failure, so
this is the only place a bad submission can be stopped.

Validation NEVER silently fixes values. It reports what is wrong and the
page decides whether to submit.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from investtrack.models.validation import ValidationIssue, ValidationResult


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class FormValidator:
    """
    Checks the required fields of each entry form.

    - Customer: name and phone
    - Investment: title, customer and a positive principal
    - Payment: a positive amount
    - Add funds: a positive amount
    """

    def _require_text(
        self,
        issues: list[ValidationIssue],
        field: str,
        value: Optional[str],
    ) -> None:
        if _is_blank(value):
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field.replace('_', ' ').capitalize()} is required",
            ))

    def _require_positive(
        self,
        issues: list[ValidationIssue],
        field: str,
        value: Any,
    ) -> None:
        amount = _to_decimal(value)
        if amount is None:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field.replace('_', ' ').capitalize()} is required",
            ))
        elif not amount.is_finite() or amount <= 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{field.replace('_', ' ').capitalize()} must be greater than zero",
            ))

    def validate_customer(
        self,
        name: Optional[str],
        phone: Optional[str],
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._require_text(issues, "name", name)
        self._require_text(issues, "phone", phone)
        return ValidationResult(form="customer", issues=issues)

    def validate_investment(
        self,
        title: Optional[str],
        customer_id: Optional[str],
        amount: Any,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._require_text(issues, "title", title)
        self._require_text(issues, "customer_id", customer_id)
        self._require_positive(issues, "amount", amount)
        return ValidationResult(form="investment", issues=issues)

    def validate_payment(self, amount: Any) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._require_positive(issues, "amount", amount)
        return ValidationResult(form="payment", issues=issues)

    def validate_funds(self, amount: Any) -> ValidationResult:
        issues: list[ValidationIssue] = []
        self._require_positive(issues, "amount", amount)
        return ValidationResult(form="add_funds", issues=issues)
