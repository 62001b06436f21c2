"""
Charge request validation with categorized issue codes.

Before a charge is routed to a bank, we verify:
  1. Amount is present, a positive integer, and not absurdly large
  2. Currency is present and one we support
  3. Bank id is present (whether it is registered is the factory's call)
  4. Customer email, when given, looks like an email

Every check that fails records an issue; the service rejects the request
on the first one.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from gateway.models.enums import Currency, enum_value
from gateway.models.payment import PaymentRequest

MAX_AMOUNT = 999_999_999

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    code: str


@dataclass
class ValidationResult:
    """Result of validating one request."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def first(self) -> Optional[ValidationIssue]:
        return self.issues[0] if self.issues else None


def _check_amount(amount) -> Optional[ValidationIssue]:
    if amount is None:
        return ValidationIssue("amount", "Amount is required", "AMOUNT_REQUIRED")
    # bool is an int subclass; True is not one cent
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        return ValidationIssue("amount", f"Invalid amount: {amount}", "INVALID_AMOUNT")
    if amount > MAX_AMOUNT:
        return ValidationIssue("amount", f"Amount too large: {amount}", "AMOUNT_TOO_LARGE")
    return None


def _check_currency(currency) -> Optional[ValidationIssue]:
    if not currency:
        return ValidationIssue("currency", "Currency required", "CURRENCY_REQUIRED")
    if enum_value(currency) not in {c.value for c in Currency}:
        return ValidationIssue("currency", f"Invalid currency: {enum_value(currency)}", "INVALID_CURRENCY")
    return None


def validate_request(request: PaymentRequest) -> ValidationResult:
    """
    Validate a charge request.

    Args:
        request: The unified request as the caller sent it.

    Returns:
        ValidationResult listing every issue found, in check order.
    """
    result = ValidationResult()

    for issue in (_check_amount(request.amount), _check_currency(request.currency)):
        if issue:
            result.issues.append(issue)

    if not request.bank_id:
        result.issues.append(ValidationIssue("bank_id", "Bank id required", "BANK_ID_REQUIRED"))

    customer = request.customer_details
    if customer and customer.email is not None and not EMAIL_RE.match(customer.email):
        result.issues.append(
            ValidationIssue("customer_details.email", f"Invalid email: {customer.email}", "INVALID_EMAIL")
        )

    return result
