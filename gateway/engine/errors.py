"""
Exception hierarchy for the gateway.

Every exception carries the gateway-level error code it maps to, so the
payment service can turn any of them into a FAILED response without a
lookup table. Bank adapters never let these escape a charge; the service's
outer catch is only a backstop.
"""

from typing import Iterable, Optional

from gateway.models.enums import ErrorCode, enum_value


class GatewayError(Exception):
    """Base exception for gateway errors."""

    error_code: ErrorCode = ErrorCode.PROCESSING_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestValidationError(GatewayError):
    """The caller sent a malformed charge request."""

    error_code = ErrorCode.INVALID_REQUEST

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = issues or []


class UnsupportedBankError(RequestValidationError):
    """Bank identifier is not registered with the factory."""

    def __init__(self, bank_id, available: Iterable):
        self.bank_id = bank_id
        self.available = [enum_value(b) for b in available]
        super().__init__(
            f"Unsupported bank: {enum_value(bank_id)}. Available: {', '.join(self.available)}"
        )


class BankDisabledError(GatewayError):
    """Bank is registered but currently disabled."""

    error_code = ErrorCode.SERVICE_UNAVAILABLE

    def __init__(self, bank_id):
        self.bank_id = bank_id
        super().__init__(f"Bank disabled: {enum_value(bank_id)}")


class ProcessorNotFoundError(GatewayError):
    """Management call named a processor that does not exist."""

    error_code = ErrorCode.INVALID_REQUEST

    def __init__(self, bank_id):
        self.bank_id = bank_id
        super().__init__(f"Processor not found: {enum_value(bank_id)}")


class NoProcessorsAvailableError(GatewayError):
    """No enabled processor is eligible for selection."""

    error_code = ErrorCode.SERVICE_UNAVAILABLE

    def __init__(self, message: str = "No processors available"):
        super().__init__(message)


class ProviderError(Exception):
    """
    Failure talking to a bank (the whole call failed).

    ``code_suffix`` is appended to the bank name to form the response's
    error code, e.g. ``STRIPE_API_ERROR``.
    """

    code_suffix = "API_ERROR"

    def __init__(self, message: str, status_code: int = 500, retriable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.retriable = retriable


class SignatureError(ProviderError):
    """Outbound payload could not be signed. Retrying cannot fix a bad key."""

    code_suffix = "SIGNATURE_ERROR"

    def __init__(self, message: str):
        super().__init__(message, status_code=400, retriable=False)
