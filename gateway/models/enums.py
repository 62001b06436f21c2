"""Enumerations for the payment gateway domain model."""

from enum import Enum


class BankId(str, Enum):
    """Banks the gateway can route a charge to, in registration order."""

    STRIPE = "stripe"  # REST JSON
    PAYPAL = "paypal"  # SOAP/XML
    SQUARE = "square"  # REST with custom headers
    ADYEN = "adyen"  # HMAC-signed REST
    BRAINTREE = "braintree"  # GraphQL


BANK_DISPLAY_NAMES: dict[BankId, str] = {
    BankId.STRIPE: "Stripe",
    BankId.PAYPAL: "PayPal",
    BankId.SQUARE: "Square Payments",
    BankId.ADYEN: "Adyen Global Payments",
    BankId.BRAINTREE: "Braintree Payments (PayPal)",
}


class Currency(str, Enum):
    """Currencies supported consistently across all processors."""

    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    AUD = "AUD"
    CAD = "CAD"


class PaymentStatus(str, Enum):
    """Unified status every bank vocabulary is mapped onto."""

    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"


class ErrorCode(str, Enum):
    """Gateway-level error codes (bank-native codes are passed through as-is)."""

    INVALID_REQUEST = "INVALID_REQUEST"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    PROCESSING_ERROR = "PROCESSING_ERROR"


class HealthStatus(str, Enum):
    """Health states for processors and the gateway as a whole."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    DISABLED = "disabled"


class Protocol(str, Enum):
    """Wire protocol family a processor speaks."""

    REST = "REST"
    SOAP = "SOAP"
    GRAPHQL = "GraphQL"
    CUSTOM = "Custom"


def enum_value(value):
    """Plain value of an enum member; anything else is returned unchanged."""
    return value.value if isinstance(value, Enum) else value


def coerce_bank_id(value):
    """
    Convert a raw bank identifier to ``BankId`` when it names a known bank.

    Unknown values are returned as-is so they can still be echoed back on a
    failed response.
    """
    if isinstance(value, BankId) or value is None:
        return value
    try:
        return BankId(value)
    except ValueError:
        return value


def coerce_currency(value):
    """Same as ``coerce_bank_id`` for currencies."""
    if isinstance(value, Currency) or value is None:
        return value
    try:
        return Currency(value)
    except ValueError:
        return value
