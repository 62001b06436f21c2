from gateway.models.enums import (
    BANK_DISPLAY_NAMES,
    BankId,
    Currency,
    ErrorCode,
    HealthStatus,
    PaymentStatus,
    Protocol,
)
from gateway.models.payment import (
    BankConfig,
    CustomerDetails,
    PaymentRequest,
    PaymentResponse,
    ProcessorInfo,
)

__all__ = [
    "BANK_DISPLAY_NAMES",
    "BankConfig",
    "BankId",
    "Currency",
    "CustomerDetails",
    "ErrorCode",
    "HealthStatus",
    "PaymentRequest",
    "PaymentResponse",
    "PaymentStatus",
    "ProcessorInfo",
    "Protocol",
]
