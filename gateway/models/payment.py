"""Unified request/response records shared by every processor."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from gateway.models.enums import BankId, Currency, PaymentStatus, Protocol, enum_value


@dataclass(frozen=True)
class CustomerDetails:
    """Optional customer information attached to a charge."""

    id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or None


@dataclass(frozen=True)
class PaymentRequest:
    """
    Unified charge request, identical for every bank.

    ``bank_id`` and ``currency`` are normally enum members, but keep whatever
    the caller sent when it is not a known value so failures can echo it.
    """

    bank_id: Union[BankId, str, None]
    amount: Any  # Smallest currency unit (cents for USD)
    currency: Union[Currency, str, None]
    customer_details: Optional[CustomerDetails] = None
    description: Optional[str] = None
    reference_id: Optional[str] = None  # Correlation hint, not enforced as unique
    metadata: Optional[dict[str, Any]] = None


@dataclass
class PaymentResponse:
    """Unified response returned by every processor and by the service."""

    transaction_id: str
    status: PaymentStatus
    amount: Any
    currency: Union[Currency, str, None]
    bank_id: Union[BankId, str, None]
    timestamp: datetime
    processing_time_ms: int = 0
    bank_specific_data: Optional[dict[str, Any]] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    reference_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == PaymentStatus.SUCCESS


@dataclass
class BankConfig:
    """Per-bank configuration; ``enabled`` is flipped at runtime by management calls."""

    bank_id: BankId
    api_url: str
    api_key: str
    enabled: bool = True
    timeout_ms: Optional[int] = None
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProcessorInfo:
    """Descriptive processor metadata. Only the latency feeds any decision."""

    name: str
    display_name: str
    protocol: Protocol
    features: tuple[str, ...]
    supported_currencies: tuple[Currency, ...]
    average_processing_time_ms: int
    type: str = "card_payment"
    api_version: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "type": self.type,
            "protocol": self.protocol.value,
            "features": list(self.features),
            "supported_currencies": [enum_value(c) for c in self.supported_currencies],
            "average_processing_time_ms": self.average_processing_time_ms,
            "api_version": self.api_version,
        }
