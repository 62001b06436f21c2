"""
Abstract payment processor interface.

All bank adapters (Stripe, PayPal, Square, Adyen, Braintree) implement this
interface. Each one wraps a simulated bank that speaks its own wire format;
in production the simulator would be replaced by the bank's real API.
"""

from abc import ABC, abstractmethod
from typing import Optional

from gateway.config import settings
from gateway.models.enums import BankId
from gateway.models.payment import BankConfig, PaymentRequest, PaymentResponse, ProcessorInfo
from gateway.processors.support import latency_for


class PaymentProcessor(ABC):
    """Contract every bank adapter satisfies."""

    bank_id: BankId

    def __init__(self, config: BankConfig, latency_ms: Optional[int] = None):
        self.config = config
        if latency_ms is None:
            latency_ms = latency_for(self.bank_id) if settings.simulate_latency else 0
        self.latency_ms = latency_ms

    @abstractmethod
    async def charge(self, request: PaymentRequest) -> PaymentResponse:
        """
        Charge through this bank.

        Never raises: declines, transport errors and timeouts all come back
        as a FAILED (or TIMEOUT) response.
        """
        ...

    @abstractmethod
    def get_display_name(self) -> str:
        ...

    @abstractmethod
    def get_processor_info(self) -> ProcessorInfo:
        ...

    def can_process(self, request: PaymentRequest) -> bool:
        return request.bank_id == self.bank_id and self.config.enabled

    def __repr__(self) -> str:
        state = "enabled" if self.config.enabled else "disabled"
        return f"<{type(self).__name__} {self.bank_id.value} {state}>"
