"""
Stripe payment processor (REST/JSON).

Amounts go out in minor units with a lower-case currency; the response is
either a charge object or an ``{"error": {...}}`` envelope when the API
call itself fails.
"""

import logging
from typing import Any, Optional

from gateway.banks.stripe import StripeSimulator
from gateway.config import bank_config
from gateway.models.enums import BANK_DISPLAY_NAMES, BankId, Currency, PaymentStatus, Protocol, enum_value
from gateway.models.payment import BankConfig, PaymentRequest, PaymentResponse, ProcessorInfo
from gateway.processors.base import PaymentProcessor
from gateway.processors.support import (
    build_response,
    compact,
    elapsed_ms,
    error_response,
    execute_charge,
    latency_for,
    simulate_latency,
    success_response,
)

logger = logging.getLogger("gateway.processors.stripe")

STATUS_MAP: dict[str, PaymentStatus] = {
    "succeeded": PaymentStatus.SUCCESS,
    "pending": PaymentStatus.PENDING,
    "canceled": PaymentStatus.CANCELLED,
    "failed": PaymentStatus.FAILED,
}


class StripeProcessor(PaymentProcessor):
    bank_id = BankId.STRIPE

    def __init__(
        self,
        bank: Optional[StripeSimulator] = None,
        config: Optional[BankConfig] = None,
        latency_ms: Optional[int] = None,
    ):
        super().__init__(config or bank_config(BankId.STRIPE), latency_ms)
        self._bank = bank or StripeSimulator()

    def get_display_name(self) -> str:
        return BANK_DISPLAY_NAMES[BankId.STRIPE]

    def get_processor_info(self) -> ProcessorInfo:
        return ProcessorInfo(
            name="Stripe",
            display_name=self.get_display_name(),
            protocol=Protocol.REST,
            features=("card_processing", "fraud_detection", "3ds_support", "tokenization"),
            supported_currencies=tuple(Currency),
            average_processing_time_ms=latency_for(self.bank_id),
            api_version="2023-10-16",
        )

    async def charge(self, request: PaymentRequest) -> PaymentResponse:
        return await execute_charge(self, request, self._exchange)

    async def _exchange(self, request: PaymentRequest, started: float) -> PaymentResponse:
        body = self.build_request(request)
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        logger.debug("Stripe request body: %s", body)

        await simulate_latency(self.latency_ms)
        charge = self._bank.create_charge(body, headers)
        return self.map_response(charge, request, started)

    def build_request(self, request: PaymentRequest) -> dict[str, Any]:
        customer = request.customer_details
        return compact(
            {
                "amount": request.amount,
                "currency": str(enum_value(request.currency)).lower(),
                "source": "tok_visa",
                "description": request.description,
                "receipt_email": customer.email if customer else None,
                "metadata": {**(request.metadata or {}), "reference_id": request.reference_id or ""},
            }
        )

    def map_response(self, charge: dict[str, Any], request: PaymentRequest, started: float) -> PaymentResponse:
        processing_time_ms = elapsed_ms(started)

        error = charge.get("error")
        if error:
            # The API call itself failed; no charge was created
            return error_response(
                request,
                error.get("message") or "Stripe API request failed",
                error.get("code") or error.get("type") or "STRIPE_API_ERROR",
                processing_time_ms=processing_time_ms,
                bank_specific_data=compact({"errorType": error.get("type")}),
            )

        status = STATUS_MAP.get(charge.get("status"), PaymentStatus.FAILED)
        card = (charge.get("payment_method_details") or {}).get("card") or {}
        data = compact(
            {
                "originalTransactionId": charge.get("id"),
                "stripeChargeId": charge.get("id"),
                "bankStatusCode": charge.get("status"),
                "cardBrand": card.get("brand"),
                "cardLast4": card.get("last4"),
                "outcome": charge.get("outcome"),
            }
        )

        if status in (PaymentStatus.SUCCESS, PaymentStatus.PENDING):
            return success_response(request, data, status=status, processing_time_ms=processing_time_ms)

        return build_response(
            request,
            status,
            bank_specific_data=data,
            error_message=charge.get("failure_message") or "Payment failed",
            error_code=charge.get("failure_code") or "STRIPE_FAILURE",
            processing_time_ms=processing_time_ms,
        )
