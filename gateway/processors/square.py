"""
Square payment processor (REST with custom headers).

Square wants its API version and an idempotency key in headers, and the
key must also appear in the body. Charges above a configurable threshold
carry a platform ``app_fee_money``.
"""

import logging
import time
import uuid
from typing import Any, Optional

from gateway.banks.square import SquareSimulator
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

logger = logging.getLogger("gateway.processors.square")

SQUARE_VERSION = "2023-10-18"

STATUS_MAP: dict[str, PaymentStatus] = {
    "COMPLETED": PaymentStatus.SUCCESS,
    "APPROVED": PaymentStatus.PENDING,
    "PENDING": PaymentStatus.PENDING,
    "CANCELED": PaymentStatus.CANCELLED,
    "FAILED": PaymentStatus.FAILED,
}


def build_idempotency_key(reference_id: Optional[str], issued_at_ms: int, max_length: int = 45) -> str:
    """
    Square caps idempotency keys at 45 characters.

    Only the reference is shortened; the timestamp suffix always survives
    so retries of one reference at different times get different keys.
    """
    suffix = f"-{issued_at_ms}"
    base = str(reference_id or uuid.uuid4())
    return f"{base[:max(max_length - len(suffix), 0)]}{suffix}"


class SquareProcessor(PaymentProcessor):
    bank_id = BankId.SQUARE

    def __init__(
        self,
        bank: Optional[SquareSimulator] = None,
        config: Optional[BankConfig] = None,
        latency_ms: Optional[int] = None,
    ):
        super().__init__(config or bank_config(BankId.SQUARE), latency_ms)
        self._bank = bank or SquareSimulator()

    def get_display_name(self) -> str:
        return BANK_DISPLAY_NAMES[BankId.SQUARE]

    def get_processor_info(self) -> ProcessorInfo:
        return ProcessorInfo(
            name="Square",
            display_name=self.get_display_name(),
            protocol=Protocol.CUSTOM,
            features=("card_processing", "idempotency", "app_fees", "risk_evaluation"),
            supported_currencies=tuple(Currency),
            average_processing_time_ms=latency_for(self.bank_id),
            api_version=SQUARE_VERSION,
        )

    async def charge(self, request: PaymentRequest) -> PaymentResponse:
        return await execute_charge(self, request, self._exchange)

    async def _exchange(self, request: PaymentRequest, started: float) -> PaymentResponse:
        body = self.build_request(request, int(time.time() * 1000))
        headers = self.build_headers(body)
        logger.debug("Square request body: %s", body)

        await simulate_latency(self.latency_ms)
        result = self._bank.create_payment(body, headers)
        return self.map_response(result, request, started)

    def build_headers(self, body: dict[str, Any]) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "Square-Version": SQUARE_VERSION,
            "Idempotency-Key": body["idempotency_key"],
        }

    def build_request(self, request: PaymentRequest, issued_at_ms: int) -> dict[str, Any]:
        opts = self.config.options
        currency = str(enum_value(request.currency))
        customer = request.customer_details
        body: dict[str, Any] = {
            "idempotency_key": build_idempotency_key(
                request.reference_id, issued_at_ms, opts.get("idempotency_key_max_length", 45)
            ),
            "source_id": "cnon:card-nonce-ok",
            "amount_money": {"amount": request.amount, "currency": currency},
            "location_id": opts.get("location_id"),
            "reference_id": request.reference_id,
            "note": request.description,
            "buyer_email_address": customer.email if customer else None,
            "autocomplete": True,
        }

        threshold = opts.get("app_fee_threshold")
        if threshold is not None and request.amount > threshold:
            body["app_fee_money"] = {
                "amount": round(request.amount * opts.get("app_fee_rate", 0.01)),
                "currency": currency,
            }
        return compact(body)

    def map_response(self, result: dict[str, Any], request: PaymentRequest, started: float) -> PaymentResponse:
        processing_time_ms = elapsed_ms(started)
        payment = result.get("payment")
        errors = result.get("errors") or []

        if payment is None:
            # Rejected before a payment was created (auth, headers, idempotency)
            first = errors[0] if errors else {}
            return error_response(
                request,
                first.get("detail") or "Square API request failed",
                first.get("code") or "SQUARE_API_ERROR",
                processing_time_ms=processing_time_ms,
                bank_specific_data=compact({"errorCategory": first.get("category"), "errors": errors or None}),
            )

        card_details = payment.get("card_details") or {}
        card = card_details.get("card") or {}
        fees = payment.get("processing_fee") or []
        data = compact(
            {
                "originalTransactionId": payment.get("id"),
                "squarePaymentId": payment.get("id"),
                "bankStatusCode": payment.get("status"),
                "locationId": payment.get("location_id"),
                "receiptNumber": payment.get("receipt_number"),
                "receiptUrl": payment.get("receipt_url"),
                "cardBrand": card.get("card_brand"),
                "cardLast4": card.get("last_4"),
                "cvvStatus": card_details.get("cvv_status"),
                "avsStatus": card_details.get("avs_status"),
                "processingFee": fees[0].get("amount_money") if fees else None,
                "appFeeMoney": payment.get("app_fee_money"),
                "riskLevel": (payment.get("risk_evaluation") or {}).get("risk_level"),
            }
        )

        status = STATUS_MAP.get(payment.get("status"), PaymentStatus.FAILED)
        if status in (PaymentStatus.SUCCESS, PaymentStatus.PENDING):
            return success_response(request, data, status=status, processing_time_ms=processing_time_ms)

        first = errors[0] if errors else {}
        return build_response(
            request,
            status,
            bank_specific_data=data,
            error_message=first.get("detail") or "Payment failed",
            error_code=first.get("code") or "SQUARE_FAILURE",
            processing_time_ms=processing_time_ms,
        )
