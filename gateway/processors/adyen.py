"""
Adyen payment processor (HMAC-signed REST).

Every request is signed with HMAC-SHA256 over the canonical body, the
merchant account and a millisecond timestamp. Card fields go out as
client-side-encrypted blobs, faked here with random bytes.
"""

import base64
import logging
import secrets
import time
from typing import Any, Optional

from gateway.banks.adyen import AdyenSimulator, hmac_signature
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

logger = logging.getLogger("gateway.processors.adyen")

STATUS_MAP: dict[str, PaymentStatus] = {
    "Authorised": PaymentStatus.SUCCESS,
    "Pending": PaymentStatus.PENDING,
    "Received": PaymentStatus.PENDING,
    "Cancelled": PaymentStatus.CANCELLED,
    "Refused": PaymentStatus.FAILED,
    "Error": PaymentStatus.FAILED,
}


def _encrypted(label: str) -> str:
    return f"adyenjs_0_1_25${label}${base64.b64encode(secrets.token_bytes(24)).decode()}"


class AdyenProcessor(PaymentProcessor):
    bank_id = BankId.ADYEN

    def __init__(
        self,
        bank: Optional[AdyenSimulator] = None,
        config: Optional[BankConfig] = None,
        latency_ms: Optional[int] = None,
    ):
        super().__init__(config or bank_config(BankId.ADYEN), latency_ms)
        self._bank = bank or AdyenSimulator(
            hmac_key=self.config.options.get("hmac_key", ""),
            merchant_account=self.config.options.get("merchant_account", ""),
        )

    def get_display_name(self) -> str:
        return BANK_DISPLAY_NAMES[BankId.ADYEN]

    def get_processor_info(self) -> ProcessorInfo:
        return ProcessorInfo(
            name="Adyen",
            display_name=self.get_display_name(),
            protocol=Protocol.REST,
            features=("card_processing", "hmac_signing", "fraud_scoring", "3ds_support"),
            supported_currencies=tuple(Currency),
            average_processing_time_ms=latency_for(self.bank_id),
            api_version="v71",
        )

    async def charge(self, request: PaymentRequest) -> PaymentResponse:
        return await execute_charge(self, request, self._exchange)

    async def _exchange(self, request: PaymentRequest, started: float) -> PaymentResponse:
        body = self.build_request(request)
        headers = self.sign(body, int(time.time() * 1000))
        logger.debug("Adyen request reference=%s signed at %s", body.get("reference"), headers["X-Adyen-Timestamp"])

        await simulate_latency(self.latency_ms)
        result = self._bank.payments(body, headers)
        return self.map_response(result, request, started)

    def sign(self, body: dict[str, Any], timestamp_ms: int) -> dict[str, str]:
        """
        Build the request headers, including the HMAC signature.

        Raises:
            SignatureError: The configured HMAC key is not valid hex.
        """
        opts = self.config.options
        signature = hmac_signature(body, opts.get("merchant_account", ""), timestamp_ms, opts.get("hmac_key", ""))
        return {
            "X-API-Key": self.config.api_key,
            "Content-Type": "application/json",
            "X-Adyen-Hmac-Signature": signature,
            "X-Adyen-Timestamp": str(timestamp_ms),
        }

    def build_request(self, request: PaymentRequest) -> dict[str, Any]:
        customer = request.customer_details
        return compact(
            {
                "amount": {"value": request.amount, "currency": enum_value(request.currency)},
                "reference": request.reference_id or f"REF_{int(time.time() * 1000)}",
                "merchantAccount": self.config.options.get("merchant_account"),
                "paymentMethod": compact(
                    {
                        "type": "scheme",
                        "encryptedCardNumber": _encrypted("number"),
                        "encryptedExpiryMonth": _encrypted("month"),
                        "encryptedExpiryYear": _encrypted("year"),
                        "encryptedSecurityCode": _encrypted("cvc"),
                        "holderName": customer.full_name if customer else None,
                    }
                ),
                "shopperEmail": customer.email if customer else None,
                "shopperReference": customer.id if customer else None,
                "shopperStatement": request.description,
            }
        )

    def map_response(self, result: dict[str, Any], request: PaymentRequest, started: float) -> PaymentResponse:
        processing_time_ms = elapsed_ms(started)

        if "errorType" in result:
            # Rejected at the API layer (auth or signature)
            return error_response(
                request,
                result.get("message") or "Adyen API request failed",
                result.get("errorCode") or "ADYEN_API_ERROR",
                processing_time_ms=processing_time_ms,
                bank_specific_data=compact(
                    {"errorType": result.get("errorType"), "httpStatus": result.get("status")}
                ),
            )

        extra = result.get("additionalData") or {}
        method = result.get("paymentMethod") or {}
        data = compact(
            {
                "originalTransactionId": result.get("pspReference"),
                "pspReference": result.get("pspReference"),
                "bankStatusCode": result.get("resultCode"),
                "resultCode": result.get("resultCode"),
                "authCode": result.get("authCode"),
                "merchantReference": result.get("merchantReference"),
                "cardBrand": method.get("brand"),
                "cardLast4": method.get("lastFour"),
                "avsResult": extra.get("avsResult"),
                "cvcResult": extra.get("cvcResult"),
                "fraudScore": (result.get("fraudResult") or {}).get("accountScore", extra.get("fraudScore")),
                "issuerCountry": extra.get("issuerCountry"),
                "acquirerReference": extra.get("acquirerReference"),
                "refusalReasonRaw": extra.get("refusalReasonRaw"),
            }
        )

        status = STATUS_MAP.get(result.get("resultCode"), PaymentStatus.FAILED)
        if status in (PaymentStatus.SUCCESS, PaymentStatus.PENDING):
            return success_response(request, data, status=status, processing_time_ms=processing_time_ms)

        return build_response(
            request,
            status,
            bank_specific_data=data,
            error_message=result.get("refusalReason") or "Payment refused",
            error_code=result.get("refusalReasonCode") or "ADYEN_FAILURE",
            processing_time_ms=processing_time_ms,
        )
