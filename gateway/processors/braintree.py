"""
Braintree payment processor (GraphQL).

A GraphQL response can fail in two layers before the transaction is even
looked at: top-level ``errors`` (auth, malformed query) and mutation
``userErrors`` (invalid input). They are checked in that order.
"""

import base64
import logging
from typing import Any, Optional

from gateway.banks.braintree import BraintreeSimulator
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
    minor_to_major,
    simulate_latency,
    success_response,
)

logger = logging.getLogger("gateway.processors.braintree")

BRAINTREE_VERSION = "2019-01-01"

STATUS_MAP: dict[str, PaymentStatus] = {
    "AUTHORIZED": PaymentStatus.SUCCESS,
    "SUBMITTED_FOR_SETTLEMENT": PaymentStatus.SUCCESS,
    "SETTLING": PaymentStatus.SUCCESS,
    "SETTLED": PaymentStatus.SUCCESS,
    "AUTHORIZING": PaymentStatus.PENDING,
    "SETTLEMENT_PENDING": PaymentStatus.PENDING,
    "VOIDED": PaymentStatus.CANCELLED,
}

CHARGE_MUTATION = """
mutation ChargePaymentMethod($input: ChargePaymentMethodInput!) {
  chargePaymentMethod(input: $input) {
    transaction {
      id
      legacyId
      orderId
      status
      createdAt
      amount { value currencyCode }
      paymentMethod {
        id
        details {
          ... on CreditCardDetails { brand last4 expirationMonth expirationYear cardholderName }
        }
      }
      processorResponse { legacyCode message cvvResponse avsStreetAddressResponse avsPostalCodeResponse }
      riskData { decision transactionRiskScore }
      gatewayRejectionReason
    }
    userErrors { message code }
  }
}
"""


class BraintreeProcessor(PaymentProcessor):
    bank_id = BankId.BRAINTREE

    def __init__(
        self,
        bank: Optional[BraintreeSimulator] = None,
        config: Optional[BankConfig] = None,
        latency_ms: Optional[int] = None,
    ):
        super().__init__(config or bank_config(BankId.BRAINTREE), latency_ms)
        self._bank = bank or BraintreeSimulator()

    def get_display_name(self) -> str:
        return BANK_DISPLAY_NAMES[BankId.BRAINTREE]

    def get_processor_info(self) -> ProcessorInfo:
        return ProcessorInfo(
            name="Braintree",
            display_name=self.get_display_name(),
            protocol=Protocol.GRAPHQL,
            features=("card_processing", "vault", "risk_data", "settlement"),
            supported_currencies=tuple(Currency),
            average_processing_time_ms=latency_for(self.bank_id),
            api_version=BRAINTREE_VERSION,
        )

    async def charge(self, request: PaymentRequest) -> PaymentResponse:
        return await execute_charge(self, request, self._exchange)

    async def _exchange(self, request: PaymentRequest, started: float) -> PaymentResponse:
        payload = self.build_request(request)
        token = base64.b64encode(f"{self.config.api_key}:".encode()).decode()
        headers = {
            "Authorization": f"Basic {token}",
            "Braintree-Version": BRAINTREE_VERSION,
            "Content-Type": "application/json",
        }
        logger.debug("Braintree variables: %s", payload["variables"])

        await simulate_latency(self.latency_ms)
        result = self._bank.execute(payload, headers)
        return self.map_response(result, request, started)

    def build_request(self, request: PaymentRequest) -> dict[str, Any]:
        customer = request.customer_details
        return {
            "operationName": "ChargePaymentMethod",
            "query": CHARGE_MUTATION,
            "variables": {
                "input": {
                    "paymentMethodId": "fake-valid-nonce",
                    "transaction": compact(
                        {
                            "amount": minor_to_major(request.amount),
                            "currencyCode": enum_value(request.currency),
                            "orderId": request.reference_id,
                            "merchantAccountId": self.config.options.get("merchant_id"),
                            "cardholderName": customer.full_name if customer else None,
                            "options": {"submitForSettlement": True},
                        }
                    ),
                }
            },
        }

    def map_response(self, result: dict[str, Any], request: PaymentRequest, started: float) -> PaymentResponse:
        processing_time_ms = elapsed_ms(started)

        errors = result.get("errors") or []
        if errors:
            first = errors[0]
            return error_response(
                request,
                first.get("message") or "Braintree GraphQL error",
                (first.get("extensions") or {}).get("code") or "GRAPHQL_ERROR",
                processing_time_ms=processing_time_ms,
            )

        charge = (result.get("data") or {}).get("chargePaymentMethod") or {}
        user_errors = charge.get("userErrors") or []
        if user_errors:
            first = user_errors[0]
            return error_response(
                request,
                first.get("message") or "Braintree rejected the input",
                first.get("code") or "USER_ERROR",
                processing_time_ms=processing_time_ms,
            )

        transaction = charge.get("transaction")
        if not transaction:
            return error_response(
                request,
                "Braintree returned no transaction",
                "UNEXPECTED_RESPONSE",
                processing_time_ms=processing_time_ms,
            )

        details = (transaction.get("paymentMethod") or {}).get("details") or {}
        processor_response = transaction.get("processorResponse") or {}
        data = compact(
            {
                "originalTransactionId": transaction.get("id"),
                "braintreeTransactionId": transaction.get("id"),
                "legacyId": transaction.get("legacyId"),
                "orderId": transaction.get("orderId"),
                "bankStatusCode": transaction.get("status"),
                "amount": (transaction.get("amount") or {}).get("value"),
                "cardBrand": details.get("brand"),
                "cardLast4": details.get("last4"),
                "processorResponseCode": processor_response.get("legacyCode"),
                "riskDecision": (transaction.get("riskData") or {}).get("decision"),
                "gatewayRejectionReason": transaction.get("gatewayRejectionReason"),
            }
        )

        status = STATUS_MAP.get(transaction.get("status"), PaymentStatus.FAILED)
        if status in (PaymentStatus.SUCCESS, PaymentStatus.PENDING):
            return success_response(request, data, status=status, processing_time_ms=processing_time_ms)

        return build_response(
            request,
            status,
            bank_specific_data=data,
            error_message=transaction.get("processorResponseText")
            or processor_response.get("message")
            or "Payment failed",
            error_code=transaction.get("processorResponseCode")
            or transaction.get("gatewayRejectionReason")
            or "BRAINTREE_FAILURE",
            processing_time_ms=processing_time_ms,
        )
