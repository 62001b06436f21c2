"""Simulated Braintree GraphQL API."""

import base64
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from gateway.banks.base import BankSimulator

DECLINES = [
    ("PROCESSOR_DECLINED", "2000", "Do Not Honor"),
    ("PROCESSOR_DECLINED", "2001", "Insufficient Funds"),
    ("GATEWAY_REJECTED", "cvv", "CVV verification failed"),
    ("FAILED", "2002", "Invalid Transaction"),
]

CARD_BRANDS = ["VISA", "MASTERCARD", "AMERICAN_EXPRESS", "DISCOVER"]


def _graphql_error(message: str, code: str) -> dict[str, Any]:
    return {"data": None, "errors": [{"message": message, "extensions": {"code": code}}]}


def _user_error(message: str, code: str) -> dict[str, Any]:
    return {"data": {"chargePaymentMethod": {"transaction": None, "userErrors": [{"message": message, "code": code}]}}}


class BraintreeSimulator(BankSimulator):
    """Answers the ``ChargePaymentMethod`` mutation."""

    def execute(self, request: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
        if not headers.get("Authorization", "").startswith("Basic "):
            return _graphql_error("Authentication credentials are invalid.", "AUTHENTICATION")
        if request.get("operationName") != "ChargePaymentMethod" or "chargePaymentMethod" not in request.get("query", ""):
            return _graphql_error("Unknown operation.", "GRAPHQL_VALIDATION_FAILED")

        tx_input = request.get("variables", {}).get("input", {}).get("transaction", {})
        try:
            amount = Decimal(str(tx_input.get("amount", "")))
        except InvalidOperation:
            return _user_error("Amount is an invalid format.", "AMOUNT_INVALID_FORMAT")
        if amount <= 0:
            return _user_error("Amount must be greater than zero.", "AMOUNT_MUST_BE_GREATER_THAN_ZERO")

        legacy_id = self.token(8, alphabet="abcdefghijklmnopqrstuvwxyz0123456789")
        transaction: dict[str, Any] = {
            "id": base64.b64encode(f"transaction_{legacy_id}".encode()).decode(),
            "legacyId": legacy_id,
            "orderId": tx_input.get("orderId"),
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "amount": {"value": tx_input["amount"], "currencyCode": tx_input.get("currencyCode", "USD")},
            "paymentMethod": {
                "id": f"pm_{int(time.time() * 1000)}_{self.token(8)}",
                "details": {
                    "brand": self.pick(CARD_BRANDS),
                    "last4": self.digits(4),
                    "expirationMonth": "12",
                    "expirationYear": "2030",
                    "cardholderName": tx_input.get("cardholderName"),
                },
            },
        }

        if self.approves():
            settle = tx_input.get("options", {}).get("submitForSettlement", False)
            transaction.update(
                status="SUBMITTED_FOR_SETTLEMENT" if settle else "AUTHORIZED",
                processorResponse={
                    "legacyCode": "1000",
                    "message": "Approved",
                    "cvvResponse": "M",
                    "avsStreetAddressResponse": "M",
                    "avsPostalCodeResponse": "M",
                },
                riskData={"decision": "Approve", "transactionRiskScore": str(self._rng.randint(0, 49))},
            )
        else:
            status, code, message = self.pick(DECLINES)
            transaction.update(
                status=status,
                processorResponse={
                    "legacyCode": code,
                    "message": message,
                    "cvvResponse": "N" if code == "cvv" else "M",
                },
                riskData={"decision": "Decline", "transactionRiskScore": str(self._rng.randint(50, 99))},
                gatewayRejectionReason="CVV" if status == "GATEWAY_REJECTED" else None,
                processorResponseCode=code,
                processorResponseText=message,
            )

        return {"data": {"chargePaymentMethod": {"transaction": transaction, "userErrors": []}}}
