"""Simulated Stripe Charges API (REST/JSON)."""

import time
from typing import Any

from gateway.banks.base import BankSimulator

DECLINES = [
    ("card_declined", "Your card was declined."),
    ("insufficient_funds", "Your card has insufficient funds."),
    ("expired_card", "Your card has expired."),
    ("incorrect_cvc", "Your card's security code is incorrect."),
    ("processing_error", "An error occurred while processing your card."),
]

CARD_BRANDS = ["visa", "mastercard", "amex", "discover"]


class StripeSimulator(BankSimulator):
    """Answers ``POST /v1/charges`` with a charge object or an error envelope."""

    def create_charge(self, body: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
        auth = headers.get("Authorization", "")
        if not auth.startswith("Bearer sk_"):
            return {
                "error": {
                    "type": "authentication_error",
                    "code": "api_key_invalid",
                    "message": "Invalid API Key provided.",
                }
            }

        charge: dict[str, Any] = {
            "id": f"ch_{self.token(24)}",
            "object": "charge",
            "amount": body["amount"],
            "created": int(time.time()),
            "currency": body["currency"],
            "description": body.get("description") or "Payment via Gateway",
            "metadata": body.get("metadata", {}),
            "payment_method_details": {
                "type": "card",
                "card": {
                    "brand": self.pick(CARD_BRANDS),
                    "last4": self.digits(4),
                    "exp_month": 12,
                    "exp_year": 2030,
                },
            },
        }

        if self.approves():
            charge.update(
                status="succeeded",
                paid=True,
                outcome={
                    "network_status": "approved_by_network",
                    "type": "authorized",
                    "seller_message": "Payment complete.",
                },
            )
        else:
            code, message = self.pick(DECLINES)
            charge.update(
                status="failed",
                paid=False,
                failure_code=code,
                failure_message=message,
                outcome={
                    "network_status": "declined_by_network",
                    "type": "issuer_declined",
                    "seller_message": "The bank declined the payment.",
                },
            )
        return charge
