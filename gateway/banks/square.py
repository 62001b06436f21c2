"""Simulated Square Payments API (REST with custom headers)."""

from datetime import datetime, timezone
from typing import Any

from gateway.banks.base import BankSimulator

DECLINES = [
    ("CARD_DECLINED", "Card was declined by the issuer."),
    ("CVV_FAILURE", "The provided CVV does not match the card."),
    ("EXPIRED_CARD", "The provided card is expired."),
    ("INSUFFICIENT_FUNDS", "The card does not have sufficient funds."),
    ("ADDRESS_VERIFICATION_FAILURE", "The provided address does not match the card."),
]

CARD_BRANDS = ["VISA", "MASTERCARD", "AMERICAN_EXPRESS", "DISCOVER"]
RISK_LEVELS = ["NORMAL", "NORMAL", "NORMAL", "MODERATE", "HIGH"]


def _request_error(category: str, code: str, detail: str, field: str | None = None) -> dict[str, Any]:
    error = {"category": category, "code": code, "detail": detail}
    if field:
        error["field"] = field
    return {"errors": [error]}


class SquareSimulator(BankSimulator):
    """Answers ``POST /v2/payments``."""

    def create_payment(self, body: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
        if not headers.get("Authorization", "").startswith("Bearer "):
            return _request_error(
                "AUTHENTICATION_ERROR", "UNAUTHORIZED", "This request could not be authorized."
            )
        if not headers.get("Square-Version"):
            return _request_error(
                "INVALID_REQUEST_ERROR", "INVALID_SQUARE_VERSION_FORMAT", "Square-Version header is required."
            )
        key = headers.get("Idempotency-Key")
        if not key or key != body.get("idempotency_key"):
            return _request_error(
                "INVALID_REQUEST_ERROR",
                "IDEMPOTENCY_KEY_MISMATCH",
                "Idempotency-Key header must match idempotency_key.",
                field="idempotency_key",
            )

        now = datetime.now(timezone.utc).isoformat()
        amount_money = body["amount_money"]
        payment_id = f"{key.replace('-', '')[:16]}{self.token(6)}"
        approved = self.approves()

        payment: dict[str, Any] = {
            "id": payment_id,
            "created_at": now,
            "updated_at": now,
            "amount_money": amount_money,
            "status": "COMPLETED" if approved else "FAILED",
            "source_type": "CARD",
            "location_id": body.get("location_id"),
            "reference_id": body.get("reference_id"),
            "note": body.get("note"),
            "receipt_number": payment_id[:4].upper(),
            "receipt_url": f"https://squareup.com/receipt/preview/{payment_id}",
            "version_token": self.token(40),
        }
        if body.get("app_fee_money"):
            payment["app_fee_money"] = body["app_fee_money"]

        card = {
            "card_brand": self.pick(CARD_BRANDS),
            "last_4": self.digits(4),
            "exp_month": 12,
            "exp_year": 2030,
            "fingerprint": f"sq-1-{self.token(32)}",
        }

        if approved:
            payment["card_details"] = {
                "status": "CAPTURED",
                "card": card,
                "entry_method": "KEYED",
                "cvv_status": "CVV_ACCEPTED",
                "avs_status": "AVS_ACCEPTED",
                "auth_result_code": self.token(6),
            }
            payment["processing_fee"] = [
                {
                    "effective_at": now,
                    "type": "INITIAL",
                    "amount_money": {
                        "amount": round(amount_money["amount"] * 0.029) + 30,
                        "currency": amount_money["currency"],
                    },
                }
            ]
            payment["risk_evaluation"] = {"created_at": now, "risk_level": self.pick(RISK_LEVELS)}
            return {"payment": payment}

        code, detail = self.pick(DECLINES)
        payment["card_details"] = {
            "status": "FAILED",
            "card": card,
            "entry_method": "KEYED",
            "cvv_status": "CVV_REJECTED" if code == "CVV_FAILURE" else "CVV_ACCEPTED",
            "avs_status": "AVS_REJECTED" if code == "ADDRESS_VERIFICATION_FAILURE" else "AVS_ACCEPTED",
            "auth_result_code": "",
        }
        return {
            "payment": payment,
            "errors": [{"category": "PAYMENT_METHOD_ERROR", "code": code, "detail": detail}],
        }
