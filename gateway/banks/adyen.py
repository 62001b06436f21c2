"""
Simulated Adyen Checkout API (HMAC-signed REST).

Requests must carry an HMAC-SHA256 signature over the canonical JSON body,
the merchant account and a millisecond timestamp. The simulator recomputes
it with its own copy of the key and rejects mismatches the way Adyen's API
does: an error envelope instead of a payment result.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any

from gateway.banks.base import BankSimulator
from gateway.engine.errors import SignatureError

DECLINES = [
    ("Refused", "Refused", "2", "DECLINED"),
    ("Refused", "CVC Declined", "7", "CVC_DECLINED"),
    ("Refused", "Expired Card", "6", "EXPIRED_CARD"),
    ("Refused", "Insufficient Funds", "5", "INSUFFICIENT_FUNDS"),
    ("Error", "Acquirer Error", "10", "ACQUIRER_ERROR"),
]

CARD_BRANDS = ["visa", "mc", "amex", "discover"]
ISSUER_COUNTRIES = ["US", "GB", "DE", "FR", "NL", "CA", "AU", "IT", "ES", "JP"]


def canonical_json(body: dict[str, Any]) -> str:
    return json.dumps(body, sort_keys=True, separators=(",", ":"))


def hmac_signature(body: dict[str, Any], merchant_account: str, timestamp_ms: int, hmac_key: str) -> str:
    """
    Base64 HMAC-SHA256 over ``canonical_json(body) + merchant + timestamp``.

    Raises:
        SignatureError: The hex key cannot be decoded.
    """
    try:
        key = binascii.unhexlify(hmac_key)
    except (binascii.Error, ValueError) as e:
        raise SignatureError(f"Invalid HMAC key: {e}") from e
    if not key:
        raise SignatureError("Invalid HMAC key: empty")

    message = f"{canonical_json(body)}{merchant_account}{timestamp_ms}".encode("utf-8")
    return base64.b64encode(hmac.new(key, message, hashlib.sha256).digest()).decode("ascii")


class AdyenSimulator(BankSimulator):
    """Answers ``POST /v71/payments``."""

    def __init__(self, hmac_key: str, merchant_account: str, **kwargs: Any):
        super().__init__(**kwargs)
        self._hmac_key = hmac_key
        self._merchant_account = merchant_account

    def payments(self, body: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
        if not headers.get("X-API-Key"):
            return self._error(401, "000", "HTTP Status Response - Unauthorized", "security")

        signature = headers.get("X-Adyen-Hmac-Signature", "")
        try:
            expected = hmac_signature(
                body,
                body.get("merchantAccount", ""),
                int(headers.get("X-Adyen-Timestamp", "0")),
                self._hmac_key,
            )
        except (SignatureError, ValueError):
            expected = None
        if (
            body.get("merchantAccount") != self._merchant_account
            or expected is None
            or not hmac.compare_digest(signature, expected)
        ):
            return self._error(401, "010", "HMAC signature validation failed", "security")

        psp_reference = f"{int(time.time() * 1000)}{self.digits(6)}"
        amount = body["amount"]
        brand = self.pick(CARD_BRANDS)
        last_four = self.digits(4)

        if self.approves():
            auth_code = self.token(6, alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")
            return {
                "pspReference": psp_reference,
                "resultCode": "Authorised",
                "authCode": auth_code,
                "merchantReference": body.get("reference"),
                "amount": amount,
                "paymentMethod": {
                    "type": "scheme",
                    "brand": brand,
                    "lastFour": last_four,
                    "holderName": body.get("paymentMethod", {}).get("holderName"),
                },
                "additionalData": {
                    "authCode": auth_code,
                    "avsResult": "7 Both postal code and address match",
                    "cvcResult": "1 Match",
                    "fraudScore": str(self._rng.randint(0, 49)),
                    "acquirerCode": "TestPmmAcquirer",
                    "acquirerReference": f"ACQ{self.digits(10)}",
                    "issuerCountry": self.pick(ISSUER_COUNTRIES),
                    "networkToken.available": "false",
                },
                "fraudResult": {"accountScore": self._rng.randint(0, 49), "results": []},
            }

        result_code, reason, reason_code, raw = self.pick(DECLINES)
        return {
            "pspReference": psp_reference,
            "resultCode": result_code,
            "merchantReference": body.get("reference"),
            "amount": amount,
            "refusalReason": reason,
            "refusalReasonCode": reason_code,
            "paymentMethod": {"type": "scheme", "brand": brand, "lastFour": last_four},
            "additionalData": {
                "refusalReasonRaw": raw,
                "avsResult": "0 Unknown",
                "cvcResult": "2 No match" if reason_code == "7" else "1 Match",
                "fraudScore": str(self._rng.randint(50, 99)),
                "acquirerCode": "TestPmmAcquirer",
                "issuerCountry": self.pick(ISSUER_COUNTRIES),
            },
        }

    @staticmethod
    def _error(status: int, code: str, message: str, error_type: str) -> dict[str, Any]:
        return {"status": status, "errorCode": code, "message": message, "errorType": error_type}
