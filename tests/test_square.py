"""Tests for the Square adapter."""

import dataclasses
import time

import pytest

from gateway.banks.square import SquareSimulator
from gateway.models.enums import PaymentStatus, Protocol
from gateway.processors.square import SquareProcessor, build_idempotency_key


class RecordingSquare(SquareSimulator):
    """Keeps the last request it was sent."""

    def create_payment(self, body, headers):
        self.body, self.headers = body, headers
        return super().create_payment(body, headers)


@pytest.fixture
def bank():
    return RecordingSquare(failure_rate=0.0)


@pytest.fixture
def square(bank):
    return SquareProcessor(bank=bank, latency_ms=0)


class TestIdempotencyKey:
    def test_uses_reference(self):
        assert build_idempotency_key("order_1001", 1700000000000) == "order_1001-1700000000000"

    def test_truncation_keeps_timestamp(self):
        key = build_idempotency_key("x" * 60, 1700000000000)
        assert len(key) == 45
        assert key == "x" * 31 + "-1700000000000"

    def test_long_reference_differs_over_time(self):
        reference = "00000000-0000-0000-0000-000000000001"
        a = build_idempotency_key(reference, 1_700_000_000_000)
        b = build_idempotency_key(reference, 1_700_000_005_000)
        assert a != b
        assert len(a) <= 45 and len(b) <= 45
        assert a.endswith("-1700000000000")
        assert b.endswith("-1700000005000")

    def test_random_without_reference(self):
        a = build_idempotency_key(None, 1700000000000)
        b = build_idempotency_key(None, 1700000000000)
        assert a != b
        assert len(a) <= 45


@pytest.mark.asyncio
async def test_headers_match_body(square, bank, payment_request):
    response = await square.charge(payment_request)

    assert response.status == PaymentStatus.SUCCESS
    assert bank.headers["Idempotency-Key"] == bank.body["idempotency_key"]
    assert bank.body["idempotency_key"].startswith("order_1001-")
    assert bank.headers["Square-Version"]
    assert bank.headers["Authorization"].startswith("Bearer ")
    assert bank.body["amount_money"] == {"amount": 2500, "currency": "USD"}


@pytest.mark.asyncio
async def test_no_app_fee_at_threshold(square, bank, payment_request):
    await square.charge(dataclasses.replace(payment_request, amount=10_000))
    assert "app_fee_money" not in bank.body


@pytest.mark.asyncio
async def test_app_fee_above_threshold(square, bank, payment_request):
    response = await square.charge(dataclasses.replace(payment_request, amount=20_000))

    assert bank.body["app_fee_money"] == {"amount": 200, "currency": "USD"}
    # The fee is Square's business; the unified amount is what was asked for
    assert response.amount == 20_000
    assert response.bank_specific_data["appFeeMoney"] == {"amount": 200, "currency": "USD"}


@pytest.mark.asyncio
async def test_declined(payment_request):
    square = SquareProcessor(bank=SquareSimulator(failure_rate=1.0), latency_ms=0)
    response = await square.charge(payment_request)

    assert response.status == PaymentStatus.FAILED
    assert response.error_code in {
        "CARD_DECLINED", "CVV_FAILURE", "EXPIRED_CARD", "INSUFFICIENT_FUNDS", "ADDRESS_VERIFICATION_FAILURE",
    }
    assert response.bank_specific_data["bankStatusCode"] == "FAILED"


def test_request_errors_without_payment(square, payment_request):
    result = {
        "errors": [
            {"category": "INVALID_REQUEST_ERROR", "code": "IDEMPOTENCY_KEY_MISMATCH", "detail": "Key mismatch."}
        ]
    }
    response = square.map_response(result, payment_request, time.monotonic())

    assert response.status == PaymentStatus.FAILED
    assert response.error_code == "IDEMPOTENCY_KEY_MISMATCH"
    assert response.error_message == "Key mismatch."
    assert response.bank_specific_data["errorCategory"] == "INVALID_REQUEST_ERROR"


@pytest.mark.parametrize(
    "status, expected",
    [
        ("COMPLETED", PaymentStatus.SUCCESS),
        ("APPROVED", PaymentStatus.PENDING),
        ("PENDING", PaymentStatus.PENDING),
        ("CANCELED", PaymentStatus.CANCELLED),
        ("FAILED", PaymentStatus.FAILED),
        ("UNKNOWN", PaymentStatus.FAILED),
    ],
)
def test_status_mapping(square, payment_request, status, expected):
    response = square.map_response({"payment": {"id": "sq_1", "status": status}}, payment_request, time.monotonic())
    assert response.status == expected


def test_processor_info(square):
    info = square.get_processor_info()
    assert info.protocol == Protocol.CUSTOM
    assert info.average_processing_time_ms == 500
    assert square.get_display_name() == "Square Payments"
