"""Tests for the Stripe adapter."""

import dataclasses
import time

import pytest

from gateway.banks.stripe import StripeSimulator
from gateway.config import bank_config
from gateway.engine.errors import ProviderError
from gateway.models.enums import BankId, PaymentStatus, Protocol
from gateway.processors.stripe import StripeProcessor


@pytest.fixture
def stripe():
    return StripeProcessor(bank=StripeSimulator(failure_rate=0.0), latency_ms=0)


def test_build_request(stripe, payment_request):
    body = stripe.build_request(payment_request)
    assert body["amount"] == 2500
    assert body["currency"] == "usd"
    assert body["receipt_email"] == "jane.doe@example.com"
    assert body["metadata"] == {"reference_id": "order_1001"}


def test_metadata_forwarded(stripe, payment_request):
    request = dataclasses.replace(payment_request, metadata={"cart_id": "c_42", "reference_id": "spoofed"})
    body = stripe.build_request(request)
    assert body["metadata"] == {"cart_id": "c_42", "reference_id": "order_1001"}


@pytest.mark.asyncio
async def test_successful_charge(stripe, payment_request):
    response = await stripe.charge(payment_request)
    assert response.status == PaymentStatus.SUCCESS
    data = response.bank_specific_data
    assert data["stripeChargeId"].startswith("ch_")
    assert data["bankStatusCode"] == "succeeded"
    assert len(data["cardLast4"]) == 4


@pytest.mark.asyncio
async def test_declined_charge(payment_request):
    stripe = StripeProcessor(bank=StripeSimulator(failure_rate=1.0), latency_ms=0)
    response = await stripe.charge(payment_request)
    assert response.status == PaymentStatus.FAILED
    assert response.error_code in {"card_declined", "insufficient_funds", "expired_card", "incorrect_cvc", "processing_error"}
    assert response.error_message


@pytest.mark.asyncio
async def test_bad_api_key(payment_request):
    config = bank_config(BankId.STRIPE)
    config.api_key = "pk_live_wrong"
    stripe = StripeProcessor(bank=StripeSimulator(failure_rate=0.0), config=config, latency_ms=0)

    response = await stripe.charge(payment_request)

    assert response.status == PaymentStatus.FAILED
    assert response.error_code == "api_key_invalid"
    assert response.bank_specific_data == {"errorType": "authentication_error"}


@pytest.mark.parametrize(
    "status, expected",
    [
        ("succeeded", PaymentStatus.SUCCESS),
        ("pending", PaymentStatus.PENDING),
        ("canceled", PaymentStatus.CANCELLED),
        ("failed", PaymentStatus.FAILED),
        ("something_new", PaymentStatus.FAILED),
    ],
)
def test_status_mapping(stripe, payment_request, status, expected):
    response = stripe.map_response({"id": "ch_1", "status": status}, payment_request, time.monotonic())
    assert response.status == expected
    assert response.amount == payment_request.amount


def test_failure_without_code(stripe, payment_request):
    response = stripe.map_response({"id": "ch_1", "status": "failed"}, payment_request, time.monotonic())
    assert response.error_code == "STRIPE_FAILURE"


@pytest.mark.asyncio
async def test_simulator_exception_is_contained(payment_request):
    class Broken(StripeSimulator):
        def create_charge(self, body, headers):
            raise ConnectionError("connection reset")

    stripe = StripeProcessor(bank=Broken(), latency_ms=0)
    response = await stripe.charge(payment_request)

    assert response.status == PaymentStatus.FAILED
    assert response.error_code == "STRIPE_API_ERROR"
    assert response.error_message == "Stripe processing error: connection reset"


@pytest.mark.asyncio
async def test_transport_failure_is_retriable(payment_request):
    class Unreachable(StripeSimulator):
        def create_charge(self, body, headers):
            raise ProviderError("bad gateway", status_code=502)

    stripe = StripeProcessor(bank=Unreachable(), latency_ms=0)
    response = await stripe.charge(payment_request)

    assert response.status == PaymentStatus.FAILED
    assert response.error_code == "STRIPE_API_ERROR"
    assert response.bank_specific_data == {"retriable": True, "statusCode": 502}


def test_processor_info(stripe):
    info = stripe.get_processor_info()
    assert info.protocol == Protocol.REST
    assert info.average_processing_time_ms == 200
    assert stripe.get_display_name() == "Stripe"


def test_can_process(stripe, payment_request):
    assert stripe.can_process(payment_request)
    stripe.config.enabled = False
    assert not stripe.can_process(payment_request)
