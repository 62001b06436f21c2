"""Shared test fixtures."""

import random

import pytest

from gateway.banks.adyen import AdyenSimulator
from gateway.banks.braintree import BraintreeSimulator
from gateway.banks.paypal import PayPalSimulator
from gateway.banks.square import SquareSimulator
from gateway.banks.stripe import StripeSimulator
from gateway.config import settings
from gateway.engine.factory import ProcessorFactory
from gateway.engine.service import PaymentService
from gateway.models.enums import BankId, Currency
from gateway.models.payment import CustomerDetails, PaymentRequest
from gateway.processors.adyen import AdyenProcessor
from gateway.processors.braintree import BraintreeProcessor
from gateway.processors.paypal import PayPalProcessor
from gateway.processors.square import SquareProcessor
from gateway.processors.stripe import StripeProcessor


def make_processors(failure_rate: float = 0.0, seed: int = 7) -> dict:
    """One zero-latency processor per bank; 0.0 always approves, 1.0 always declines."""
    rng = random.Random(seed)
    sim = {"failure_rate": failure_rate, "rng": rng}
    return {
        BankId.STRIPE: StripeProcessor(bank=StripeSimulator(**sim), latency_ms=0),
        BankId.PAYPAL: PayPalProcessor(bank=PayPalSimulator(**sim), latency_ms=0),
        BankId.SQUARE: SquareProcessor(bank=SquareSimulator(**sim), latency_ms=0),
        BankId.ADYEN: AdyenProcessor(
            bank=AdyenSimulator(settings.adyen_hmac_key, settings.adyen_merchant_account, **sim),
            latency_ms=0,
        ),
        BankId.BRAINTREE: BraintreeProcessor(bank=BraintreeSimulator(**sim), latency_ms=0),
    }


@pytest.fixture
def factory():
    return ProcessorFactory(make_processors(failure_rate=0.0))


@pytest.fixture
def declining_factory():
    return ProcessorFactory(make_processors(failure_rate=1.0))


@pytest.fixture
def service(factory):
    return PaymentService(factory)


@pytest.fixture
def customer():
    return CustomerDetails(
        id="cust_42",
        email="jane.doe@example.com",
        first_name="Jane",
        last_name="Doe",
    )


@pytest.fixture
def payment_request(customer):
    """A valid 25.00 USD charge for Stripe."""
    return PaymentRequest(
        bank_id=BankId.STRIPE,
        amount=2500,
        currency=Currency.USD,
        customer_details=customer,
        description="Order #1001",
        reference_id="order_1001",
    )
