"""Tests for the PayPal SOAP adapter."""

import dataclasses
import time
import xml.etree.ElementTree as ET

import pytest

from gateway.banks.paypal import PayPalSimulator, soap_fault
from gateway.models.enums import PaymentStatus, Protocol
from gateway.processors.paypal import PayPalProcessor


def _envelope(ack="Success", status="Completed", errors=""):
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Body>
    <DoDirectPaymentResponse xmlns="urn:ebay:api:PayPalAPI">
      <Ack>{ack}</Ack>
      <CorrelationID>ABC123</CorrelationID>{errors}
      <DoDirectPaymentResponseDetails>
        <TransactionID>PP123456789</TransactionID>
        <Amount currencyID="USD">25.00</Amount>
        <PaymentStatus>{status}</PaymentStatus>
      </DoDirectPaymentResponseDetails>
    </DoDirectPaymentResponse>
  </soap:Body>
</soap:Envelope>"""


@pytest.fixture
def paypal():
    return PayPalProcessor(bank=PayPalSimulator(failure_rate=0.0), latency_ms=0)


def test_envelope_uses_major_units(paypal, payment_request):
    root = ET.fromstring(paypal.build_request(payment_request))
    total = next(el for el in root.iter() if el.tag.endswith("OrderTotal"))
    assert total.text == "25.00"
    assert total.get("currencyID") == "USD"


def test_envelope_escapes_text(paypal, payment_request):
    request = dataclasses.replace(payment_request, description="Tea & <biscuits>")
    root = ET.fromstring(paypal.build_request(request))
    description = next(el for el in root.iter() if el.tag.endswith("OrderDescription"))
    assert description.text == "Tea & <biscuits>"


def test_completed_payment(paypal, payment_request):
    response = paypal.map_response(_envelope(), payment_request, time.monotonic())

    assert response.status == PaymentStatus.SUCCESS
    assert response.amount == 2500
    assert response.bank_specific_data["amount"] == "25.00"
    assert response.bank_specific_data["originalTransactionId"] == "PP123456789"
    assert response.bank_specific_data["correlationId"] == "ABC123"


@pytest.mark.parametrize(
    "status, expected",
    [
        ("Pending", PaymentStatus.PENDING),
        ("In-Progress", PaymentStatus.PENDING),
        ("Voided", PaymentStatus.CANCELLED),
        ("Canceled-Reversal", PaymentStatus.CANCELLED),
        ("Denied", PaymentStatus.FAILED),
        ("Reversed", PaymentStatus.FAILED),
    ],
)
def test_payment_status_mapping(paypal, payment_request, status, expected):
    response = paypal.map_response(_envelope(status=status), payment_request, time.monotonic())
    assert response.status == expected


def test_ack_failure(paypal, payment_request):
    errors = "<Errors><LongMessage>Payment method declined.</LongMessage><ErrorCode>10005</ErrorCode></Errors>"
    response = paypal.map_response(
        _envelope(ack="Failure", status="Failed", errors=errors), payment_request, time.monotonic()
    )
    assert response.status == PaymentStatus.FAILED
    assert response.error_code == "10005"
    assert response.error_message == "Payment method declined."


def test_ack_failure_without_error_code(paypal, payment_request):
    response = paypal.map_response(_envelope(ack="Failure", status="Failed"), payment_request, time.monotonic())
    assert response.error_code == "PAYPAL_FAILURE"


def test_soap_fault(paypal, payment_request):
    response = paypal.map_response(
        soap_fault("soap:Server", "Internal error"), payment_request, time.monotonic()
    )
    assert response.status == PaymentStatus.FAILED
    assert response.error_code == "soap:Server"
    assert response.error_message == "Internal error"


@pytest.mark.asyncio
async def test_round_trip_through_simulator(paypal, payment_request):
    response = await paypal.charge(payment_request)
    assert response.status == PaymentStatus.SUCCESS
    assert response.bank_specific_data["amount"] == "25.00"
    assert response.bank_specific_data["currencyCode"] == "USD"


@pytest.mark.asyncio
async def test_malformed_xml_is_contained(payment_request):
    class Garbled(PayPalSimulator):
        def do_direct_payment(self, envelope):
            return "<soap:Envelope><unclosed>"

    paypal = PayPalProcessor(bank=Garbled(), latency_ms=0)
    response = await paypal.charge(payment_request)
    assert response.status == PaymentStatus.FAILED
    assert response.error_code == "PAYPAL_API_ERROR"


def test_processor_info(paypal):
    info = paypal.get_processor_info()
    assert info.protocol == Protocol.SOAP
    assert info.average_processing_time_ms == 2000
