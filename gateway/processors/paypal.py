"""
PayPal payment processor (SOAP/XML).

The request is a DoDirectPayment envelope with the order total in major
units ("25.00"); the response envelope is parsed by tag name with
namespaces ignored. The unified response keeps the request's minor-unit
amount, PayPal's own figure is kept in ``bank_specific_data["amount"]``.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional
from xml.sax.saxutils import escape, quoteattr

from gateway.banks.paypal import PayPalSimulator
from gateway.config import bank_config
from gateway.models.enums import BANK_DISPLAY_NAMES, BankId, Currency, PaymentStatus, Protocol, enum_value
from gateway.models.payment import BankConfig, PaymentRequest, PaymentResponse, ProcessorInfo
from gateway.processors.base import PaymentProcessor
from gateway.processors.support import (
    compact,
    elapsed_ms,
    error_response,
    execute_charge,
    latency_for,
    minor_to_major,
    simulate_latency,
    success_response,
)

logger = logging.getLogger("gateway.processors.paypal")

SUCCESS_ACKS = {"Success", "SuccessWithWarning"}

STATUS_MAP: dict[str, PaymentStatus] = {
    "Completed": PaymentStatus.SUCCESS,
    "Pending": PaymentStatus.PENDING,
    "In-Progress": PaymentStatus.PENDING,
    "Voided": PaymentStatus.CANCELLED,
    "Canceled-Reversal": PaymentStatus.CANCELLED,
    "Failed": PaymentStatus.FAILED,
    "Denied": PaymentStatus.FAILED,
}

REQUEST_ENVELOPE = """<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/"
                  xmlns:urn="urn:ebay:api:PayPalAPI"
                  xmlns:ebl="urn:ebay:apis:eBLBaseComponents">
  <soapenv:Header>
    <urn:RequesterCredentials>
      <ebl:Credentials>
        <ebl:Username>{username}</ebl:Username>
        <ebl:Password>{password}</ebl:Password>
        <ebl:Signature>{signature}</ebl:Signature>
      </ebl:Credentials>
    </urn:RequesterCredentials>
  </soapenv:Header>
  <soapenv:Body>
    <urn:DoDirectPaymentReq>
      <urn:DoDirectPaymentRequest>
        <ebl:Version>124.0</ebl:Version>
        <ebl:DoDirectPaymentRequestDetails>
          <ebl:PaymentAction>Sale</ebl:PaymentAction>
          <ebl:PaymentDetails>
            <ebl:OrderTotal currencyID={currency}>{amount}</ebl:OrderTotal>
            <ebl:OrderDescription>{description}</ebl:OrderDescription>
            <ebl:InvoiceID>{invoice_id}</ebl:InvoiceID>
          </ebl:PaymentDetails>
          <ebl:CreditCard>
            <ebl:CreditCardType>Visa</ebl:CreditCardType>
            <ebl:CreditCardNumber>4111111111111111</ebl:CreditCardNumber>
            <ebl:CardOwner>
              <ebl:Payer>{email}</ebl:Payer>
              <ebl:PayerName>
                <ebl:FirstName>{first_name}</ebl:FirstName>
                <ebl:LastName>{last_name}</ebl:LastName>
              </ebl:PayerName>
            </ebl:CardOwner>
          </ebl:CreditCard>
        </ebl:DoDirectPaymentRequestDetails>
      </urn:DoDirectPaymentRequest>
    </urn:DoDirectPaymentReq>
  </soapenv:Body>
</soapenv:Envelope>"""


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _find(root: ET.Element, tag: str) -> Optional[ET.Element]:
    for el in root.iter():
        if _local(el.tag) == tag:
            return el
    return None


def _text(root: ET.Element, tag: str) -> Optional[str]:
    el = _find(root, tag)
    if el is None or el.text is None:
        return None
    return el.text.strip() or None


class PayPalProcessor(PaymentProcessor):
    bank_id = BankId.PAYPAL

    def __init__(
        self,
        bank: Optional[PayPalSimulator] = None,
        config: Optional[BankConfig] = None,
        latency_ms: Optional[int] = None,
    ):
        super().__init__(config or bank_config(BankId.PAYPAL), latency_ms)
        self._bank = bank or PayPalSimulator()

    def get_display_name(self) -> str:
        return BANK_DISPLAY_NAMES[BankId.PAYPAL]

    def get_processor_info(self) -> ProcessorInfo:
        return ProcessorInfo(
            name="PayPal",
            display_name=self.get_display_name(),
            type="digital_wallet",
            protocol=Protocol.SOAP,
            features=("card_processing", "fraud_detection", "refunds", "disputes"),
            supported_currencies=tuple(Currency),
            average_processing_time_ms=latency_for(self.bank_id),
            api_version="124.0",
        )

    async def charge(self, request: PaymentRequest) -> PaymentResponse:
        return await execute_charge(self, request, self._exchange)

    async def _exchange(self, request: PaymentRequest, started: float) -> PaymentResponse:
        envelope = self.build_request(request)
        logger.debug("PayPal request envelope: %s", envelope)
        await simulate_latency(self.latency_ms)
        soap_xml = self._bank.do_direct_payment(envelope)
        return self.map_response(soap_xml, request, started)

    def build_request(self, request: PaymentRequest) -> str:
        opts = self.config.options
        customer = request.customer_details
        return REQUEST_ENVELOPE.format(
            username=escape(opts.get("username", "")),
            password=escape(opts.get("password", "")),
            signature=escape(opts.get("signature", "")),
            currency=quoteattr(str(enum_value(request.currency))),
            amount=minor_to_major(request.amount),
            description=escape(request.description or ""),
            invoice_id=escape(request.reference_id or ""),
            email=escape((customer and customer.email) or ""),
            first_name=escape((customer and customer.first_name) or ""),
            last_name=escape((customer and customer.last_name) or ""),
        )

    def map_response(self, soap_xml: str, request: PaymentRequest, started: float) -> PaymentResponse:
        """
        Map a DoDirectPayment response envelope.

        Raises:
            ET.ParseError: The envelope is not well-formed XML (contained by
                ``execute_charge`` as ``PAYPAL_API_ERROR``).
        """
        processing_time_ms = elapsed_ms(started)
        root = ET.fromstring(soap_xml)

        if _find(root, "Fault") is not None:
            # SOAP-level failure; PayPal never looked at the payment
            return error_response(
                request,
                _text(root, "faultstring") or "PayPal SOAP fault",
                _text(root, "faultcode") or "PAYPAL_SOAP_FAULT",
                processing_time_ms=processing_time_ms,
            )

        ack = _text(root, "Ack")
        amount_el = _find(root, "Amount")
        payment_status = _text(root, "PaymentStatus")
        data = compact(
            {
                "originalTransactionId": _text(root, "TransactionID"),
                "paypalTransactionId": _text(root, "TransactionID"),
                "correlationId": _text(root, "CorrelationID"),
                "bankStatusCode": payment_status,
                "ack": ack,
                "paymentStatus": payment_status,
                "paymentType": _text(root, "PaymentType"),
                "protectionEligibility": _text(root, "ProtectionEligibility"),
                "amount": amount_el.text.strip() if amount_el is not None and amount_el.text else None,
                "currencyCode": amount_el.get("currencyID") if amount_el is not None else None,
                "timestamp": _text(root, "Timestamp"),
            }
        )

        if ack not in SUCCESS_ACKS:
            return error_response(
                request,
                _text(root, "LongMessage") or _text(root, "ShortMessage") or "PayPal payment failed",
                _text(root, "ErrorCode") or "PAYPAL_FAILURE",
                bank_specific_data=data,
                processing_time_ms=processing_time_ms,
            )

        status = STATUS_MAP.get(payment_status, PaymentStatus.FAILED)
        if status == PaymentStatus.FAILED:
            return error_response(
                request,
                f"PayPal reported payment status: {payment_status or 'unknown'}",
                "PAYPAL_FAILURE",
                bank_specific_data=data,
                processing_time_ms=processing_time_ms,
            )
        return success_response(request, data, status=status, processing_time_ms=processing_time_ms)
