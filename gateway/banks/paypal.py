"""
Simulated PayPal DoDirectPayment SOAP API.

Takes the request envelope as an XML string and answers with a response
envelope, also as a string. Amounts travel in major units ("25.00").
"""

import uuid
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Optional
from xml.sax.saxutils import escape, quoteattr

from gateway.banks.base import BankSimulator

DECLINES = [
    ("10004", "Invalid payment amount."),
    ("10005", "Payment method declined."),
    ("10009", "The account is not verified."),
    ("10413", "The merchant does not accept payments in this currency."),
    ("11607", "A successful transaction has already been completed for this token."),
]

ENVELOPE = """<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"
               xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
               xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <soap:Body>
{body}
  </soap:Body>
</soap:Envelope>"""

FAULT = """    <soap:Fault>
      <faultcode>{code}</faultcode>
      <faultstring>{message}</faultstring>
    </soap:Fault>"""

RESPONSE = """    <DoDirectPaymentResponse xmlns="urn:ebay:api:PayPalAPI">
      <Timestamp>{timestamp}</Timestamp>
      <Ack>{ack}</Ack>
      <CorrelationID>{correlation_id}</CorrelationID>
      <Version>124.0</Version>
      <Build>18316154</Build>{errors}
      <DoDirectPaymentResponseDetails>
        <TransactionID>{transaction_id}</TransactionID>
        <Amount currencyID={currency}>{amount}</Amount>
        <PaymentStatus>{payment_status}</PaymentStatus>
        <PaymentType>instant</PaymentType>
        <ProtectionEligibility>{protection}</ProtectionEligibility>
      </DoDirectPaymentResponseDetails>
    </DoDirectPaymentResponse>"""

ERRORS = """
      <Errors>
        <ShortMessage>Transaction failed</ShortMessage>
        <LongMessage>{message}</LongMessage>
        <ErrorCode>{code}</ErrorCode>
        <SeverityCode>Error</SeverityCode>
      </Errors>"""


def _find(root: ET.Element, tag: str) -> Optional[ET.Element]:
    """First element whose local name is ``tag``, ignoring namespaces."""
    for el in root.iter():
        if el.tag.rsplit("}", 1)[-1] == tag:
            return el
    return None


def soap_fault(code: str, message: str) -> str:
    return ENVELOPE.format(body=FAULT.format(code=escape(code), message=escape(message)))


class PayPalSimulator(BankSimulator):
    """Answers DoDirectPayment envelopes."""

    def do_direct_payment(self, envelope: str) -> str:
        try:
            root = ET.fromstring(envelope)
        except ET.ParseError as e:
            return soap_fault("soap:Client", f"Malformed request envelope: {e}")

        total = _find(root, "OrderTotal")
        if total is None or not (total.text or "").strip():
            return soap_fault("soap:Client", "OrderTotal is required")

        approved = self.approves()
        errors = ""
        if not approved:
            code, message = self.pick(DECLINES)
            errors = ERRORS.format(code=code, message=escape(message))

        body = RESPONSE.format(
            timestamp=datetime.now(timezone.utc).isoformat(),
            ack="Success" if approved else "Failure",
            correlation_id=uuid.uuid4().hex[:13].upper(),
            errors=errors,
            transaction_id=f"PP{self.digits(17)}",
            currency=quoteattr(total.get("currencyID", "USD")),
            amount=escape(total.text.strip()),
            payment_status="Completed" if approved else "Failed",
            protection="Eligible" if approved else "Ineligible",
        )
        return ENVELOPE.format(body=body)
