"""
Charge endpoints.

POST /payments          Charge through the bank named in the body.
POST /payments/auto     Charge through the fastest enabled bank.
GET  /payments/methods  Banks currently accepting charges.

Charges always answer 200 with a unified response; declines and rejected
requests are reported in ``status``/``error_code``, not as HTTP errors.
"""

from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from gateway.api.deps import get_service
from gateway.engine.service import PaymentService
from gateway.models.enums import coerce_bank_id, coerce_currency, enum_value
from gateway.models.payment import CustomerDetails, PaymentRequest, PaymentResponse

router = APIRouter(prefix="/payments", tags=["payments"])


class CustomerBody(BaseModel):
    id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class ChargeBody(BaseModel):
    # Loosely typed on purpose: bad values are reported as FAILED charges
    bank_id: Optional[str] = None
    amount: Optional[Union[int, float, str]] = None
    currency: Optional[str] = None
    customer_details: Optional[CustomerBody] = None
    description: Optional[str] = None
    reference_id: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    def to_request(self) -> PaymentRequest:
        customer = None
        if self.customer_details is not None:
            customer = CustomerDetails(**self.customer_details.model_dump())
        return PaymentRequest(
            bank_id=coerce_bank_id(self.bank_id),
            amount=self.amount,
            currency=coerce_currency(self.currency),
            customer_details=customer,
            description=self.description,
            reference_id=self.reference_id,
            metadata=self.metadata,
        )


class ChargeResult(BaseModel):
    transaction_id: str
    status: str
    amount: Any
    currency: Optional[str]
    bank_id: Optional[str]
    timestamp: str
    processing_time_ms: int
    bank_specific_data: Optional[dict[str, Any]] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    reference_id: Optional[str] = None


def _response_to_result(r: PaymentResponse) -> ChargeResult:
    return ChargeResult(
        transaction_id=r.transaction_id,
        status=enum_value(r.status),
        amount=r.amount,
        currency=enum_value(r.currency),
        bank_id=enum_value(r.bank_id),
        timestamp=r.timestamp.isoformat(),
        processing_time_ms=r.processing_time_ms,
        bank_specific_data=r.bank_specific_data,
        error_message=r.error_message,
        error_code=r.error_code,
        reference_id=r.reference_id,
    )


@router.post("", response_model=ChargeResult)
async def create_charge(body: ChargeBody, service: PaymentService = Depends(get_service)):
    """Charge through the requested bank."""
    response = await service.charge(body.to_request())
    return _response_to_result(response)


@router.post("/auto", response_model=ChargeResult)
async def create_auto_charge(
    body: ChargeBody,
    exclude: list[str] = Query(default=[], description="Bank ids to skip"),
    service: PaymentService = Depends(get_service),
):
    """
    Charge through the fastest enabled bank.

    ``bank_id`` in the body is ignored; the chosen bank is echoed back on
    the response.
    """
    response = await service.process_payment_auto(body.to_request(), excluding=exclude)
    return _response_to_result(response)


@router.get("/methods")
async def list_payment_methods(service: PaymentService = Depends(get_service)):
    """Banks currently accepting charges."""
    return service.get_available_payment_methods()
