"""
Processor management endpoints.

GET /processors                     All registered processors.
GET /processors/{bank_id}           One processor's metadata.
PUT /processors/{bank_id}/enable    Start accepting charges.
PUT /processors/{bank_id}/disable   Stop accepting charges.
GET /processors/{bank_id}/available Whether charges would be accepted.
"""

from fastapi import APIRouter, Depends, HTTPException

from gateway.api.deps import get_service
from gateway.engine.errors import ProcessorNotFoundError, UnsupportedBankError
from gateway.engine.service import PaymentService

router = APIRouter(prefix="/processors", tags=["processors"])


@router.get("")
async def list_processors(service: PaymentService = Depends(get_service)):
    """All registered processors, enabled or not."""
    return service.factory.get_processor_summaries()


@router.get("/{bank_id}")
async def get_processor(bank_id: str, service: PaymentService = Depends(get_service)):
    try:
        info = service.get_processor_info(bank_id)
    except UnsupportedBankError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {**info.to_dict(), "bank_id": bank_id, "enabled": service.is_bank_available(bank_id)}


@router.put("/{bank_id}/enable")
async def enable_processor(bank_id: str, service: PaymentService = Depends(get_service)):
    try:
        service.enable_processor(bank_id)
    except ProcessorNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {"bank_id": bank_id, "enabled": True}


@router.put("/{bank_id}/disable")
async def disable_processor(bank_id: str, service: PaymentService = Depends(get_service)):
    try:
        service.disable_processor(bank_id)
    except ProcessorNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {"bank_id": bank_id, "enabled": False}


@router.get("/{bank_id}/available")
async def is_processor_available(bank_id: str, service: PaymentService = Depends(get_service)):
    return {"bank_id": bank_id, "available": service.is_bank_available(bank_id)}
