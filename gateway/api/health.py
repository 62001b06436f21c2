"""
Liveness and gateway-wide status endpoints.

GET /health                   The API process is up.
GET /gateway/health           Processor health rolled up to one status.
GET /gateway/statistics       Registry counts and latency figures.
GET /gateway/connectivity     Probe charge against every enabled bank.
"""

from fastapi import APIRouter, Depends

from gateway.api.deps import get_service
from gateway.engine.service import PaymentService

router = APIRouter(tags=["health"])
gateway_router = APIRouter(prefix="/gateway", tags=["gateway"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@gateway_router.get("/health")
async def gateway_health(service: PaymentService = Depends(get_service)):
    return service.get_health_status()


@gateway_router.get("/statistics")
async def gateway_statistics(service: PaymentService = Depends(get_service)):
    return service.get_statistics()


@gateway_router.get("/connectivity")
async def gateway_connectivity(service: PaymentService = Depends(get_service)):
    """Sends a real (simulated) one-dollar charge through each enabled bank."""
    return await service.test_connectivity()
