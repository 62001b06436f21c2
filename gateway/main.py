"""
Payment Gateway: one charge API over five very different banks.

Routes unified charge requests to Stripe (REST), PayPal (SOAP), Square
(REST with custom headers), Adyen (HMAC-signed REST) and Braintree
(GraphQL), each backed by a simulated bank.

Start the server:
    uvicorn gateway.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gateway.api.health import gateway_router
from gateway.api.health import router as health_router
from gateway.api.payments import router as payments_router
from gateway.api.processors import router as processors_router
from gateway.config import settings
from gateway.engine.factory import ProcessorFactory
from gateway.engine.service import PaymentService

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the processor registry and payment service on startup."""
    factory = ProcessorFactory()
    app.state.factory = factory
    app.state.service = PaymentService(factory)
    yield


app = FastAPI(
    title="Payment Gateway",
    description=(
        "Unified charge API over five simulated banks with different wire formats. "
        "Every charge returns a normalized response, whether the bank approved it, "
        "declined it, timed out, or was never reached."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(gateway_router, prefix="/api")
app.include_router(payments_router, prefix="/api")
app.include_router(processors_router, prefix="/api")
