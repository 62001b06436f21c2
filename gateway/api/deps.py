"""FastAPI dependencies shared by the routers."""

from fastapi import Request

from gateway.engine.service import PaymentService


def get_service(request: Request) -> PaymentService:
    """The service built by the app lifespan."""
    return request.app.state.service
