"""
Helpers shared by every bank adapter.

Adapters compose these instead of inheriting them: transaction-id
generation, simulated latency, amount unit conversion, the generic
response builders, and ``execute_charge``, the wrapper that guarantees a
charge always ends in a response (never an exception).
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Awaitable, Callable, Optional

from gateway.engine.errors import ProviderError
from gateway.models.enums import BANK_DISPLAY_NAMES, BankId, PaymentStatus
from gateway.models.payment import PaymentRequest, PaymentResponse

logger = logging.getLogger("gateway.processors")

# Typical real-world latency per bank. Doubles as the advertised average
# processing time and as processing_time_ms on untimed responses.
BANK_LATENCY_MS: dict[BankId, int] = {
    BankId.STRIPE: 200,  # Fast REST API
    BankId.PAYPAL: 2000,  # Slow SOAP processing
    BankId.SQUARE: 500,  # REST with custom headers
    BankId.ADYEN: 300,  # Fast, HMAC signing overhead
    BankId.BRAINTREE: 400,  # GraphQL overhead
}
DEFAULT_LATENCY_MS = 500

BANK_TIMEOUT_MS: dict[BankId, int] = {
    BankId.STRIPE: 5_000,
    BankId.PAYPAL: 10_000,
    BankId.SQUARE: 30_000,
    BankId.ADYEN: 30_000,
    BankId.BRAINTREE: 30_000,
}

Exchange = Callable[[PaymentRequest, float], Awaitable[PaymentResponse]]


def latency_for(bank_id: Any) -> int:
    return BANK_LATENCY_MS.get(bank_id, DEFAULT_LATENCY_MS)


def generate_transaction_id(prefix: str = "TXN") -> str:
    """Internal transaction ID: prefix, epoch milliseconds, random suffix."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


async def simulate_latency(latency_ms: int) -> None:
    """Stand-in for the network round trip to the bank."""
    if latency_ms > 0:
        await asyncio.sleep(latency_ms / 1000)


def elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def minor_to_major(amount: int) -> str:
    """2500 -> "25.00". Decimal avoids float drift on large amounts."""
    return str((Decimal(amount) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_response(
    request: PaymentRequest,
    status: PaymentStatus,
    *,
    bank_specific_data: Optional[dict[str, Any]] = None,
    error_message: Optional[str] = None,
    error_code: Optional[str] = None,
    processing_time_ms: Optional[int] = None,
    transaction_id: Optional[str] = None,
) -> PaymentResponse:
    """
    Stamp a unified response.

    Amount, currency, bank and reference are always copied from the request
    verbatim; adapters only supply the status and the bank-specific bits.
    """
    return PaymentResponse(
        transaction_id=transaction_id or generate_transaction_id(),
        status=status,
        amount=request.amount,
        currency=request.currency,
        bank_id=request.bank_id,
        timestamp=datetime.now(timezone.utc),
        processing_time_ms=(
            processing_time_ms if processing_time_ms is not None else latency_for(request.bank_id)
        ),
        bank_specific_data=bank_specific_data,
        error_message=error_message,
        error_code=error_code,
        reference_id=request.reference_id,
    )


def success_response(
    request: PaymentRequest,
    bank_specific_data: Optional[dict[str, Any]] = None,
    status: PaymentStatus = PaymentStatus.SUCCESS,
    **kwargs: Any,
) -> PaymentResponse:
    """Approved (or still pending) charge; carries no error fields."""
    return build_response(request, status, bank_specific_data=bank_specific_data, **kwargs)


def error_response(
    request: PaymentRequest,
    error_message: str,
    error_code: Optional[str] = None,
    **kwargs: Any,
) -> PaymentResponse:
    return build_response(
        request,
        PaymentStatus.FAILED,
        error_message=error_message,
        error_code=error_code,
        **kwargs,
    )


def compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


async def execute_charge(processor: Any, request: PaymentRequest, exchange: Exchange) -> PaymentResponse:
    """
    Run one bank exchange and contain every failure.

    The exchange runs under the bank's configured deadline. Expiry yields a
    TIMEOUT response. A ``ProviderError`` yields a FAILED response coded
    by its kind (``ADYEN_SIGNATURE_ERROR``) with ``retriable`` recorded in
    the bank data; any other exception yields ``<BANK>_API_ERROR``.

    Args:
        processor: The adapter doing the work (for bank id, config, name).
        request: The unified request.
        exchange: ``async (request, started) -> PaymentResponse``.
    """
    started = time.monotonic()
    bank = processor.bank_id
    name = BANK_DISPLAY_NAMES.get(bank, str(bank))
    timeout_ms = processor.config.timeout_ms

    try:
        return await asyncio.wait_for(
            exchange(request, started),
            timeout=timeout_ms / 1000 if timeout_ms else None,
        )

    except asyncio.TimeoutError:
        logger.warning("%s charge timed out after %sms", name, timeout_ms)
        return build_response(
            request,
            PaymentStatus.TIMEOUT,
            error_message=f"{name} did not respond within {timeout_ms}ms",
            error_code=f"{bank.name}_TIMEOUT",
            processing_time_ms=elapsed_ms(started),
        )

    except ProviderError as e:
        logger.error("%s payment processing failed (retriable=%s): %s", name, e.retriable, e)
        return error_response(
            request,
            f"{name} processing error: {e}",
            f"{bank.name}_{e.code_suffix}",
            processing_time_ms=elapsed_ms(started),
            bank_specific_data={"retriable": e.retriable, "statusCode": e.status_code},
        )

    except Exception as e:
        logger.error("%s payment processing failed: %s", name, e)
        return error_response(
            request,
            f"{name} processing error: {e}",
            f"{bank.name}_API_ERROR",
            processing_time_ms=elapsed_ms(started),
        )
