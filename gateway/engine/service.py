"""
Payment service: the single entry point for charges.

The flow for each charge:

  1. Validation (amount, currency, bank id, email)
  2. Availability (registered, then enabled)
  3. Adapter execution (bank-shaped request → simulated bank → unified response)
  4. Audit logging (start and outcome of every charge)

Guarantees:
  - ``charge`` never raises; every failure becomes a FAILED response
  - Amount, currency, bank id and reference always echo the request
  - Adapter responses are returned unchanged

Management calls (enable/disable, health, statistics, connectivity) are
thin wrappers over the factory.
"""

import asyncio
import dataclasses
import logging
import time
from datetime import datetime, timezone
from typing import Any, Iterable

from gateway.audit.logger import log_event
from gateway.engine.errors import GatewayError, NoProcessorsAvailableError, RequestValidationError
from gateway.engine.factory import ProcessorFactory
from gateway.engine.validation import validate_request
from gateway.models.enums import Currency, ErrorCode, HealthStatus, PaymentStatus, enum_value
from gateway.models.payment import PaymentRequest, PaymentResponse, ProcessorInfo
from gateway.processors.support import build_response, elapsed_ms, generate_transaction_id

logger = logging.getLogger("gateway.service")

PROBE_AMOUNT = 100  # One dollar, in cents


class PaymentService:
    def __init__(self, factory: ProcessorFactory):
        self.factory = factory

    async def charge(self, request: PaymentRequest) -> PaymentResponse:
        """
        Validate, resolve the adapter and charge.

        Args:
            request: Unified charge request.

        Returns:
            The adapter's response, or a FAILED response carrying a
            gateway-level error code when the request never reached a bank.
        """
        started = time.monotonic()
        log_event("charge_started", bank_id=request.bank_id, details={
            "amount": request.amount,
            "currency": enum_value(request.currency),
            "reference_id": request.reference_id,
        })

        try:
            result = validate_request(request)
            if not result.valid:
                raise RequestValidationError(result.first.message, result.issues)

            processor = self.factory.create_processor(request.bank_id, require_enabled=True)
            response = await processor.charge(request)

        except Exception as e:
            response = self._failure(request, e, started)
            logger.warning("Charge rejected for bank %s: %s", enum_value(request.bank_id), response.error_message)
            log_event("charge_failed", response.transaction_id, request.bank_id, details={
                "error_code": response.error_code,
                "error": response.error_message,
            })
            return response

        logger.info(
            "Charge %s via %s: %s in %dms",
            response.transaction_id,
            enum_value(request.bank_id),
            enum_value(response.status),
            response.processing_time_ms,
        )
        log_event("charge_completed", response.transaction_id, request.bank_id, details={
            "status": enum_value(response.status),
            "error_code": response.error_code,
        })
        return response

    # Same operation, kept under the name the HTTP layer and clients know
    process_payment = charge

    def _failure(self, request: PaymentRequest, error: Exception, started: float) -> PaymentResponse:
        if isinstance(error, GatewayError):
            code = error.error_code
        else:
            logger.exception("Unexpected error while charging")
            code = ErrorCode.PROCESSING_ERROR

        return build_response(
            request,
            PaymentStatus.FAILED,
            transaction_id=generate_transaction_id("failed"),
            error_message=str(error) or "Payment processing failed",
            error_code=code.value,
            processing_time_ms=elapsed_ms(started),
        )

    async def process_payment_auto(self, request: PaymentRequest, excluding: Iterable[Any] = ()) -> PaymentResponse:
        """Charge through the fastest enabled processor, whatever ``request.bank_id`` says."""
        try:
            processor = self.factory.get_best_processor(excluding)
        except NoProcessorsAvailableError as e:
            log_event("charge_failed", details={"error": str(e), "auto": True})
            return build_response(
                request,
                PaymentStatus.FAILED,
                transaction_id=generate_transaction_id("failed"),
                error_message=str(e),
                error_code=e.error_code.value,
                processing_time_ms=0,
            )

        logger.info("Auto-selected %s", processor.get_display_name())
        return await self.charge(dataclasses.replace(request, bank_id=processor.bank_id))

    def get_available_payment_methods(self) -> list[dict[str, Any]]:
        return self.factory.get_processor_summaries(enabled_only=True)

    def get_processor_info(self, bank_id: Any) -> ProcessorInfo:
        return self.factory.create_processor(bank_id).get_processor_info()

    def is_bank_available(self, bank_id: Any) -> bool:
        return self.factory.is_supported(bank_id)

    def enable_processor(self, bank_id: Any) -> None:
        self.factory.enable_processor(bank_id)

    def disable_processor(self, bank_id: Any) -> None:
        self.factory.disable_processor(bank_id)

    def get_health_status(self) -> dict[str, Any]:
        processors = self.factory.get_health_summary()
        total = len(processors)
        enabled = sum(1 for s in processors.values() if s == HealthStatus.HEALTHY)

        if total and enabled == total:
            overall = HealthStatus.HEALTHY
        elif enabled:
            overall = HealthStatus.DEGRADED
        else:
            overall = HealthStatus.UNHEALTHY

        return {
            "status": overall.value,
            "processors": {bank: status.value for bank, status in processors.items()},
            "enabled_processors": enabled,
            "total_processors": total,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def get_statistics(self) -> dict[str, Any]:
        return self.factory.get_statistics()

    async def test_connectivity(self) -> dict[str, dict[str, Any]]:
        """
        Send a small USD probe charge to every enabled processor at once.

        Disabled processors are reported as unsuccessful without being called.
        """
        results: dict[str, dict[str, Any]] = {}
        probes = []

        for processor in self.factory.get_all_processors():
            bank = processor.bank_id.value
            if not processor.config.enabled:
                results[bank] = {
                    "success": False,
                    "status": HealthStatus.DISABLED.value,
                    "response_time_ms": 0,
                    "error": "Processor disabled",
                }
                continue
            probes.append(
                PaymentRequest(
                    bank_id=processor.bank_id,
                    amount=PROBE_AMOUNT,
                    currency=Currency.USD,
                    description="Connectivity test",
                    reference_id=f"connectivity_{bank}",
                )
            )

        responses = await asyncio.gather(*(self.charge(p) for p in probes))
        for probe, response in zip(probes, responses):
            results[probe.bank_id.value] = {
                "success": response.succeeded,
                "status": enum_value(response.status),
                "response_time_ms": response.processing_time_ms,
                "error": response.error_message,
            }

        return {p.bank_id.value: results[p.bank_id.value] for p in self.factory.get_all_processors()}
