"""
Processor registry: one adapter per bank, resolved by bank id.

The registry is fixed at construction. The only thing that changes at
runtime is each adapter's ``config.enabled`` flag, flipped through
``enable_processor``/``disable_processor``. Everything else here is a
read-only projection over the registered set.
"""

import logging
from collections import Counter
from typing import Any, Iterable, Mapping, Optional

from gateway.audit.logger import log_event
from gateway.engine.errors import (
    BankDisabledError,
    NoProcessorsAvailableError,
    ProcessorNotFoundError,
    UnsupportedBankError,
)
from gateway.models.enums import BankId, HealthStatus, coerce_bank_id
from gateway.processors.adyen import AdyenProcessor
from gateway.processors.base import PaymentProcessor
from gateway.processors.braintree import BraintreeProcessor
from gateway.processors.paypal import PayPalProcessor
from gateway.processors.square import SquareProcessor
from gateway.processors.stripe import StripeProcessor

logger = logging.getLogger("gateway.factory")

PROCESSOR_CLASSES: dict[BankId, type[PaymentProcessor]] = {
    BankId.STRIPE: StripeProcessor,
    BankId.PAYPAL: PayPalProcessor,
    BankId.SQUARE: SquareProcessor,
    BankId.ADYEN: AdyenProcessor,
    BankId.BRAINTREE: BraintreeProcessor,
}


class ProcessorFactory:
    def __init__(self, processors: Optional[Mapping[BankId, PaymentProcessor]] = None):
        if processors is None:
            processors = {bank: cls() for bank, cls in PROCESSOR_CLASSES.items()}
        self._processors: dict[BankId, PaymentProcessor] = dict(processors)
        logger.info(
            "Factory initialized with %d processors: %s",
            len(self._processors),
            ", ".join(b.value for b in self._processors),
        )

    def _lookup(self, bank_id: Any) -> Optional[PaymentProcessor]:
        return self._processors.get(coerce_bank_id(bank_id))

    def create_processor(self, bank_id: Any, require_enabled: bool = False) -> PaymentProcessor:
        """
        Resolve a bank id to its adapter.

        Raises:
            UnsupportedBankError: No adapter is registered for the id.
            BankDisabledError: ``require_enabled`` is set and the adapter is disabled.
        """
        processor = self._lookup(bank_id)
        if processor is None:
            raise UnsupportedBankError(bank_id, self._processors)
        if require_enabled and not processor.config.enabled:
            raise BankDisabledError(processor.bank_id)
        return processor

    def is_registered(self, bank_id: Any) -> bool:
        return self._lookup(bank_id) is not None

    def is_supported(self, bank_id: Any) -> bool:
        processor = self._lookup(bank_id)
        return processor is not None and processor.config.enabled

    def get_all_processors(self) -> list[PaymentProcessor]:
        return list(self._processors.values())

    def get_supported_banks(self) -> list[BankId]:
        return list(self._processors)

    def get_enabled_processors(self) -> list[PaymentProcessor]:
        return [p for p in self._processors.values() if p.config.enabled]

    def enable_processor(self, bank_id: Any) -> None:
        self._set_enabled(bank_id, True)

    def disable_processor(self, bank_id: Any) -> None:
        self._set_enabled(bank_id, False)

    def _set_enabled(self, bank_id: Any, enabled: bool) -> None:
        processor = self._lookup(bank_id)
        if processor is None:
            raise ProcessorNotFoundError(bank_id)

        was_enabled = processor.config.enabled
        processor.config.enabled = enabled
        action = "processor_enabled" if enabled else "processor_disabled"
        logger.info("%s %s", processor.get_display_name(), "enabled" if enabled else "disabled")
        log_event(action, bank_id=processor.bank_id, details={"was_enabled": was_enabled})

    def get_best_processor(self, excluding: Iterable[Any] = ()) -> PaymentProcessor:
        """
        Pick the enabled processor with the lowest advertised latency.

        Ties go to the earliest registered bank.

        Raises:
            NoProcessorsAvailableError: Nothing enabled is left after exclusions.
        """
        skip = {coerce_bank_id(b) for b in excluding}
        candidates = [p for p in self.get_enabled_processors() if p.bank_id not in skip]
        if not candidates:
            raise NoProcessorsAvailableError()
        # min() keeps the first of equal keys, i.e. registration order
        return min(candidates, key=lambda p: p.get_processor_info().average_processing_time_ms)

    # --- Read-only projections ---

    def get_processor_summaries(self, enabled_only: bool = False) -> list[dict[str, Any]]:
        processors = self.get_enabled_processors() if enabled_only else self.get_all_processors()
        summaries = []
        for p in processors:
            info = p.get_processor_info()
            summaries.append(
                {
                    "bank_id": p.bank_id.value,
                    "name": info.name,
                    "display_name": info.display_name,
                    "enabled": p.config.enabled,
                    "protocol": info.protocol.value,
                    "features": list(info.features),
                    "average_processing_time_ms": info.average_processing_time_ms,
                }
            )
        return summaries

    def get_health_summary(self) -> dict[str, HealthStatus]:
        return {
            p.bank_id.value: HealthStatus.HEALTHY if p.config.enabled else HealthStatus.DISABLED
            for p in self._processors.values()
        }

    def get_statistics(self) -> dict[str, Any]:
        enabled = self.get_enabled_processors()
        infos = {p.bank_id: p.get_processor_info() for p in self._processors.values()}
        latencies = [infos[p.bank_id].average_processing_time_ms for p in enabled]
        fastest = self.get_best_processor() if enabled else None

        return {
            "total_processors": len(self._processors),
            "enabled_processors": len(enabled),
            "disabled_processors": len(self._processors) - len(enabled),
            "average_processing_time_ms": round(sum(latencies) / len(latencies)) if latencies else 0,
            "protocols": dict(Counter(info.protocol.value for info in infos.values())),
            "fastest_processor": fastest.bank_id.value if fastest else None,
        }
