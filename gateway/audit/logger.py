"""
Append-only audit trail for gateway operations.

Every charge and every processor state change gets an audit line with:
  - Transaction ID (which charge it relates to, if any)
  - Bank ID (which processor)
  - Action (what happened)
  - Details (amounts, statuses, error codes)

The gateway has no storage, so the trail lives in the log stream. Entries
go to the dedicated ``gateway.audit`` logger so they can be routed to a
separate sink.
"""

import json
import logging
from typing import Any, Optional

from gateway.models.enums import enum_value

logger = logging.getLogger("gateway.audit")


def log_event(
    action: str,
    transaction_id: Optional[str] = None,
    bank_id: Any = None,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Emit an audit log entry.

    Args:
        action: What happened (e.g. "charge_started", "processor_disabled").
        transaction_id: The charge this event relates to.
        bank_id: The processor this event relates to.
        details: Arbitrary context (serialized to JSON).

    Returns:
        The entry as a dict, mainly so callers and tests can inspect it.
    """
    entry = {
        "action": action,
        "transaction_id": transaction_id,
        "bank_id": enum_value(bank_id),
        "details": details or {},
    }
    logger.info(
        "AUDIT | txn=%s bank=%s action=%s | %s",
        transaction_id or "-",
        entry["bank_id"] or "-",
        action,
        json.dumps(details, default=str)[:200] if details else "",
    )
    return entry
