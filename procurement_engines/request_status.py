"""
procurement_engines.request_status -- Procurement request status rollup.

Responsibility:
    Derive a procurement request's status from the statuses of its line
    items.  The request status is a pure function of its items; the caller
    writes it back.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Rules (first match wins):
    1. No line items -> None (leave the request status unchanged).
    2. Every item RECEIVED, SHORT_CLOSED or CLOSED -> RECEIVED.
    3. Any item DISPATCHED -> DISPATCHED.
    4. Any item ORDERED -> ORDERED.
    5. Otherwise -> IN_PROGRESS.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from procurement_engines.return_types import LineItemStatus, ProcurementStatus
from procurement_engines.tracer import traced_engine

_SETTLED_STATES = frozenset({
    LineItemStatus.RECEIVED,
    LineItemStatus.SHORT_CLOSED,
    LineItemStatus.CLOSED,
})


@traced_engine("request_status", "1.0", fingerprint_fields=("statuses",))
def calculate_request_status(
    statuses: Sequence[LineItemStatus],
) -> ProcurementStatus | None:
    """Roll line item statuses up into a procurement request status."""
    counts = Counter(statuses)
    total = sum(counts.values())
    if total == 0:
        return None

    settled = sum(counts[s] for s in _SETTLED_STATES)
    if settled == total:
        return ProcurementStatus.RECEIVED
    if counts[LineItemStatus.DISPATCHED]:
        return ProcurementStatus.DISPATCHED
    if counts[LineItemStatus.ORDERED]:
        return ProcurementStatus.ORDERED
    return ProcurementStatus.IN_PROGRESS
