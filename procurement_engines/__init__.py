"""
Module: procurement_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for higher
    layers (procurement_services, procurement_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import procurement_kernel (and sibling engine modules).
    MUST NOT import procurement_services or procurement_modules.

Invariants enforced:
    - Purity: engines never read the clock, never touch storage.
    - Decimal-only arithmetic for quantities; floats are never produced.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from procurement_engines import compute_effective_quantity, recompute_return_totals
    from procurement_engines import calculate_request_status
"""

from procurement_engines.request_status import calculate_request_status
from procurement_engines.return_types import (
    LineItem,
    LineItemStatus,
    ProcurementStatus,
    ReturnRequest,
    ReturnStatus,
    ReturnSummary,
    ReturnTotals,
)
from procurement_engines.returns import (
    calculate_return_totals,
    can_be_returned,
    can_close_request,
    compute_effective_quantity,
    has_pending_returns,
    max_returnable_quantity,
    recompute_return_totals,
    summarize_returns,
)
from procurement_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Types
    "LineItem",
    "LineItemStatus",
    "ProcurementStatus",
    "ReturnRequest",
    "ReturnStatus",
    "ReturnSummary",
    "ReturnTotals",
    # Return lifecycle
    "calculate_return_totals",
    "can_be_returned",
    "can_close_request",
    "compute_effective_quantity",
    "has_pending_returns",
    "max_returnable_quantity",
    "recompute_return_totals",
    "summarize_returns",
    # Request rollup
    "calculate_request_status",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
