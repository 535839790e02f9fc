"""
procurement_engines.returns -- Line item return-lifecycle engine.

Responsibility:
    The rules governing how a line item's received quantity, returned
    quantity and status interact: effective quantity, return eligibility,
    maximum returnable quantity, pending-return detection, and recomputation
    of the cached return totals.  Also the request-level aggregates built on
    them (return summary, close eligibility).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import procurement_kernel and sibling engine modules.
    Consumed by procurement_modules.returns (policies and service).

Invariants enforced:
    - ``total_returned_quantity`` is the sum of ``return_quantity`` over
      RETURN_APPROVED requests only, recomputed from the full collection on
      every call, never incrementally patched.
    - ``has_returns`` is true iff that sum is strictly positive.
    - Effective quantity is NOT clamped at zero.  Approved returns in excess
      of receipt yield a negative value, and a WARNING is logged so the
      anomaly is visible; callers decide what to do with it.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    None.  Every operation is total over well-formed records: absent
    optional quantities are treated per the rules below, never raised on.

Concurrency:
    Synchronous, lock-free, no shared state.  Callers must serialize
    ``recompute_return_totals`` per line item (one transaction or one
    aggregate update) so partial updates are never observed.

Usage:
    from procurement_engines.returns import (
        can_be_returned,
        max_returnable_quantity,
        recompute_return_totals,
    )

    if can_be_returned(line_item):
        limit = max_returnable_quantity(line_item)
    ...
    totals = recompute_return_totals(line_item)
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from procurement_engines.return_types import (
    LineItem,
    LineItemStatus,
    ReturnRequest,
    ReturnStatus,
    ReturnSummary,
    ReturnTotals,
)
from procurement_engines.tracer import traced_engine
from procurement_kernel.domain.values import ZERO
from procurement_kernel.logging_config import get_logger

logger = get_logger("engines.returns")


def compute_effective_quantity(line_item: LineItem) -> Decimal:
    """
    Received quantity net of approved returns.

    Rules:
        - ``actual_quantity`` absent -> 0.
        - ``total_returned_quantity`` absent -> ``actual_quantity``.
        - otherwise ``actual_quantity - total_returned_quantity``.

    The result is not clamped; see the module docstring.
    """
    if line_item.actual_quantity is None:
        return ZERO
    if line_item.total_returned_quantity is None:
        return line_item.actual_quantity

    effective = line_item.actual_quantity - line_item.total_returned_quantity
    if effective < ZERO:
        logger.warning(
            "effective_quantity_negative",
            extra={
                "line_item_id": str(line_item.id),
                "actual_quantity": str(line_item.actual_quantity),
                "total_returned_quantity": str(line_item.total_returned_quantity),
                "effective_quantity": str(effective),
            },
        )
    return effective


def can_be_returned(line_item: LineItem) -> bool:
    """
    True iff a new return request may be raised against the line item.

    Requires status RECEIVED, a positive ``actual_quantity``, and a positive
    effective quantity.
    """
    if line_item.status is not LineItemStatus.RECEIVED:
        return False
    if line_item.actual_quantity is None or line_item.actual_quantity <= ZERO:
        return False
    return compute_effective_quantity(line_item) > ZERO


def max_returnable_quantity(line_item: LineItem) -> Decimal:
    """Upper bound for a requested return quantity (the effective quantity)."""
    return compute_effective_quantity(line_item)


def has_pending_returns(line_item: LineItem) -> bool:
    """True iff any owned return request is still RETURN_REQUESTED."""
    if not line_item.return_requests:
        return False
    return any(r.is_pending for r in line_item.return_requests)


@traced_engine("return_lifecycle", "1.0", fingerprint_fields=("return_requests",))
def calculate_return_totals(
    return_requests: Iterable[ReturnRequest] | None,
) -> ReturnTotals:
    """
    Fold a return-request collection into its aggregate totals.

    Only RETURN_APPROVED requests contribute.  An empty or absent
    collection yields ``ReturnTotals(0, False)``.
    """
    total = ZERO
    for request in return_requests or ():
        if request.is_approved:
            total += request.return_quantity
    return ReturnTotals(total_returned_quantity=total, has_returns=total > ZERO)


def recompute_return_totals(line_item: LineItem) -> ReturnTotals:
    """
    Rewrite the line item's cached return fields from its return requests.

    Must be called after any return request is added, removed, approved or
    rejected.  Mutates ``total_returned_quantity`` and ``has_returns`` and
    returns the new values.  Idempotent.
    """
    totals = calculate_return_totals(line_item.return_requests)
    previous = (line_item.total_returned_quantity, line_item.has_returns)

    line_item.total_returned_quantity = totals.total_returned_quantity
    line_item.has_returns = totals.has_returns

    logger.debug(
        "return_totals_recomputed",
        extra={
            "line_item_id": str(line_item.id),
            "previous_total_returned_quantity": str(previous[0]),
            "total_returned_quantity": str(totals.total_returned_quantity),
            "has_returns": totals.has_returns,
            "changed": previous != (totals.total_returned_quantity, totals.has_returns),
        },
    )
    return totals


def summarize_returns(line_items: Iterable[LineItem]) -> ReturnSummary:
    """Count returns by status and total the approved quantity."""
    total = pending = approved = rejected = 0
    quantity = ZERO
    for line_item in line_items:
        for request in line_item.return_requests or ():
            total += 1
            if request.is_pending:
                pending += 1
            elif request.is_approved:
                approved += 1
                quantity += request.return_quantity
            elif request.return_status is ReturnStatus.RETURN_REJECTED:
                rejected += 1
    return ReturnSummary(
        total_returns=total,
        pending_returns=pending,
        approved_returns=approved,
        rejected_returns=rejected,
        total_returned_quantity=quantity,
    )


def can_close_request(line_items: Iterable[LineItem]) -> bool:
    """A procurement request cannot close while any return decision is outstanding."""
    return not any(has_pending_returns(line_item) for line_item in line_items)
