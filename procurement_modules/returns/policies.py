"""
Returns Validation Policies (``procurement_modules.returns.policies``).

Responsibility
--------------
The business rules that decide whether a return request may be created,
approved or rejected, whether a receipt may be recorded, and whether a
line item may be short closed.  Each ``validate_*`` function checks its
preconditions in a fixed order and raises the first violation.

Architecture
------------
Layer: **Modules** -- pure functions.  No I/O, no clock, no mutation.
Quantity rules are delegated to ``procurement_engines.returns``.

Failure Modes
-------------
Every violation raises a ``procurement_kernel.exceptions.ValidationError``
subclass carrying the offending values as attributes.  Nothing is logged
here; the service logs the rejection with its operation context.
"""

from __future__ import annotations

from decimal import Decimal

from procurement_engines.return_types import (
    LineItem,
    LineItemStatus,
    ReturnRequest,
)
from procurement_engines.returns import has_pending_returns, max_returnable_quantity
from procurement_kernel.domain.values import ZERO, fits_scale
from procurement_kernel.exceptions import (
    DuplicateReturnRequestError,
    InvalidQuantityError,
    LineItemAlreadyReceivedError,
    LineItemAlreadyShortClosedError,
    LineItemNotReceivedError,
    NoReceivedQuantityError,
    PendingReturnsError,
    ReceiptQuantityExceededError,
    RequestPendingApprovalError,
    ReturnNotPendingError,
    ReturnQuantityExceededError,
    ReturnReasonRequiredError,
    ReturnReasonTooLongError,
    ShortCloseNotAllowedError,
    ShortCloseReasonRequiredError,
    ShortCloseReasonTooLongError,
)
from procurement_modules.returns.config import ReturnsConfig

_SHORT_CLOSE_BLOCKED = frozenset({
    LineItemStatus.DISPATCHED,
    LineItemStatus.RECEIVED,
    LineItemStatus.SHORT_CLOSED,
})


def _check_scale(field: str, quantity: Decimal, places: int) -> None:
    if not fits_scale(quantity, places):
        raise InvalidQuantityError(field, quantity, f"at most {places} decimal places allowed")


def validate_return_creation(
    line_item: LineItem,
    quantity: Decimal,
    reason: str | None,
    config: ReturnsConfig,
) -> str:
    """
    Check that a new return request may be raised against ``line_item``.

    Order of checks:
        1. line item is RECEIVED
        2. line item has a positive actual quantity
        3. ``quantity`` is positive and within the configured scale
        4. no existing return request (when ``single_return_per_line_item``)
        5. ``quantity`` does not exceed the max returnable quantity
        6. ``reason`` is non-blank and within the configured length

    Returns:
        The stripped reason, ready to store.
    """
    if line_item.status is not LineItemStatus.RECEIVED:
        raise LineItemNotReceivedError(line_item.id, line_item.status.value)

    if line_item.actual_quantity is None or line_item.actual_quantity <= ZERO:
        raise NoReceivedQuantityError(line_item.id)

    if quantity <= ZERO:
        raise InvalidQuantityError("return_quantity", quantity, "must be greater than zero")
    _check_scale("return_quantity", quantity, config.quantity_places)

    if config.single_return_per_line_item and line_item.return_requests:
        raise DuplicateReturnRequestError(line_item.id, len(line_item.return_requests))

    limit = max_returnable_quantity(line_item)
    if quantity > limit:
        raise ReturnQuantityExceededError(line_item.id, quantity, limit)

    stripped = (reason or "").strip()
    if not stripped:
        raise ReturnReasonRequiredError()
    if len(stripped) > config.max_return_reason_length:
        raise ReturnReasonTooLongError(len(stripped), config.max_return_reason_length)
    return stripped


def validate_return_approval(line_item: LineItem, request: ReturnRequest) -> None:
    """
    Check that ``request`` may be approved.

    The quantity is re-checked against the current max returnable quantity,
    which may have shrunk since the request was raised.
    """
    if not request.is_pending:
        raise ReturnNotPendingError(request.id, request.return_status.value)

    if line_item.status is not LineItemStatus.RECEIVED:
        raise LineItemNotReceivedError(line_item.id, line_item.status.value)

    limit = max_returnable_quantity(line_item)
    if request.return_quantity > limit:
        raise ReturnQuantityExceededError(line_item.id, request.return_quantity, limit)


def validate_return_rejection(request: ReturnRequest) -> None:
    if not request.is_pending:
        raise ReturnNotPendingError(request.id, request.return_status.value)


def validate_receipt(
    line_item: LineItem,
    actual_quantity: Decimal,
    config: ReturnsConfig,
) -> None:
    """
    Check that a receipt of ``actual_quantity`` may be recorded.

    Zero is a valid receipt (nothing arrived).  The DISPATCHED status
    requirement is enforced by the line item workflow, not here.
    """
    if actual_quantity < ZERO:
        raise InvalidQuantityError("actual_quantity", actual_quantity, "cannot be negative")
    _check_scale("actual_quantity", actual_quantity, config.quantity_places)

    if (
        not config.allow_receipt_above_requested
        and actual_quantity > line_item.requested_quantity
    ):
        raise ReceiptQuantityExceededError(
            line_item.id, actual_quantity, line_item.requested_quantity,
        )

    if line_item.actual_quantity is not None:
        raise LineItemAlreadyReceivedError(line_item.id)


def validate_short_close(
    line_item: LineItem,
    reason: str | None,
    config: ReturnsConfig,
    request_requires_approval: bool = False,
) -> str:
    """
    Check that ``line_item`` may be short closed.

    Returns:
        The stripped reason, ready to store.
    """
    stripped = (reason or "").strip()
    if not stripped:
        raise ShortCloseReasonRequiredError()
    if len(stripped) > config.max_short_close_reason_length:
        raise ShortCloseReasonTooLongError(len(stripped), config.max_short_close_reason_length)

    if line_item.is_short_closed:
        raise LineItemAlreadyShortClosedError(line_item.id)

    if line_item.status in _SHORT_CLOSE_BLOCKED:
        raise ShortCloseNotAllowedError(line_item.id, line_item.status.value)

    if has_pending_returns(line_item):
        raise PendingReturnsError(line_item.id, "short close")

    if request_requires_approval:
        raise RequestPendingApprovalError("short close")
    return stripped


def validate_status_update(request_requires_approval: bool = False) -> None:
    """Line item status cannot move while the parent request awaits approval."""
    if request_requires_approval:
        raise RequestPendingApprovalError("update line item status")
