"""
Return-lifecycle domain types.

Enums and records consumed by the return-lifecycle engine
(``procurement_engines.returns``) and the returns module service.

Architecture: procurement_engines -- pure domain, zero I/O.

A ``LineItem`` is the aggregate root: it owns its ``ReturnRequest`` list and
carries two cached fields (``total_returned_quantity``, ``has_returns``) that
are only ever written by ``recompute_return_totals``.  A ``ReturnRequest``
refers back to its line item by id, never by object reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from procurement_kernel.domain.values import ZERO


# =============================================================================
# Enums
# =============================================================================


class LineItemStatus(str, Enum):
    """Line item lifecycle states."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    ORDERED = "ordered"
    DISPATCHED = "dispatched"
    RECEIVED = "received"
    SHORT_CLOSED = "short_closed"
    CLOSED = "closed"


class ReturnStatus(str, Enum):
    """Return request states. APPROVED and REJECTED are terminal."""

    RETURN_REQUESTED = "return_requested"
    RETURN_APPROVED = "return_approved"
    RETURN_REJECTED = "return_rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ReturnStatus.RETURN_REQUESTED


class ProcurementStatus(str, Enum):
    """Procurement request lifecycle states."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    IN_PROGRESS = "in_progress"
    ORDERED = "ordered"
    DISPATCHED = "dispatched"
    RECEIVED = "received"
    CLOSED = "closed"
    CANCELLED = "cancelled"


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class ReturnRequest:
    """A request to send back previously received quantity of a line item."""

    id: UUID
    line_item_id: UUID
    return_quantity: Decimal
    return_reason: str = ""
    return_status: ReturnStatus = ReturnStatus.RETURN_REQUESTED
    requested_by: UUID | None = None
    approved_by: UUID | None = None
    requested_at: datetime | None = None
    decided_at: datetime | None = None
    rejection_reason: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.return_status is ReturnStatus.RETURN_REQUESTED

    @property
    def is_approved(self) -> bool:
        return self.return_status is ReturnStatus.RETURN_APPROVED


@dataclass
class LineItem:
    """One material/quantity entry within a procurement request.

    ``actual_quantity`` stays None until receipt is recorded.
    ``return_requests`` may be None for records loaded without their returns.
    """

    id: UUID
    requested_quantity: Decimal
    procurement_request_id: UUID | None = None
    material_id: UUID | None = None
    actual_quantity: Decimal | None = None
    status: LineItemStatus = LineItemStatus.PENDING
    total_returned_quantity: Decimal | None = ZERO
    has_returns: bool = False
    is_short_closed: bool = False
    short_close_reason: str | None = None
    return_requests: list[ReturnRequest] | None = field(default_factory=list)


@dataclass(frozen=True)
class ReturnTotals:
    """Recomputed aggregate return fields for one line item."""

    total_returned_quantity: Decimal
    has_returns: bool


@dataclass(frozen=True)
class ReturnSummary:
    """Return counts and approved quantity across a set of line items."""

    total_returns: int = 0
    pending_returns: int = 0
    approved_returns: int = 0
    rejected_returns: int = 0
    total_returned_quantity: Decimal = ZERO
