"""
Returns Module Service (``procurement_modules.returns.service``).

Responsibility
--------------
Orchestrates the return lifecycle of procurement line items -- raising,
approving and rejecting return requests, recording receipt, moving line
items through their status workflow, and short closing -- by delegating
quantity rules to ``procurement_engines.returns``, validation to
``procurement_modules.returns.policies``, and state transitions to
``procurement_services.workflow_executor``.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ReturnsService`` is the sole public
entry point for return-lifecycle operations.  It works on in-memory
records handed to it; loading and saving them is the caller's concern.

Invariants enforced
-------------------
* Every change to a line item's return requests is followed by
  ``recompute_return_totals`` before the method returns, so the cached
  ``total_returned_quantity`` / ``has_returns`` never lag the collection.
* Validation runs before any mutation: a failed call leaves the line item
  exactly as it was.
* Role gating happens first; an unauthorized caller learns nothing about
  the line item's state.

Failure modes
-------------
* ``UnauthorizedActionError`` -- actor role may not perform the action.
* ``ValidationError`` subclasses -- business rule violations.
* ``InvalidTransitionError`` / ``GuardFailedError`` -- workflow refused.
* ``ReturnRequestNotFoundError`` -- id not owned by the line item.

All failures are logged at WARNING with the error code and re-raised.

Usage::

    service = ReturnsService(ReturnsConfig.with_defaults(), clock=clock)
    request = service.create_return_request(
        line_item, quantity="5", reason="Damaged in transit",
        actor_id=actor_id, actor_role=UserRole.FACTORY_USER,
    )
    service.approve_return_request(
        line_item, request.id, approver_id=manager_id,
        actor_role=UserRole.MANAGEMENT,
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from decimal import Decimal
from uuid import UUID, uuid4

from procurement_engines.request_status import calculate_request_status
from procurement_engines.return_types import (
    LineItem,
    LineItemStatus,
    ProcurementStatus,
    ReturnRequest,
    ReturnStatus,
    ReturnSummary,
)
from procurement_engines.returns import (
    can_close_request,
    has_pending_returns,
    max_returnable_quantity,
    recompute_return_totals,
    summarize_returns,
)
from procurement_kernel.domain.clock import Clock, SystemClock
from procurement_kernel.domain.values import to_quantity
from procurement_kernel.exceptions import (
    InvalidTransitionError,
    ProcurementError,
    ReturnRequestNotFoundError,
    UnauthorizedActionError,
)
from procurement_kernel.logging_config import LogContext, get_logger
from procurement_modules.returns.config import ReturnsConfig
from procurement_modules.returns.models import (
    APPROVAL_ROLES,
    DECISION_ROLES,
    FACTORY_ROLES,
    ProcurementRequest,
    UserRole,
)
from procurement_modules.returns.policies import (
    validate_receipt,
    validate_return_approval,
    validate_return_creation,
    validate_return_rejection,
    validate_short_close,
    validate_status_update,
)
from procurement_modules.returns.workflows import LINE_ITEM_WORKFLOW, RETURN_REQUEST_WORKFLOW
from procurement_services.workflow_executor import WorkflowExecutor

logger = get_logger("modules.returns.service")

# Status moves reachable through update_line_item_status; receive and
# short_close have their own operations.
_STATUS_ACTIONS = frozenset({"start", "order", "dispatch", "close"})


class ReturnsService:
    """
    Orchestrates return-lifecycle operations through policies, engines and
    the workflow executor.

    Contract
    --------
    * Mutating methods change the ``LineItem`` passed in and return the
      affected record.  ``ReturnRequest`` records are immutable; a decision
      replaces the request in ``line_item.return_requests``.
    * Query methods (``summarize_returns``, ``can_close_request``) have no
      side effects.

    Guarantees
    ----------
    * Clock is injectable for deterministic testing.
    * Callers must serialize operations on the same line item.
    """

    def __init__(
        self,
        config: ReturnsConfig | None = None,
        clock: Clock | None = None,
        workflow_executor: WorkflowExecutor | None = None,
    ):
        self._config = config or ReturnsConfig.with_defaults()
        self._clock = clock or SystemClock()
        self._workflow_executor = workflow_executor or WorkflowExecutor()

    @property
    def config(self) -> ReturnsConfig:
        return self._config

    # =========================================================================
    # Return requests
    # =========================================================================

    def create_return_request(
        self,
        line_item: LineItem,
        quantity: Decimal | str | int,
        reason: str | None,
        actor_id: UUID,
        actor_role: UserRole,
    ) -> ReturnRequest:
        """
        Raise a return request against a received line item.

        Factory users only.  The new request starts in RETURN_REQUESTED and
        does not count towards ``total_returned_quantity`` until approved.
        """
        with self._operation("create_return_request", line_item, actor_id=actor_id):
            self._require_role("create return requests", actor_role, FACTORY_ROLES)
            qty = to_quantity(quantity, "return_quantity")
            stripped = validate_return_creation(line_item, qty, reason, self._config)

            request = ReturnRequest(
                id=uuid4(),
                line_item_id=line_item.id,
                return_quantity=qty,
                return_reason=stripped,
                return_status=ReturnStatus.RETURN_REQUESTED,
                requested_by=actor_id,
                requested_at=self._clock.now(),
            )
            if line_item.return_requests is None:
                line_item.return_requests = []
            line_item.return_requests.append(request)
            totals = recompute_return_totals(line_item)

            logger.info("return_request_created", extra={
                "return_request_id": str(request.id),
                "return_quantity": str(qty),
                "max_returnable_quantity": str(max_returnable_quantity(line_item)),
                "total_returned_quantity": str(totals.total_returned_quantity),
            })
            return request

    def approve_return_request(
        self,
        line_item: LineItem,
        return_request_id: UUID,
        approver_id: UUID,
        actor_role: UserRole,
    ) -> ReturnRequest:
        """
        Approve a pending return request.  Purchase team or management only.

        The approved quantity is folded into ``total_returned_quantity``.
        """
        with self._operation(
            "approve_return_request", line_item,
            actor_id=approver_id, return_request_id=return_request_id,
        ):
            self._require_role("approve return requests", actor_role, DECISION_ROLES)
            request = self._find_return_request(line_item, return_request_id)
            validate_return_approval(line_item, request)

            new_state = self._workflow_executor.require_transition(
                RETURN_REQUEST_WORKFLOW,
                "return_request",
                request.id,
                request.return_status.value,
                "approve",
                context={
                    "return_quantity": request.return_quantity,
                    "max_returnable": max_returnable_quantity(line_item),
                },
            )
            approved = replace(
                request,
                return_status=ReturnStatus(new_state),
                approved_by=approver_id,
                decided_at=self._clock.now(),
            )
            self._replace_return_request(line_item, approved)
            totals = recompute_return_totals(line_item)

            logger.info("return_request_approved", extra={
                "return_request_id": str(approved.id),
                "return_quantity": str(approved.return_quantity),
                "total_returned_quantity": str(totals.total_returned_quantity),
                "has_returns": totals.has_returns,
            })
            return approved

    def reject_return_request(
        self,
        line_item: LineItem,
        return_request_id: UUID,
        approver_id: UUID,
        actor_role: UserRole,
        reason: str | None = None,
    ) -> ReturnRequest:
        """Reject a pending return request.  Purchase team or management only."""
        with self._operation(
            "reject_return_request", line_item,
            actor_id=approver_id, return_request_id=return_request_id,
        ):
            self._require_role("reject return requests", actor_role, DECISION_ROLES)
            request = self._find_return_request(line_item, return_request_id)
            validate_return_rejection(request)

            new_state = self._workflow_executor.require_transition(
                RETURN_REQUEST_WORKFLOW,
                "return_request",
                request.id,
                request.return_status.value,
                "reject",
            )
            rejected = replace(
                request,
                return_status=ReturnStatus(new_state),
                approved_by=approver_id,
                decided_at=self._clock.now(),
                rejection_reason=(reason or "").strip() or None,
            )
            self._replace_return_request(line_item, rejected)
            totals = recompute_return_totals(line_item)

            logger.info("return_request_rejected", extra={
                "return_request_id": str(rejected.id),
                "return_quantity": str(rejected.return_quantity),
                "total_returned_quantity": str(totals.total_returned_quantity),
            })
            return rejected

    # =========================================================================
    # Line item lifecycle
    # =========================================================================

    def receive_line_item(
        self,
        line_item: LineItem,
        actual_quantity: Decimal | str | int,
        actor_role: UserRole,
    ) -> LineItem:
        """Record the quantity that arrived and mark the line item RECEIVED.  Factory users only."""
        with self._operation("receive_line_item", line_item):
            self._require_role("receive line items", actor_role, FACTORY_ROLES)
            qty = to_quantity(actual_quantity, "actual_quantity")
            validate_receipt(line_item, qty, self._config)

            new_state = self._workflow_executor.require_transition(
                LINE_ITEM_WORKFLOW,
                "line_item",
                line_item.id,
                line_item.status.value,
                "receive",
            )
            line_item.actual_quantity = qty
            line_item.status = LineItemStatus(new_state)

            logger.info("line_item_received", extra={
                "actual_quantity": str(qty),
                "requested_quantity": str(line_item.requested_quantity),
            })
            return line_item

    def update_line_item_status(
        self,
        line_item: LineItem,
        action: str,
        actor_role: UserRole,
        request_requires_approval: bool = False,
    ) -> LineItem:
        """
        Move a line item along its workflow (start, order, dispatch, close).

        Purchase team or management only.  While the parent request awaits
        approval only approvers may move line items.
        """
        with self._operation("update_line_item_status", line_item):
            self._require_role("update line item status", actor_role, DECISION_ROLES)
            if action not in _STATUS_ACTIONS:
                raise InvalidTransitionError(LINE_ITEM_WORKFLOW.name, line_item.status.value, action)
            validate_status_update(self._is_locked(request_requires_approval, actor_role))

            previous = line_item.status
            new_state = self._workflow_executor.require_transition(
                LINE_ITEM_WORKFLOW,
                "line_item",
                line_item.id,
                previous.value,
                action,
                context={"has_pending_returns": has_pending_returns(line_item)},
            )
            line_item.status = LineItemStatus(new_state)

            logger.info("line_item_status_updated", extra={
                "action": action,
                "from_status": previous.value,
                "to_status": line_item.status.value,
            })
            return line_item

    def short_close_line_item(
        self,
        line_item: LineItem,
        reason: str | None,
        actor_role: UserRole,
        request_requires_approval: bool = False,
    ) -> LineItem:
        """
        Close a line item that will not be (fully) delivered.

        Purchase team or management only.  The actual quantity is set to
        zero since nothing was received.
        """
        with self._operation("short_close_line_item", line_item):
            self._require_role("short close line items", actor_role, DECISION_ROLES)
            stripped = validate_short_close(
                line_item,
                reason,
                self._config,
                self._is_locked(request_requires_approval, actor_role),
            )

            new_state = self._workflow_executor.require_transition(
                LINE_ITEM_WORKFLOW,
                "line_item",
                line_item.id,
                line_item.status.value,
                "short_close",
                context={"has_pending_returns": has_pending_returns(line_item)},
            )
            line_item.is_short_closed = True
            line_item.short_close_reason = stripped
            line_item.status = LineItemStatus(new_state)
            line_item.actual_quantity = Decimal("0")

            logger.info("line_item_short_closed", extra={
                "short_close_reason": stripped,
                "requested_quantity": str(line_item.requested_quantity),
            })
            return line_item

    # =========================================================================
    # Procurement request queries
    # =========================================================================

    def summarize_returns(self, line_items: Iterable[LineItem]) -> ReturnSummary:
        return summarize_returns(line_items)

    def can_close_request(self, line_items: Iterable[LineItem]) -> bool:
        return can_close_request(line_items)

    def refresh_request_status(self, procurement_request: ProcurementRequest) -> ProcurementStatus:
        """
        Roll line item statuses up into the procurement request status.

        Leaves the status unchanged when the request has no line items.
        """
        with LogContext.bind(procurement_request_id=procurement_request.id):
            derived = calculate_request_status(procurement_request.line_item_statuses)
            previous = procurement_request.status
            if derived is not None:
                procurement_request.status = derived
            logger.info("procurement_request_status_refreshed", extra={
                "from_status": previous.value,
                "to_status": procurement_request.status.value,
                "line_item_count": len(procurement_request.line_items),
            })
            return procurement_request.status

    # =========================================================================
    # Helpers
    # =========================================================================

    @contextmanager
    def _operation(
        self,
        operation: str,
        line_item: LineItem,
        actor_id: UUID | None = None,
        return_request_id: UUID | None = None,
    ) -> Iterator[None]:
        with LogContext.bind(
            actor_id=actor_id,
            procurement_request_id=line_item.procurement_request_id,
            line_item_id=line_item.id,
            return_request_id=return_request_id,
        ):
            logger.info("returns_operation_started", extra={"operation": operation})
            try:
                yield
            except ProcurementError as exc:
                logger.warning("returns_operation_failed", extra={
                    "operation": operation,
                    "error_code": exc.code,
                    "error": str(exc),
                })
                raise

    @staticmethod
    def _require_role(
        action: str,
        actor_role: UserRole,
        allowed: tuple[UserRole, ...],
    ) -> None:
        if actor_role not in allowed:
            raise UnauthorizedActionError(
                action,
                getattr(actor_role, "value", str(actor_role)),
                tuple(r.value for r in allowed),
            )

    @staticmethod
    def _is_locked(request_requires_approval: bool, actor_role: UserRole) -> bool:
        return request_requires_approval and actor_role not in APPROVAL_ROLES

    @staticmethod
    def _find_return_request(line_item: LineItem, return_request_id: UUID) -> ReturnRequest:
        for request in line_item.return_requests or ():
            if request.id == return_request_id:
                return request
        raise ReturnRequestNotFoundError(return_request_id, line_item.id)

    @staticmethod
    def _replace_return_request(line_item: LineItem, updated: ReturnRequest) -> None:
        requests = line_item.return_requests or []
        line_item.return_requests = [
            updated if r.id == updated.id else r for r in requests
        ]
