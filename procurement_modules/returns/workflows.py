"""
Returns Workflows.

State machines for return requests and the line items they are raised
against.
"""

from procurement_engines.return_types import LineItemStatus, ReturnStatus
from procurement_kernel.domain.workflow import Guard, Transition, Workflow
from procurement_kernel.logging_config import get_logger

logger = get_logger("modules.returns.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

RETURN_QUANTITY_AVAILABLE = Guard(
    name="return_quantity_available",
    description="Return quantity does not exceed the line item's returnable quantity",
)

NO_PENDING_RETURNS = Guard(
    name="no_pending_returns",
    description="Line item has no return request awaiting a decision",
)

logger.info(
    "returns_workflow_guards_defined",
    extra={
        "guards": [
            RETURN_QUANTITY_AVAILABLE.name,
            NO_PENDING_RETURNS.name,
        ],
    },
)


# -----------------------------------------------------------------------------
# Return Request Workflow
# -----------------------------------------------------------------------------

_REQUESTED = ReturnStatus.RETURN_REQUESTED.value
_APPROVED = ReturnStatus.RETURN_APPROVED.value
_REJECTED = ReturnStatus.RETURN_REJECTED.value

RETURN_REQUEST_WORKFLOW = Workflow(
    name="return_request",
    description="Return request decision lifecycle",
    initial_state=_REQUESTED,
    states=(_REQUESTED, _APPROVED, _REJECTED),
    transitions=(
        Transition(_REQUESTED, _APPROVED, action="approve", guard=RETURN_QUANTITY_AVAILABLE),
        Transition(_REQUESTED, _REJECTED, action="reject"),
    ),
    terminal_states=(_APPROVED, _REJECTED),
)

logger.info(
    "returns_request_workflow_registered",
    extra={
        "workflow_name": RETURN_REQUEST_WORKFLOW.name,
        "state_count": len(RETURN_REQUEST_WORKFLOW.states),
        "transition_count": len(RETURN_REQUEST_WORKFLOW.transitions),
        "initial_state": RETURN_REQUEST_WORKFLOW.initial_state,
    },
)


# -----------------------------------------------------------------------------
# Line Item Workflow
# -----------------------------------------------------------------------------

_S = LineItemStatus

LINE_ITEM_WORKFLOW = Workflow(
    name="line_item",
    description="Procurement line item lifecycle",
    initial_state=_S.PENDING.value,
    states=tuple(s.value for s in LineItemStatus),
    transitions=(
        Transition(_S.PENDING.value, _S.IN_PROGRESS.value, action="start"),
        Transition(_S.PENDING.value, _S.ORDERED.value, action="order"),
        Transition(_S.IN_PROGRESS.value, _S.ORDERED.value, action="order"),
        Transition(_S.ORDERED.value, _S.DISPATCHED.value, action="dispatch"),
        Transition(_S.DISPATCHED.value, _S.RECEIVED.value, action="receive"),
        Transition(_S.PENDING.value, _S.SHORT_CLOSED.value, action="short_close", guard=NO_PENDING_RETURNS),
        Transition(_S.IN_PROGRESS.value, _S.SHORT_CLOSED.value, action="short_close", guard=NO_PENDING_RETURNS),
        Transition(_S.ORDERED.value, _S.SHORT_CLOSED.value, action="short_close", guard=NO_PENDING_RETURNS),
        Transition(_S.RECEIVED.value, _S.CLOSED.value, action="close", guard=NO_PENDING_RETURNS),
        Transition(_S.SHORT_CLOSED.value, _S.CLOSED.value, action="close"),
    ),
    terminal_states=(_S.CLOSED.value,),
)

logger.info(
    "returns_line_item_workflow_registered",
    extra={
        "workflow_name": LINE_ITEM_WORKFLOW.name,
        "state_count": len(LINE_ITEM_WORKFLOW.states),
        "transition_count": len(LINE_ITEM_WORKFLOW.transitions),
        "initial_state": LINE_ITEM_WORKFLOW.initial_state,
    },
)
