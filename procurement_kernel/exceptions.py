"""
Typed Exception Hierarchy for the Procurement Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the returns workflow need to tell "quantity too large" apart from
"line item not received" without parsing message strings.  Every error:
  1. Has its own class (catch by type, not message)
  2. Carries a class-level ``code`` (machine-readable, API-safe)
  3. Stores its context as attributes (not just a message string)

Example:
    try:
        service.create_return_request(line_item, quantity, reason, ...)
    except ReturnQuantityExceededError as e:
        respond(code=e.code, max_returnable=e.max_returnable)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ProcurementError (base)
    |
    +-- ValidationError
    |   +-- InvalidQuantityError
    |   +-- LineItemNotReceivedError
    |   +-- NoReceivedQuantityError
    |   +-- ReturnQuantityExceededError
    |   +-- DuplicateReturnRequestError
    |   +-- ReturnReasonRequiredError
    |   +-- ReturnReasonTooLongError
    |   +-- ReturnNotPendingError
    |   +-- ShortCloseReasonRequiredError
    |   +-- ShortCloseReasonTooLongError
    |   +-- LineItemAlreadyShortClosedError
    |   +-- ShortCloseNotAllowedError
    |   +-- PendingReturnsError
    |   +-- ReceiptQuantityExceededError
    |   +-- LineItemAlreadyReceivedError
    |   +-- RequestPendingApprovalError
    |
    +-- WorkflowError
    |   +-- InvalidTransitionError
    |   +-- GuardFailedError
    |
    +-- NotFoundError
    |   +-- ReturnRequestNotFoundError
    |
    +-- AuthorizationError
        +-- UnauthorizedActionError

The return-lifecycle engine itself never raises: its operations are total
functions.  These exceptions come from the policy and service layers.
"""

from decimal import Decimal
from uuid import UUID


class ProcurementError(Exception):
    """
    Base exception for all procurement kernel errors.

    All subclasses must have a ``code`` class attribute.
    """

    code: str = "PROCUREMENT_ERROR"


# Validation


class ValidationError(ProcurementError):
    """Base exception for rejected input or a disallowed operation."""

    code: str = "VALIDATION_ERROR"


class InvalidQuantityError(ValidationError):
    """A quantity is missing, malformed, or outside its allowed range."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} ({value!r}): {reason}")


class LineItemNotReceivedError(ValidationError):
    """Operation requires the line item to be in RECEIVED status."""

    code: str = "LINE_ITEM_NOT_RECEIVED"

    def __init__(self, line_item_id: UUID, status: str):
        self.line_item_id = line_item_id
        self.status = status
        super().__init__(
            f"Line item {line_item_id} is {status}; "
            f"returns are only allowed for received line items"
        )


class NoReceivedQuantityError(ValidationError):
    """Line item has no received quantity to return."""

    code: str = "NO_RECEIVED_QUANTITY"

    def __init__(self, line_item_id: UUID):
        self.line_item_id = line_item_id
        super().__init__(f"Line item {line_item_id} has no received quantity to return")


class ReturnQuantityExceededError(ValidationError):
    """Requested return quantity is larger than what can still be returned."""

    code: str = "RETURN_QUANTITY_EXCEEDED"

    def __init__(self, line_item_id: UUID, requested: Decimal, max_returnable: Decimal):
        self.line_item_id = line_item_id
        self.requested = requested
        self.max_returnable = max_returnable
        super().__init__(
            f"Return quantity {requested} exceeds returnable quantity "
            f"{max_returnable} for line item {line_item_id}"
        )


class DuplicateReturnRequestError(ValidationError):
    """Line item already carries a return request."""

    code: str = "DUPLICATE_RETURN_REQUEST"

    def __init__(self, line_item_id: UUID, existing_count: int):
        self.line_item_id = line_item_id
        self.existing_count = existing_count
        super().__init__(f"Line item {line_item_id} already has a return request")


class ReturnReasonRequiredError(ValidationError):
    """Return reason is blank."""

    code: str = "RETURN_REASON_REQUIRED"

    def __init__(self):
        super().__init__("Return reason is required")


class ReturnReasonTooLongError(ValidationError):
    """Return reason exceeds the configured length."""

    code: str = "RETURN_REASON_TOO_LONG"

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(f"Return reason cannot exceed {max_length} characters (got {length})")


class ReturnNotPendingError(ValidationError):
    """Only requests in RETURN_REQUESTED can be decided."""

    code: str = "RETURN_NOT_PENDING"

    def __init__(self, return_request_id: UUID, status: str):
        self.return_request_id = return_request_id
        self.status = status
        super().__init__(
            f"Return request {return_request_id} is {status}; "
            f"only pending return requests can be decided"
        )


class ShortCloseReasonRequiredError(ValidationError):
    """Short-close reason is blank."""

    code: str = "SHORT_CLOSE_REASON_REQUIRED"

    def __init__(self):
        super().__init__("Short close reason is required")


class ShortCloseReasonTooLongError(ValidationError):
    """Short-close reason exceeds the configured length."""

    code: str = "SHORT_CLOSE_REASON_TOO_LONG"

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"Short close reason cannot exceed {max_length} characters (got {length})"
        )


class LineItemAlreadyShortClosedError(ValidationError):
    """Line item was already short closed."""

    code: str = "LINE_ITEM_ALREADY_SHORT_CLOSED"

    def __init__(self, line_item_id: UUID):
        self.line_item_id = line_item_id
        super().__init__(f"Line item {line_item_id} is already short closed")


class ShortCloseNotAllowedError(ValidationError):
    """Line item status does not permit short close."""

    code: str = "SHORT_CLOSE_NOT_ALLOWED"

    def __init__(self, line_item_id: UUID, status: str):
        self.line_item_id = line_item_id
        self.status = status
        super().__init__(f"Cannot short close line item {line_item_id} in {status} status")


class PendingReturnsError(ValidationError):
    """Operation is blocked while a return decision is outstanding."""

    code: str = "PENDING_RETURNS"

    def __init__(self, line_item_id: UUID, operation: str):
        self.line_item_id = line_item_id
        self.operation = operation
        super().__init__(
            f"Cannot {operation} line item {line_item_id} while return requests are pending"
        )


class ReceiptQuantityExceededError(ValidationError):
    """Received quantity is larger than the requested quantity."""

    code: str = "RECEIPT_QUANTITY_EXCEEDED"

    def __init__(self, line_item_id: UUID, actual: Decimal, requested: Decimal):
        self.line_item_id = line_item_id
        self.actual = actual
        self.requested = requested
        super().__init__(
            f"Actual quantity {actual} cannot exceed requested quantity "
            f"{requested} for line item {line_item_id}"
        )


class LineItemAlreadyReceivedError(ValidationError):
    """Receipt has already been recorded for the line item."""

    code: str = "LINE_ITEM_ALREADY_RECEIVED"

    def __init__(self, line_item_id: UUID):
        self.line_item_id = line_item_id
        super().__init__(f"Line item {line_item_id} has already been received")


class RequestPendingApprovalError(ValidationError):
    """Parent procurement request is locked awaiting management approval."""

    code: str = "REQUEST_PENDING_APPROVAL"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation} while request is pending approval")


# Workflow


class WorkflowError(ProcurementError):
    """Base exception for state machine errors."""

    code: str = "WORKFLOW_ERROR"


class InvalidTransitionError(WorkflowError):
    """No transition exists for the current state and action."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, from_state: str, action: str):
        self.workflow = workflow
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"No transition from '{from_state}' via action '{action}' "
            f"in workflow '{workflow}'"
        )


class GuardFailedError(WorkflowError):
    """A transition guard rejected the transition."""

    code: str = "GUARD_FAILED"

    def __init__(self, workflow: str, action: str, guard: str):
        self.workflow = workflow
        self.action = action
        self.guard = guard
        super().__init__(f"Guard '{guard}' rejected action '{action}' in workflow '{workflow}'")


# Lookup


class NotFoundError(ProcurementError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class ReturnRequestNotFoundError(NotFoundError):
    """Return request is not owned by the given line item."""

    code: str = "RETURN_REQUEST_NOT_FOUND"

    def __init__(self, return_request_id: UUID, line_item_id: UUID):
        self.return_request_id = return_request_id
        self.line_item_id = line_item_id
        super().__init__(
            f"Return request {return_request_id} not found on line item {line_item_id}"
        )


# Authorization


class AuthorizationError(ProcurementError):
    """Base exception for role-based access failures."""

    code: str = "AUTHORIZATION_ERROR"


class UnauthorizedActionError(AuthorizationError):
    """Actor role is not allowed to perform the action."""

    code: str = "UNAUTHORIZED_ACTION"

    def __init__(self, action: str, actor_role: str, allowed_roles: tuple[str, ...]):
        self.action = action
        self.actor_role = actor_role
        self.allowed_roles = allowed_roles
        super().__init__(
            f"Role '{actor_role}' cannot {action}; allowed: {', '.join(allowed_roles)}"
        )
