"""
Returns Module (``procurement_modules.returns``).

Responsibility
--------------
Thin glue for the return lifecycle of procurement line items: raising,
approving and rejecting return requests, recording receipt, line item
status moves, short close, and request-level return summaries.

Architecture position
---------------------
**Modules layer** -- declarative workflows, config schema, validation
policies, and a service facade.  Quantity rules live in
``procurement_engines.returns``; transitions run through
``procurement_services.workflow_executor``.

Invariants enforced
-------------------
* ``total_returned_quantity`` counts approved returns only and is
  recomputed after every return request change.
* A line item carries at most one return request (configurable).
* No line item may be short closed or closed while a return is pending.

Failure modes
-------------
* Typed ``procurement_kernel.exceptions`` errors, raised and logged by
  ``ReturnsService``; a failed call leaves its records untouched.
"""

from procurement_modules.returns.config import ReturnsConfig
from procurement_modules.returns.models import (
    LineItem,
    LineItemStatus,
    ProcurementRequest,
    ProcurementStatus,
    ReturnRequest,
    ReturnStatus,
    ReturnSummary,
    UserRole,
)
from procurement_modules.returns.service import ReturnsService
from procurement_modules.returns.workflows import (
    LINE_ITEM_WORKFLOW,
    RETURN_REQUEST_WORKFLOW,
)

__all__ = [
    "LineItem",
    "LineItemStatus",
    "ProcurementRequest",
    "ProcurementStatus",
    "ReturnRequest",
    "ReturnStatus",
    "ReturnSummary",
    "UserRole",
    "RETURN_REQUEST_WORKFLOW",
    "LINE_ITEM_WORKFLOW",
    "ReturnsConfig",
    "ReturnsService",
]
