"""
Returns Domain Models.

The nouns of the return lifecycle: line items, return requests, and the
procurement request that groups line items.  The line item and return
request records are owned by ``procurement_engines.return_types`` so the
engines never import from the modules layer; they are re-exported here.
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from procurement_engines.return_types import (
    LineItem,
    LineItemStatus,
    ProcurementStatus,
    ReturnRequest,
    ReturnStatus,
    ReturnSummary,
    ReturnTotals,
)


class UserRole(Enum):
    """Actor roles recognised by the returns workflow."""
    FACTORY_USER = "factory_user"
    PURCHASE_TEAM = "purchase_team"
    MANAGEMENT = "management"
    ADMIN = "admin"


FACTORY_ROLES: tuple[UserRole, ...] = (UserRole.FACTORY_USER,)
DECISION_ROLES: tuple[UserRole, ...] = (UserRole.PURCHASE_TEAM, UserRole.MANAGEMENT)
# May act on a procurement request that is awaiting approval.
APPROVAL_ROLES: tuple[UserRole, ...] = (UserRole.MANAGEMENT, UserRole.ADMIN)


@dataclass
class ProcurementRequest:
    """A group of line items raised together by a factory."""
    id: UUID
    request_number: str = ""
    factory_id: UUID | None = None
    status: ProcurementStatus = ProcurementStatus.DRAFT
    requires_approval: bool = False
    line_items: list[LineItem] = field(default_factory=list)

    @property
    def line_item_statuses(self) -> list[LineItemStatus]:
        return [li.status for li in self.line_items]


__all__ = [
    "APPROVAL_ROLES",
    "DECISION_ROLES",
    "FACTORY_ROLES",
    "LineItem",
    "LineItemStatus",
    "ProcurementRequest",
    "ProcurementStatus",
    "ReturnRequest",
    "ReturnStatus",
    "ReturnSummary",
    "ReturnTotals",
    "UserRole",
]
