"""
Unit tests for the typed exception hierarchy.

Verifies:
- Every error carries a distinct machine-readable code
- Context is stored as attributes
- Family base classes catch their members
"""

import inspect
from decimal import Decimal
from uuid import uuid4

import pytest

from procurement_kernel import exceptions as exc_module
from procurement_kernel.exceptions import (
    AuthorizationError,
    DuplicateReturnRequestError,
    GuardFailedError,
    InvalidTransitionError,
    NotFoundError,
    PendingReturnsError,
    ProcurementError,
    ReceiptQuantityExceededError,
    ReturnQuantityExceededError,
    ReturnRequestNotFoundError,
    UnauthorizedActionError,
    ValidationError,
    WorkflowError,
)


def _error_classes() -> list[type[ProcurementError]]:
    return [
        obj
        for _, obj in inspect.getmembers(exc_module, inspect.isclass)
        if issubclass(obj, ProcurementError)
    ]


class TestHierarchy:

    def test_codes_are_unique(self):
        codes = [cls.code for cls in _error_classes()]
        assert len(codes) == len(set(codes))

    def test_every_subclass_overrides_code(self):
        for cls in _error_classes():
            if cls is not ProcurementError:
                assert cls.code != ProcurementError.code, cls.__name__

    @pytest.mark.parametrize(
        ("error", "family"),
        [
            (ReturnQuantityExceededError(uuid4(), Decimal("2"), Decimal("1")), ValidationError),
            (InvalidTransitionError("wf", "a", "go"), WorkflowError),
            (GuardFailedError("wf", "go", "g"), WorkflowError),
            (ReturnRequestNotFoundError(uuid4(), uuid4()), NotFoundError),
            (UnauthorizedActionError("approve", "factory_user", ("management",)), AuthorizationError),
        ],
    )
    def test_family_membership(self, error, family):
        assert isinstance(error, family)
        assert isinstance(error, ProcurementError)


class TestContextAttributes:

    def test_return_quantity_exceeded(self):
        line_item_id = uuid4()
        err = ReturnQuantityExceededError(line_item_id, Decimal("12"), Decimal("10"))

        assert err.line_item_id == line_item_id
        assert err.requested == Decimal("12")
        assert err.max_returnable == Decimal("10")
        assert "exceeds returnable quantity 10" in str(err)

    def test_duplicate_return_request(self):
        err = DuplicateReturnRequestError(uuid4(), 1)

        assert err.existing_count == 1
        assert "already has a return request" in str(err)

    def test_pending_returns(self):
        err = PendingReturnsError(uuid4(), "short close")

        assert err.operation == "short close"
        assert str(err).startswith("Cannot short close line item")

    def test_receipt_quantity_exceeded(self):
        err = ReceiptQuantityExceededError(uuid4(), Decimal("11"), Decimal("10"))

        assert err.code == "RECEIPT_QUANTITY_EXCEEDED"
        assert "cannot exceed requested quantity 10" in str(err)

    def test_unauthorized_action_lists_roles(self):
        err = UnauthorizedActionError("approve return requests", "factory_user", ("purchase_team", "management"))

        assert err.allowed_roles == ("purchase_team", "management")
        assert str(err) == (
            "Role 'factory_user' cannot approve return requests; "
            "allowed: purchase_team, management"
        )
