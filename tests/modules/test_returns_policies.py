"""
Tests for the returns validation policies.

Covers:
- Return creation: status, receipt, quantity, duplicate, limit, reason
- Return approval / rejection: pending only, quantity re-check
- Receipt: negative, above requested, already received
- Short close: reason, already closed, blocked statuses, pending returns,
  approval lock
"""

from decimal import Decimal

import pytest

from procurement_engines.return_types import LineItemStatus, ReturnStatus
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
from procurement_modules.returns.policies import (
    validate_receipt,
    validate_return_approval,
    validate_return_creation,
    validate_return_rejection,
    validate_short_close,
    validate_status_update,
)


class TestValidateReturnCreation:

    def test_valid_request_returns_stripped_reason(self, received_line_item, returns_config):
        reason = validate_return_creation(
            received_line_item, Decimal("10"), "  Damaged  ", returns_config,
        )

        assert reason == "Damaged"

    def test_full_quantity_allowed(self, received_line_item, returns_config):
        validate_return_creation(received_line_item, Decimal("100"), "Wrong part", returns_config)

    def test_line_item_not_received(self, make_line_item, returns_config):
        line_item = make_line_item(actual="100", status=LineItemStatus.DISPATCHED)

        with pytest.raises(LineItemNotReceivedError) as exc_info:
            validate_return_creation(line_item, Decimal("1"), "r", returns_config)
        assert exc_info.value.status == "dispatched"

    @pytest.mark.parametrize("actual", [None, "0"])
    def test_no_received_quantity(self, make_line_item, returns_config, actual):
        line_item = make_line_item(actual=actual)

        with pytest.raises(NoReceivedQuantityError):
            validate_return_creation(line_item, Decimal("1"), "r", returns_config)

    @pytest.mark.parametrize("quantity", ["0", "-1"])
    def test_quantity_must_be_positive(self, received_line_item, returns_config, quantity):
        with pytest.raises(InvalidQuantityError, match="greater than zero"):
            validate_return_creation(received_line_item, Decimal(quantity), "r", returns_config)

    def test_quantity_scale_enforced(self, received_line_item, returns_config):
        with pytest.raises(InvalidQuantityError, match="at most 3 decimal places"):
            validate_return_creation(received_line_item, Decimal("1.0005"), "r", returns_config)

    def test_quantity_beyond_decimal_precision(self, received_line_item, returns_config):
        with pytest.raises(InvalidQuantityError, match="at most 3 decimal places"):
            validate_return_creation(
                received_line_item,
                Decimal("12345678901234567890123456789.0001"),
                "r",
                returns_config,
            )

        with pytest.raises(ReturnQuantityExceededError):
            validate_return_creation(received_line_item, Decimal("1e30"), "r", returns_config)

    def test_second_request_rejected(self, line_item_with_pending_return, returns_config):
        with pytest.raises(DuplicateReturnRequestError) as exc_info:
            validate_return_creation(line_item_with_pending_return, Decimal("1"), "r", returns_config)
        assert exc_info.value.existing_count == 1

    def test_second_request_allowed_when_configured(self, line_item_with_pending_return):
        config = ReturnsConfig(single_return_per_line_item=False)

        validate_return_creation(line_item_with_pending_return, Decimal("1"), "r", config)

    def test_quantity_above_returnable(self, make_line_item, returns_config):
        line_item = make_line_item(actual="100", returned="80")

        with pytest.raises(ReturnQuantityExceededError) as exc_info:
            validate_return_creation(line_item, Decimal("21"), "r", returns_config)
        assert exc_info.value.max_returnable == Decimal("20")

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_reason_required(self, received_line_item, returns_config, reason):
        with pytest.raises(ReturnReasonRequiredError, match="Return reason is required"):
            validate_return_creation(received_line_item, Decimal("1"), reason, returns_config)

    def test_reason_length_limit(self, received_line_item, returns_config):
        validate_return_creation(received_line_item, Decimal("1"), "x" * 1000, returns_config)

        with pytest.raises(ReturnReasonTooLongError) as exc_info:
            validate_return_creation(received_line_item, Decimal("1"), "x" * 1001, returns_config)
        assert exc_info.value.length == 1001
        assert exc_info.value.max_length == 1000

    def test_reason_length_measured_after_strip(self, received_line_item, returns_config):
        padded = "  " + "x" * 1000 + "  "

        assert validate_return_creation(
            received_line_item, Decimal("1"), padded, returns_config,
        ) == "x" * 1000

    def test_status_checked_before_reason(self, make_line_item, returns_config):
        line_item = make_line_item(actual="100", status=LineItemStatus.CLOSED)

        with pytest.raises(LineItemNotReceivedError):
            validate_return_creation(line_item, Decimal("1"), "", returns_config)


class TestValidateReturnDecision:

    def test_pending_request_can_be_approved(self, line_item_with_pending_return):
        request = line_item_with_pending_return.return_requests[0]

        validate_return_approval(line_item_with_pending_return, request)

    @pytest.mark.parametrize(
        "status", [ReturnStatus.RETURN_APPROVED, ReturnStatus.RETURN_REJECTED],
    )
    def test_decided_request_cannot_be_approved(
        self, received_line_item, make_return_request, status,
    ):
        request = make_return_request(received_line_item.id, "1", status)

        with pytest.raises(ReturnNotPendingError) as exc_info:
            validate_return_approval(received_line_item, request)
        assert exc_info.value.status == status.value

    def test_line_item_no_longer_received(self, line_item_with_pending_return):
        line_item_with_pending_return.status = LineItemStatus.CLOSED
        request = line_item_with_pending_return.return_requests[0]

        with pytest.raises(LineItemNotReceivedError):
            validate_return_approval(line_item_with_pending_return, request)

    def test_quantity_rechecked_against_current_limit(self, line_item_with_pending_return):
        line_item_with_pending_return.total_returned_quantity = Decimal("95")
        request = line_item_with_pending_return.return_requests[0]

        with pytest.raises(ReturnQuantityExceededError):
            validate_return_approval(line_item_with_pending_return, request)

    def test_rejection_requires_pending(self, received_line_item, make_return_request):
        validate_return_rejection(make_return_request(received_line_item.id))

        with pytest.raises(ReturnNotPendingError):
            validate_return_rejection(
                make_return_request(received_line_item.id, "1", ReturnStatus.RETURN_REJECTED),
            )


class TestValidateReceipt:

    def test_valid_receipt(self, dispatched_line_item, returns_config):
        validate_receipt(dispatched_line_item, Decimal("100"), returns_config)

    def test_zero_receipt_allowed(self, dispatched_line_item, returns_config):
        validate_receipt(dispatched_line_item, Decimal("0"), returns_config)

    def test_negative_rejected(self, dispatched_line_item, returns_config):
        with pytest.raises(InvalidQuantityError, match="cannot be negative"):
            validate_receipt(dispatched_line_item, Decimal("-1"), returns_config)

    def test_above_requested_rejected(self, dispatched_line_item, returns_config):
        with pytest.raises(ReceiptQuantityExceededError):
            validate_receipt(dispatched_line_item, Decimal("100.001"), returns_config)

    def test_huge_receipt_rejected(self, dispatched_line_item, returns_config):
        with pytest.raises(ReceiptQuantityExceededError):
            validate_receipt(dispatched_line_item, Decimal("1e30"), returns_config)

    def test_above_requested_allowed_when_configured(self, dispatched_line_item):
        config = ReturnsConfig(allow_receipt_above_requested=True)

        validate_receipt(dispatched_line_item, Decimal("120"), config)

    def test_already_received(self, make_line_item, returns_config):
        line_item = make_line_item(actual="50", status=LineItemStatus.DISPATCHED)

        with pytest.raises(LineItemAlreadyReceivedError):
            validate_receipt(line_item, Decimal("50"), returns_config)


class TestValidateShortClose:

    @pytest.mark.parametrize(
        "status", [LineItemStatus.PENDING, LineItemStatus.IN_PROGRESS, LineItemStatus.ORDERED],
    )
    def test_allowed_before_dispatch(self, make_line_item, returns_config, status):
        line_item = make_line_item(status=status)

        assert validate_short_close(line_item, " Vendor out of stock ", returns_config) == (
            "Vendor out of stock"
        )

    @pytest.mark.parametrize("reason", [None, "", "  "])
    def test_reason_required(self, make_line_item, returns_config, reason):
        line_item = make_line_item(status=LineItemStatus.ORDERED)

        with pytest.raises(ShortCloseReasonRequiredError):
            validate_short_close(line_item, reason, returns_config)

    def test_reason_length_limit(self, make_line_item, returns_config):
        line_item = make_line_item(status=LineItemStatus.ORDERED)

        with pytest.raises(ShortCloseReasonTooLongError) as exc_info:
            validate_short_close(line_item, "x" * 501, returns_config)
        assert exc_info.value.max_length == 500

    def test_already_short_closed(self, make_line_item, returns_config):
        line_item = make_line_item(status=LineItemStatus.ORDERED, is_short_closed=True)

        with pytest.raises(LineItemAlreadyShortClosedError):
            validate_short_close(line_item, "reason", returns_config)

    @pytest.mark.parametrize(
        "status",
        [LineItemStatus.DISPATCHED, LineItemStatus.RECEIVED, LineItemStatus.SHORT_CLOSED],
    )
    def test_blocked_statuses(self, make_line_item, returns_config, status):
        line_item = make_line_item(status=status)

        with pytest.raises(ShortCloseNotAllowedError) as exc_info:
            validate_short_close(line_item, "reason", returns_config)
        assert exc_info.value.status == status.value

    def test_pending_returns_block(self, make_line_item, make_return_request, returns_config):
        line_item = make_line_item(status=LineItemStatus.ORDERED)
        line_item.return_requests = [make_return_request(line_item.id)]

        with pytest.raises(PendingReturnsError, match="while return requests are pending"):
            validate_short_close(line_item, "reason", returns_config)

    def test_approval_lock(self, make_line_item, returns_config):
        line_item = make_line_item(status=LineItemStatus.PENDING)

        with pytest.raises(RequestPendingApprovalError, match="Cannot short close while request"):
            validate_short_close(line_item, "reason", returns_config, request_requires_approval=True)


class TestValidateStatusUpdate:

    def test_unlocked(self):
        validate_status_update(False)

    def test_locked(self):
        with pytest.raises(RequestPendingApprovalError):
            validate_status_update(True)
