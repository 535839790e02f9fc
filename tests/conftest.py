"""
Pytest fixtures for the procurement returns test suite.

Provides:
- Session-wide structured logging
- Log capture as parsed JSON dicts
- Deterministic clock and actor ids
- Line item and return request builders

No database or network is needed by any test.
"""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest

from procurement_engines.return_types import (
    LineItem,
    LineItemStatus,
    ReturnRequest,
    ReturnStatus,
)
from procurement_kernel.domain.clock import DeterministicClock
from procurement_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Deterministic ids shared by tests
TEST_FACTORY_USER_ID = UUID("00000000-0000-4000-a000-000000000001")
TEST_PURCHASER_ID = UUID("00000000-0000-4000-a000-000000000002")
TEST_MANAGER_ID = UUID("00000000-0000-4000-a000-000000000003")
TEST_PROCUREMENT_REQUEST_ID = UUID("00000000-0000-4000-a000-000000000010")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture procurement_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.create_return_request(...)
            logs = captured_logs()
            assert any(r["message"] == "return_request_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("procurement_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and actors
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture
def factory_user_id():
    return TEST_FACTORY_USER_ID


@pytest.fixture
def manager_id():
    return TEST_MANAGER_ID


# =============================================================================
# Record builders
# =============================================================================


@pytest.fixture
def make_line_item():
    """
    Build a ``LineItem``.  Quantities may be given as strings.

    Usage::

        line_item = make_line_item(actual="100", returned="20")
    """

    def _make(
        requested="100",
        actual=None,
        returned="0",
        status=LineItemStatus.RECEIVED,
        return_requests=None,
        **kwargs,
    ) -> LineItem:
        return LineItem(
            id=kwargs.pop("id", uuid4()),
            requested_quantity=Decimal(requested),
            procurement_request_id=kwargs.pop(
                "procurement_request_id", TEST_PROCUREMENT_REQUEST_ID
            ),
            actual_quantity=None if actual is None else Decimal(actual),
            status=status,
            total_returned_quantity=None if returned is None else Decimal(returned),
            return_requests=[] if return_requests is None else return_requests,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_return_request():
    """Build a ``ReturnRequest`` for a line item id."""

    def _make(
        line_item_id: UUID,
        quantity="5",
        status=ReturnStatus.RETURN_REQUESTED,
        reason="Damaged",
    ) -> ReturnRequest:
        return ReturnRequest(
            id=uuid4(),
            line_item_id=line_item_id,
            return_quantity=Decimal(quantity),
            return_reason=reason,
            return_status=status,
        )

    return _make
