"""
Shared fixtures for returns module tests.

DESIGN RULE: Every fixture is opt-in.  No autouse.  Each test explicitly
declares what it depends on in its function signature.
"""

import pytest

from procurement_engines.return_types import LineItemStatus, ReturnStatus
from procurement_modules.returns.config import ReturnsConfig
from procurement_modules.returns.service import ReturnsService


@pytest.fixture
def returns_config():
    return ReturnsConfig.with_defaults()


@pytest.fixture
def service(returns_config, deterministic_clock):
    return ReturnsService(returns_config, clock=deterministic_clock)


@pytest.fixture
def received_line_item(make_line_item):
    """100 requested, 100 received, no returns yet."""
    return make_line_item(requested="100", actual="100", status=LineItemStatus.RECEIVED)


@pytest.fixture
def dispatched_line_item(make_line_item):
    return make_line_item(requested="100", actual=None, status=LineItemStatus.DISPATCHED)


@pytest.fixture
def line_item_with_pending_return(received_line_item, make_return_request):
    received_line_item.return_requests = [
        make_return_request(received_line_item.id, "10", ReturnStatus.RETURN_REQUESTED),
    ]
    return received_line_item

