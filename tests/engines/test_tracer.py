"""Tests for the engine invocation tracer."""

from dataclasses import dataclass
from decimal import Decimal

from procurement_engines.return_types import ReturnStatus
from procurement_engines.tracer import TRACE_TYPE, compute_input_fingerprint, traced_engine


@dataclass(frozen=True)
class _Record:
    quantity: Decimal
    status: ReturnStatus


@traced_engine("test_engine", "2.1", fingerprint_fields=("values", "label"))
def _engine(values, label="x"):
    return sum(values)


class TestComputeInputFingerprint:

    def test_deterministic(self):
        args = {"a": [1, 2], "b": {"y": 1, "x": 2}}

        assert compute_input_fingerprint(("a", "b"), args) == compute_input_fingerprint(("a", "b"), args)

    def test_dict_key_order_irrelevant(self):
        first = compute_input_fingerprint(("d",), {"d": {"x": 1, "y": 2}})
        second = compute_input_fingerprint(("d",), {"d": {"y": 2, "x": 1}})

        assert first == second

    def test_sequence_order_matters(self):
        first = compute_input_fingerprint(("s",), {"s": [1, 2]})
        second = compute_input_fingerprint(("s",), {"s": [2, 1]})

        assert first != second

    def test_dataclass_fields_and_enum_values(self):
        first = compute_input_fingerprint(
            ("r",), {"r": _Record(Decimal("1"), ReturnStatus.RETURN_APPROVED)},
        )
        second = compute_input_fingerprint(
            ("r",), {"r": _Record(Decimal("1"), ReturnStatus.RETURN_REJECTED)},
        )

        assert first != second
        assert len(first) == 16

    def test_missing_field_recorded_as_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(("a",), {"a": None})


class TestTracedEngine:

    def test_result_passes_through(self):
        assert _engine([1, 2, 3]) == 6

    def test_emits_trace_record(self, captured_logs):
        _engine([1, 2], label="y")

        traces = [r for r in captured_logs() if r.get("trace_type") == TRACE_TYPE]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "test_engine"
        assert trace["engine_version"] == "2.1"
        assert trace["level"] == "DEBUG"
        assert trace["input_fingerprint"] == compute_input_fingerprint(
            ("values", "label"), {"values": [1, 2], "label": "y"},
        )

    def test_positional_and_keyword_calls_fingerprint_alike(self, captured_logs):
        _engine([4], "z")
        _engine(values=[4], label="z")

        traces = [r for r in captured_logs() if r.get("trace_type") == TRACE_TYPE]
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]

    def test_wraps_preserves_name(self):
        assert _engine.__name__ == "_engine"
