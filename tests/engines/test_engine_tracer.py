"""
Tests for the engine invocation tracer.

Verifies that traced engines emit FIELDFORCE_ENGINE_TRACE records with a
stable input fingerprint and leave results untouched.
"""

from decimal import Decimal

from fieldforce_engines.expense_calculator import calculate_expense
from fieldforce_engines.tracer import compute_input_fingerprint, traced_engine
from fieldforce_modules.expense.models import AppSettings, ExpenseInput, UserRole


def _input(distance: str = "45") -> ExpenseInput:
    return ExpenseInput(
        user_id="u-1", user_role=UserRole.MR, distance_km=Decimal(distance),
    )


def _traces(records):
    return [r for r in records if r.get("trace_type") == "FIELDFORCE_ENGINE_TRACE"]


class TestComputeInputFingerprint:

    def test_deterministic(self):
        args = {"input": _input(), "settings": AppSettings()}
        fields = ("input", "settings")
        assert compute_input_fingerprint(fields, args) == compute_input_fingerprint(
            fields, args,
        )

    def test_decimal_scale_does_not_matter(self):
        a = compute_input_fingerprint(("rate",), {"rate": Decimal("2.50")})
        b = compute_input_fingerprint(("rate",), {"rate": Decimal("2.5")})
        assert a == b

    def test_different_inputs_differ(self):
        a = compute_input_fingerprint(("input",), {"input": _input("45")})
        b = compute_input_fingerprint(("input",), {"input": _input("46")})
        assert a != b

    def test_missing_field_is_null(self):
        a = compute_input_fingerprint(("x",), {})
        b = compute_input_fingerprint(("x",), {"x": None})
        assert a == b
        assert len(a) == 16


class TestTracedEngine:

    def test_calculator_emits_trace(self, captured_logs):
        calculate_expense(_input(), AppSettings())
        traces = _traces(captured_logs())
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "expense_calculator"
        assert trace["engine_version"] == "1.0"
        assert len(trace["input_fingerprint"]) == 16
        assert trace["logger"] == "fieldforce.engines.tracer"

    def test_keyword_and_positional_fingerprint_match(self, captured_logs):
        calculate_expense(_input(), AppSettings())
        calculate_expense(input=_input(), settings=AppSettings())
        first, second = _traces(captured_logs())
        assert first["input_fingerprint"] == second["input_fingerprint"]

    def test_result_passes_through(self):
        @traced_engine("doubler", "0.1", fingerprint_fields=("value",))
        def double(value):
            return value * 2

        assert double(Decimal("2.5")) == Decimal("5.0")
        assert double.__name__ == "double"

    def test_no_fingerprint_fields_gives_empty_fingerprint(self, captured_logs):
        @traced_engine("noop", "0.1")
        def noop():
            return None

        noop()
        (trace,) = _traces(captured_logs())
        assert trace["input_fingerprint"] == ""
