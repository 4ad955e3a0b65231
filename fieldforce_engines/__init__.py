"""
Module: fieldforce_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    higher layers (fieldforce_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fieldforce_modules.expense.models DTOs and sibling
    engine modules.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``.  The current time is
      passed in by the service, which reads its injected Clock once per call.
    - Decimal-only arithmetic: all amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from fieldforce_engines import calculate_expense, validate_expense_input
"""

from fieldforce_engines.expense_calculator import (
    calculate_expense,
    calculate_expense_summary,
    format_hour,
    is_expense_entry_allowed,
    round_currency,
)
from fieldforce_engines.expense_validation import (
    MAX_PLAUSIBLE_DISTANCE_KM,
    MAX_PLAUSIBLE_HOTEL_BILL,
    METER_DISTANCE_TOLERANCE_KM,
    check_meter_readings,
    validate_expense_input,
    validate_submission,
)
from fieldforce_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Calculation
    "calculate_expense",
    "calculate_expense_summary",
    "format_hour",
    "is_expense_entry_allowed",
    "round_currency",
    # Validation
    "MAX_PLAUSIBLE_DISTANCE_KM",
    "MAX_PLAUSIBLE_HOTEL_BILL",
    "METER_DISTANCE_TOLERANCE_KM",
    "check_meter_readings",
    "validate_expense_input",
    "validate_submission",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
