"""
Field Expense Validation Engine (``fieldforce_engines.expense_validation``).

Responsibility
--------------
Pure validation functions for field expense entry:

* Input sanity checks on the claimed trip (distance, hotel bill)
* Submission-boundary evidence checks (bill photo, odometer readings and
  photos, image validator verdicts)

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.

Invariants enforced
-------------------
* Never raises for business-rule violations; every failing rule produces
  one ``ValidationIssue`` and ALL issues are returned, not just the first.
* "Unusually high" checks carry ``WARNING`` severity; everything else is
  ``BLOCKING``.  Whether warnings stop a submission is the caller's
  ``WarningPolicy``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from fieldforce_engines.tracer import traced_engine
from fieldforce_modules.expense.models import (
    ExpenseInput,
    ExpenseSubmission,
    ExpenseValidationResult,
    ImageValidationResult,
    ValidationAction,
    ValidationIssue,
    ValidationSeverity,
)

MAX_PLAUSIBLE_DISTANCE_KM = Decimal("1000")
MAX_PLAUSIBLE_HOTEL_BILL = Decimal("10000")
METER_DISTANCE_TOLERANCE_KM = Decimal("0.1")
_TENTH = Decimal("0.1")


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


@traced_engine("expense_validation", "1.0", fingerprint_fields=("input",))
def validate_expense_input(input: ExpenseInput) -> ExpenseValidationResult:
    """Check the claimed trip for impossible or implausible values.

    Args:
        input: The claimed trip.

    Returns:
        ExpenseValidationResult with issues in rule order.
    """
    issues: list[ValidationIssue] = []

    if input.distance_km < 0:
        issues.append(ValidationIssue(
            code="NEGATIVE_DISTANCE",
            message="Distance cannot be negative",
        ))

    if input.distance_km > MAX_PLAUSIBLE_DISTANCE_KM:
        issues.append(ValidationIssue(
            code="DISTANCE_UNUSUALLY_HIGH",
            message="Distance seems unusually high (>1000 km). Please verify.",
            severity=ValidationSeverity.WARNING,
        ))

    if input.is_night_stay and input.hotel_bill_amount <= 0:
        issues.append(ValidationIssue(
            code="HOTEL_BILL_REQUIRED",
            message="Hotel bill amount is required for night stay",
        ))

    if input.hotel_bill_amount < 0:
        issues.append(ValidationIssue(
            code="NEGATIVE_HOTEL_BILL",
            message="Hotel bill amount cannot be negative",
        ))

    if input.hotel_bill_amount > MAX_PLAUSIBLE_HOTEL_BILL:
        issues.append(ValidationIssue(
            code="HOTEL_BILL_UNUSUALLY_HIGH",
            message="Hotel bill amount seems unusually high. Please verify.",
            severity=ValidationSeverity.WARNING,
        ))

    return ExpenseValidationResult(issues=tuple(issues))


# ---------------------------------------------------------------------------
# Submission-boundary validation
# ---------------------------------------------------------------------------


def _image_issues(
    verdict: ImageValidationResult,
    subject: str,
    code_prefix: str,
    retake_hint: str,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not verdict.is_valid:
        detail = ", ".join(verdict.flags)
        issues.append(ValidationIssue(
            code=f"{code_prefix}_VALIDATION_FAILED",
            message=f"{subject} validation failed"
            + (f": {detail}" if detail else ""),
        ))
    if verdict.action == ValidationAction.FLAG_REJECT:
        issues.append(ValidationIssue(
            code=f"{code_prefix}_FLAGGED",
            message=f"{subject} appears suspicious. {retake_hint}",
        ))
    return issues


def check_meter_readings(
    distance_km: Decimal,
    meter_start: Decimal,
    meter_end: Decimal,
    tolerance_km: Decimal = METER_DISTANCE_TOLERANCE_KM,
) -> list[ValidationIssue]:
    """Check odometer readings against the claimed distance.

    The end-minus-start delta must match ``distance_km`` within
    ``tolerance_km`` and the end reading must exceed the start reading.

    Returns:
        Issues found (possibly both).
    """
    issues: list[ValidationIssue] = []

    meter_diff = meter_end - meter_start
    if abs(meter_diff - distance_km) > tolerance_km:
        shown_diff = meter_diff.quantize(_TENTH, rounding=ROUND_HALF_UP)
        issues.append(ValidationIssue(
            code="METER_DISTANCE_MISMATCH",
            message=(
                f"Meter reading mismatch! Difference: {shown_diff} km, "
                f"Distance entered: {format(distance_km.normalize(), 'f')} km"
            ),
        ))

    if meter_end <= meter_start:
        issues.append(ValidationIssue(
            code="METER_END_NOT_AFTER_START",
            message="End meter reading must be greater than start meter reading",
        ))

    return issues


@traced_engine("expense_validation", "1.0")
def validate_submission(submission: ExpenseSubmission) -> ExpenseValidationResult:
    """Check the evidence attached to a submission.

    Outstation evidence is keyed on the submitter's own ``is_outstation``
    flag: the form only collects meter readings when the flag is set.

    Args:
        submission: Input plus photos, meter readings and image verdicts.

    Returns:
        ExpenseValidationResult with every failing check.
    """
    input = submission.input
    issues: list[ValidationIssue] = []

    if input.hotel_bill_amount > 0 and not submission.bill_photo:
        issues.append(ValidationIssue(
            code="HOTEL_BILL_PHOTO_REQUIRED",
            message="Please upload hotel bill photo",
        ))

    if submission.bill_photo and submission.bill_validation is not None:
        issues.extend(_image_issues(
            submission.bill_validation,
            subject="Hotel bill",
            code_prefix="BILL",
            retake_hint="Please upload a clear photo of the original bill",
        ))

    if not input.is_outstation:
        return ExpenseValidationResult(issues=tuple(issues))

    if submission.meter_end_photo and submission.odometer_validation is not None:
        issues.extend(_image_issues(
            submission.odometer_validation,
            subject="Odometer image",
            code_prefix="ODOMETER",
            retake_hint="Please upload a clear photo of the actual odometer",
        ))

    has_readings = (
        submission.meter_start is not None and submission.meter_end is not None
    )
    if not has_readings:
        issues.append(ValidationIssue(
            code="METER_READINGS_REQUIRED",
            message="Start and End meter readings are required for outstation travel",
        ))

    if not (submission.meter_start_photo and submission.meter_end_photo):
        issues.append(ValidationIssue(
            code="METER_PHOTOS_REQUIRED",
            message="Start and End meter photos are required for outstation travel",
        ))

    if has_readings:
        issues.extend(check_meter_readings(
            input.distance_km,
            submission.meter_start,
            submission.meter_end,
        ))

    return ExpenseValidationResult(issues=tuple(issues))
