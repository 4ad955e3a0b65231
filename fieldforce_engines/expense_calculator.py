"""
Field Expense Calculation Engine (``fieldforce_engines.expense_calculator``).

Responsibility
--------------
Pure functions for the daily field allowance:

* Daily Allowance (DA) selection by role
* Travel Allowance (TA) with the distance threshold and outstation cap
* Hotel reimbursement clamped to the role limit
* Entry-window gating by local hour
* Summary aggregation over computed expenses

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO database,
ZERO clock reads.  May only import module-level DTO types.

Invariants enforced
-------------------
* TA is zero whenever ``distance_km < outstation_distance_threshold``, even
  if the submitter flagged the trip as outstation.
* Hotel reimbursement never exceeds the role hotel limit.
* DA, TA and total are rounded half-up to 2 decimal places.
* Manager DA depends on the joint-work flag only, never on distance or
  outstation status.
* Same inputs always produce identical outputs.

Failure modes
-------------
* None.  Negative distances or negative rates produce a numeric answer;
  input validation is a separate step (``expense_validation``).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import assert_never

from fieldforce_engines.tracer import traced_engine
from fieldforce_modules.expense.models import (
    AppSettings,
    ComputedExpense,
    EntryWindowStatus,
    ExpenseBreakdown,
    ExpenseCalculation,
    ExpenseInput,
    ExpenseSummary,
    UserRole,
)

_CENT = Decimal("0.01")
_ZERO = Decimal("0")


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to 2 decimal places."""
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def _plain(value: Decimal) -> str:
    """Render a Decimal without trailing zeros or exponent (45, 2.5, 500)."""
    return format(value.normalize(), "f")


# ---------------------------------------------------------------------------
# DA / TA / hotel
# ---------------------------------------------------------------------------


def _select_daily_allowance(
    input: ExpenseInput,
    settings: AppSettings,
    outstation: bool,
) -> tuple[Decimal, str, Decimal]:
    """Return (DA amount, DA label, hotel limit) for the submitter's role."""
    role = UserRole(input.user_role)

    if role is UserRole.MR:
        if outstation:
            return settings.mr_da_outstation, "MR DA (Outstation)", settings.mr_hotel_limit
        return settings.mr_da_local, "MR DA (Local)", settings.mr_hotel_limit

    if role is UserRole.MANAGER:
        # Supervision tier, independent of distance
        if input.is_joint_work:
            return (
                settings.manager_da_joint,
                "Manager DA (Joint with MR)",
                settings.manager_hotel_limit,
            )
        return settings.manager_da_solo, "Manager DA (Solo)", settings.manager_hotel_limit

    if role is UserRole.ADMIN:
        return _ZERO, "N/A", _ZERO

    assert_never(role)


def _travel_allowance(
    distance_km: Decimal,
    settings: AppSettings,
    outstation: bool,
) -> tuple[Decimal, str]:
    """Return (rounded TA, TA formula text)."""
    threshold = settings.outstation_distance_threshold

    if distance_km < threshold:
        return _ZERO, f"Not applicable (< {_plain(threshold)} km)"

    ta_amount = distance_km * settings.ta_per_km
    if outstation:
        ta_amount = min(ta_amount, settings.outstation_ta_cap)
    ta_amount = round_currency(ta_amount)

    formula = f"{_plain(distance_km)} km × ₹{_plain(settings.ta_per_km)}"
    if outstation:
        formula = (
            f"{formula} = ₹{ta_amount} "
            f"(capped at ₹{_plain(settings.outstation_ta_cap)})"
        )
    return ta_amount, formula


@traced_engine(
    "expense_calculator", "1.0", fingerprint_fields=("input", "settings")
)
def calculate_expense(
    input: ExpenseInput,
    settings: AppSettings,
) -> ExpenseCalculation:
    """Compute DA, TA, hotel reimbursement and total for one day's trip.

    A trip is outstation when the submitter says so OR when the distance
    reaches ``outstation_distance_threshold``.  A short distance never
    downgrades an explicit outstation flag, but TA is still only payable
    at or above the threshold.

    Args:
        input: The claimed trip.
        settings: The active rate table.

    Returns:
        ExpenseCalculation with a breakdown describing every rule applied.
    """
    by_distance = input.distance_km >= settings.outstation_distance_threshold
    outstation = input.is_outstation or by_distance

    da_amount, da_type, hotel_limit = _select_daily_allowance(
        input, settings, outstation,
    )
    da_amount = round_currency(da_amount)

    ta_amount, ta_calculation = _travel_allowance(
        input.distance_km, settings, outstation,
    )

    hotel_amount = _ZERO
    if input.is_night_stay and input.hotel_bill_amount > 0:
        hotel_amount = min(input.hotel_bill_amount, hotel_limit)

    total = round_currency(da_amount + ta_amount + hotel_amount)

    return ExpenseCalculation(
        calculated_da=da_amount,
        calculated_ta=ta_amount,
        total_expense=total,
        breakdown=ExpenseBreakdown(
            da_type=da_type,
            da_amount=da_amount,
            ta_calculation=ta_calculation,
            ta_amount=ta_amount,
            hotel_amount=hotel_amount,
            hotel_limit=hotel_limit,
        ),
        is_outstation=outstation,
    )


# ---------------------------------------------------------------------------
# Entry window
# ---------------------------------------------------------------------------


def format_hour(hour: int) -> str:
    """Format a 0-23 hour as a 12-hour label ("12 AM", "8 PM")."""
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def is_expense_entry_allowed(
    settings: AppSettings,
    now: datetime,
) -> EntryWindowStatus:
    """Check whether expense entry is open at ``now`` (local time).

    Entry opens at the top of ``expense_entry_start_hour``; minutes are
    ignored once that hour is reached.  Before then, the countdown is
    ``(start - hour - 1)h (60 - minute)m``: the hour is pre-decremented
    because the minute part already counts up to the next full hour.

    Args:
        settings: The active rate table.
        now: Current local time, read once by the caller.

    Returns:
        EntryWindowStatus; ``time_remaining`` is set only when closed.
    """
    start_hour = settings.expense_entry_start_hour

    if now.hour >= start_hour:
        return EntryWindowStatus(
            allowed=True,
            message="Expense entry is allowed",
        )

    hours_remaining = start_hour - now.hour
    minutes_remaining = 60 - now.minute

    return EntryWindowStatus(
        allowed=False,
        message=(
            f"Expense entry is only allowed after {start_hour}:00 "
            f"({format_hour(start_hour)})"
        ),
        time_remaining=f"{hours_remaining - 1}h {minutes_remaining}m remaining",
    )


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def calculate_expense_summary(
    expenses: Sequence[ComputedExpense],
) -> ExpenseSummary:
    """Aggregate computed expenses into period totals.

    ``total_hotel`` is derived as ``total - DA - TA`` rather than summed on
    its own, so any rounding residue lands in the hotel figure and the
    parts always reconcile to the total.

    Args:
        expenses: Calculations or records exposing ``calculated_da``,
            ``calculated_ta`` and ``total_expense``.

    Returns:
        ExpenseSummary; all zeros for an empty sequence.
    """
    if not expenses:
        return ExpenseSummary()

    total_da = sum((e.calculated_da for e in expenses), _ZERO)
    total_ta = sum((e.calculated_ta for e in expenses), _ZERO)
    total_expenses = sum((e.total_expense for e in expenses), _ZERO)
    total_hotel = total_expenses - total_da - total_ta

    return ExpenseSummary(
        total_expenses=round_currency(total_expenses),
        total_da=round_currency(total_da),
        total_ta=round_currency(total_ta),
        total_hotel=round_currency(total_hotel),
        count=len(expenses),
        average_expense=round_currency(total_expenses / len(expenses)),
    )
