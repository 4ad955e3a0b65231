"""
Field Expense Domain Models (``fieldforce_modules.expense.models``).

Responsibility
--------------
Frozen dataclass value objects for the daily field expense cycle: the
submitted trip (``ExpenseInput``), the admin-curated rate table
(``AppSettings``), the computed allowance (``ExpenseCalculation``),
validation outcomes, the entry-window verdict, the persisted record and
period summaries.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by the
``fieldforce_engines`` calculators, ``ExpenseRecordStore`` and
``ExpenseService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary and distance fields use ``Decimal`` -- NEVER ``float``.
* Settings are NOT clamped or range-checked here; the engine trusts its
  configuration (structural checks live in ``fieldforce_config.loader``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol
from uuid import UUID


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class UserRole(str, Enum):
    """Roles that can submit expenses."""
    MR = "mr"
    MANAGER = "manager"
    ADMIN = "admin"


class ExpenseStatus(str, Enum):
    """Expense record approval states."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ValidationSeverity(str, Enum):
    """Whether a validation issue stops a submission outright."""
    BLOCKING = "blocking"
    WARNING = "warning"  # "unusually high" checks


class WarningPolicy(str, Enum):
    """How the submission boundary treats WARNING-severity issues."""
    BLOCK = "block"
    FLAG_FOR_REVIEW = "flag_for_review"


class ValidationAction(str, Enum):
    """Recommendation returned by an image validator."""
    AUTO_APPROVE = "AUTO_APPROVE"
    MANUAL_REVIEW = "MANUAL_REVIEW"
    FLAG_REJECT = "FLAG_REJECT"


class ConfidenceLevel(str, Enum):
    """Coarse confidence band returned by an image validator."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AppSettings:
    """Tunable allowance rate table, owned by the admin settings screens."""
    mr_da_local: Decimal = Decimal("100")
    mr_da_outstation: Decimal = Decimal("100")
    manager_da_solo: Decimal = Decimal("200")
    manager_da_joint: Decimal = Decimal("500")
    ta_per_km: Decimal = Decimal("2.5")
    mr_hotel_limit: Decimal = Decimal("500")
    manager_hotel_limit: Decimal = Decimal("700")
    outstation_ta_cap: Decimal = Decimal("500")
    outstation_distance_threshold: Decimal = Decimal("30")  # km
    expense_entry_start_hour: int = 20  # 8 PM local time
    company_logo: str | None = None


# ---------------------------------------------------------------------------
# Calculation input / output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExpenseInput:
    """One day's trip as claimed by the submitter."""
    user_id: str
    user_role: UserRole
    distance_km: Decimal
    is_outstation: bool = False
    is_night_stay: bool = False
    hotel_bill_amount: Decimal = Decimal("0")
    is_joint_work: bool = False  # manager touring with an MR


@dataclass(frozen=True)
class ExpenseBreakdown:
    """Human-readable trace of which allowance rules fired."""
    da_type: str
    da_amount: Decimal
    ta_calculation: str
    ta_amount: Decimal
    hotel_amount: Decimal
    hotel_limit: Decimal


@dataclass(frozen=True)
class ExpenseCalculation:
    """Computed allowance for one ``ExpenseInput``."""
    calculated_da: Decimal
    calculated_ta: Decimal
    total_expense: Decimal
    breakdown: ExpenseBreakdown
    is_outstation: bool = False  # after OR-ing the flag with the distance rule


class ComputedExpense(Protocol):
    """Anything carrying computed DA, TA and total (calculations, records)."""
    calculated_da: Decimal
    calculated_ta: Decimal
    total_expense: Decimal


@dataclass(frozen=True)
class ExpenseSummary:
    """Totals over a set of computed expenses."""
    total_expenses: Decimal = Decimal("0")
    total_da: Decimal = Decimal("0")
    total_ta: Decimal = Decimal("0")
    total_hotel: Decimal = Decimal("0")
    count: int = 0
    average_expense: Decimal = Decimal("0")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationIssue:
    """A single user-facing validation failure."""
    code: str
    message: str
    severity: ValidationSeverity = ValidationSeverity.BLOCKING

    @property
    def is_blocking(self) -> bool:
        return self.severity == ValidationSeverity.BLOCKING


@dataclass(frozen=True)
class ExpenseValidationResult:
    """All issues raised against an input, in rule order.

    ``valid`` is True only when no issue of any severity fired.  Use
    ``blocking_errors`` and ``warnings`` when a policy decides whether
    warnings stop the submission.
    """
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return len(self.issues) == 0

    @property
    def errors(self) -> tuple[str, ...]:
        return tuple(issue.message for issue in self.issues)

    @property
    def blocking_errors(self) -> tuple[ValidationIssue, ...]:
        return tuple(i for i in self.issues if i.is_blocking)

    @property
    def warnings(self) -> tuple[ValidationIssue, ...]:
        return tuple(i for i in self.issues if not i.is_blocking)


@dataclass(frozen=True)
class ImageValidationResult:
    """Verdict from an odometer or hotel bill image validator."""
    is_valid: bool
    confidence: int  # 0-100
    level: ConfidenceLevel
    action: ValidationAction
    flags: tuple[str, ...] = ()
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ValueError(
                f"confidence must be between 0 and 100, got {self.confidence}"
            )


@dataclass(frozen=True)
class ExpenseSubmission:
    """An ``ExpenseInput`` plus the evidence collected by the entry form.

    Photos are opaque references (storage URLs or data URIs).  Meter
    readings are only required when ``input.is_outstation`` is set.
    """
    input: ExpenseInput
    user_name: str = ""
    bill_photo: str | None = None
    meter_start: Decimal | None = None
    meter_end: Decimal | None = None
    meter_start_photo: str | None = None
    meter_end_photo: str | None = None
    bill_validation: ImageValidationResult | None = None
    odometer_validation: ImageValidationResult | None = None
    joint_work_mr_id: str | None = None
    joint_work_mr_name: str | None = None


# ---------------------------------------------------------------------------
# Entry window
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EntryWindowStatus:
    """Whether expense entry is open at a given moment."""
    allowed: bool
    message: str
    time_remaining: str | None = None


# ---------------------------------------------------------------------------
# Persisted record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExpenseRecord:
    """A submitted expense: raw input merged with its calculation."""
    id: UUID
    user_id: str
    user_name: str
    user_role: UserRole
    distance_km: Decimal
    is_outstation: bool
    is_night_stay: bool
    hotel_bill_amount: Decimal
    calculated_da: Decimal
    calculated_ta: Decimal
    total_expense: Decimal
    status: ExpenseStatus
    submitted_at: datetime
    is_joint_work: bool = False
    joint_work_mr_id: str | None = None
    joint_work_mr_name: str | None = None
    bill_proof_url: str | None = None
    meter_start: Decimal | None = None
    meter_end: Decimal | None = None
    meter_start_photo_url: str | None = None
    meter_end_photo_url: str | None = None
    bill_validation_action: ValidationAction | None = None
    odometer_validation_action: ValidationAction | None = None
    needs_review: bool = False
    review_notes: tuple[str, ...] = ()
    approved_by_manager_id: str | None = None
    approved_by_manager_name: str | None = None
    rejection_reason: str | None = None
    processed_at: datetime | None = None
