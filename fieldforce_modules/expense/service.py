"""
Field Expense Module Service (``fieldforce_modules.expense.service``).

Responsibility
--------------
Orchestrates daily expense operations -- entry-window gating, input and
evidence validation, allowance calculation, persistence, manager approval
and period summaries -- by delegating pure computation to
``fieldforce_engines`` and persistence to ``ExpenseRecordStore``.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ExpenseService`` is the sole public
entry point for expense operations.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary (``commit`` on
  success, ``rollback`` on refusal or exception).
* The clock is read once per call and passed into the engines.
* Settings are fetched from the provider once per call and passed
  explicitly; engines never look them up.

Failure modes
-------------
* Business-rule refusals (window closed, validation issues) ->
  ``SubmissionResult`` with a non-accepted status and ALL issues.
* Unknown / already-processed expense -> typed exception from the store.
* Unexpected exception -> session rolled back, exception re-raised.

Usage::

    service = ExpenseService(session, SettingsProvider(), clock=clock)
    result = service.submit(ExpenseSubmission(input=expense_input, ...))
    if not result.is_success:
        show_errors(result.errors)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy.orm import Session

from fieldforce_engines.expense_calculator import (
    calculate_expense,
    calculate_expense_summary,
    is_expense_entry_allowed,
)
from fieldforce_engines.expense_validation import (
    validate_expense_input,
    validate_submission,
)
from fieldforce_kernel.domain.clock import Clock, SystemClock
from fieldforce_kernel.logging_config import LogContext, get_logger
from fieldforce_modules.expense.models import (
    EntryWindowStatus,
    ExpenseCalculation,
    ExpenseInput,
    ExpenseRecord,
    ExpenseStatus,
    ExpenseSubmission,
    ExpenseSummary,
    UserRole,
    ValidationAction,
    ValidationIssue,
    WarningPolicy,
)
from fieldforce_modules.expense.settings import SettingsProvider
from fieldforce_modules.expense.store import ExpenseRecordStore

logger = get_logger("modules.expense.service")


class SubmissionStatus(str, Enum):
    """Outcome of an expense submission."""

    ACCEPTED = "accepted"
    ENTRY_WINDOW_CLOSED = "entry_window_closed"
    VALIDATION_FAILED = "validation_failed"


@dataclass(frozen=True)
class SubmissionResult:
    """Result of ``ExpenseService.submit``."""

    status: SubmissionStatus
    errors: tuple[ValidationIssue, ...] = ()
    calculation: ExpenseCalculation | None = None
    expense: ExpenseRecord | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == SubmissionStatus.ACCEPTED

    @property
    def error_messages(self) -> tuple[str, ...]:
        return tuple(issue.message for issue in self.errors)


class ExpenseService:
    """
    Orchestrates field expense operations through engines and the store.

    Contract
    --------
    * ``submit`` returns a ``SubmissionResult``; callers inspect
      ``result.is_success`` and display every entry of ``result.errors``.
    * ``preview`` and ``check_entry_window`` have no side effects.

    Warning policy
    --------------
    "Unusually high" distance/bill checks are WARNING severity.  Under
    ``WarningPolicy.BLOCK`` (default) they refuse the submission like any
    other issue.  Under ``WarningPolicy.FLAG_FOR_REVIEW`` the expense is
    accepted with ``needs_review=True`` and the warning messages recorded
    as review notes.  Image verdicts of MANUAL_REVIEW are flagged the same
    way under either policy.
    """

    def __init__(
        self,
        session: Session,
        settings_provider: SettingsProvider,
        clock: Clock | None = None,
        warning_policy: WarningPolicy = WarningPolicy.BLOCK,
    ):
        self._session = session
        self._settings = settings_provider
        self._clock = clock or SystemClock()
        self._warning_policy = warning_policy
        self._store = ExpenseRecordStore(session, clock=self._clock)

    @property
    def store(self) -> ExpenseRecordStore:
        return self._store

    # =========================================================================
    # Read-only helpers
    # =========================================================================

    def check_entry_window(self) -> EntryWindowStatus:
        """Is expense entry open right now?"""
        return is_expense_entry_allowed(self._settings.get(), self._clock.now())

    def preview(self, input: ExpenseInput) -> ExpenseCalculation:
        """Live calculation for the entry form; nothing is persisted."""
        return calculate_expense(input, self._settings.get())

    # =========================================================================
    # Submission
    # =========================================================================

    def submit(self, submission: ExpenseSubmission) -> SubmissionResult:
        """
        Validate, calculate and persist an expense as ``pending``.

        Order: entry window -> input validation -> evidence validation ->
        calculation -> persistence.  All validation issues from both
        validation steps are reported together.
        """
        input = submission.input
        settings = self._settings.get()

        role = UserRole(input.user_role)
        with LogContext.bind(actor_id=input.user_id, user_role=role.value):
            try:
                window = is_expense_entry_allowed(settings, self._clock.now())
                if not window.allowed:
                    logger.info(
                        "expense_submission_outside_window",
                        extra={"time_remaining": window.time_remaining},
                    )
                    self._session.rollback()
                    return SubmissionResult(
                        status=SubmissionStatus.ENTRY_WINDOW_CLOSED,
                        message=window.message,
                    )

                input_check = validate_expense_input(input)
                evidence_check = validate_submission(submission)

                if self._warning_policy == WarningPolicy.BLOCK:
                    blocking = [*input_check.issues, *evidence_check.issues]
                    warnings = []
                else:
                    blocking = [*input_check.blocking_errors, *evidence_check.issues]
                    warnings = list(input_check.warnings)

                if blocking:
                    logger.info(
                        "expense_submission_rejected",
                        extra={"issue_codes": [i.code for i in blocking]},
                    )
                    self._session.rollback()
                    return SubmissionResult(
                        status=SubmissionStatus.VALIDATION_FAILED,
                        errors=tuple(blocking),
                    )

                calculation = calculate_expense(input, settings)

                review_notes = [w.message for w in warnings]
                review_notes.extend(self._manual_review_notes(submission))

                record = self._store.create(
                    submission,
                    calculation,
                    needs_review=bool(review_notes),
                    review_notes=tuple(review_notes),
                )
                self._session.commit()

                logger.info(
                    "expense_submitted",
                    extra={
                        "expense_id": str(record.id),
                        "calculated_da": str(calculation.calculated_da),
                        "calculated_ta": str(calculation.calculated_ta),
                        "total_expense": str(calculation.total_expense),
                        "needs_review": record.needs_review,
                    },
                )
                return SubmissionResult(
                    status=SubmissionStatus.ACCEPTED,
                    errors=tuple(warnings),
                    calculation=calculation,
                    expense=record,
                )

            except Exception:
                self._session.rollback()
                raise

    @staticmethod
    def _manual_review_notes(submission: ExpenseSubmission) -> list[str]:
        notes: list[str] = []
        verdicts = (
            ("Hotel bill", submission.bill_validation),
            ("Odometer image", submission.odometer_validation),
        )
        for subject, verdict in verdicts:
            if verdict is not None and verdict.action == ValidationAction.MANUAL_REVIEW:
                notes.append(f"{subject} requires manual review")
        return notes

    # =========================================================================
    # Approval workflow
    # =========================================================================

    def approve(
        self,
        expense_id: UUID,
        manager_id: str,
        manager_name: str,
    ) -> ExpenseRecord:
        """Approve a pending expense."""
        return self._decide(
            expense_id, ExpenseStatus.APPROVED, manager_id, manager_name, None,
        )

    def reject(
        self,
        expense_id: UUID,
        manager_id: str,
        manager_name: str,
        reason: str,
    ) -> ExpenseRecord:
        """Reject a pending expense with a reason shown to the submitter."""
        return self._decide(
            expense_id, ExpenseStatus.REJECTED, manager_id, manager_name, reason,
        )

    def _decide(
        self,
        expense_id: UUID,
        status: ExpenseStatus,
        manager_id: str,
        manager_name: str,
        reason: str | None,
    ) -> ExpenseRecord:
        with LogContext.bind(actor_id=manager_id, expense_id=str(expense_id)):
            try:
                record = self._store.update_status(
                    expense_id,
                    status,
                    manager_id=manager_id,
                    manager_name=manager_name,
                    rejection_reason=reason,
                )
                self._session.commit()
                return record
            except Exception:
                self._session.rollback()
                raise

    # =========================================================================
    # Reporting
    # =========================================================================

    def summarize(
        self,
        user_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> ExpenseSummary:
        """Summary over a user's expenses and/or a submission window.

        Rejected expenses are excluded.  A date window needs both bounds.
        """
        if (start is None) != (end is None):
            raise ValueError("summarize requires both start and end, or neither")
        if start is not None:
            records = self._store.list_by_date_range(start, end, user_id=user_id)
        elif user_id is not None:
            records = self._store.list_by_user(user_id)
        else:
            raise ValueError("summarize requires user_id or a start/end window")

        counted = [r for r in records if r.status != ExpenseStatus.REJECTED]
        return calculate_expense_summary(counted)
