"""
Expense Record Store (``fieldforce_modules.expense.store``).

Responsibility
--------------
Persists submitted expenses (raw input merged with the computed allowance)
and records approval decisions.  Returns frozen ``ExpenseRecord`` DTOs,
never live ORM objects.

Architecture position
---------------------
**Modules layer** -- persistence glue.  Uses the caller's ``Session`` and
does NOT commit: ``ExpenseService`` owns the transaction boundary.

Failure modes
-------------
* ``ExpenseNotFoundError`` for an unknown expense id.
* ``ExpenseAlreadyProcessedError`` when approving/rejecting a record that
  is no longer pending.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from fieldforce_kernel.domain.clock import Clock, SystemClock
from fieldforce_kernel.exceptions import (
    ExpenseAlreadyProcessedError,
    ExpenseNotFoundError,
)
from fieldforce_kernel.logging_config import get_logger
from fieldforce_modules.expense.models import (
    ExpenseCalculation,
    ExpenseRecord,
    ExpenseStatus,
    ExpenseSubmission,
    UserRole,
)
from fieldforce_modules.expense.orm import ExpenseModel

logger = get_logger("modules.expense.store")


class ExpenseRecordStore:
    """SQLAlchemy-backed storage for submitted expenses."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def create(
        self,
        submission: ExpenseSubmission,
        calculation: ExpenseCalculation,
        needs_review: bool = False,
        review_notes: tuple[str, ...] = (),
    ) -> ExpenseRecord:
        """Persist a new pending expense stamped with the submission time."""
        input = submission.input
        outstation = input.is_outstation
        bill = submission.bill_validation
        odometer = submission.odometer_validation

        model = ExpenseModel(
            user_id=input.user_id,
            user_name=submission.user_name,
            user_role=UserRole(input.user_role).value,
            distance_km=input.distance_km,
            is_outstation=input.is_outstation,
            is_night_stay=input.is_night_stay,
            hotel_bill_amount=input.hotel_bill_amount,
            is_joint_work=input.is_joint_work,
            joint_work_mr_id=submission.joint_work_mr_id if input.is_joint_work else None,
            joint_work_mr_name=submission.joint_work_mr_name if input.is_joint_work else None,
            bill_proof_url=submission.bill_photo,
            meter_start=submission.meter_start if outstation else None,
            meter_end=submission.meter_end if outstation else None,
            meter_start_photo_url=submission.meter_start_photo if outstation else None,
            meter_end_photo_url=submission.meter_end_photo if outstation else None,
            bill_validation_action=bill.action.value if bill else None,
            odometer_validation_action=odometer.action.value if odometer else None,
            calculated_da=calculation.calculated_da,
            calculated_ta=calculation.calculated_ta,
            total_expense=calculation.total_expense,
            status=ExpenseStatus.PENDING.value,
            needs_review=needs_review,
            review_notes=list(review_notes),
            submitted_at=self._clock.now_utc(),
        )
        self._session.add(model)
        self._session.flush()

        logger.info(
            "expense_record_created",
            extra={
                "expense_id": str(model.id),
                "user_id": model.user_id,
                "total_expense": str(model.total_expense),
                "needs_review": needs_review,
            },
        )
        return model.to_dto()

    def _load(self, expense_id: UUID) -> ExpenseModel:
        model = self._session.get(ExpenseModel, expense_id)
        if model is None:
            raise ExpenseNotFoundError(str(expense_id))
        return model

    def get(self, expense_id: UUID) -> ExpenseRecord:
        return self._load(expense_id).to_dto()

    def list_by_user(self, user_id: str) -> list[ExpenseRecord]:
        stmt = (
            select(ExpenseModel)
            .where(ExpenseModel.user_id == user_id)
            .order_by(ExpenseModel.submitted_at)
        )
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def list_pending(self, user_ids: list[str] | None = None) -> list[ExpenseRecord]:
        """Pending expenses, optionally restricted to a manager's team."""
        stmt = select(ExpenseModel).where(
            ExpenseModel.status == ExpenseStatus.PENDING.value
        )
        if user_ids is not None:
            stmt = stmt.where(ExpenseModel.user_id.in_(user_ids))
        stmt = stmt.order_by(ExpenseModel.submitted_at)
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def list_by_date_range(
        self,
        start: datetime,
        end: datetime,
        user_id: str | None = None,
    ) -> list[ExpenseRecord]:
        """Expenses submitted within [start, end], inclusive."""
        stmt = select(ExpenseModel).where(
            ExpenseModel.submitted_at >= start,
            ExpenseModel.submitted_at <= end,
        )
        if user_id is not None:
            stmt = stmt.where(ExpenseModel.user_id == user_id)
        stmt = stmt.order_by(ExpenseModel.submitted_at)
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def list_flagged(self) -> list[ExpenseRecord]:
        """Expenses routed to manual review."""
        stmt = (
            select(ExpenseModel)
            .where(ExpenseModel.needs_review.is_(True))
            .order_by(ExpenseModel.submitted_at)
        )
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def update_status(
        self,
        expense_id: UUID,
        status: ExpenseStatus,
        manager_id: str | None = None,
        manager_name: str | None = None,
        rejection_reason: str | None = None,
    ) -> ExpenseRecord:
        """Record an approval decision on a pending expense."""
        model = self._load(expense_id)
        if model.status != ExpenseStatus.PENDING.value:
            raise ExpenseAlreadyProcessedError(str(expense_id), model.status)

        model.status = status.value
        model.approved_by_manager_id = manager_id
        model.approved_by_manager_name = manager_name
        model.rejection_reason = rejection_reason
        model.processed_at = self._clock.now_utc()
        self._session.flush()

        logger.info(
            "expense_status_updated",
            extra={
                "expense_id": str(expense_id),
                "status": status.value,
                "manager_id": manager_id,
            },
        )
        return model.to_dto()
