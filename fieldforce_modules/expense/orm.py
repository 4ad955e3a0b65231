"""
SQLAlchemy ORM persistence models for the field expense module.

Responsibility
--------------
Persist submitted expenses: the raw claimed trip, its computed allowance,
attached evidence references and the approval outcome.  Transient
computation DTOs (``ExpenseInput``, ``ExpenseCalculation``) are not
persisted on their own.

Invariants enforced
-------------------
* All monetary and distance fields use ``Decimal`` (Numeric) -- NEVER float.
* Enum fields stored as String(50) for readability and portability.
* ``status`` follows pending -> approved | rejected.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fieldforce_kernel.db.base import Base


class ExpenseModel(Base):
    """
    A submitted field expense.

    Maps to the ``ExpenseRecord`` DTO in ``fieldforce_modules.expense.models``.
    """

    __tablename__ = "expenses"

    __table_args__ = (
        Index("idx_expense_user", "user_id"),
        Index("idx_expense_status", "status"),
        Index("idx_expense_submitted_at", "submitted_at"),
    )

    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    user_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    user_role: Mapped[str] = mapped_column(String(50), nullable=False)

    # Claimed trip
    distance_km: Mapped[Decimal]
    is_outstation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_night_stay: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    hotel_bill_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    is_joint_work: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    joint_work_mr_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    joint_work_mr_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Evidence
    bill_proof_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    meter_start: Mapped[Decimal | None]
    meter_end: Mapped[Decimal | None]
    meter_start_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    meter_end_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    bill_validation_action: Mapped[str | None] = mapped_column(String(50), nullable=True)
    odometer_validation_action: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Computed allowance
    calculated_da: Mapped[Decimal]
    calculated_ta: Mapped[Decimal]
    total_expense: Mapped[Decimal]

    # Review / approval
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    needs_review: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    review_notes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    submitted_at: Mapped[datetime]
    approved_by_manager_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    approved_by_manager_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    processed_at: Mapped[datetime | None]

    def to_dto(self):
        from fieldforce_modules.expense.models import (
            ExpenseRecord,
            ExpenseStatus,
            UserRole,
            ValidationAction,
        )

        return ExpenseRecord(
            id=self.id,
            user_id=self.user_id,
            user_name=self.user_name,
            user_role=UserRole(self.user_role),
            distance_km=self.distance_km,
            is_outstation=self.is_outstation,
            is_night_stay=self.is_night_stay,
            hotel_bill_amount=self.hotel_bill_amount,
            calculated_da=self.calculated_da,
            calculated_ta=self.calculated_ta,
            total_expense=self.total_expense,
            status=ExpenseStatus(self.status),
            submitted_at=self.submitted_at,
            is_joint_work=self.is_joint_work,
            joint_work_mr_id=self.joint_work_mr_id,
            joint_work_mr_name=self.joint_work_mr_name,
            bill_proof_url=self.bill_proof_url,
            meter_start=self.meter_start,
            meter_end=self.meter_end,
            meter_start_photo_url=self.meter_start_photo_url,
            meter_end_photo_url=self.meter_end_photo_url,
            bill_validation_action=(
                ValidationAction(self.bill_validation_action)
                if self.bill_validation_action else None
            ),
            odometer_validation_action=(
                ValidationAction(self.odometer_validation_action)
                if self.odometer_validation_action else None
            ),
            needs_review=self.needs_review,
            review_notes=tuple(self.review_notes or ()),
            approved_by_manager_id=self.approved_by_manager_id,
            approved_by_manager_name=self.approved_by_manager_name,
            rejection_reason=self.rejection_reason,
            processed_at=self.processed_at,
        )
