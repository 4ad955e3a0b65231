"""
Tests for ExpenseRecordStore against an in-memory SQLite database.

The store flushes but never commits; tests commit explicitly where a
fresh read is needed.
"""

import dataclasses
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from fieldforce_engines.expense_calculator import calculate_expense
from fieldforce_kernel.exceptions import (
    ExpenseAlreadyProcessedError,
    ExpenseNotFoundError,
)
from fieldforce_modules.expense.image_validation import build_validation_result
from fieldforce_modules.expense.models import (
    AppSettings,
    ExpenseInput,
    ExpenseStatus,
    ExpenseSubmission,
    UserRole,
    ValidationAction,
)
from fieldforce_modules.expense.store import ExpenseRecordStore


def _submission(
    user_id: str = "mr-1",
    distance: str = "45",
    outstation: bool = True,
    joint_work: bool = False,
    role: UserRole = UserRole.MR,
) -> ExpenseSubmission:
    return ExpenseSubmission(
        input=ExpenseInput(
            user_id=user_id,
            user_role=role,
            distance_km=Decimal(distance),
            is_outstation=outstation,
            is_joint_work=joint_work,
        ),
        user_name="Asha",
        meter_start=Decimal("1000"),
        meter_end=Decimal("1045"),
        meter_start_photo="start.jpg",
        meter_end_photo="end.jpg",
        joint_work_mr_id="mr-9",
        joint_work_mr_name="Ravi",
    )


def _create(store: ExpenseRecordStore, submission: ExpenseSubmission, **kwargs):
    calculation = calculate_expense(submission.input, AppSettings())
    return store.create(submission, calculation, **kwargs)


@pytest.fixture
def store(session, clock):
    return ExpenseRecordStore(session, clock=clock)


class TestCreate:

    def test_persists_pending_record(self, store, session):
        record = _create(store, _submission())
        session.commit()

        loaded = store.get(record.id)
        assert loaded.status == ExpenseStatus.PENDING
        assert loaded.user_role == UserRole.MR
        assert loaded.user_name == "Asha"
        assert loaded.calculated_da == Decimal("100")
        assert loaded.calculated_ta == Decimal("112.5")
        assert loaded.total_expense == Decimal("212.5")
        assert loaded.meter_start == Decimal("1000")
        assert loaded.meter_end_photo_url == "end.jpg"

    def test_meter_fields_dropped_for_local_trip(self, store):
        record = _create(store, _submission(distance="10", outstation=False))
        assert record.meter_start is None
        assert record.meter_end is None
        assert record.meter_start_photo_url is None

    def test_joint_work_fields_only_when_joint(self, store):
        solo = _create(store, _submission(role=UserRole.MANAGER, user_id="mgr-1"))
        joint = _create(
            store,
            _submission(role=UserRole.MANAGER, user_id="mgr-1", joint_work=True),
        )
        assert solo.joint_work_mr_id is None
        assert joint.joint_work_mr_id == "mr-9"
        assert joint.joint_work_mr_name == "Ravi"
        assert joint.calculated_da == Decimal("500")

    def test_review_flags_and_verdicts_stored(self, store, session):
        submission = dataclasses.replace(
            _submission(), odometer_validation=build_validation_result(60),
        )
        record = _create(
            store, submission,
            needs_review=True, review_notes=("Odometer image requires manual review",),
        )
        session.commit()

        loaded = store.get(record.id)
        assert loaded.needs_review
        assert loaded.review_notes == ("Odometer image requires manual review",)
        assert loaded.odometer_validation_action == ValidationAction.MANUAL_REVIEW
        assert loaded.bill_validation_action is None

    def test_get_unknown_raises(self, store):
        with pytest.raises(ExpenseNotFoundError) as exc_info:
            store.get(uuid4())
        assert exc_info.value.code == "EXPENSE_NOT_FOUND"


class TestQueries:

    def test_list_by_user(self, store):
        _create(store, _submission(user_id="mr-1"))
        _create(store, _submission(user_id="mr-1"))
        _create(store, _submission(user_id="mr-2"))
        assert len(store.list_by_user("mr-1")) == 2
        assert store.list_by_user("nobody") == []

    def test_list_pending_for_team(self, store):
        _create(store, _submission(user_id="mr-1"))
        other = _create(store, _submission(user_id="mr-2"))
        _create(store, _submission(user_id="mr-3"))

        team = store.list_pending(user_ids=["mr-1", "mr-2"])
        assert {r.user_id for r in team} == {"mr-1", "mr-2"}

        store.update_status(other.id, ExpenseStatus.APPROVED, "mgr-1", "Meera")
        assert {r.user_id for r in store.list_pending()} == {"mr-1", "mr-3"}

    def test_list_by_date_range(self, store, clock):
        first = _create(store, _submission(user_id="mr-1"))
        clock.advance(2 * 24 * 3600)
        _create(store, _submission(user_id="mr-1"))

        start = datetime(2026, 3, 10, 0, 0, tzinfo=timezone.utc)
        end = start + timedelta(days=1)
        records = store.list_by_date_range(start, end)
        assert [r.id for r in records] == [first.id]

        assert store.list_by_date_range(start, end, user_id="mr-2") == []

    def test_list_flagged(self, store):
        _create(store, _submission(), needs_review=True, review_notes=("check",))
        _create(store, _submission())
        flagged = store.list_flagged()
        assert len(flagged) == 1
        assert flagged[0].review_notes == ("check",)


class TestUpdateStatus:

    def test_approve_sets_manager_and_timestamp(self, store, clock):
        record = _create(store, _submission())
        clock.advance(3600)
        updated = store.update_status(
            record.id, ExpenseStatus.APPROVED, "mgr-1", "Meera",
        )
        assert updated.status == ExpenseStatus.APPROVED
        assert updated.approved_by_manager_id == "mgr-1"
        assert updated.approved_by_manager_name == "Meera"
        assert updated.processed_at is not None
        assert updated.rejection_reason is None

    def test_reject_records_reason(self, store):
        record = _create(store, _submission())
        updated = store.update_status(
            record.id, ExpenseStatus.REJECTED, "mgr-1", "Meera",
            rejection_reason="Odometer photo unreadable",
        )
        assert updated.rejection_reason == "Odometer photo unreadable"

    def test_cannot_process_twice(self, store):
        record = _create(store, _submission())
        store.update_status(record.id, ExpenseStatus.APPROVED, "mgr-1", "Meera")
        with pytest.raises(ExpenseAlreadyProcessedError) as exc_info:
            store.update_status(record.id, ExpenseStatus.REJECTED, "mgr-1", "Meera")
        assert exc_info.value.current_status == "approved"

    def test_unknown_expense(self, store):
        with pytest.raises(ExpenseNotFoundError):
            store.update_status(uuid4(), ExpenseStatus.APPROVED, "mgr-1", "Meera")
