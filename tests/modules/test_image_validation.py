"""
Tests for the image validator seam.

Confidence bands:
    >= 80  HIGH   -> AUTO_APPROVE
    >= 50  MEDIUM -> MANUAL_REVIEW
    <  50  LOW    -> FLAG_REJECT
"""

from decimal import Decimal

import pytest

from fieldforce_modules.expense.image_validation import (
    ImageValidator,
    ManualReviewImageValidator,
    build_validation_result,
    classify_confidence,
)
from fieldforce_modules.expense.models import (
    ConfidenceLevel,
    ImageValidationResult,
    ValidationAction,
)


class TestClassifyConfidence:

    @pytest.mark.parametrize(
        "confidence, level, action",
        [
            (100, ConfidenceLevel.HIGH, ValidationAction.AUTO_APPROVE),
            (80, ConfidenceLevel.HIGH, ValidationAction.AUTO_APPROVE),
            (79, ConfidenceLevel.MEDIUM, ValidationAction.MANUAL_REVIEW),
            (50, ConfidenceLevel.MEDIUM, ValidationAction.MANUAL_REVIEW),
            (49, ConfidenceLevel.LOW, ValidationAction.FLAG_REJECT),
            (0, ConfidenceLevel.LOW, ValidationAction.FLAG_REJECT),
        ],
    )
    def test_bands(self, confidence, level, action):
        assert classify_confidence(confidence) == (level, action)


class TestBuildValidationResult:

    def test_low_band_is_invalid(self):
        result = build_validation_result(30, flags=("Blurry",))
        assert not result.is_valid
        assert result.action == ValidationAction.FLAG_REJECT
        assert result.flags == ("Blurry",)

    def test_medium_band_is_valid(self):
        assert build_validation_result(65).is_valid

    def test_confidence_clamped(self):
        assert build_validation_result(140).confidence == 100
        assert build_validation_result(-5).confidence == 0

    def test_result_rejects_out_of_range_confidence(self):
        with pytest.raises(ValueError):
            ImageValidationResult(
                is_valid=True,
                confidence=101,
                level=ConfidenceLevel.HIGH,
                action=ValidationAction.AUTO_APPROVE,
            )


class TestManualReviewImageValidator:

    def test_satisfies_protocol(self):
        assert isinstance(ManualReviewImageValidator(), ImageValidator)

    def test_odometer_routed_to_review(self):
        result = ManualReviewImageValidator().validate_odometer(
            "end.jpg", "u-1", previous_reading=Decimal("1000"),
            claimed_distance=Decimal("45"),
        )
        assert result.is_valid
        assert result.level == ConfidenceLevel.MEDIUM
        assert result.action == ValidationAction.MANUAL_REVIEW
        assert result.flags == (ManualReviewImageValidator.FLAG,)

    def test_hotel_bill_routed_to_review(self):
        result = ManualReviewImageValidator().validate_hotel_bill(
            "bill.jpg", "u-1", claimed_amount=Decimal("600"),
        )
        assert result.action == ValidationAction.MANUAL_REVIEW
