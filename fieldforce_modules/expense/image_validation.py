"""
Image validator seam (``fieldforce_modules.expense.image_validation``).

Odometer and hotel bill photos are checked by an external OCR / fraud
backend.  The expense engine never calls that backend; the entry form
collects its verdicts and passes them in on ``ExpenseSubmission``, where
``validate_submission`` hard-blocks ``FLAG_REJECT`` recommendations.

Backends implement ``ImageValidator``.  ``ManualReviewImageValidator`` is
the fallback for deployments without a backend: it routes every image to
a human reviewer.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Protocol, runtime_checkable

from fieldforce_kernel.logging_config import get_logger
from fieldforce_modules.expense.models import (
    ConfidenceLevel,
    ImageValidationResult,
    ValidationAction,
)

logger = get_logger("modules.expense.image_validation")

HIGH_CONFIDENCE_THRESHOLD = 80
MEDIUM_CONFIDENCE_THRESHOLD = 50


@runtime_checkable
class ImageValidator(Protocol):
    """Backend contract for odometer and hotel bill photo checks."""

    def validate_odometer(
        self,
        image: str,
        user_id: str,
        previous_reading: Decimal | None = None,
        claimed_distance: Decimal | None = None,
    ) -> ImageValidationResult:
        ...

    def validate_hotel_bill(
        self,
        image: str,
        user_id: str,
        claimed_amount: Decimal | None = None,
    ) -> ImageValidationResult:
        ...


def classify_confidence(confidence: int) -> tuple[ConfidenceLevel, ValidationAction]:
    """Map a 0-100 confidence score to a level and a recommended action."""
    if confidence >= HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.HIGH, ValidationAction.AUTO_APPROVE
    if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.MEDIUM, ValidationAction.MANUAL_REVIEW
    return ConfidenceLevel.LOW, ValidationAction.FLAG_REJECT


def build_validation_result(
    confidence: int,
    flags: tuple[str, ...] = (),
    details: dict | None = None,
    timestamp: datetime | None = None,
) -> ImageValidationResult:
    """Assemble a verdict from a backend's raw confidence and flags.

    The image is treated as invalid only when the backend's confidence
    falls in the LOW band.
    """
    confidence = max(0, min(100, confidence))
    level, action = classify_confidence(confidence)
    return ImageValidationResult(
        is_valid=level != ConfidenceLevel.LOW,
        confidence=confidence,
        level=level,
        action=action,
        flags=flags,
        details=details or {},
        timestamp=timestamp,
    )


class ManualReviewImageValidator:
    """Routes every image to manual review; no automated scoring."""

    FLAG = "No automated image validation configured"

    def _verdict(self, kind: str, user_id: str) -> ImageValidationResult:
        logger.debug(
            "image_routed_to_manual_review",
            extra={"kind": kind, "user_id": user_id},
        )
        return build_validation_result(
            MEDIUM_CONFIDENCE_THRESHOLD, flags=(self.FLAG,),
        )

    def validate_odometer(
        self,
        image: str,
        user_id: str,
        previous_reading: Decimal | None = None,
        claimed_distance: Decimal | None = None,
    ) -> ImageValidationResult:
        return self._verdict("odometer", user_id)

    def validate_hotel_bill(
        self,
        image: str,
        user_id: str,
        claimed_amount: Decimal | None = None,
    ) -> ImageValidationResult:
        return self._verdict("hotel_bill", user_id)
