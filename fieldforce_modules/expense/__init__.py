"""
Field Expense Module (``fieldforce_modules.expense``).

Responsibility
--------------
Daily expense cycle for field staff: allowance value types, the settings
provider, the image validator seam, persistence of submitted expenses and
the ``ExpenseService`` facade that gates, validates, calculates and stores
submissions and records manager approvals.

Architecture position
---------------------
**Modules layer** -- the package root only re-exports value types so the
engines can import them without pulling in services.  Import
``ExpenseService`` from ``fieldforce_modules.expense.service``.
"""

from fieldforce_modules.expense.models import (
    AppSettings,
    ConfidenceLevel,
    EntryWindowStatus,
    ExpenseBreakdown,
    ExpenseCalculation,
    ExpenseInput,
    ExpenseRecord,
    ExpenseStatus,
    ExpenseSubmission,
    ExpenseSummary,
    ExpenseValidationResult,
    ImageValidationResult,
    UserRole,
    ValidationAction,
    ValidationIssue,
    ValidationSeverity,
    WarningPolicy,
)

__all__ = [
    "AppSettings",
    "ConfidenceLevel",
    "EntryWindowStatus",
    "ExpenseBreakdown",
    "ExpenseCalculation",
    "ExpenseInput",
    "ExpenseRecord",
    "ExpenseStatus",
    "ExpenseSubmission",
    "ExpenseSummary",
    "ExpenseValidationResult",
    "ImageValidationResult",
    "UserRole",
    "ValidationAction",
    "ValidationIssue",
    "ValidationSeverity",
    "WarningPolicy",
]
