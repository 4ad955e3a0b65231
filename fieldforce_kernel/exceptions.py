"""
Typed exception hierarchy for the field-force expense system.

Business-rule failures (bad distances, missing odometer photos, entry window
closed) are NOT exceptions: engines return them as structured validation
results.  The classes below cover programming and persistence errors that a
caller must handle by type.

    FieldForceError (base)
    |
    +-- ExpenseError
    |   +-- ExpenseNotFoundError
    |   +-- ExpenseAlreadyProcessedError
    |
    +-- ConfigurationError
        +-- InvalidSettingsError

Every class carries a ``code`` attribute (machine-readable, API-safe) and
structured fields instead of a message that callers would have to parse.

Usage:
    try:
        service.approve(expense_id, manager_id, manager_name)
    except ExpenseAlreadyProcessedError as e:
        return {"error": e.code, "status": e.current_status}
"""


class FieldForceError(Exception):
    """
    Base exception for all field-force errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "FIELDFORCE_ERROR"


# Expense record exceptions


class ExpenseError(FieldForceError):
    """Base exception for expense record errors."""

    code: str = "EXPENSE_ERROR"


class ExpenseNotFoundError(ExpenseError):
    """Expense with given ID was not found."""

    code: str = "EXPENSE_NOT_FOUND"

    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__(f"Expense not found: {expense_id}")


class ExpenseAlreadyProcessedError(ExpenseError):
    """Expense has already been approved or rejected."""

    code: str = "EXPENSE_ALREADY_PROCESSED"

    def __init__(self, expense_id: str, current_status: str):
        self.expense_id = expense_id
        self.current_status = current_status
        super().__init__(
            f"Expense {expense_id} is already {current_status}; "
            f"only pending expenses can be processed"
        )


# Configuration exceptions


class ConfigurationError(FieldForceError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidSettingsError(ConfigurationError):
    """Settings document or update is structurally invalid."""

    code: str = "INVALID_SETTINGS"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid setting '{field}': {reason}")
