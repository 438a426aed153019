from typing import Any, Dict, Optional


class SchoolDataError(Exception):
    """
    Base class for every error raised by the data layer.
    Carries a stable code and optional details so callers can report
    failures in one format.
    """
    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(self.message)


# =========================================================
# 1. PERSISTENCE ERRORS
# =========================================================

class EntityValidationError(SchoolDataError):
    """
    A field breaks a length, range, requiredness or format rule.
    Raised by save_changes() before anything is written.
    """
    def __init__(self, message: str = "Entity validation failed", details: dict = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=details
        )


class ConstraintViolationError(SchoolDataError):
    """
    The store rejected the unit of work: duplicate enrollment,
    missing parent row or a check constraint. Nothing was committed.
    """
    def __init__(self, message: str, details: dict = None):
        super().__init__(
            message=f"Constraint violation: {message}",
            code="CONSTRAINT_VIOLATION",
            details=details
        )


class ConnectivityError(SchoolDataError):
    """The store is unreachable or the schema could not be created."""
    def __init__(self, message: str):
        super().__init__(
            message=f"Database Error: {message}",
            code="CONNECTIVITY_ERROR"
        )


# =========================================================
# 2. LOOKUP ERRORS
# =========================================================

class EntityNotFoundError(SchoolDataError):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            code="NOT_FOUND"
        )


class MultipleResultsError(SchoolDataError):
    def __init__(self, message: str = "More than one matching row found"):
        super().__init__(
            message=message,
            code="MULTIPLE_RESULTS"
        )
