# school/core/handlers.py
from typing import Any, Dict

from school.core.exceptions import SchoolDataError
from school.core.logging import logger


# 1. Handle data layer errors (raised on purpose by the context / services)
def data_error_response(exc: SchoolDataError) -> Dict[str, Any]:
    logger.error(f"{exc.code}: {exc.message}")
    return {
        "success": False,
        "error": {
            "code": exc.code,
            "message": exc.message,
            "details": exc.details
        }
    }


# 2. Handle general system errors (crash, bug, driver error)
def general_error_response(exc: Exception) -> Dict[str, Any]:
    # Keep the traceback in the log
    logger.critical(f"Unhandled Exception: {exc}", exc_info=True)

    return {
        "success": False,
        "error": {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred.",
            "details": str(exc)
        }
    }


def error_response(exc: Exception) -> Dict[str, Any]:
    """Build the error envelope for any exception."""
    if isinstance(exc, SchoolDataError):
        return data_error_response(exc)
    return general_error_response(exc)
