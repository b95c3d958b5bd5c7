"""
Error handling utilities for the lineup efficiency engine.

This module provides the engine's exception classes together with the
standardized response format and decorators used by the tool layer, so
every tool reports failures the same way.
"""

import logging
from functools import wraps
from typing import Any, Dict, Iterable, List, Optional, Callable, Union


# Configure logging for error tracking
logger = logging.getLogger(__name__)


class ErrorType:
    """Standard error type constants."""
    VALIDATION = "validation_error"
    CONSISTENCY = "consistency_error"
    UNEXPECTED = "unexpected_error"


class LineupEngineError(Exception):
    """Base class for engine errors."""
    error_type = ErrorType.UNEXPECTED


class LineupValidationError(LineupEngineError, ValueError):
    """
    Input that the engine refuses to evaluate.

    Raised at the boundary for records with a missing or unknown position,
    an unknown roster slot, or an actual lineup that breaks the template.
    Callers can correct and resubmit.
    """
    error_type = ErrorType.VALIDATION

    def __init__(self, errors: Union[str, Iterable[str]]):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class LineupConsistencyError(LineupEngineError):
    """Actual score exceeded the optimal score computed from the same roster."""
    error_type = ErrorType.CONSISTENCY

    def __init__(self, actual_score: float, optimal_score: float):
        self.actual_score = actual_score
        self.optimal_score = optimal_score
        super().__init__(
            f"Actual score {actual_score:.4f} exceeds optimal score {optimal_score:.4f}"
        )


def create_error_response(
    error_message: str,
    error_type: str = ErrorType.UNEXPECTED,
    data: Optional[Dict[str, Any]] = None,
    success: bool = False
) -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        error_message: Human-readable error description
        error_type: Type of error (see ErrorType constants)
        data: Tool-specific data to include in response
        success: Whether the operation was successful

    Returns:
        Standardized error response dictionary
    """
    response = {
        "success": success,
        "error": error_message,
        "error_type": error_type
    }

    # Add tool-specific data if provided
    if data:
        response.update(data)

    # Log the error for debugging
    if not success:
        logger.error(f"Error ({error_type}): {error_message}")

    return response


def create_success_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: Tool-specific data to include in response

    Returns:
        Standardized success response dictionary
    """
    response = {
        "success": True,
        "error": None,
        "error_type": None
    }
    response.update(data)
    return response


def handle_engine_errors(
    default_data: Optional[Dict[str, Any]] = None,
    operation_name: str = "operation"
) -> Callable:
    """
    Decorator for standardizing engine error handling in async tools.

    Args:
        default_data: Default data structure to return on errors
        operation_name: Name of the operation for error messages

    Returns:
        Decorator function
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Dict[str, Any]:
            try:
                result = await func(*args, **kwargs)
                return result

            except LineupValidationError as e:
                return create_error_response(
                    f"Invalid input while {operation_name}: {str(e)}",
                    ErrorType.VALIDATION,
                    dict(default_data or {}, validation_errors=e.errors)
                )

            except LineupConsistencyError as e:
                logger.error(f"Consistency fault while {operation_name}: {e}", exc_info=True)
                return create_error_response(
                    f"Internal consistency error while {operation_name}: {str(e)}",
                    ErrorType.CONSISTENCY,
                    default_data or {}
                )

            except Exception as e:
                logger.exception(f"Unexpected error during {operation_name}")
                return create_error_response(
                    f"Unexpected error during {operation_name}: {str(e)}",
                    ErrorType.UNEXPECTED,
                    default_data or {}
                )

        return wrapper
    return decorator
