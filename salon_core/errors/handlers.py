# =============================================================================
# salon_core/errors/handlers.py
# Error Handling Utilities for the Salon Sync Core
# =============================================================================

from __future__ import annotations
import functools
import logging
import traceback
from typing import Optional, Callable, TypeVar, Any, Dict

from salon_core.logging import get_logger
from .exceptions import SalonCoreError

logger = get_logger(__name__)

T = TypeVar("T")


def handle_error(
    error: Exception,
    log_error: bool = True,
    user_message: Optional[str] = None,
    level: int = logging.ERROR,
) -> Dict[str, Any]:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        log_error: Whether to log the error
        user_message: Custom message for the caller (uses error message if None)
        level: Log level for the record

    Returns:
        Dict with message, code, details and recoverable flag, suitable for
        a caller-visible banner.
    """
    if isinstance(error, SalonCoreError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}
        recoverable = True

    if log_error:
        logger.log(
            level,
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=level >= logging.ERROR,
        )

    return {
        "message": message,
        "code": code,
        "details": details,
        "recoverable": recoverable,
    }


def safe_execute(
    func: Callable[..., T],
    *args,
    default: Optional[T] = None,
    error_message: Optional[str] = None,
    reraise: bool = False,
    **kwargs,
) -> Optional[T]:
    """
    Execute a function with automatic error handling.

    Usage:
        count = safe_execute(repository.count, default=0)
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, user_message=error_message)
        if reraise:
            raise
        return default


class ErrorContext:
    """
    Context manager for error handling with automatic logging.

    Usage:
        with ErrorContext("Deleting account") as ctx:
            ...
            return OperationResult.ok()
        return OperationResult.fail(ctx.error["message"], ctx.error["code"])
    """

    def __init__(
        self,
        operation: str,
        recoverable: bool = True,
    ):
        self.operation = operation
        self.recoverable = recoverable
        self.error: Optional[Dict[str, Any]] = None

    def __enter__(self) -> ErrorContext:
        logger.info(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            if isinstance(exc_val, SalonCoreError):
                self.error = handle_error(exc_val)
            else:
                self.error = handle_error(
                    exc_val,
                    user_message=f"Error during: {self.operation}",
                )

            # Suppress exception if recoverable
            return self.recoverable

        logger.info(f"Completed: {self.operation}")
        return False


def error_boundary(
    default_return: Any = None,
    log: bool = True,
):
    """
    Decorator to wrap functions with error handling.

    Usage:
        @error_boundary(default_return={})
        def sync_everything() -> Dict[str, bool]:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log:
                    logger.error(
                        f"Error in {func.__name__}: {e}",
                        exc_info=True,
                    )
                return default_return

        return wrapper

    return decorator
