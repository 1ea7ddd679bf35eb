# =============================================================================
# salon_core/services/base_service.py
# Base Service Class with Common Functionality
# =============================================================================

from __future__ import annotations
import logging
from abc import ABC
from typing import Optional, Dict, Any, Callable
from dataclasses import dataclass

from salon_core.logging import get_logger, LogContext
from salon_core.errors import handle_error, SalonCoreError, LocalStoreError


@dataclass
class OperationResult:
    """
    Standard result container for repository and service operations.

    Callers must check `success` (or the truthiness of the result) before
    using `data`.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: Any = None, metadata: Dict[str, Any] = None) -> OperationResult:
        """Create a successful result"""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: str = "UNKNOWN",
        metadata: Dict[str, Any] = None
    ) -> OperationResult:
        """Create a failed result"""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            metadata=metadata,
        )

    @classmethod
    def from_exception(cls, e: Exception) -> OperationResult:
        """Create a failed result from an exception"""
        if isinstance(e, SalonCoreError):
            return cls(
                success=False,
                error=e.message,
                error_code=e.code,
                metadata=e.details,
            )
        return cls(
            success=False,
            error=str(e),
            error_code="EXCEPTION",
        )


class BaseService(ABC):
    """
    Abstract base class for services and repositories.

    Provides common functionality:
    - Logging
    - Error handling
    - Result standardization

    Usage:
        class MyService(BaseService):
            def do_something(self) -> OperationResult:
                with self.log_operation("Doing something"):
                    result = ...
                    return OperationResult.ok(result)
    """

    def __init__(self):
        self.logger = get_logger(f"salon_core.{self.__class__.__name__}")

    def log_operation(self, operation: str) -> LogContext:
        """
        Create a logging context for an operation.

        Usage:
            with self.log_operation("Syncing customers"):
                ...
        """
        return LogContext(self.logger, operation)

    def safe_execute(
        self,
        operation: str,
        func: Callable[..., Any],
        *args,
        **kwargs
    ) -> OperationResult:
        """
        Execute a function with error handling and logging.

        Returns:
            OperationResult with success/failure status
        """
        try:
            result = func(*args, **kwargs)
            if isinstance(result, OperationResult):
                return result
            return OperationResult.ok(result)
        except SalonCoreError as e:
            # Local store failures are fatal; the rest are expected outcomes
            level = logging.ERROR if isinstance(e, LocalStoreError) else logging.WARNING
            handle_error(e, level=level)
            return OperationResult.from_exception(e)
        except Exception as e:
            self.logger.error(f"{operation} failed: {e}", exc_info=True)
            return OperationResult.fail(str(e))
