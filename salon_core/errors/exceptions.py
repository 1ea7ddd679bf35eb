# =============================================================================
# salon_core/errors/exceptions.py
# Custom Exception Hierarchy for the Salon Sync Core
# =============================================================================

from typing import Optional, Dict, Any


class SalonCoreError(Exception):
    """
    Base exception for all sync core errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "AUTH_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "SC_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# SESSION / TENANT EXCEPTIONS
# =============================================================================

class AuthenticationError(SalonCoreError):
    """Raised when no authenticated tenant is available"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            code="AUTH_001",
            recoverable=False,
            **kwargs,
        )


class TenantMismatchError(SalonCoreError):
    """Raised when a caller mutates a record owned by another tenant"""

    def __init__(
        self,
        message: str,
        record_id: Optional[str] = None,
        collection: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if record_id:
            details["record_id"] = record_id
        if collection:
            details["collection"] = collection

        super().__init__(
            message=message,
            code="TENANT_001",
            details=details,
            recoverable=False,
            **kwargs,
        )


# =============================================================================
# STORE EXCEPTIONS
# =============================================================================

class LocalStoreError(SalonCoreError):
    """Raised when the local SQLite store fails"""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if table:
            details["table"] = table
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="LOCAL_001",
            details=details,
            **kwargs,
        )


class RemoteStoreError(SalonCoreError):
    """Raised when the cloud document store rejects or fails a call"""

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        document_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if collection:
            details["collection"] = collection
        if document_id:
            details["document_id"] = document_id

        super().__init__(
            message=message,
            code="REMOTE_001",
            details=details,
            **kwargs,
        )


class NetworkUnavailableError(SalonCoreError):
    """Raised when a remote operation is requested while offline"""

    def __init__(self, message: str = "No network connection", **kwargs):
        super().__init__(
            message=message,
            code="NET_001",
            **kwargs,
        )


# =============================================================================
# DATA EXCEPTIONS
# =============================================================================

class EntityValidationError(SalonCoreError):
    """Raised when a record cannot be mapped to or from a store representation"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if expected:
            details["expected"] = expected
        if actual:
            details["actual"] = actual

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(SalonCoreError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
