# =============================================================================
# salon_core/errors/__init__.py
# Centralized Error Handling for the Salon Sync Core
# =============================================================================

from .exceptions import (
    SalonCoreError,
    AuthenticationError,
    TenantMismatchError,
    LocalStoreError,
    RemoteStoreError,
    NetworkUnavailableError,
    EntityValidationError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    safe_execute,
    error_boundary,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "SalonCoreError",
    "AuthenticationError",
    "TenantMismatchError",
    "LocalStoreError",
    "RemoteStoreError",
    "NetworkUnavailableError",
    "EntityValidationError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "safe_execute",
    "error_boundary",
    "ErrorContext",
]
