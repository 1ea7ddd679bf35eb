# =============================================================================
# salon_core/services/__init__.py
# Service Layer for the Salon Sync Core
# =============================================================================
"""
Service layer.

Usage Example:
-------------
    from salon_core.config import load_config
    from salon_core.services.container import create_services

    app = create_services(load_config())
    app.tenant_context.current_tenant_id()
    result = app.customers.add(Customer(first_name="Ada"))
    if result.success:
        print(result.data.id)

The composition root lives in salon_core.services.container and is imported
from there; this package only exposes the result and base types.
"""

from .base_service import BaseService, OperationResult

__all__ = [
    "BaseService",
    "OperationResult",
]
