# =============================================================================
# salon_core/__init__.py
# Salon Sync Core
# =============================================================================
"""
Offline-first synchronization core for salon business data.

Entry point: salon_core.services.container.create_services().
"""

__version__ = "0.1.0"
