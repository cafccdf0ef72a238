"""Data access services for ImmoGest."""

from immogest.services.context import DataContext
from immogest.services.fallback_store import FallbackStore
from immogest.services.maintenance_service import MaintenanceService
from immogest.services.notifications import Notification, NotificationCenter
from immogest.services.property_service import PropertyService
from immogest.services.resilience import ResilientCallPolicy, execute_with_fallback, with_timeout
from immogest.services.tenant_service import TenantService
from immogest.services.transaction_service import TransactionService
from immogest.services.unit_service import UnitService

__all__ = [
    "DataContext",
    "FallbackStore",
    "MaintenanceService",
    "Notification",
    "NotificationCenter",
    "PropertyService",
    "ResilientCallPolicy",
    "execute_with_fallback",
    "with_timeout",
    "TenantService",
    "TransactionService",
    "UnitService",
]
