"""Table records for ImmoGest.

These mirror the hosted backend's schema and are what both the remote client
and the fallback store hand back to services.
"""

from immogest.models.property import Property, Unit
from immogest.models.tenant import Tenant
from immogest.models.maintenance import MaintenanceRequest
from immogest.models.transaction import Transaction

__all__ = [
    "Property",
    "Unit",
    "Tenant",
    "MaintenanceRequest",
    "Transaction",
]
