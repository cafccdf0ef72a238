"""API Routers for ImmoGest."""

from immogest.routers.properties import router as properties_router
from immogest.routers.properties import units_router
from immogest.routers.tenants import router as tenants_router
from immogest.routers.maintenance import router as maintenance_router
from immogest.routers.transactions import router as transactions_router
from immogest.routers.dashboard import router as dashboard_router

__all__ = [
    "properties_router",
    "units_router",
    "tenants_router",
    "maintenance_router",
    "transactions_router",
    "dashboard_router",
]
