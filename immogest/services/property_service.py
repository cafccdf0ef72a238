"""Property data access."""

import logging
from datetime import datetime, timezone
from typing import Optional

from immogest.core.remote_client import eq, in_
from immogest.models.maintenance import MaintenanceRequest
from immogest.models.property import Property, Unit
from immogest.models.tenant import Tenant
from immogest.schemas.dashboard import PropertyStats
from immogest.schemas.property import PropertyCreate, PropertyUpdate
from immogest.services.context import DataContext

logger = logging.getLogger(__name__)

TABLE = "properties"


class PropertyService:
    """Properties, and the per-property dashboard figures."""

    def __init__(self, ctx: DataContext):
        self.ctx = ctx

    async def list_properties(self, owner_id: Optional[str] = None) -> list[Property]:
        async def primary():
            filters = [eq("owner_id", owner_id)] if owner_id else []
            rows = await self.ctx.remote.select(TABLE, filters, order="created_at", descending=True)
            return [Property.model_validate(r) for r in rows]

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_properties(owner_id),
            "loading properties",
        )

    async def get_property(self, property_id: str) -> Optional[Property]:
        async def primary():
            row = await self.ctx.remote.select_one(TABLE, [eq("id", property_id)])
            return Property.model_validate(row) if row else None

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_property(property_id),
            "loading property",
        )

    async def create_property(self, payload: PropertyCreate) -> Optional[Property]:
        fields = payload.model_dump()

        async def remote_op():
            return Property.model_validate(await self.ctx.remote.insert(TABLE, fields))

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.create_property(fields),
            "creating property",
            success_message="Property created",
        )

    async def update_property(self, property_id: str, payload: PropertyUpdate) -> Optional[Property]:
        changes = payload.changes()

        async def remote_op():
            row = await self.ctx.remote.update(
                TABLE,
                {**changes, "updated_at": datetime.now(timezone.utc)},
                [eq("id", property_id)],
            )
            return Property.model_validate(row) if row else None

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.update_property(property_id, changes),
            "updating property",
            success_message="Property updated",
        )

    async def delete_property(self, property_id: str) -> bool:
        logger.info(f"[PROPERTIES] Deleting property {property_id} and its units")

        async def remote_op():
            return await self.ctx.remote.delete(TABLE, [eq("id", property_id)]) > 0

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.delete_property(property_id),
            "deleting property",
            failed=False,
            success_message="Property deleted",
        )

    async def get_property_stats(self, property_id: str) -> PropertyStats:
        async def primary():
            remote = self.ctx.remote
            units = [Unit.model_validate(r) for r in await remote.select("units", [eq("property_id", property_id)])]
            if not units:
                return PropertyStats()
            unit_ids = [u.id for u in units]
            tenants = [
                Tenant.model_validate(r)
                for r in await remote.select("tenants", [in_("unit_id", unit_ids)])
            ]
            requests = [
                MaintenanceRequest.model_validate(r)
                for r in await remote.select("maintenance_requests", [in_("unit_id", unit_ids)])
            ]
            return PropertyStats.compute(units, tenants, requests)

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_property_stats(property_id),
            "loading property statistics",
        )
