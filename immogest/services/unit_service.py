"""Unit data access."""

import logging
from datetime import datetime, timezone
from typing import Optional

from immogest.core.remote_client import eq
from immogest.models.enums import UnitStatus
from immogest.models.maintenance import MaintenanceRequest
from immogest.models.property import Unit
from immogest.models.tenant import Tenant
from immogest.schemas.dashboard import UnitWithDetails
from immogest.schemas.property import UnitCreate, UnitUpdate
from immogest.services.context import DataContext
from immogest.services.fallback_store import natural_key

logger = logging.getLogger(__name__)

TABLE = "units"


def _sorted_units(rows: list[dict]) -> list[Unit]:
    units = [Unit.model_validate(r) for r in rows]
    return sorted(units, key=lambda u: natural_key(u.unit_number))


class UnitService:
    """Units of a property and their occupancy status."""

    def __init__(self, ctx: DataContext):
        self.ctx = ctx

    async def list_units(
        self,
        property_id: Optional[str] = None,
        status: Optional[UnitStatus] = None,
    ) -> list[Unit]:
        async def primary():
            filters = []
            if property_id:
                filters.append(eq("property_id", property_id))
            if status:
                filters.append(eq("status", status))
            return _sorted_units(await self.ctx.remote.select(TABLE, filters, order="unit_number"))

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_units(property_id, status),
            "loading units",
        )

    async def get_units_by_status(self, property_id: str, status: UnitStatus) -> list[Unit]:
        return await self.list_units(property_id, status)

    async def get_unit(self, unit_id: str) -> Optional[Unit]:
        async def primary():
            row = await self.ctx.remote.select_one(TABLE, [eq("id", unit_id)])
            return Unit.model_validate(row) if row else None

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_unit(unit_id),
            "loading unit",
        )

    async def get_unit_with_details(self, unit_id: str) -> Optional[UnitWithDetails]:
        async def primary():
            remote = self.ctx.remote
            row = await remote.select_one(TABLE, [eq("id", unit_id)])
            if not row:
                return None
            tenant_row = await remote.select_one("tenants", [eq("unit_id", unit_id)])
            request_rows = await remote.select(
                "maintenance_requests",
                [eq("unit_id", unit_id)],
                order="created_at",
                descending=True,
            )
            return UnitWithDetails.from_records(
                Unit.model_validate(row),
                Tenant.model_validate(tenant_row) if tenant_row else None,
                [MaintenanceRequest.model_validate(r) for r in request_rows],
            )

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_unit_with_details(unit_id),
            "loading unit details",
        )

    async def create_unit(self, payload: UnitCreate) -> Optional[Unit]:
        fields = payload.model_dump()

        async def remote_op():
            return Unit.model_validate(await self.ctx.remote.insert(TABLE, fields))

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.create_unit(fields),
            "creating unit",
            success_message=f"Unit {payload.unit_number} created",
        )

    async def update_unit(self, unit_id: str, payload: UnitUpdate) -> Optional[Unit]:
        return await self._patch(unit_id, payload.changes(), "updating unit")

    async def update_unit_status(self, unit_id: str, status: UnitStatus) -> Optional[Unit]:
        logger.info(f"[UNITS] Unit {unit_id} -> {status.value}")
        return await self._patch(unit_id, {"status": status}, "updating unit status")

    async def delete_unit(self, unit_id: str) -> bool:
        async def remote_op():
            return await self.ctx.remote.delete(TABLE, [eq("id", unit_id)]) > 0

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.delete_unit(unit_id),
            "deleting unit",
            failed=False,
            success_message="Unit deleted",
        )

    async def _patch(self, unit_id: str, changes: dict, context: str) -> Optional[Unit]:
        async def remote_op():
            row = await self.ctx.remote.update(
                TABLE,
                {**changes, "updated_at": datetime.now(timezone.utc)},
                [eq("id", unit_id)],
            )
            return Unit.model_validate(row) if row else None

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.update_unit(unit_id, changes),
            context,
        )
