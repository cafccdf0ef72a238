"""
Tenant data access.

Tenant writes keep unit occupancy in step: placing a tenant occupies the unit,
removing or deleting them frees it, and moving them does both. Against the
in-memory store the whole move is atomic; against the hosted backend the
steps run in order (tenant row, previous unit, new unit) and a failure part
way is reported rather than rolled back.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from immogest.core.remote_client import eq
from immogest.models.enums import UnitStatus
from immogest.models.property import Unit
from immogest.models.tenant import Tenant
from immogest.schemas.tenant import TenantCreate, TenantUpdate, TenantWithUnit
from immogest.services.context import DataContext

logger = logging.getLogger(__name__)

TABLE = "tenants"
UNITS_TABLE = "units"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TenantService:
    """Tenants and their placement in units."""

    def __init__(self, ctx: DataContext):
        self.ctx = ctx

    # --- Reads ---

    async def list_tenants(self, property_id: Optional[str] = None) -> list[Tenant]:
        """All tenants, or those of a property plus every unassigned tenant."""
        async def primary():
            remote = self.ctx.remote
            tenants = [Tenant.model_validate(r) for r in await remote.select(TABLE, order="name")]
            if not property_id:
                return tenants
            unit_rows = await remote.select(UNITS_TABLE, [eq("property_id", property_id)], columns="id")
            unit_ids = {r["id"] for r in unit_rows}
            return [t for t in tenants if t.unit_id is None or t.unit_id in unit_ids]

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_tenants(property_id),
            "loading tenants",
        )

    async def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        async def primary():
            row = await self.ctx.remote.select_one(TABLE, [eq("id", tenant_id)])
            return Tenant.model_validate(row) if row else None

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_tenant(tenant_id),
            "loading tenant",
        )

    async def get_tenant_by_unit(self, unit_id: str) -> Optional[Tenant]:
        async def primary():
            rows = await self.ctx.remote.select(TABLE, [eq("unit_id", unit_id)])
            return Tenant.model_validate(rows[0]) if rows else None

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_tenant_by_unit(unit_id),
            "loading unit tenant",
        )

    async def get_tenant_with_unit(self, tenant_id: str) -> Optional[TenantWithUnit]:
        async def primary():
            remote = self.ctx.remote
            row = await remote.select_one(TABLE, [eq("id", tenant_id)])
            if not row:
                return None
            tenant = Tenant.model_validate(row)
            unit_row = None
            if tenant.unit_id:
                unit_row = await remote.select_one(UNITS_TABLE, [eq("id", tenant.unit_id)])
            return TenantWithUnit.from_records(tenant, Unit.model_validate(unit_row) if unit_row else None)

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_tenant_with_unit(tenant_id),
            "loading tenant",
        )

    async def get_tenants_with_units(self, property_id: str) -> list[TenantWithUnit]:
        async def primary():
            remote = self.ctx.remote
            units = {
                r["id"]: Unit.model_validate(r)
                for r in await remote.select(UNITS_TABLE, [eq("property_id", property_id)])
            }
            tenants = [Tenant.model_validate(r) for r in await remote.select(TABLE, order="name")]
            return [
                TenantWithUnit.from_records(t, units.get(t.unit_id))
                for t in tenants
                if t.unit_id is None or t.unit_id in units
            ]

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_tenants_with_units(property_id),
            "loading tenants",
        )

    # --- Writes ---

    async def create_tenant(self, payload: TenantCreate) -> Optional[Tenant]:
        fields = payload.model_dump()
        if payload.unit_id and not await self._unit_is_free(payload.unit_id):
            return None

        async def remote_op():
            tenant = Tenant.model_validate(await self.ctx.remote.insert(TABLE, fields))
            if tenant.unit_id:
                await self._set_unit_status(tenant.unit_id, UnitStatus.OCCUPIED)
            return tenant

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.create_tenant(fields),
            "creating tenant",
            success_message=f"Tenant {payload.name} created",
        )

    async def update_tenant(self, tenant_id: str, payload: TenantUpdate) -> Optional[Tenant]:
        """Update a tenant; an explicit ``unit_id`` moves them."""
        changes = payload.changes()
        if "unit_id" not in changes:
            async def remote_op():
                row = await self.ctx.remote.update(
                    TABLE, {**changes, "updated_at": _now()}, [eq("id", tenant_id)]
                )
                return Tenant.model_validate(row) if row else None

            return await self.ctx.write(
                remote_op,
                lambda: self.ctx.store.update_tenant(tenant_id, changes),
                "updating tenant",
                success_message="Tenant updated",
            )

        unit_id = changes["unit_id"]
        if unit_id and not await self._unit_is_free(unit_id, tenant_id):
            return None
        return await self._move(tenant_id, unit_id, changes, "updating tenant")

    async def assign_tenant_to_unit(self, tenant_id: str, unit_id: str) -> Optional[Tenant]:
        if not await self._unit_is_free(unit_id, tenant_id):
            return None
        logger.info(f"[TENANTS] Assigning {tenant_id} to unit {unit_id}")
        return await self._move(tenant_id, unit_id, {"unit_id": unit_id}, "assigning tenant")

    async def remove_tenant_from_unit(self, tenant_id: str) -> Optional[Tenant]:
        logger.info(f"[TENANTS] Removing {tenant_id} from their unit")
        return await self._move(tenant_id, None, {"unit_id": None}, "removing tenant from unit")

    async def delete_tenant(self, tenant_id: str) -> bool:
        async def remote_op():
            remote = self.ctx.remote
            row = await remote.select_one(TABLE, [eq("id", tenant_id)])
            if not row:
                return False
            previous_unit_id = row.get("unit_id")
            deleted = await remote.delete(TABLE, [eq("id", tenant_id)]) > 0
            if deleted and previous_unit_id:
                await self._set_unit_status(previous_unit_id, UnitStatus.AVAILABLE)
            return deleted

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.delete_tenant(tenant_id),
            "deleting tenant",
            failed=False,
            success_message="Tenant deleted",
        )

    # --- Internals ---

    async def _move(
        self,
        tenant_id: str,
        unit_id: Optional[str],
        changes: dict[str, Any],
        context: str,
    ) -> Optional[Tenant]:
        async def remote_op():
            remote = self.ctx.remote
            current = await remote.select_one(TABLE, [eq("id", tenant_id)])
            if not current:
                return None
            previous_unit_id = current.get("unit_id")

            row = await remote.update(
                TABLE,
                {**changes, "unit_id": unit_id, "updated_at": _now()},
                [eq("id", tenant_id)],
            )
            if previous_unit_id and previous_unit_id != unit_id:
                await self._set_unit_status(previous_unit_id, UnitStatus.AVAILABLE)
            if unit_id:
                await self._set_unit_status(unit_id, UnitStatus.OCCUPIED)
            return Tenant.model_validate(row) if row else None

        def local_op():
            if unit_id is None and set(changes) == {"unit_id"}:
                return self.ctx.store.remove_tenant_from_unit(tenant_id)
            if set(changes) == {"unit_id"}:
                return self.ctx.store.assign_tenant_to_unit(tenant_id, unit_id)
            return self.ctx.store.update_tenant(tenant_id, changes)

        return await self.ctx.write(remote_op, local_op, context, success_message="Tenant updated")

    async def _unit_is_free(self, unit_id: str, tenant_id: Optional[str] = None) -> bool:
        holder = await self.get_tenant_by_unit(unit_id)
        if holder is None or holder.id == tenant_id:
            return True
        logger.warning(f"[TENANTS] Unit {unit_id} already held by tenant {holder.id}")
        self.ctx.notifier.warning("This unit is already occupied by another tenant")
        return False

    async def _set_unit_status(self, unit_id: str, status: UnitStatus) -> None:
        await self.ctx.remote.update(
            UNITS_TABLE,
            {"status": status, "updated_at": _now()},
            [eq("id", unit_id)],
        )
