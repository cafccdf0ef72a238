"""Maintenance request data access."""

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

from immogest.core.remote_client import eq, in_
from immogest.models.enums import MaintenanceStatus
from immogest.models.maintenance import MaintenanceRequest
from immogest.models.property import Unit
from immogest.schemas.maintenance import (
    MaintenanceCreate,
    MaintenanceRequestWithUnit,
    MaintenanceStats,
    MaintenanceStatusRequest,
    MaintenanceUpdate,
)
from immogest.services.context import DataContext

logger = logging.getLogger(__name__)

TABLE = "maintenance_requests"
UNITS_TABLE = "units"


class MaintenanceService:
    """Maintenance requests and their workflow (pending to completed)."""

    def __init__(self, ctx: DataContext):
        self.ctx = ctx

    # --- Reads ---

    async def list_requests(
        self,
        property_id: Optional[str] = None,
        unit_id: Optional[str] = None,
        status: Optional[MaintenanceStatus] = None,
    ) -> list[MaintenanceRequest]:
        async def primary():
            return [MaintenanceRequest.model_validate(r) for r in await self._select(property_id, unit_id, status)]

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_maintenance_requests(property_id, unit_id, status),
            "loading maintenance requests",
        )

    async def get_request(self, request_id: str) -> Optional[MaintenanceRequest]:
        async def primary():
            row = await self.ctx.remote.select_one(TABLE, [eq("id", request_id)])
            return MaintenanceRequest.model_validate(row) if row else None

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_maintenance_request(request_id),
            "loading maintenance request",
        )

    async def get_request_with_unit(self, request_id: str) -> Optional[MaintenanceRequestWithUnit]:
        async def primary():
            remote = self.ctx.remote
            row = await remote.select_one(TABLE, [eq("id", request_id)])
            if not row:
                return None
            request = MaintenanceRequest.model_validate(row)
            unit_row = await remote.select_one(UNITS_TABLE, [eq("id", request.unit_id)])
            return MaintenanceRequestWithUnit.from_records(
                request, Unit.model_validate(unit_row) if unit_row else None
            )

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_maintenance_request_with_unit(request_id),
            "loading maintenance request",
        )

    async def get_requests_with_units(
        self,
        property_id: str,
        status: Optional[MaintenanceStatus] = None,
    ) -> list[MaintenanceRequestWithUnit]:
        async def primary():
            unit_rows = await self.ctx.remote.select(UNITS_TABLE, [eq("property_id", property_id)])
            units = {r["id"]: Unit.model_validate(r) for r in unit_rows}
            rows = await self._select(property_id, None, status, unit_ids=list(units))
            return [
                MaintenanceRequestWithUnit.from_records(
                    MaintenanceRequest.model_validate(r), units.get(r["unit_id"])
                )
                for r in rows
            ]

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_maintenance_requests_with_units(property_id, status),
            "loading maintenance requests",
        )

    async def get_maintenance_stats(self, property_id: str) -> MaintenanceStats:
        async def primary():
            rows = await self._select(property_id, None, None)
            return MaintenanceStats.from_requests([MaintenanceRequest.model_validate(r) for r in rows])

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_maintenance_stats(property_id),
            "loading maintenance statistics",
        )

    # --- Writes ---

    async def create_request(self, payload: MaintenanceCreate) -> Optional[MaintenanceRequest]:
        fields = payload.model_dump()
        fields["reported_date"] = fields.get("reported_date") or date.today()

        async def remote_op():
            return MaintenanceRequest.model_validate(await self.ctx.remote.insert(TABLE, fields))

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.create_maintenance_request(fields),
            "creating maintenance request",
            success_message="Maintenance request created",
        )

    async def update_request(
        self, request_id: str, payload: MaintenanceUpdate
    ) -> Optional[MaintenanceRequest]:
        changes = payload.changes()
        if changes.get("status") == MaintenanceStatus.COMPLETED:
            return await self._set_status(request_id, MaintenanceStatus.COMPLETED, changes, "updating maintenance request")
        return await self._patch(request_id, changes, "updating maintenance request")

    async def update_status(
        self, request_id: str, payload: MaintenanceStatusRequest
    ) -> Optional[MaintenanceRequest]:
        changes = payload.changes()
        return await self._set_status(request_id, payload.status, changes, "updating maintenance status")

    async def assign_request(self, request_id: str, assigned_to: str) -> Optional[MaintenanceRequest]:
        """Hand a request to a contractor; work is then in progress."""
        return await self._patch(
            request_id,
            {"assigned_to": assigned_to, "status": MaintenanceStatus.IN_PROGRESS},
            "assigning maintenance request",
        )

    async def schedule_request(
        self, request_id: str, scheduled_date: date
    ) -> Optional[MaintenanceRequest]:
        return await self._patch(
            request_id,
            {"scheduled_date": scheduled_date, "status": MaintenanceStatus.SCHEDULED},
            "scheduling maintenance request",
        )

    async def delete_request(self, request_id: str) -> bool:
        async def remote_op():
            return await self.ctx.remote.delete(TABLE, [eq("id", request_id)]) > 0

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.delete_maintenance_request(request_id),
            "deleting maintenance request",
            failed=False,
            success_message="Maintenance request deleted",
        )

    # --- Internals ---

    async def _select(
        self,
        property_id: Optional[str],
        unit_id: Optional[str],
        status: Optional[MaintenanceStatus],
        unit_ids: Optional[list[str]] = None,
    ) -> list[dict]:
        remote = self.ctx.remote
        filters = []
        if property_id:
            if unit_ids is None:
                unit_rows = await remote.select(UNITS_TABLE, [eq("property_id", property_id)], columns="id")
                unit_ids = [r["id"] for r in unit_rows]
            if not unit_ids:
                return []
            filters.append(in_("unit_id", unit_ids))
        if unit_id:
            filters.append(eq("unit_id", unit_id))
        if status:
            filters.append(eq("status", status))
        return await remote.select(TABLE, filters, order="created_at", descending=True)

    async def _set_status(
        self,
        request_id: str,
        status: MaintenanceStatus,
        changes: dict[str, Any],
        context: str,
    ) -> Optional[MaintenanceRequest]:
        extra = {k: v for k, v in changes.items() if k != "status" and v is not None}
        logger.info(f"[MAINTENANCE] Request {request_id} -> {status.value}")

        async def remote_op():
            values = {**extra, "status": status}
            if status == MaintenanceStatus.COMPLETED and not values.get("completed_date"):
                values["completed_date"] = datetime.now(timezone.utc)
            return await self._remote_patch(request_id, values)

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.update_maintenance_status(request_id, status, **extra),
            context,
            success_message=f"Maintenance request marked {status.value}",
        )

    async def _patch(
        self, request_id: str, changes: dict[str, Any], context: str
    ) -> Optional[MaintenanceRequest]:
        return await self.ctx.write(
            lambda: self._remote_patch(request_id, changes),
            lambda: self.ctx.store.update_maintenance_request(request_id, changes),
            context,
            success_message="Maintenance request updated",
        )

    async def _remote_patch(self, request_id: str, values: dict[str, Any]) -> Optional[MaintenanceRequest]:
        row = await self.ctx.remote.update(
            TABLE,
            {**values, "updated_at": datetime.now(timezone.utc)},
            [eq("id", request_id)],
        )
        return MaintenanceRequest.model_validate(row) if row else None
