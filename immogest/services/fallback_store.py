"""In-memory fallback store.

Mirrors the hosted backend's tables (properties, units, tenants, maintenance
requests, transactions) so the application keeps working when the backend is
unreachable or not configured. The store lives as long as the process; it is
never persisted and never reconciled back into the backend.

Cross-entity rules applied here mirror what the backend does with triggers and
foreign keys:

- creating a tenant with a unit marks the unit occupied
- deleting a tenant, or removing them from a unit, marks the unit available
- moving a tenant releases the previous unit and occupies the new one
- completing a maintenance request stamps its completion date
- deleting a unit releases its tenant and drops its maintenance requests
- deleting a property drops its units, their requests and its transactions

Every public method runs under one re-entrant lock, so a reader never observes
the middle of a composite update.
"""

import logging
import re
import threading
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional, TypeVar

from immogest.models.base import Record
from immogest.models.enums import (
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
    TransactionType,
    UnitStatus,
)
from immogest.models.maintenance import MaintenanceRequest
from immogest.models.property import Property, Unit
from immogest.models.tenant import Tenant
from immogest.models.transaction import Transaction
from immogest.schemas.dashboard import PropertyStats, UnitWithDetails
from immogest.schemas.maintenance import MaintenanceRequestWithUnit, MaintenanceStats
from immogest.schemas.tenant import TenantWithUnit
from immogest.schemas.transaction import FinancialSummary

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

# Fields a caller may never overwrite through an update
_PROTECTED_FIELDS = {"id", "created_at", "updated_at"}

_DIGITS = re.compile(r"(\d+)")


def natural_key(value: str) -> list[tuple[int, int, str]]:
    """Sort key ordering "2B" before "10A" the way people read unit numbers."""
    return [
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in _DIGITS.split(value or "")
        if part
    ]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FallbackStore:
    """Schema-shaped, in-memory CRUD over the five ImmoGest tables."""

    def __init__(self, seed: bool = True):
        self._lock = threading.RLock()
        self._properties: dict[str, Property] = {}
        self._units: dict[str, Unit] = {}
        self._tenants: dict[str, Tenant] = {}
        self._maintenance: dict[str, MaintenanceRequest] = {}
        self._transactions: dict[str, Transaction] = {}
        if seed:
            self._load_seed()

    def reset(self, seed: bool = True) -> None:
        """Drop all rows, optionally reloading the demonstration data."""
        with self._lock:
            for table in self._tables():
                table.clear()
            if seed:
                self._load_seed()
        logger.info(f"[FALLBACK] Store reset (seeded={seed})")

    # --- Generic table helpers ---

    def _tables(self) -> list[dict]:
        return [
            self._properties,
            self._units,
            self._tenants,
            self._maintenance,
            self._transactions,
        ]

    @staticmethod
    def _generate_id(prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex}"

    def _insert(
        self,
        table: dict[str, R],
        model: type[R],
        prefix: str,
        fields: dict[str, Any],
    ) -> R:
        now = _utcnow()
        data = {k: v for k, v in fields.items() if k not in _PROTECTED_FIELDS}
        record = model.model_validate({
            **data,
            "id": fields.get("id") or self._generate_id(prefix),
            "created_at": now,
            "updated_at": now,
        })
        table[record.id] = record
        return record

    def _patch(
        self,
        table: dict[str, R],
        model: type[R],
        record_id: str,
        changes: dict[str, Any],
    ) -> Optional[R]:
        current = table.get(record_id)
        if current is None:
            return None

        data = {k: v for k, v in changes.items() if k not in _PROTECTED_FIELDS}
        record = model.model_validate({
            **current.model_dump(),
            **data,
            "updated_at": _utcnow(),
        })
        table[record_id] = record
        return record

    # --- Properties ---

    def get_properties(self, owner_id: Optional[str] = None) -> list[Property]:
        """Properties, newest first, optionally restricted to one owner."""
        with self._lock:
            rows = [
                p for p in self._properties.values()
                if owner_id is None or p.owner_id == owner_id
            ]
        return sorted(rows, key=lambda p: p.created_at, reverse=True)

    def get_property(self, property_id: str) -> Optional[Property]:
        with self._lock:
            return self._properties.get(property_id)

    def create_property(self, fields: dict[str, Any]) -> Property:
        with self._lock:
            return self._insert(self._properties, Property, "property", fields)

    def update_property(self, property_id: str, changes: dict[str, Any]) -> Optional[Property]:
        with self._lock:
            return self._patch(self._properties, Property, property_id, changes)

    def delete_property(self, property_id: str) -> bool:
        with self._lock:
            if property_id not in self._properties:
                return False
            for unit_id in [u.id for u in self._units.values() if u.property_id == property_id]:
                self.delete_unit(unit_id)
            for tx_id in [t.id for t in self._transactions.values() if t.property_id == property_id]:
                del self._transactions[tx_id]
            del self._properties[property_id]
            return True

    # --- Units ---

    def get_units(
        self,
        property_id: Optional[str] = None,
        status: Optional[UnitStatus] = None,
    ) -> list[Unit]:
        """Units in natural unit-number order."""
        with self._lock:
            rows = [
                u for u in self._units.values()
                if (property_id is None or u.property_id == property_id)
                and (status is None or u.status == status)
            ]
        return sorted(rows, key=lambda u: natural_key(u.unit_number))

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        with self._lock:
            return self._units.get(unit_id)

    def create_unit(self, fields: dict[str, Any]) -> Unit:
        with self._lock:
            return self._insert(self._units, Unit, "unit", fields)

    def update_unit(self, unit_id: str, changes: dict[str, Any]) -> Optional[Unit]:
        with self._lock:
            return self._patch(self._units, Unit, unit_id, changes)

    def update_unit_status(self, unit_id: str, status: UnitStatus) -> Optional[Unit]:
        return self.update_unit(unit_id, {"status": status})

    def delete_unit(self, unit_id: str) -> bool:
        with self._lock:
            if unit_id not in self._units:
                return False
            for tenant in list(self._tenants.values()):
                if tenant.unit_id == unit_id:
                    self._patch(self._tenants, Tenant, tenant.id, {"unit_id": None})
            for request_id in [r.id for r in self._maintenance.values() if r.unit_id == unit_id]:
                del self._maintenance[request_id]
            del self._units[unit_id]
            return True

    # --- Tenants ---

    def get_tenants(self, property_id: Optional[str] = None) -> list[Tenant]:
        """Tenants ordered by name.

        With ``property_id``, returns the tenants housed in that property plus
        every unassigned tenant (who may be placed there).
        """
        with self._lock:
            if property_id is None:
                rows = list(self._tenants.values())
            else:
                unit_ids = {u.id for u in self._units.values() if u.property_id == property_id}
                rows = [
                    t for t in self._tenants.values()
                    if t.unit_id is None or t.unit_id in unit_ids
                ]
        return sorted(rows, key=lambda t: t.name.lower())

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        with self._lock:
            return self._tenants.get(tenant_id)

    def get_tenant_by_unit(self, unit_id: str) -> Optional[Tenant]:
        with self._lock:
            return next((t for t in self._tenants.values() if t.unit_id == unit_id), None)

    def create_tenant(self, fields: dict[str, Any]) -> Tenant:
        with self._lock:
            tenant = self._insert(self._tenants, Tenant, "tenant", fields)
            if tenant.unit_id:
                self.update_unit_status(tenant.unit_id, UnitStatus.OCCUPIED)
            return tenant

    def update_tenant(self, tenant_id: str, changes: dict[str, Any]) -> Optional[Tenant]:
        """Update a tenant; a ``unit_id`` key moves them between units."""
        with self._lock:
            if tenant_id not in self._tenants:
                return None
            if "unit_id" not in changes:
                return self._patch(self._tenants, Tenant, tenant_id, changes)

            new_unit_id = changes["unit_id"]
            if new_unit_id and not self._unit_is_free_for(new_unit_id, tenant_id):
                return None
            return self._move_tenant(tenant_id, new_unit_id, changes)

    def assign_tenant_to_unit(self, tenant_id: str, unit_id: str) -> Optional[Tenant]:
        """Move a tenant into ``unit_id``.

        Returns None when the tenant or unit is unknown, or the unit is held by
        another tenant.
        """
        with self._lock:
            if tenant_id not in self._tenants or not self._unit_is_free_for(unit_id, tenant_id):
                return None
            return self._move_tenant(tenant_id, unit_id, {"unit_id": unit_id})

    def remove_tenant_from_unit(self, tenant_id: str) -> Optional[Tenant]:
        with self._lock:
            if tenant_id not in self._tenants:
                return None
            return self._move_tenant(tenant_id, None, {"unit_id": None})

    def delete_tenant(self, tenant_id: str) -> bool:
        with self._lock:
            tenant = self._tenants.get(tenant_id)
            if tenant is None:
                return False
            previous_unit_id = tenant.unit_id
            del self._tenants[tenant_id]
            if previous_unit_id:
                self.update_unit_status(previous_unit_id, UnitStatus.AVAILABLE)
            return True

    def _unit_is_free_for(self, unit_id: str, tenant_id: str) -> bool:
        if unit_id not in self._units:
            return False
        holder = self.get_tenant_by_unit(unit_id)
        return holder is None or holder.id == tenant_id

    def _move_tenant(
        self,
        tenant_id: str,
        new_unit_id: Optional[str],
        changes: dict[str, Any],
    ) -> Optional[Tenant]:
        # Caller holds the lock. Order: tenant row, previous unit, new unit.
        previous_unit_id = self._tenants[tenant_id].unit_id
        tenant = self._patch(self._tenants, Tenant, tenant_id, {**changes, "unit_id": new_unit_id})
        if previous_unit_id:
            self.update_unit_status(previous_unit_id, UnitStatus.AVAILABLE)
        if new_unit_id:
            self.update_unit_status(new_unit_id, UnitStatus.OCCUPIED)
        return tenant

    # --- Maintenance requests ---

    def get_maintenance_requests(
        self,
        property_id: Optional[str] = None,
        unit_id: Optional[str] = None,
        status: Optional[MaintenanceStatus] = None,
    ) -> list[MaintenanceRequest]:
        """Maintenance requests, newest first."""
        with self._lock:
            unit_ids = None
            if property_id is not None:
                unit_ids = {u.id for u in self._units.values() if u.property_id == property_id}
            rows = [
                r for r in self._maintenance.values()
                if (unit_ids is None or r.unit_id in unit_ids)
                and (unit_id is None or r.unit_id == unit_id)
                and (status is None or r.status == status)
            ]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    def get_maintenance_request(self, request_id: str) -> Optional[MaintenanceRequest]:
        with self._lock:
            return self._maintenance.get(request_id)

    def create_maintenance_request(self, fields: dict[str, Any]) -> MaintenanceRequest:
        fields = {"reported_date": date.today(), **fields}
        with self._lock:
            return self._insert(self._maintenance, MaintenanceRequest, "maintenance", fields)

    def update_maintenance_request(
        self, request_id: str, changes: dict[str, Any]
    ) -> Optional[MaintenanceRequest]:
        with self._lock:
            return self._patch(self._maintenance, MaintenanceRequest, request_id, changes)

    def update_maintenance_status(
        self,
        request_id: str,
        status: MaintenanceStatus,
        **extra: Any,
    ) -> Optional[MaintenanceRequest]:
        """Change a request's status.

        Moving to completed stamps ``completed_date`` with the current time
        unless the caller passed one explicitly.
        """
        changes = {**extra, "status": status}
        if status == MaintenanceStatus.COMPLETED and not changes.get("completed_date"):
            changes["completed_date"] = _utcnow()
        return self.update_maintenance_request(request_id, changes)

    def delete_maintenance_request(self, request_id: str) -> bool:
        with self._lock:
            return self._maintenance.pop(request_id, None) is not None

    # --- Transactions ---

    def get_transactions(
        self,
        property_id: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        tenant_id: Optional[str] = None,
    ) -> list[Transaction]:
        """Transactions, most recent date first."""
        with self._lock:
            rows = [
                t for t in self._transactions.values()
                if (property_id is None or t.property_id == property_id)
                and (transaction_type is None or t.transaction_type == transaction_type)
                and (start_date is None or t.transaction_date >= start_date)
                and (end_date is None or t.transaction_date <= end_date)
                and (tenant_id is None or t.tenant_id == tenant_id)
            ]
        return sorted(rows, key=lambda t: t.transaction_date, reverse=True)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with self._lock:
            return self._transactions.get(transaction_id)

    def create_transaction(self, fields: dict[str, Any]) -> Transaction:
        with self._lock:
            return self._insert(self._transactions, Transaction, "transaction", fields)

    def update_transaction(
        self, transaction_id: str, changes: dict[str, Any]
    ) -> Optional[Transaction]:
        with self._lock:
            return self._patch(self._transactions, Transaction, transaction_id, changes)

    def delete_transaction(self, transaction_id: str) -> bool:
        with self._lock:
            return self._transactions.pop(transaction_id, None) is not None

    # --- Projections and aggregates ---

    def get_tenant_with_unit(self, tenant_id: str) -> Optional[TenantWithUnit]:
        with self._lock:
            tenant = self._tenants.get(tenant_id)
            if tenant is None:
                return None
            unit = self._units.get(tenant.unit_id) if tenant.unit_id else None
            return TenantWithUnit.from_records(tenant, unit)

    def get_tenants_with_units(self, property_id: str) -> list[TenantWithUnit]:
        with self._lock:
            return [
                TenantWithUnit.from_records(t, self._units.get(t.unit_id) if t.unit_id else None)
                for t in self.get_tenants(property_id)
            ]

    def get_maintenance_request_with_unit(
        self, request_id: str
    ) -> Optional[MaintenanceRequestWithUnit]:
        with self._lock:
            request = self._maintenance.get(request_id)
            if request is None:
                return None
            return MaintenanceRequestWithUnit.from_records(request, self._units.get(request.unit_id))

    def get_maintenance_requests_with_units(
        self,
        property_id: str,
        status: Optional[MaintenanceStatus] = None,
    ) -> list[MaintenanceRequestWithUnit]:
        with self._lock:
            return [
                MaintenanceRequestWithUnit.from_records(r, self._units.get(r.unit_id))
                for r in self.get_maintenance_requests(property_id=property_id, status=status)
            ]

    def get_unit_with_details(self, unit_id: str) -> Optional[UnitWithDetails]:
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None:
                return None
            return UnitWithDetails.from_records(
                unit,
                self.get_tenant_by_unit(unit_id),
                self.get_maintenance_requests(unit_id=unit_id),
            )

    def get_property_stats(self, property_id: str) -> PropertyStats:
        with self._lock:
            return PropertyStats.compute(
                self.get_units(property_id),
                list(self._tenants.values()),
                self.get_maintenance_requests(property_id=property_id),
            )

    def get_maintenance_stats(self, property_id: str) -> MaintenanceStats:
        return MaintenanceStats.from_requests(self.get_maintenance_requests(property_id=property_id))

    def get_financial_summary(self, property_id: str, year: int) -> FinancialSummary:
        return FinancialSummary.from_transactions(
            property_id, year, self.get_transactions(property_id=property_id)
        )

    # --- Demonstration data ---

    def _load_seed(self) -> None:
        def ts(year: int, month: int, day: int) -> datetime:
            return datetime(year, month, day, tzinfo=timezone.utc)

        def put(table: dict[str, R], record: R) -> None:
            table[record.id] = record

        created = ts(2024, 1, 1)

        put(self._properties, Property(
            id="mock-property-1",
            name="Résidence Les Palmiers",
            address="Boulevard Lagunaire, Cocody, Abidjan, Côte d'Ivoire",
            description=(
                "Résidence moderne avec équipements mis à jour, proche du "
                "centre-ville et des transports en commun à Abidjan."
            ),
            total_units=12,
            year_built=2018,
            square_footage=850,
            owner_id="mock-owner-1",
            created_at=created,
            updated_at=created,
        ))

        units = [
            ("mock-unit-1", "1A", "rdc", "f2", 65, 2, 1, 180000, 360000,
             "Appartement lumineux avec balcon donnant sur jardin",
             ["wifi", "parking", "security"], False, UnitStatus.OCCUPIED),
            ("mock-unit-2", "1B", "rdc", "f1", 45, 1, 1, 120000, 240000,
             "Studio moderne avec kitchenette équipée",
             ["wifi", "ac", "security"], True, UnitStatus.AVAILABLE),
            ("mock-unit-3", "2A", "etage_1", "f3", 85, 3, 2, 250000, 500000,
             "Grand appartement familial avec terrasse",
             ["wifi", "parking", "security", "balcony"], False, UnitStatus.OCCUPIED),
            ("mock-unit-4", "2B", "etage_1", "f2", 70, 2, 1, 190000, 380000,
             "Appartement rénové avec vue dégagée",
             ["wifi", "ac", "security"], False, UnitStatus.MAINTENANCE),
            ("mock-unit-5", "3A", "etage_2", "f2", 68, 2, 1, 185000, 370000,
             "Appartement calme avec beaucoup de lumière",
             ["wifi", "parking", "security"], False, UnitStatus.AVAILABLE),
        ]
        for (unit_id, number, floor, unit_type, surface, beds, baths,
             rent, deposit, description, amenities, furnished, status) in units:
            put(self._units, Unit(
                id=unit_id,
                property_id="mock-property-1",
                unit_number=number,
                floor=floor,
                unit_type=unit_type,
                surface=surface,
                bedrooms=beds,
                bathrooms=baths,
                rent=rent,
                deposit=deposit,
                description=description,
                amenities=amenities,
                furnished=furnished,
                status=status,
                created_at=created,
                updated_at=created,
            ))

        tenants = [
            ("mock-tenant-1", "mock-unit-1", "Awa Traoré", "awa.traore@email.com",
             "+225 07 12 34 56 78", date(2024, 1, 15), date(2025, 1, 14),
             180000, 360000, "+225 05 11 22 33 44", "Professeure"),
            ("mock-tenant-2", "mock-unit-3", "Kouadio Michel", "kouadio.michel@email.com",
             "+225 05 98 76 54 32", date(2024, 3, 1), date(2025, 2, 28),
             250000, 500000, "+225 07 55 66 77 88", "Ingénieur"),
            ("mock-tenant-3", None, "Aminata Kone", "aminata.kone@email.com",
             "+225 01 23 45 67 89", date(2024, 6, 1), date(2025, 5, 31),
             0, 0, "+225 07 99 88 77 66", "Commerçante"),
        ]
        for (tenant_id, unit_id, name, email, phone, lease_start, lease_end,
             rent_amount, deposit_amount, emergency, occupation) in tenants:
            put(self._tenants, Tenant(
                id=tenant_id,
                unit_id=unit_id,
                name=name,
                email=email,
                phone=phone,
                lease_start=lease_start,
                lease_end=lease_end,
                rent_amount=rent_amount,
                deposit_amount=deposit_amount,
                emergency_contact=emergency,
                occupation=occupation,
                created_at=created,
                updated_at=created,
            ))

        requests = [
            ("mock-maintenance-1", "mock-unit-1", "Fuite robinet cuisine",
             "Eau qui goutte du robinet de cuisine, réparation ou remplacement nécessaire",
             MaintenanceCategory.PLUMBING, MaintenancePriority.MEDIUM, MaintenanceStatus.IN_PROGRESS,
             date(2024, 12, 10), date(2024, 12, 18), None,
             "Awa Traoré", "Plomberie Express CI", 90000, None, ts(2024, 12, 10)),
            ("mock-maintenance-2", "mock-unit-3", "Climatisation ne refroidit pas",
             "Climatiseur du salon ne maintient pas la température",
             MaintenanceCategory.HVAC, MaintenancePriority.HIGH, MaintenanceStatus.SCHEDULED,
             date(2024, 12, 11), date(2024, 12, 19), None,
             "Kouadio Michel", "Froid Service Abidjan", 180000, None, ts(2024, 12, 11)),
            ("mock-maintenance-3", "mock-unit-2", "Peinture écaillée salle de bain",
             "Peinture qui s'écaille dans la salle de bain due à l'humidité",
             MaintenanceCategory.GENERAL, MaintenancePriority.LOW, MaintenanceStatus.PENDING,
             date(2024, 12, 12), None, None,
             "Propriétaire", None, 75000, None, ts(2024, 12, 12)),
            ("mock-maintenance-4", "mock-unit-4", "Prise électrique défaillante",
             "Prise de courant dans la chambre principale ne fonctionne pas",
             MaintenanceCategory.ELECTRICAL, MaintenancePriority.URGENT, MaintenanceStatus.COMPLETED,
             date(2024, 12, 8), date(2024, 12, 9), ts(2024, 12, 9),
             "Propriétaire", "Électricité Moderne CI", 50000, 45000, ts(2024, 12, 8)),
        ]
        for (request_id, unit_id, title, description, category, priority, status,
             reported, scheduled, completed, reported_by, assigned_to,
             estimated, actual, created_at) in requests:
            put(self._maintenance, MaintenanceRequest(
                id=request_id,
                unit_id=unit_id,
                title=title,
                description=description,
                category=category,
                priority=priority,
                status=status,
                reported_date=reported,
                scheduled_date=scheduled,
                completed_date=completed,
                reported_by=reported_by,
                assigned_to=assigned_to,
                estimated_cost=estimated,
                actual_cost=actual,
                created_at=created_at,
                updated_at=completed or created_at,
            ))

        transactions = [
            ("mock-transaction-1", TransactionType.INCOME, "Paiement Loyer - Logement 1A",
             180000, "Loyer", "mock-unit-1", "mock-tenant-1", date(2024, 12, 1)),
            ("mock-transaction-2", TransactionType.INCOME, "Paiement Loyer - Logement 2A",
             250000, "Loyer", "mock-unit-3", "mock-tenant-2", date(2024, 12, 1)),
            ("mock-transaction-3", TransactionType.EXPENSE, "Réparation Électricité - Logement 2B",
             45000, "Maintenance", "mock-unit-4", None, date(2024, 12, 9)),
            ("mock-transaction-4", TransactionType.EXPENSE, "Assurance propriété - Mois de décembre",
             85000, "Assurance", None, None, date(2024, 12, 5)),
        ]
        for (tx_id, tx_type, description, amount, category,
             unit_id, tenant_id, tx_date) in transactions:
            stamp = ts(tx_date.year, tx_date.month, tx_date.day)
            put(self._transactions, Transaction(
                id=tx_id,
                property_id="mock-property-1",
                unit_id=unit_id,
                tenant_id=tenant_id,
                transaction_type=tx_type,
                amount=amount,
                description=description,
                category=category,
                transaction_date=tx_date,
                created_at=stamp,
                updated_at=stamp,
            ))
