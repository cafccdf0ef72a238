"""
Tests for the HTTP API
Tests: health, role checks, CRUD status codes, unit rules, tenant placement, tenant-scoped reads,
notifications and connection endpoints
"""

from tests.conftest import LANDLORD_HEADERS, TENANT_HEADERS


class TestHealth:
    """Health and root endpoints"""

    def test_health_reports_fallback_source(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "ImmoGest", "data_source": "fallback"}

    def test_connection_status(self, client):
        response = client.get("/v1/dashboard/connection")
        assert response.json() == {"is_backend_connected": False, "connection_type": "fallback"}


class TestAuthorization:
    """Session headers and role checks"""

    def test_missing_identity_is_unauthorized(self, client):
        assert client.get("/v1/properties").status_code == 401

    def test_unknown_role_rejected(self, client):
        response = client.get("/v1/properties", headers={"X-User-Id": "u1", "X-User-Role": "admin"})
        assert response.status_code == 400

    def test_tenant_cannot_manage_properties(self, client):
        assert client.get("/v1/properties", headers=TENANT_HEADERS).status_code == 403
        response = client.post(
            "/v1/properties",
            json={"name": "Villa", "address": "Rue 12, Abidjan"},
            headers=TENANT_HEADERS,
        )
        assert response.status_code == 403

    def test_tenant_reads_only_own_record(self, client):
        own = client.get("/v1/tenants/mock-tenant-1", headers=TENANT_HEADERS)
        other = client.get("/v1/tenants/mock-tenant-2", headers=TENANT_HEADERS)

        assert own.status_code == 200
        assert own.json()["unit_number"] == "1A"
        assert other.status_code == 403

    def test_tenant_can_report_maintenance(self, client):
        response = client.post(
            "/v1/maintenance",
            json={"unit_id": "mock-unit-1", "title": "Ampoule grillée", "category": "electrical"},
            headers=TENANT_HEADERS,
        )
        assert response.status_code == 201
        assert response.json()["status"] == "pending"


class TestProperties:
    """Properties and units"""

    def test_list_and_get(self, client):
        listing = client.get("/v1/properties", headers=LANDLORD_HEADERS)
        assert [p["id"] for p in listing.json()] == ["mock-property-1"]

        missing = client.get("/v1/properties/nope", headers=LANDLORD_HEADERS)
        assert missing.status_code == 404

    def test_create_defaults_owner_to_caller(self, client):
        response = client.post(
            "/v1/properties",
            json={"name": "Immeuble Plateau", "address": "Avenue Chardy, Abidjan"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 201
        assert response.json()["owner_id"] == "mock-owner-1"

    def test_units_filtered_by_status(self, client):
        response = client.get(
            "/v1/properties/mock-property-1/units",
            params={"status": "available"},
            headers=TENANT_HEADERS,
        )
        assert [u["unit_number"] for u in response.json()] == ["1B", "3A"]

    def test_duplicate_unit_number_conflicts(self, client):
        response = client.post(
            "/v1/units",
            json={"property_id": "mock-property-1", "unit_number": "2A"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 409

    def test_unit_details_and_status(self, client):
        details = client.get("/v1/units/mock-unit-3", headers=LANDLORD_HEADERS).json()
        assert details["tenant"]["name"] == "Kouadio Michel"

        response = client.put(
            "/v1/units/mock-unit-2/status",
            json={"status": "maintenance"},
            headers=LANDLORD_HEADERS,
        )
        assert response.json()["status"] == "maintenance"

    def test_property_stats(self, client):
        stats = client.get("/v1/properties/mock-property-1/stats", headers=LANDLORD_HEADERS).json()
        assert stats["occupancy_rate"] == 40
        assert stats["monthly_revenue"] == 430000

    def test_delete_property(self, client):
        response = client.delete("/v1/properties/mock-property-1", headers=LANDLORD_HEADERS)
        assert response.status_code == 204
        assert client.get("/v1/properties/mock-property-1", headers=LANDLORD_HEADERS).status_code == 404


class TestUnitRules:
    """Unit numbers and occupancy status stay consistent"""

    def test_vacant_unit_cannot_be_marked_occupied(self, client):
        response = client.put(
            "/v1/units/mock-unit-2/status",
            json={"status": "occupied"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 409

    def test_held_unit_keeps_occupied_status(self, client):
        for new_status in ("available", "maintenance"):
            response = client.put(
                "/v1/units/mock-unit-1/status",
                json={"status": new_status},
                headers=LANDLORD_HEADERS,
            )
            assert response.status_code == 409

        unit = client.get("/v1/units/mock-unit-1", headers=LANDLORD_HEADERS).json()
        assert unit["status"] == "occupied"

    def test_patch_checks_status_too(self, client):
        response = client.patch(
            "/v1/units/mock-unit-5",
            json={"status": "occupied"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 409

    def test_new_unit_cannot_start_occupied(self, client):
        occupied = client.post(
            "/v1/units",
            json={"property_id": "mock-property-1", "unit_number": "4A", "status": "occupied"},
            headers=LANDLORD_HEADERS,
        )
        in_works = client.post(
            "/v1/units",
            json={"property_id": "mock-property-1", "unit_number": "4B", "status": "maintenance"},
            headers=LANDLORD_HEADERS,
        )

        assert occupied.status_code == 422
        assert in_works.status_code == 201
        assert in_works.json()["status"] == "maintenance"

    def test_renumbering_to_a_sibling_number_conflicts(self, client):
        taken = client.patch(
            "/v1/units/mock-unit-2",
            json={"unit_number": "1A"},
            headers=LANDLORD_HEADERS,
        )
        unchanged = client.patch(
            "/v1/units/mock-unit-2",
            json={"unit_number": "1B", "rent": 125000},
            headers=LANDLORD_HEADERS,
        )
        renamed = client.patch(
            "/v1/units/mock-unit-2",
            json={"unit_number": "1C"},
            headers=LANDLORD_HEADERS,
        )

        assert taken.status_code == 409
        assert unchanged.status_code == 200
        assert renamed.json()["unit_number"] == "1C"


class TestTenantPlacement:
    """Tenant creation, moves and release through the API"""

    def test_kone_aminata_in_unit_3b(self, client):
        unit = client.post(
            "/v1/units",
            json={"property_id": "mock-property-1", "unit_number": "3B", "rent": 185000},
            headers=LANDLORD_HEADERS,
        ).json()
        tenant = client.post(
            "/v1/tenants",
            json={"name": "Kone Aminata", "unit_id": unit["id"], "rent_amount": 185000},
            headers=LANDLORD_HEADERS,
        ).json()

        occupied = client.get(f"/v1/units/{unit['id']}", headers=LANDLORD_HEADERS).json()
        assert occupied["status"] == "occupied"

        released = client.post(f"/v1/tenants/{tenant['id']}/release", headers=LANDLORD_HEADERS).json()
        assert released["unit_id"] is None

        available = client.get(f"/v1/units/{unit['id']}", headers=LANDLORD_HEADERS).json()
        assert available["status"] == "available"

    def test_assign_into_occupied_unit_conflicts(self, client):
        response = client.post(
            "/v1/tenants/mock-tenant-3/assign",
            json={"unit_id": "mock-unit-1"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 409

    def test_assign_into_unknown_unit(self, client):
        response = client.post(
            "/v1/tenants/mock-tenant-3/assign",
            json={"unit_id": "ghost"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 404

    def test_delete_tenant_frees_unit(self, client):
        assert client.delete("/v1/tenants/mock-tenant-1", headers=LANDLORD_HEADERS).status_code == 204
        unit = client.get("/v1/units/mock-unit-1", headers=LANDLORD_HEADERS).json()
        assert unit["status"] == "available"
        assert unit["tenant"] is None

    def test_invalid_lease_dates(self, client):
        response = client.post(
            "/v1/tenants",
            json={"name": "Yao Konan", "lease_start": "2025-06-01", "lease_end": "2025-01-01"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 422


class TestMaintenanceAndFinance:
    """Maintenance workflow and financial endpoints"""

    def test_complete_request(self, client):
        response = client.post(
            "/v1/maintenance/mock-maintenance-3/status",
            json={"status": "completed"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["completed_date"] is not None

    def test_tenant_cannot_change_status(self, client):
        response = client.post(
            "/v1/maintenance/mock-maintenance-1/status",
            json={"status": "completed"},
            headers=TENANT_HEADERS,
        )
        assert response.status_code == 403

    def test_maintenance_stats(self, client):
        stats = client.get(
            "/v1/maintenance/stats",
            params={"property_id": "mock-property-1"},
            headers=LANDLORD_HEADERS,
        ).json()
        assert stats == {"total": 4, "pending": 1, "in_progress": 1, "scheduled": 1, "completed": 1}

    def test_financial_summary(self, client):
        summary = client.get(
            "/v1/transactions/summary",
            params={"property_id": "mock-property-1", "year": 2024},
            headers=LANDLORD_HEADERS,
        ).json()
        assert summary["total_income"] == 430000
        assert len(summary["monthly_breakdown"]) == 12

    def test_reversed_date_range_rejected(self, client):
        response = client.get(
            "/v1/transactions",
            params={"start_date": "2024-12-31", "end_date": "2024-01-01"},
            headers=LANDLORD_HEADERS,
        )
        assert response.status_code == 400

    def test_overview(self, client):
        overview = client.get(
            "/v1/dashboard/properties/mock-property-1",
            params={"year": 2024},
            headers=LANDLORD_HEADERS,
        ).json()
        assert overview["stats"]["total_units"] == 5
        assert overview["finances"]["net_income"] == 300000


class TestTenantScopedReads:
    """A tenant only sees their own unit's requests and their own payments"""

    def test_tenant_lists_only_own_unit_requests(self, client):
        own = client.get("/v1/maintenance", headers=TENANT_HEADERS).json()
        other = client.get("/v1/maintenance", params={"unit_id": "mock-unit-2"}, headers=TENANT_HEADERS).json()

        assert [r["id"] for r in own] == ["mock-maintenance-1"]
        assert other == []

    def test_landlord_lists_everything(self, client):
        requests = client.get("/v1/maintenance", headers=LANDLORD_HEADERS).json()
        assert len(requests) == 4

    def test_tenant_reads_single_request_on_own_unit_only(self, client):
        own = client.get("/v1/maintenance/mock-maintenance-1", headers=TENANT_HEADERS)
        other = client.get("/v1/maintenance/mock-maintenance-2", headers=TENANT_HEADERS)

        assert own.status_code == 200
        assert own.json()["unit_number"] == "1A"
        assert other.status_code == 403

    def test_property_wide_views_are_for_landlords(self, client):
        params = {"property_id": "mock-property-1"}

        assert client.get("/v1/maintenance/with-units", params=params, headers=TENANT_HEADERS).status_code == 403
        assert client.get("/v1/maintenance/stats", params=params, headers=TENANT_HEADERS).status_code == 403
        assert client.get("/v1/transactions/summary", params=params, headers=TENANT_HEADERS).status_code == 403

    def test_tenant_reports_on_own_unit_only(self, client):
        response = client.post(
            "/v1/maintenance",
            json={"unit_id": "mock-unit-2", "title": "Fuite d'eau"},
            headers=TENANT_HEADERS,
        )
        assert response.status_code == 403

    def test_tenant_sees_own_payments(self, client):
        payments = client.get(
            "/v1/transactions",
            params={"property_id": "mock-property-1"},
            headers=TENANT_HEADERS,
        )

        assert payments.status_code == 200
        assert [t["id"] for t in payments.json()] == ["mock-transaction-1"]
        assert client.get("/v1/transactions/mock-transaction-1", headers=TENANT_HEADERS).status_code == 200
        assert client.get("/v1/transactions/mock-transaction-2", headers=TENANT_HEADERS).status_code == 403

    def test_tenant_cannot_record_transactions(self, client):
        response = client.post(
            "/v1/transactions",
            json={"property_id": "mock-property-1", "transaction_type": "income", "amount": 180000},
            headers=TENANT_HEADERS,
        )
        assert response.status_code == 403


class TestNotificationsAndAdmin:
    """Notification drain, connection test and store reset"""

    def test_notifications_drained(self, client):
        client.post(
            "/v1/transactions",
            json={"property_id": "mock-property-1", "transaction_type": "expense", "amount": 20000},
            headers=LANDLORD_HEADERS,
        )

        first = client.get("/v1/dashboard/notifications", headers=LANDLORD_HEADERS).json()
        second = client.get("/v1/dashboard/notifications", headers=LANDLORD_HEADERS).json()

        assert [n["message"] for n in first] == ["Transaction recorded"]
        assert second == []

    def test_connection_test_without_backend(self, client):
        result = client.post("/v1/dashboard/connection/test", headers=TENANT_HEADERS).json()
        assert result["success"] is False

    def test_reset_requires_landlord(self, client):
        assert client.post("/v1/dashboard/fallback/reset", headers=TENANT_HEADERS).status_code == 403

    def test_reset_restores_demo_data(self, client):
        client.delete("/v1/tenants/mock-tenant-1", headers=LANDLORD_HEADERS)

        assert client.post("/v1/dashboard/fallback/reset", headers=LANDLORD_HEADERS).status_code == 204
        assert client.get("/v1/tenants/mock-tenant-1", headers=LANDLORD_HEADERS).status_code == 200
