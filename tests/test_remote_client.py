"""
Tests for the hosted backend client
Tests: request shape, filters, single-row reads, counts and error mapping
"""

import json
from datetime import date

import httpx
import pytest

from immogest.core.errors import (
    OperationTimeoutError,
    RemoteConnectionError,
    RemoteQueryError,
    UpstreamAuthError,
)
from immogest.core.remote_client import RemoteTableClient, eq, gte, in_, lte
from immogest.models.enums import UnitStatus


def client_for(settings, handler) -> RemoteTableClient:
    return RemoteTableClient(settings, transport=httpx.MockTransport(handler))


class TestFilters:
    """PostgREST operator syntax"""

    def test_filter_helpers(self):
        assert eq("status", UnitStatus.OCCUPIED) == ("status", "eq.occupied")
        assert eq("furnished", True) == ("furnished", "eq.true")
        assert in_("unit_id", ["a", "b"]) == ("unit_id", 'in.("a","b")')
        assert gte("transaction_date", date(2024, 1, 1)) == ("transaction_date", "gte.2024-01-01")
        assert lte("amount", 500) == ("amount", "lte.500")


class TestRequests:
    """What goes over the wire"""

    async def test_select_sends_auth_headers_filters_and_order(self, remote_settings):
        seen = {}

        def handler(request: httpx.Request):
            seen["request"] = request
            return httpx.Response(200, json=[{"id": "u1"}])

        client = client_for(remote_settings, handler)
        rows = await client.select("units", [eq("property_id", "p1")], order="unit_number")
        await client.aclose()

        request = seen["request"]
        assert rows == [{"id": "u1"}]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/units"
        assert request.url.params["property_id"] == "eq.p1"
        assert request.url.params["order"] == "unit_number.asc"
        assert request.url.params["select"] == "*"
        assert request.headers["apikey"] == "test-anon-key"
        assert request.headers["authorization"] == "Bearer test-anon-key"

    async def test_insert_requests_representation(self, remote_settings):
        seen = {}

        def handler(request: httpx.Request):
            seen["request"] = request
            body = json.loads(request.content)
            return httpx.Response(201, json=[{**body, "id": "t1"}])

        client = client_for(remote_settings, handler)
        row = await client.insert("tenants", {"name": "Kone Aminata", "lease_start": date(2025, 1, 1)})

        assert row["id"] == "t1"
        assert row["lease_start"] == "2025-01-01"
        assert seen["request"].headers["prefer"] == "return=representation"

    async def test_update_returns_first_row_or_none(self, remote_settings):
        def handler(request: httpx.Request):
            assert request.method == "PATCH"
            if request.url.params["id"] == "eq.known":
                return httpx.Response(200, json=[{"id": "known", "status": "occupied"}])
            return httpx.Response(200, json=[])

        client = client_for(remote_settings, handler)

        assert (await client.update("units", {"status": "occupied"}, [eq("id", "known")]))["status"] == "occupied"
        assert await client.update("units", {"status": "occupied"}, [eq("id", "missing")]) is None

    async def test_delete_counts_removed_rows(self, remote_settings):
        client = client_for(remote_settings, lambda request: httpx.Response(200, json=[{"id": "x"}]))
        assert await client.delete("transactions", [eq("id", "x")]) == 1

    async def test_select_one_not_found(self, remote_settings):
        def handler(request: httpx.Request):
            assert request.headers["accept"] == "application/vnd.pgrst.object+json"
            return httpx.Response(
                406,
                json={"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"},
            )

        client = client_for(remote_settings, handler)
        assert await client.select_one("tenants", [eq("id", "ghost")]) is None

    async def test_count_reads_content_range(self, remote_settings):
        def handler(request: httpx.Request):
            assert request.method == "HEAD"
            assert request.headers["prefer"] == "count=exact"
            return httpx.Response(200, headers={"Content-Range": "0-0/7"})

        client = client_for(remote_settings, handler)
        assert await client.count("properties") == 7


class TestErrorMapping:
    """Transport and HTTP failures become typed errors"""

    async def test_timeout(self, remote_settings):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(OperationTimeoutError):
            await client_for(remote_settings, handler).select("units")

    async def test_network_failure(self, remote_settings):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RemoteConnectionError) as exc_info:
            await client_for(remote_settings, handler).select("units")
        assert exc_info.value.code == "NETWORK_ERROR"

    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_rejected_credentials(self, remote_settings, status_code):
        client = client_for(remote_settings, lambda request: httpx.Response(status_code, json={}))

        with pytest.raises(UpstreamAuthError) as exc_info:
            await client.select("units")
        assert exc_info.value.code == "UNAUTHORIZED"

    async def test_query_error_carries_backend_details(self, remote_settings):
        def handler(request):
            return httpx.Response(
                400,
                json={
                    "code": "42703",
                    "message": "column units.colour does not exist",
                    "details": None,
                    "hint": "Perhaps you meant to reference the column units.floor",
                },
            )

        with pytest.raises(RemoteQueryError) as exc_info:
            await client_for(remote_settings, handler).select("units", [eq("colour", "red")])

        error = exc_info.value
        assert error.code == "42703"
        assert error.status_code == 400
        assert error.hint.startswith("Perhaps")

    async def test_non_json_error_body(self, remote_settings):
        client = client_for(remote_settings, lambda request: httpx.Response(500, text="upstream down"))

        with pytest.raises(RemoteQueryError) as exc_info:
            await client.select("units")
        assert exc_info.value.status_code == 500
        assert "500" in str(exc_info.value)
