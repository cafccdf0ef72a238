"""
Hosted backend client.

Thin async wrapper over the PostgREST-style table interface exposed at
``{SUPABASE_URL}/rest/v1/{table}``. Rows go in and come out as plain dicts;
services validate them into records. Transport and HTTP failures are raised
as the typed errors from ``immogest.core.errors``.
"""

import logging
from typing import Any, Optional, Sequence

import httpx
from pydantic import TypeAdapter

from immogest.core.config import Settings
from immogest.core.errors import (
    OperationTimeoutError,
    RemoteConnectionError,
    RemoteQueryError,
    UpstreamAuthError,
)

logger = logging.getLogger(__name__)

Filters = Sequence[tuple[str, str]]

# PostgREST error code for "single row requested, none found"
NO_ROWS_CODE = "PGRST116"

SINGLE_OBJECT = "application/vnd.pgrst.object+json"

_json_values = TypeAdapter(Any)


# --- Filter helpers (PostgREST operator syntax) ---

def _jsonable(value: Any) -> Any:
    return _json_values.dump_python(value, mode="json")


def _literal(value: Any) -> str:
    value = _jsonable(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def eq(column: str, value: Any) -> tuple[str, str]:
    return column, f"eq.{_literal(value)}"


def in_(column: str, values: Sequence[Any]) -> tuple[str, str]:
    joined = ",".join(f'"{_literal(v)}"' for v in values)
    return column, f"in.({joined})"


def gte(column: str, value: Any) -> tuple[str, str]:
    return column, f"gte.{_literal(value)}"


def lte(column: str, value: Any) -> tuple[str, str]:
    return column, f"lte.{_literal(value)}"


class RemoteTableClient:
    """Client for the hosted backend's table REST interface."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.rest_url,
            headers={
                "apikey": settings.supabase_anon_key,
                "Authorization": f"Bearer {settings.supabase_anon_key}",
            },
            timeout=settings.request_timeout_ms / 1000,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Table operations ---

    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order: Optional[str] = None,
        descending: bool = False,
        columns: str = "*",
    ) -> list[dict]:
        """Fetch every row of ``table`` matching ``filters``."""
        params = [("select", columns), *(filters or [])]
        if order:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))

        response = await self._request("GET", table, params=params)
        return response.json()

    async def select_one(self, table: str, filters: Filters, columns: str = "*") -> Optional[dict]:
        """Fetch a single row, or None when nothing matches."""
        try:
            response = await self._request(
                "GET",
                table,
                params=[("select", columns), *filters],
                headers={"Accept": SINGLE_OBJECT},
            )
        except RemoteQueryError as e:
            if e.code == NO_ROWS_CODE:
                return None
            raise
        return response.json()

    async def insert(self, table: str, values: dict[str, Any]) -> dict:
        """Insert one row and return it as stored."""
        response = await self._request(
            "POST",
            table,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        return rows[0] if isinstance(rows, list) else rows

    async def update(self, table: str, values: dict[str, Any], filters: Filters) -> Optional[dict]:
        """Patch matching rows; returns the first updated row, if any."""
        response = await self._request(
            "PATCH",
            table,
            params=list(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        return rows[0] if rows else None

    async def delete(self, table: str, filters: Filters) -> int:
        """Delete matching rows; returns how many were removed."""
        response = await self._request(
            "DELETE",
            table,
            params=list(filters),
            headers={"Prefer": "return=representation"},
        )
        return len(response.json())

    async def count(self, table: str, filters: Optional[Filters] = None) -> int:
        """Exact row count, read from the Content-Range header."""
        response = await self._request(
            "HEAD",
            table,
            params=[("select", "id"), *(filters or [])],
            headers={"Prefer": "count=exact"},
        )
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        return int(total) if total.isdigit() else 0

    # --- Transport ---

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[list[tuple[str, str]]] = None,
        json: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                f"/{table}",
                params=params,
                json=_jsonable(json) if json is not None else None,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"[REMOTE] {method} {table} timed out")
            raise OperationTimeoutError(f"Request to {table} timed out") from e
        except httpx.TransportError as e:
            logger.warning(f"[REMOTE] {method} {table} network error: {e}")
            raise RemoteConnectionError(f"Network error contacting backend: {e}", original_error=e) from e

        if response.status_code in (401, 403):
            logger.warning(f"[REMOTE] {method} {table} rejected: {response.status_code}")
            raise UpstreamAuthError()

        if response.is_error:
            body = self._error_body(response)
            logger.warning(
                f"[REMOTE] {method} {table} failed: {response.status_code} {body.get('code')}"
            )
            raise RemoteQueryError(
                body.get("message") or f"Backend returned HTTP {response.status_code}",
                code=body.get("code"),
                status_code=response.status_code,
                details=body.get("details"),
                hint=body.get("hint"),
            )

        logger.debug(f"[REMOTE] {method} {table} -> {response.status_code}")
        return response

    @staticmethod
    def _error_body(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
