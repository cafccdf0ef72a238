"""
Data context.

Bundles everything the data access services share: settings, the hosted
backend client, the fallback store, the read policy and the notification
sink. One context is built per application (see ``immogest.main``) and handed
to the services explicitly.
"""

import logging
from contextvars import ContextVar
from typing import Any, Awaitable, Callable, Optional, TypeVar

from immogest.core.config import Settings
from immogest.core.errors import ErrorReporter
from immogest.core.remote_client import RemoteTableClient
from immogest.schemas.dashboard import ConnectionStatus, ConnectionTestResult
from immogest.services.fallback_store import FallbackStore
from immogest.services.notifications import NotificationCenter
from immogest.services.resilience import ResilientCallPolicy, with_timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROBE_TABLE = "properties"

# Message reported by the last failed write of the current request
_write_failure: ContextVar[Optional[str]] = ContextVar("write_failure", default=None)


class DataContext:
    """Shared state for the data access services."""

    def __init__(
        self,
        settings: Settings,
        remote: Optional[RemoteTableClient] = None,
        store: Optional[FallbackStore] = None,
        notifier: Optional[NotificationCenter] = None,
        policy: Optional[ResilientCallPolicy] = None,
    ):
        self.settings = settings
        self.notifier = notifier or NotificationCenter(settings.notification_buffer_size)
        self.reporter = ErrorReporter(self.notifier)
        self.store = store if store is not None else FallbackStore()
        if remote is None and settings.is_backend_configured:
            remote = RemoteTableClient(settings)
        self.remote = remote
        self.policy = policy or ResilientCallPolicy.from_settings(settings, self.reporter)
        self.use_remote = False

    # --- Lifecycle ---

    async def initialize(self) -> bool:
        """Decide which data source serves requests. Returns True for the backend."""
        if self.remote is None:
            logger.info("[FALLBACK] Backend not configured, serving in-memory demo data")
            self.use_remote = False
            return False

        if not self.settings.probe_on_startup:
            self.use_remote = True
            return True

        status = await self.refresh_connection()
        return status.is_backend_connected

    async def refresh_connection(self) -> ConnectionStatus:
        """Probe the backend again and switch data source accordingly."""
        if self.remote is None:
            self.use_remote = False
            return self.connection_status()

        try:
            await self._probe()
            self.use_remote = True
            logger.info(f"[REMOTE] Connected to {self.settings.supabase_url}")
        except Exception as e:
            self.use_remote = False
            logger.warning(f"[FALLBACK] Backend probe failed ({e!r}), using in-memory store")
        return self.connection_status()

    async def test_connection(self) -> ConnectionTestResult:
        """Probe the backend without changing the active data source."""
        if self.remote is None:
            return ConnectionTestResult(
                success=False,
                message="Database service not configured - using demo data",
            )
        try:
            count = await self._probe()
        except Exception as e:
            return ConnectionTestResult(success=False, message=f"Connection failed: {e}")
        return ConnectionTestResult(success=True, message=f"Connected ({count} properties)")

    def connection_status(self) -> ConnectionStatus:
        return ConnectionStatus(
            is_backend_connected=self.use_remote,
            connection_type="remote" if self.use_remote else "fallback",
        )

    async def aclose(self) -> None:
        if self.remote is not None:
            await self.remote.aclose()

    async def _probe(self) -> int:
        return await with_timeout(
            self.remote.count(PROBE_TABLE),
            self.settings.request_timeout_ms,
            "Connection probe timed out",
        )

    # --- Helpers used by the services ---

    async def read(
        self,
        primary: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
        context: str,
    ) -> T:
        """Resilient read; goes straight to the fallback when the backend is down."""
        if not self.use_remote:
            return fallback()
        return await self.policy.execute(primary, fallback, context=context)

    async def write(
        self,
        remote_op: Callable[[], Awaitable[T]],
        local_op: Callable[[], T],
        context: str,
        failed: Any = None,
        success_message: Optional[str] = None,
    ) -> T:
        """
        Run a write against the active data source.

        Remote failures are reported and turned into ``failed``; they are not
        replayed into the fallback store. The reported message stays readable
        through ``write_failure()`` for the rest of the request.
        """
        _write_failure.set(None)
        if not self.use_remote:
            result = local_op()
        else:
            try:
                result = await with_timeout(
                    remote_op(),
                    self.settings.request_timeout_ms,
                    f"{context} timed out",
                )
            except Exception as e:
                self.reporter.handle(e, context)
                _write_failure.set(self.reporter.describe(e, context)[1])
                return failed

        if success_message and result:
            self.notifier.success(success_message)
        return result

    def write_failure(self) -> Optional[str]:
        """Why the last write of this request failed against the backend, if it did."""
        return _write_failure.get()
