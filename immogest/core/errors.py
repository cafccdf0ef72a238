"""Error taxonomy and reporting for data access failures."""

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

import httpx

if TYPE_CHECKING:
    from immogest.services.notifications import NotificationCenter

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Classification of a failed data operation."""
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    UPSTREAM_AUTH = "upstream_auth"
    UNEXPECTED = "unexpected"


class ImmoGestError(Exception):
    """Base application error carrying an optional machine-readable code."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.original_error = original_error


class OperationTimeoutError(ImmoGestError):
    """An attempt exceeded its time box."""

    def __init__(self, message: str = "Operation timed out"):
        super().__init__(message, code="TIMEOUT")


class RemoteConnectionError(ImmoGestError):
    """The transport to the hosted backend failed (DNS, refused, reset)."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        super().__init__(message, code="NETWORK_ERROR", original_error=original_error)


class UpstreamAuthError(ImmoGestError):
    """The hosted backend rejected our credentials."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message, code="UNAUTHORIZED")


class RemoteQueryError(ImmoGestError):
    """Any other error reported by the hosted backend."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message, code=code)
        self.status_code = status_code
        self.details = details
        self.hint = hint


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception onto the four error kinds."""
    if isinstance(error, (OperationTimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT
    if isinstance(error, (RemoteConnectionError, httpx.TransportError)):
        return ErrorKind.CONNECTION
    if isinstance(error, UpstreamAuthError):
        return ErrorKind.UPSTREAM_AUTH

    code = getattr(error, "code", None)
    message = str(error).lower()
    if code == "TIMEOUT" or "timeout" in message or "timed out" in message:
        return ErrorKind.TIMEOUT
    if code == "NETWORK_ERROR" or "network" in message:
        return ErrorKind.CONNECTION
    if code == "UNAUTHORIZED" or "invalid api key" in message:
        return ErrorKind.UPSTREAM_AUTH
    return ErrorKind.UNEXPECTED


class ErrorReporter:
    """Logs failures and forwards a human-readable message to the notification sink."""

    MESSAGES = {
        ErrorKind.TIMEOUT: ("warning", "Slow connection detected - using local data"),
        ErrorKind.CONNECTION: ("warning", "Connection problem - using local data"),
        ErrorKind.UPSTREAM_AUTH: ("info", "Database service not configured - using demo data"),
    }

    def __init__(self, notifier: Optional["NotificationCenter"] = None):
        self.notifier = notifier

    def handle(self, error: BaseException, context: Optional[str] = None) -> bool:
        """Report an error.

        Returns True when the error is one of the recognized kinds (timeout,
        connection, upstream auth), False for unexpected errors.
        """
        where = context or "application"
        logger.error(f"[ERROR] Error in {where}: {error!r}")

        kind = classify_error(error)
        level, message = self.describe(error, context)
        if kind in self.MESSAGES:
            logger.warning(f"[ERROR] {kind.value} during {where}: {message}")
        self._notify(level, message)
        return kind in self.MESSAGES

    def describe(self, error: BaseException, context: Optional[str] = None) -> tuple[str, str]:
        """The notification level and message reported for an error."""
        kind = classify_error(error)
        if kind in self.MESSAGES:
            return self.MESSAGES[kind]
        return "error", f"Error in {context}" if context else "Unexpected error"

    def _notify(self, level: str, message: str) -> None:
        if self.notifier is not None:
            self.notifier.notify(level, message)
