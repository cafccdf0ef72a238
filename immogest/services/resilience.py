"""
Resilient call policy.

Every remote read runs through ``ResilientCallPolicy.execute``: each attempt is
time-boxed, failures are retried with a linear backoff, and once attempts are
exhausted the error is reported and the fallback value is returned instead.
Reads therefore never raise data errors to their callers.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from immogest.core.errors import ErrorReporter, OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_MAX_RETRIES = 2
DEFAULT_TIMEOUT_MS = 5000
DEFAULT_BACKOFF_MS = 1000


async def with_timeout(
    awaitable: Awaitable[T],
    timeout_ms: int,
    message: str = "Operation timed out",
) -> T:
    """Await ``awaitable``, raising OperationTimeoutError after ``timeout_ms``."""
    try:
        return await asyncio.wait_for(awaitable, timeout_ms / 1000)
    except asyncio.TimeoutError as e:
        raise OperationTimeoutError(message) from e


def _check_bounds(max_retries: int, timeout_ms: int) -> None:
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")
    if timeout_ms <= 0:
        raise ValueError(f"timeout_ms must be > 0, got {timeout_ms}")


class ResilientCallPolicy:
    """Timeout, bounded retries with linear backoff, fallback on exhaustion."""

    def __init__(
        self,
        reporter: Optional[ErrorReporter] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        backoff_ms: int = DEFAULT_BACKOFF_MS,
        sleep: SleepFn = asyncio.sleep,
    ):
        _check_bounds(max_retries, timeout_ms)
        if backoff_ms < 0:
            raise ValueError(f"backoff_ms must be >= 0, got {backoff_ms}")
        self.reporter = reporter
        self.max_retries = max_retries
        self.timeout_ms = timeout_ms
        self.backoff_ms = backoff_ms
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings, reporter: Optional[ErrorReporter] = None) -> "ResilientCallPolicy":
        return cls(
            reporter=reporter,
            max_retries=settings.max_retries,
            timeout_ms=settings.request_timeout_ms,
            backoff_ms=settings.retry_backoff_ms,
        )

    async def execute(
        self,
        primary: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
        max_retries: Optional[int] = None,
        timeout_ms: Optional[int] = None,
        context: Optional[str] = None,
    ) -> T:
        """
        Run ``primary`` up to ``max_retries + 1`` times.

        Attempt ``n`` (from 0) that fails with attempts left waits
        ``backoff_ms * (n + 1)`` before the next one. The last failure is
        reported and ``fallback()`` is returned; it is called at most once.
        """
        retries = self.max_retries if max_retries is None else max_retries
        timeout = self.timeout_ms if timeout_ms is None else timeout_ms
        _check_bounds(retries, timeout)
        label = context or "operation"

        attempt = 0
        while True:
            try:
                return await with_timeout(primary(), timeout, f"{label} timed out after {timeout} ms")
            except Exception as error:
                if attempt < retries:
                    delay_ms = self.backoff_ms * (attempt + 1)
                    logger.warning(
                        f"[RETRY] {label}: attempt {attempt + 1}/{retries + 1} failed "
                        f"({error!r}), retrying in {delay_ms} ms"
                    )
                    await self._sleep(delay_ms / 1000)
                    attempt += 1
                    continue

                logger.error(f"[RETRY] {label}: giving up after {attempt + 1} attempt(s)")
                if self.reporter is not None:
                    self.reporter.handle(error, context)
                return fallback()


async def execute_with_fallback(
    primary: Callable[[], Awaitable[T]],
    fallback: Callable[[], T],
    max_retries: int = DEFAULT_MAX_RETRIES,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    reporter: Optional[ErrorReporter] = None,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """One-off form of ``ResilientCallPolicy.execute``."""
    policy = ResilientCallPolicy(
        reporter=reporter,
        max_retries=max_retries,
        timeout_ms=timeout_ms,
        sleep=sleep,
    )
    return await policy.execute(primary, fallback)
