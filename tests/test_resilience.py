"""
Tests for the resilient call policy
Tests: retry counts, linear backoff, timeouts, fallback reporting and argument bounds
"""

import asyncio

import pytest

from immogest.core.errors import ErrorReporter, OperationTimeoutError, RemoteConnectionError
from immogest.services.notifications import NotificationCenter
from immogest.services.resilience import (
    ResilientCallPolicy,
    execute_with_fallback,
    with_timeout,
)


class Recorder:
    """Counts primary attempts, fallback calls and backoff waits."""

    def __init__(self, fail_times=None, value="remote"):
        self.fail_times = fail_times
        self.value = value
        self.attempts = 0
        self.fallbacks = 0
        self.sleeps = []

    async def primary(self):
        self.attempts += 1
        if self.fail_times is None or self.attempts <= self.fail_times:
            raise RemoteConnectionError("network")
        return self.value

    def fallback(self):
        self.fallbacks += 1
        return []

    async def sleep(self, seconds):
        self.sleeps.append(seconds)


class TestRetries:
    """Attempt counting and backoff"""

    @pytest.mark.parametrize("max_retries", [0, 1, 2, 5])
    async def test_always_failing_primary_falls_back_once(self, max_retries):
        """n retries give n + 1 attempts and exactly one fallback call"""
        rec = Recorder()
        policy = ResilientCallPolicy(max_retries=max_retries, timeout_ms=100, sleep=rec.sleep)

        result = await policy.execute(rec.primary, rec.fallback)

        assert result == []
        assert rec.attempts == max_retries + 1
        assert rec.fallbacks == 1

    async def test_backoff_is_linear(self):
        """Waits of 1000 ms then 2000 ms between three attempts"""
        rec = Recorder()
        policy = ResilientCallPolicy(max_retries=2, timeout_ms=50, sleep=rec.sleep)

        result = await policy.execute(rec.primary, rec.fallback)

        assert result == []
        assert rec.attempts == 3
        assert rec.sleeps == [1.0, 2.0]

    @pytest.mark.parametrize("k", [0, 1, 2])
    async def test_success_on_attempt_k_stops_retrying(self, k):
        """The first successful attempt's value is returned, nothing after it"""
        rec = Recorder(fail_times=k)
        policy = ResilientCallPolicy(max_retries=2, timeout_ms=100, sleep=rec.sleep)

        result = await policy.execute(rec.primary, rec.fallback)

        assert result == "remote"
        assert rec.attempts == k + 1
        assert rec.fallbacks == 0
        assert len(rec.sleeps) == k

    async def test_zero_retries_means_single_attempt(self):
        rec = Recorder()
        policy = ResilientCallPolicy(max_retries=0, timeout_ms=100, sleep=rec.sleep)

        await policy.execute(rec.primary, rec.fallback)

        assert rec.attempts == 1
        assert rec.sleeps == []

    async def test_per_call_overrides(self):
        """max_retries passed to execute wins over the policy default"""
        rec = Recorder()
        policy = ResilientCallPolicy(max_retries=5, timeout_ms=100, sleep=rec.sleep)

        await policy.execute(rec.primary, rec.fallback, max_retries=1)

        assert rec.attempts == 2

    async def test_execute_with_fallback_helper(self):
        rec = Recorder()

        result = await execute_with_fallback(
            rec.primary, rec.fallback, max_retries=2, timeout_ms=50, sleep=rec.sleep
        )

        assert result == []
        assert rec.attempts == 3
        assert rec.sleeps == [1.0, 2.0]


class TestTimeouts:
    """Time-boxed attempts"""

    async def test_slow_primary_counts_as_failed_attempt(self):
        """A primary that outlives the timeout is abandoned and retried"""
        attempts = 0

        async def slow():
            nonlocal attempts
            attempts += 1
            await asyncio.sleep(1)
            return "late"

        async def no_wait(seconds):
            pass

        policy = ResilientCallPolicy(max_retries=1, timeout_ms=20, sleep=no_wait)
        loop = asyncio.get_running_loop()
        started = loop.time()

        result = await policy.execute(slow, lambda: "fallback")

        assert result == "fallback"
        assert attempts == 2
        assert loop.time() - started < 0.5

    async def test_fast_primary_within_timeout(self):
        async def quick():
            await asyncio.sleep(0.01)
            return 42

        policy = ResilientCallPolicy(max_retries=0, timeout_ms=500)

        assert await policy.execute(quick, lambda: 0) == 42

    async def test_with_timeout_raises_typed_error(self):
        with pytest.raises(OperationTimeoutError) as exc_info:
            await with_timeout(asyncio.sleep(1), 10, "probe timed out")

        assert exc_info.value.code == "TIMEOUT"
        assert str(exc_info.value) == "probe timed out"

    async def test_with_timeout_passes_result_through(self):
        async def value():
            return "ok"

        assert await with_timeout(value(), 100) == "ok"


class TestReporting:
    """Errors reported when attempts run out"""

    async def test_timeout_reported_as_slow_connection(self):
        notifier = NotificationCenter()
        policy = ResilientCallPolicy(
            reporter=ErrorReporter(notifier), max_retries=0, timeout_ms=10
        )

        async def hang():
            await asyncio.sleep(1)

        await policy.execute(hang, lambda: None, context="loading units")

        [entry] = notifier.drain()
        assert entry.level == "warning"
        assert entry.message == "Slow connection detected - using local data"

    async def test_unexpected_error_reported_with_context(self):
        notifier = NotificationCenter()
        policy = ResilientCallPolicy(
            reporter=ErrorReporter(notifier), max_retries=0, timeout_ms=100
        )

        async def broken():
            raise KeyError("unit_number")

        result = await policy.execute(broken, lambda: [], context="loading units")

        assert result == []
        [entry] = notifier.drain()
        assert entry.level == "error"
        assert entry.message == "Error in loading units"

    async def test_retries_are_not_reported(self):
        """Only the final failure reaches the notification sink"""
        notifier = NotificationCenter()
        rec = Recorder(fail_times=1)
        policy = ResilientCallPolicy(
            reporter=ErrorReporter(notifier), max_retries=2, timeout_ms=100, sleep=rec.sleep
        )

        await policy.execute(rec.primary, rec.fallback)

        assert len(notifier) == 0


class TestArguments:
    """Invalid policy bounds are programming errors"""

    def test_negative_retries_rejected(self):
        with pytest.raises(ValueError):
            ResilientCallPolicy(max_retries=-1)

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValueError):
            ResilientCallPolicy(timeout_ms=0)

    def test_negative_backoff_rejected(self):
        with pytest.raises(ValueError):
            ResilientCallPolicy(backoff_ms=-5)

    async def test_invalid_override_rejected_before_any_attempt(self):
        rec = Recorder()
        policy = ResilientCallPolicy()

        with pytest.raises(ValueError):
            await policy.execute(rec.primary, rec.fallback, max_retries=-1)
        assert rec.attempts == 0
