"""Property-based tests for the availability cache and retry budget."""

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tests.mocks import FakeServerPool
from toolmind_core.config import ExecutorConfig, ServerDescriptor
from toolmind_core.executor import AvailabilityCache, ToolExecutor
from toolmind_core.mcp import ToolCatalog


class ManualClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def flaky_catalog(failures: int) -> tuple[ToolCatalog, FakeServerPool]:
    """Catalog with one tool that fails ``failures`` times, then succeeds."""
    pool = FakeServerPool()
    server = pool.add(ServerDescriptor(name="svc"))
    remaining = {"count": failures}

    def handler(arguments: dict) -> str:
        if remaining["count"] > 0:
            remaining["count"] -= 1
            raise ConnectionError("connection reset")
        return "done"

    server.add_tool("work", handler)
    catalog = ToolCatalog(pool.descriptors, connection_factory=pool.factory)
    asyncio.run(catalog.connect_all())
    return catalog, pool


@pytest.mark.property
class TestAvailabilityCacheProperties:
    """An entry is live strictly before its TTL elapses."""

    @given(
        st.floats(min_value=0.001, max_value=10_000, allow_nan=False),
        st.floats(min_value=0, max_value=20_000, allow_nan=False),
        st.booleans(),
    )
    @settings(max_examples=100)
    def test_expiry_boundary(self, ttl, elapsed, available):
        clock = ManualClock(1000.0)
        cache = AvailabilityCache(ttl, clock)
        cache.put("svc_work", available)
        clock.now += elapsed

        entry = cache.get("svc_work")
        if clock.now - 1000.0 >= ttl:
            assert entry is None
            assert len(cache) == 0
        else:
            assert entry is not None
            assert entry.available is available


@pytest.mark.property
class TestRetryProperties:
    """Attempts never exceed the retry budget."""

    @given(
        st.integers(min_value=1, max_value=6),
        st.integers(min_value=0, max_value=8),
        st.floats(min_value=0.1, max_value=5, allow_nan=False),
    )
    @settings(max_examples=50, deadline=None)
    def test_attempts_bounded(self, max_retries, failures, backoff):
        catalog, pool = flaky_catalog(failures)
        sleeps: list[float] = []

        async def record(delay: float) -> None:
            sleeps.append(delay)

        executor = ToolExecutor(
            catalog,
            ExecutorConfig(max_retries=max_retries, backoff_seconds=backoff),
            sleep=record,
        )
        result = asyncio.run(executor.execute("work"))

        calls = len(pool.servers["svc"].calls)
        assert calls == result.attempts
        assert result.attempts <= max_retries
        assert result.success is (failures < max_retries)
        assert len(sleeps) == result.attempts - 1
        assert sleeps == [attempt * backoff for attempt in range(1, result.attempts)]
