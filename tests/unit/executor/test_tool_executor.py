"""Unit tests for ToolExecutor."""

import pytest

from toolmind_core.config import ExecutorConfig
from toolmind_core.errors import create_error
from toolmind_core.executor import AvailabilityCache, ToolExecutor, ToolOperationResult
from toolmind_core.policy import PolicyAdvisor
from toolmind_core.types import ConnectionStatus


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def failing(arguments):
    raise RuntimeError("upstream exploded")


class TestReadiness:
    """Availability cache behaviour."""

    @pytest.mark.asyncio
    async def test_ready_tool(self, executor):
        """Test a connected tool is ready under either name."""
        assert executor.is_ready("get-forecast")
        assert executor.is_ready("weather_get-forecast")

    @pytest.mark.asyncio
    async def test_unknown_tool_not_ready(self, executor):
        """Test an unresolvable name is never ready or cached."""
        assert not executor.is_ready("teleport")
        assert executor.get_stats()["cached_tools"] == 0

    @pytest.mark.asyncio
    async def test_cached_answer_until_ttl(self, catalog):
        """Test the cached answer is used until it expires."""
        clock = FakeClock()
        executor = ToolExecutor(catalog, ExecutorConfig(cache_ttl_seconds=10), clock=clock)
        assert executor.is_ready("weather_get-forecast")

        catalog._status["weather"] = ConnectionStatus.ERROR

        clock.now += 9.9
        assert executor.is_ready("weather_get-forecast")

        clock.now += 0.1
        assert not executor.is_ready("weather_get-forecast")

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(self, executor):
        """Test invalidate forgets one entry and clear forgets all."""
        executor.is_ready("get-forecast")
        executor.is_ready("read_file")
        assert executor.get_stats()["cached_tools"] == 2
        executor.invalidate("get-forecast")
        assert executor.get_stats()["cached_tools"] == 1
        executor.clear()
        assert executor.get_stats()["cached_tools"] == 0


class TestExecute:
    """Execution with retries."""

    @pytest.mark.asyncio
    async def test_success(self, executor):
        """Test a successful call returns the tool text after one attempt."""
        result = await executor.execute("get-forecast", {"latitude": 40.7, "longitude": -74.0})
        assert result.success
        assert result.tool_name == "weather_get-forecast"
        assert result.result == "Forecast for 40.7,-74.0: sunny, 25C"
        assert result.attempts == 1
        assert result.error is None
        assert result.suggestions == []

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, executor, server_pool, sleeps):
        """Test a transient failure is retried with linear backoff."""
        outcomes = iter([RuntimeError("flaky"), "recovered"])

        def flaky(arguments):
            outcome = next(outcomes)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        server_pool.servers["time"].add_tool("get_current_time", flaky)
        result = await executor.execute("get_current_time", {"timezone": "UTC"})

        assert result.success
        assert result.result == "recovered"
        assert result.attempts == 2
        assert sleeps == [1.0]

    @pytest.mark.asyncio
    async def test_exhausted_retries(self, executor, server_pool, sleeps):
        """Test an always-failing tool makes exactly max_retries attempts."""
        server_pool.servers["filesystem"].add_tool("read_file", failing)

        result = await executor.execute("read_file", {"path": "/tmp/x"})

        assert not result.success
        assert result.attempts == 3
        assert len(server_pool.servers["filesystem"].calls) == 3
        assert sleeps == [1.0, 2.0]
        assert result.error.code == "TOOL_EXECUTION_FAILED"
        assert result.error.cause is not None
        assert "3 attempts" in result.error_message
        assert result.suggestions == [
            "filesystem_list_directory",
            "filesystem_create_directory",
        ]

    @pytest.mark.asyncio
    async def test_failure_invalidates_cache(self, executor, server_pool):
        """Test exhausting retries drops the cached readiness."""
        server_pool.servers["filesystem"].add_tool("read_file", failing)
        await executor.execute("read_file", {"path": "/tmp/x"})
        assert executor.get_stats()["cached_tools"] == 0

    @pytest.mark.asyncio
    async def test_unavailable_tool_not_attempted(self, executor):
        """Test a missing tool fails fast with suggestions."""
        result = await executor.execute("filesystem_write_file", {"path": "a", "content": "b"})
        assert not result.success
        assert result.attempts == 0
        assert result.error.code == "TOOL_NOT_AVAILABLE"
        assert 0 < len(result.suggestions) <= 3
        assert all("filesystem" in name or "write" in name for name in result.suggestions)

    @pytest.mark.asyncio
    async def test_server_dropped_after_ready_check_not_retried(self, executor, catalog, sleeps):
        """Test a server lost between readiness and call fails fast as not available."""
        assert executor.is_ready("weather_get-forecast")
        catalog._status["weather"] = ConnectionStatus.CONNECTING

        result = await executor.execute("weather_get-forecast", {"latitude": 1, "longitude": 2})

        assert not result.success
        assert result.error.code == "TOOL_NOT_AVAILABLE"
        assert result.attempts == 1
        assert sleeps == []
        assert result.suggestions
        assert executor.get_stats()["cached_tools"] == 0
        assert not executor.is_ready("weather_get-forecast")

    @pytest.mark.asyncio
    async def test_validation_error_classified(self, catalog, server_pool, fake_sleep):
        """Test an error naming a schema field becomes SCHEMA_VALIDATION_FAILED."""
        server_pool.servers["weather"].error_results["get-forecast"] = "latitude must be a number"
        executor = ToolExecutor(
            catalog,
            ExecutorConfig(max_retries=2),
            advisor=PolicyAdvisor(catalog),
            sleep=fake_sleep,
        )
        result = await executor.execute("get-forecast", {"latitude": "x", "longitude": 1})
        assert result.error.code == "SCHEMA_VALIDATION_FAILED"
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_adaptive_retries_follow_priority(self, catalog, server_pool, fake_sleep):
        """Test adaptive retries use the server priority budget (HIGH = 5)."""
        server_pool.servers["weather"].add_tool("get-alerts", failing)
        executor = ToolExecutor(
            catalog,
            ExecutorConfig(adaptive_retries=True),
            advisor=PolicyAdvisor(catalog),
            sleep=fake_sleep,
        )
        result = await executor.execute("get-alerts", {"state": "NY"})
        assert result.attempts == 5


class TestSuggestions:
    """Fallback suggestions."""

    @pytest.mark.asyncio
    async def test_keyword_is_first_token(self, executor):
        """Test the first token before '-' or '_' drives the search."""
        assert executor.suggest_alternatives("weather_get-forecast") == ["weather_get-alerts"]

    @pytest.mark.asyncio
    async def test_capped_at_max_suggestions(self, catalog):
        """Test no more than max_suggestions are returned."""
        executor = ToolExecutor(catalog, ExecutorConfig(max_suggestions=1))
        assert executor.suggest_alternatives("filesystem_write_file") == ["filesystem_read_file"]

    @pytest.mark.asyncio
    async def test_nothing_matches(self, executor):
        """Test unrelated names yield an empty list, never None."""
        assert executor.suggest_alternatives("zzz") == []


class TestSummaries:
    """Prompt-facing catalog descriptions."""

    @pytest.mark.asyncio
    async def test_ready_tools_skip_disconnected(self, executor, catalog):
        """Test tools of a disconnected server are not listed."""
        await catalog.disconnect("time")
        names = [spec.qualified_name for spec in executor.ready_tools()]
        assert "time_get_current_time" not in names
        assert "weather_get-forecast" in names

    @pytest.mark.asyncio
    async def test_formatted_summary(self, executor):
        """Test the summary lists signatures with required markers."""
        summary = executor.formatted_catalog_summary()
        assert summary.startswith("AVAILABLE TOOLS:\n")
        assert "Name: weather_get-forecast" in summary
        assert "  - latitude (number): Latitude of the location (Required)" in summary

    def test_describe_failure(self):
        """Test a failed result renders its error and alternatives."""
        result = ToolOperationResult(
            success=False,
            tool_name="x_y",
            error=create_error("TOOL_NOT_AVAILABLE", tool_name="x_y"),
            suggestions=["x_z"],
        )
        assert result.describe() == (
            "Error: Tool not available: x_y (suggested alternatives: x_z)"
        )


class TestAvailabilityCache:
    """The cache on its own."""

    def test_expiry_boundary(self):
        """Test an entry expires exactly at the TTL."""
        clock = FakeClock(0.0)
        cache = AvailabilityCache(ttl_seconds=5, clock=clock)
        cache.put("a_b", True)
        clock.now = 4.999
        assert cache.get("a_b").available is True
        clock.now = 5.0
        assert cache.get("a_b") is None
        assert len(cache) == 0

    def test_live_count(self):
        """Test live_count ignores expired entries still stored."""
        clock = FakeClock(0.0)
        cache = AvailabilityCache(ttl_seconds=5, clock=clock)
        cache.put("old", True)
        clock.now = 3.0
        cache.put("new", False)
        clock.now = 6.0
        assert len(cache) == 2
        assert cache.live_count() == 1
        assert cache.invalidate("new") is True
        assert cache.invalidate("new") is False
