"""
Pytest configuration and shared fixtures for toolmind tests.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add src and the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from tests.mocks import FakeServerPool, ScriptedLanguageModel  # noqa: E402
from toolmind_core.config import ExecutorConfig, ServerDescriptor  # noqa: E402
from toolmind_core.executor import ToolExecutor  # noqa: E402
from toolmind_core.mcp import ToolCatalog  # noqa: E402
from toolmind_core.policy import PolicyAdvisor  # noqa: E402
from toolmind_core.types import ServerPriority  # noqa: E402

# =============================================================================
# Tool Server Fixtures
# =============================================================================

COORDINATE_PROPERTIES = {
    "latitude": {"type": "number", "description": "Latitude of the location"},
    "longitude": {"type": "number", "description": "Longitude of the location"},
}
PATH_PROPERTIES = {"path": {"type": "string", "description": "File path"}}


def forecast(arguments: dict) -> str:
    return f"Forecast for {arguments['latitude']},{arguments['longitude']}: sunny, 25C"


@pytest.fixture
def server_pool() -> FakeServerPool:
    """Weather (HIGH), filesystem (MEDIUM) and time (LOW) fake servers."""
    pool = FakeServerPool()

    weather = pool.add(
        ServerDescriptor(
            name="weather",
            priority=ServerPriority.HIGH,
            description="Weather forecasts and alerts",
        )
    )
    weather.add_tool(
        "get-forecast",
        forecast,
        description="Get weather forecast for a location",
        properties=COORDINATE_PROPERTIES,
        required=["latitude", "longitude"],
    )
    weather.add_tool(
        "get-alerts",
        "No active alerts",
        description="Get weather alerts for a state",
        properties={"state": {"type": "string", "description": "Two-letter state code"}},
        required=["state"],
    )

    filesystem = pool.add(
        ServerDescriptor(
            name="filesystem",
            priority=ServerPriority.MEDIUM,
            description="Local files",
        )
    )
    filesystem.add_tool(
        "read_file",
        "file contents",
        description="Read the contents of a file",
        properties=PATH_PROPERTIES,
        required=["path"],
    )
    filesystem.add_tool(
        "list_directory",
        "a.txt\nb.txt",
        description="List the entries of a directory",
        properties=PATH_PROPERTIES,
        required=["path"],
    )
    filesystem.add_tool(
        "create_directory",
        "created",
        description="Create a new directory",
        properties=PATH_PROPERTIES,
        required=["path"],
    )

    time_server = pool.add(
        ServerDescriptor(
            name="time",
            priority=ServerPriority.LOW,
            description="Current time in Brazil",
        )
    )
    time_server.add_tool(
        "get_current_time",
        "2025-06-01T12:00:00-03:00",
        description="Get the current time in a timezone",
        properties={"timezone": {"type": "string", "description": "IANA timezone"}},
        required=["timezone"],
    )
    return pool


@pytest_asyncio.fixture
async def catalog(server_pool: FakeServerPool) -> ToolCatalog:
    """Catalog connected to every server of the pool."""
    catalog = ToolCatalog(server_pool.descriptors, connection_factory=server_pool.factory)
    await catalog.connect_all()
    return catalog


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the executor, recorded instead of slept."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest.fixture
def advisor(catalog: ToolCatalog) -> PolicyAdvisor:
    return PolicyAdvisor(catalog)


@pytest.fixture
def executor(catalog: ToolCatalog, fake_sleep) -> ToolExecutor:
    """Executor with three attempts and no real sleeping."""
    return ToolExecutor(catalog, ExecutorConfig(max_retries=3), sleep=fake_sleep)


@pytest.fixture
def llm() -> ScriptedLanguageModel:
    return ScriptedLanguageModel()


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "scenario: End-to-end query scenarios")
