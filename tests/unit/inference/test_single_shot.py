"""Unit tests for SingleShotStrategy."""

import io

import pytest

from tests.mocks import ScriptedLanguageModel
from toolmind_core.inference import SingleShotStrategy
from toolmind_core.llm import LlmResponse
from toolmind_core.logging import EngineLogger, LogConfig
from toolmind_core.types import LogFormat, LogLevel


@pytest.fixture
def strategy(llm, catalog, executor):
    return SingleShotStrategy(llm, catalog, executor)


class TestDirectAnswers:
    """Queries that need no tool."""

    @pytest.mark.asyncio
    async def test_direct_answer(self, strategy, llm):
        """Test a plain answer is returned after one model call."""
        llm.queue("Hello! How can I help?")
        assert await strategy.process_query("hi") == "Hello! How can I help?"
        assert len(llm.prompts) == 1

    @pytest.mark.asyncio
    async def test_analysis_prompt_embeds_catalog_summary(self, strategy, llm):
        """Test the analysis prompt embeds the query and every ready tool signature."""
        llm.queue("ok")
        await strategy.process_query("what is up")
        prompt = llm.prompts[0].prompt
        assert "USER QUERY: what is up" in prompt
        assert (
            "AVAILABLE TOOLS:\n"
            "Name: weather_get-forecast\n"
            "Description: Get weather forecast for a location\n"
            "Parameters:\n"
            "  - latitude (number): Latitude of the location (Required)\n"
            "  - longitude (number): Longitude of the location (Required)"
        ) in prompt
        assert "Name: time_get_current_time" in prompt
        assert 'TOOL:tool_name:{"parameter":"value"}' in prompt
        assert prompt.endswith("RESPONSE:")

    @pytest.mark.asyncio
    async def test_analysis_prompt_without_ready_tools(self, strategy, llm, catalog):
        """Test the placeholder replaces the summary when nothing is connected."""
        await catalog.close()
        llm.queue("ok")
        await strategy.process_query("hi")
        prompt = llm.prompts[0].prompt
        assert "(No tools available)" in prompt
        assert "Name: " not in prompt

    @pytest.mark.asyncio
    async def test_analysis_failure(self, strategy, llm):
        """Test a failed analysis call becomes an error string."""
        llm.queue(LlmResponse.error("rate limited"))
        assert await strategy.process_query("hi") == "LLM analysis failed: rate limited"


class TestToolUse:
    """Queries answered through one tool."""

    @pytest.mark.asyncio
    async def test_forecast_by_coordinates(self, strategy, llm, server_pool):
        """Test the forecast tool is called with both coordinates and synthesized."""
        llm.queue(
            'TOOL:weather_get-forecast:{"latitude": 40.7128, "longitude": -74.006}',
            "New York will be sunny and 25C.",
        )

        answer = await strategy.process_query("What's the weather in New York?")

        assert answer == "New York will be sunny and 25C."
        assert server_pool.servers["weather"].calls == [
            ("get-forecast", {"latitude": 40.7128, "longitude": -74.006})
        ]
        synthesis = llm.prompts[1].prompt
        assert "Tool: weather_get-forecast" in synthesis
        assert "Result: Forecast for 40.7128,-74.006: sunny, 25C" in synthesis
        assert "User Query: What's the weather in New York?" in synthesis

    @pytest.mark.asyncio
    async def test_unavailable_tool_lists_alternatives(self, strategy, llm):
        """Test a missing tool answers with the error and suggestions."""
        llm.queue('TOOL:filesystem_write_file:{"path": "a.txt", "content": "hi"}')
        answer = await strategy.process_query("save hi to a.txt")
        assert answer == (
            "Tool not available: filesystem_write_file. Try: filesystem_read_file, "
            "filesystem_list_directory, filesystem_create_directory"
        )
        assert len(llm.prompts) == 1

    @pytest.mark.asyncio
    async def test_malformed_invocation(self, strategy, llm):
        """Test invalid JSON arguments are reported, not raised."""
        llm.queue("TOOL:weather_get-forecast:{latitude: 1}")
        answer = await strategy.process_query("forecast please")
        assert answer.startswith("Tool execution failed: ")

    @pytest.mark.asyncio
    async def test_synthesis_failure(self, strategy, llm):
        """Test a failed final call is reported."""
        llm.queue(
            'TOOL:time_get_current_time:{"timezone": "UTC"}',
            LlmResponse.error("overloaded"),
        )
        answer = await strategy.process_query("what time is it")
        assert answer == "Failed to generate final response: overloaded"

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, catalog, executor):
        """Test an exception from the model becomes an error string."""

        class ExplodingModel(ScriptedLanguageModel):
            async def generate(self, prompt):
                raise RuntimeError("socket closed")

        strategy = SingleShotStrategy(ExplodingModel(), catalog, executor)
        answer = await strategy.process_query("hi")
        assert answer == "I encountered an error while processing your request: socket closed"


class TestConversationLog:
    """Logged conversation entries."""

    @pytest.mark.asyncio
    async def test_entries_logged(self, llm, catalog, executor):
        """Test user, tool and assistant entries reach the log."""
        output = io.StringIO()
        logger = EngineLogger(LogConfig(level=LogLevel.DEBUG, format=LogFormat.JSON, output=output))
        strategy = SingleShotStrategy(llm, catalog, executor, logger=logger)
        llm.queue('TOOL:time_get_current_time:{"timezone": "UTC"}', "It is noon.")

        await strategy.process_query("what time is it")

        err = output.getvalue()
        assert "what time is it" in err
        assert "time_get_current_time" in err
        assert "It is noon." in err

    def test_system_prompt(self, strategy):
        """Test the system prompt is the analysis prompt of a placeholder query."""
        assert "USER QUERY: [System Prompt]" in strategy.build_system_prompt()
        assert strategy.strategy.value == "simple"
