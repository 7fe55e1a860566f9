"""Unit tests for EngineLogger and its scoped loggers."""

import io
import json

import pytest

from toolmind_core.logging import (
    CONVERSATION_TRUNCATION,
    RESET,
    EngineLogger,
    LogConfig,
    truncate,
)
from toolmind_core.types import LogFormat, LogLevel


def json_logger(**kwargs) -> tuple[EngineLogger, io.StringIO]:
    output = io.StringIO()
    return EngineLogger(LogConfig(format=LogFormat.JSON, output=output, **kwargs)), output


def entries(output: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in output.getvalue().splitlines()]


class TestEngineLogger:
    """Tests for level filtering, components and formats."""

    def test_level_filtering(self):
        logger, output = json_logger(level=LogLevel.WARN)
        logger._log(LogLevel.INFO, "engine", "quiet")
        logger._log(LogLevel.ERROR, "engine", "loud")
        assert [e["message"] for e in entries(output)] == ["loud"]

    def test_json_entry(self):
        logger, output = json_logger()
        logger._log(LogLevel.INFO, "catalog", "connected", {"server_name": "weather"})
        (entry,) = entries(output)
        assert entry["level"] == "INFO"
        assert entry["component"] == "catalog"
        assert entry["server_name"] == "weather"
        assert entry["timestamp"].endswith("Z")

    def test_disabled_component(self):
        """Test dotted components follow their first segment."""
        logger, output = json_logger(components={"inference": False, "engine": True})
        logger._log(LogLevel.INFO, "inference.reflection", "hidden")
        logger._log(LogLevel.INFO, "engine", "shown")
        assert [e["message"] for e in entries(output)] == ["shown"]

    def test_colored_output(self):
        output = io.StringIO()
        logger = EngineLogger(LogConfig(output=output))
        logger._log(LogLevel.WARN, "executor", "slow tool", {"tool_name": "t"})
        line = output.getvalue()
        assert "[EXECUTOR]" in line
        assert "slow tool" in line
        assert "'tool_name': 't'" in line
        assert RESET in line

    def test_colored_output_hides_params(self):
        output = io.StringIO()
        logger = EngineLogger(LogConfig(output=output, show_params=False))
        logger._log(LogLevel.INFO, "executor", "call", {"secret": "x"})
        assert "secret" not in output.getvalue()


class TestScopedLoggers:
    """Tests for tool and conversation loggers."""

    def test_tool_attempts(self):
        logger, output = json_logger()
        tool_log = logger.tool("weather_get-forecast")
        tool_log.calling(1, 3, {"latitude": 1})
        tool_log.retrying(1, 3, 1.0, "timeout")
        tool_log.error("timeout", 3)
        events = [e["event"] for e in entries(output)]
        assert events == ["tool_calling", "tool_retrying", "tool_error"]
        assert entries(output)[0]["params"] == {"latitude": 1}

    def test_tool_result_truncated(self):
        logger, output = json_logger(truncate_at=5)
        logger.tool("t").result("abcdefghij", 1500)
        (entry,) = entries(output)
        assert entry["result"] == "abcde..."
        assert "(1.50s)" in entry["message"]

    @pytest.mark.parametrize("kind", sorted(CONVERSATION_TRUNCATION))
    def test_conversation_truncation(self, kind):
        logger, _ = json_logger(level=LogLevel.DEBUG)
        limit = CONVERSATION_TRUNCATION[kind]
        logged = logger.conversation("simple").entry(kind, "x" * (limit + 10))
        assert logged == "x" * limit + "..."

    def test_conversation_error_is_warning(self):
        logger, output = json_logger()
        logger.conversation("react").entry("ERROR", "boom")
        logger.conversation("react").entry("USER", "hidden at INFO")
        (entry,) = entries(output)
        assert entry["level"] == "WARN"
        assert entry["strategy"] == "react"


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("0123456789abc", 10) == "0123456789..."
