"""Unit tests for the structured error layer."""

import pytest

from toolmind_core.errors import (
    EngineError,
    ErrorCategory,
    ErrorRegistry,
    ReflectionError,
    create_error,
    get_error_factory,
    simplify_message,
    user_friendly_message,
)
from toolmind_core.errors.reflection import (
    evaluation_failed,
    improvement_failed,
    initial_failed,
    parsing_failed,
    timed_out,
)
from toolmind_core.types import ReflectionPhase


class TestErrorRegistry:
    """Templates and error creation."""

    def test_builtin_codes_registered(self):
        """Test every engine error code has a template."""
        codes = set(ErrorRegistry().list_codes())
        assert {
            "TOOL_NOT_AVAILABLE",
            "TOOL_EXECUTION_FAILED",
            "TOOL_TIMEOUT",
            "TOOL_FAILED",
            "SERVER_CONNECTION_FAILED",
            "SCHEMA_VALIDATION_FAILED",
            "LLM_GENERATION_FAILED",
            "REFLECTION_FAILED",
            "QUERY_FAILED",
            "CONFIG_INVALID",
            "INTERNAL_ERROR",
        } <= codes

    def test_unknown_code_raises(self):
        """Test creating an unknown code is a programming error."""
        with pytest.raises(ValueError, match="Unknown error code"):
            ErrorRegistry().create("NOPE")

    def test_message_interpolation(self):
        """Test context variables fill the message template."""
        error = create_error(
            "TOOL_EXECUTION_FAILED",
            tool_name="weather_get-forecast",
            attempts=3,
            reason="boom",
        )
        assert error.code == "TOOL_EXECUTION_FAILED"
        assert error.category == ErrorCategory.TOOL
        assert error.message == "Tool execution failed after 3 attempts: boom"
        assert error.tool_name == "weather_get-forecast"
        assert error.retryable is True

    def test_missing_context_keeps_template(self):
        """Test a missing variable leaves the template text intact."""
        error = create_error("TOOL_NOT_AVAILABLE")
        assert error.message == "Tool not available: {tool_name}"

    def test_detail_override(self):
        """Test a detail entry in the context replaces the template detail."""
        error = create_error("CONFIG_INVALID", detail="servers[0]: missing name")
        assert error.detail == "servers[0]: missing name"


class TestEngineError:
    """EngineError behaviour."""

    def test_is_exception_with_message(self):
        """Test the error is raisable and prints its message."""
        error = create_error("QUERY_FAILED", reason="model unreachable")
        with pytest.raises(EngineError) as exc_info:
            raise error
        assert str(exc_info.value) == "model unreachable"

    def test_to_dict_includes_cause(self):
        """Test serialization nests the cause."""
        cause = create_error("TOOL_FAILED", tool_name="t", reason="bad")
        error = create_error("QUERY_FAILED", reason="outer")
        error.cause = cause
        data = error.to_dict()
        assert data["code"] == "QUERY_FAILED"
        assert data["category"] == "INFERENCE"
        assert data["cause"]["code"] == "TOOL_FAILED"

    def test_with_context_keeps_existing_values(self):
        """Test with_context only fills in what is given."""
        error = create_error("TOOL_FAILED", tool_name="a_b", reason="x")
        updated = error.with_context(server_name="a")
        assert updated.tool_name == "a_b"
        assert updated.server_name == "a"
        assert error.server_name is None


class TestErrorFactory:
    """Conversion of raw exceptions."""

    def test_timeout_maps_to_tool_timeout(self):
        """Test timeouts become retryable TOOL_TIMEOUT errors."""
        error = get_error_factory().from_exception(TimeoutError(), tool_name="t_x")
        assert error.code == "TOOL_TIMEOUT"
        assert error.retryable is True
        assert error.tool_name == "t_x"

    def test_connection_error_maps_to_server_failure(self):
        """Test transport failures become SERVER_CONNECTION_FAILED."""
        error = get_error_factory().from_exception(ConnectionResetError("reset"))
        assert error.code == "SERVER_CONNECTION_FAILED"

    def test_generic_error_maps_to_internal(self):
        """Test anything else becomes INTERNAL_ERROR with the detail kept."""
        error = get_error_factory().from_exception(RuntimeError("kaput"))
        assert error.code == "INTERNAL_ERROR"
        assert error.detail == "kaput"

    def test_engine_error_passes_through(self):
        """Test an EngineError is only enriched with context."""
        original = create_error("TOOL_FAILED", reason="x")
        error = get_error_factory().from_exception(original, tool_name="s_t")
        assert error.code == "TOOL_FAILED"
        assert error.tool_name == "s_t"


class TestReflectionErrors:
    """Phase-tagged reflection failures."""

    @pytest.mark.parametrize(
        ("error", "phase", "iteration"),
        [
            (initial_failed("q", "empty"), ReflectionPhase.INITIAL, 0),
            (evaluation_failed("q", 2, "empty"), ReflectionPhase.EVALUATION, 2),
            (improvement_failed("q", 3, "empty"), ReflectionPhase.IMPROVEMENT, 3),
            (timed_out("q", 1, 5.0), ReflectionPhase.TIMEOUT, 1),
        ],
    )
    def test_helpers_tag_phase_and_query(self, error, phase, iteration):
        """Test each helper records phase, iteration and query."""
        assert isinstance(error, ReflectionError)
        assert error.code == "REFLECTION_FAILED"
        assert error.phase == phase
        assert error.iteration == iteration
        assert error.query == "q"

    def test_parsing_failed_previews_content(self):
        """Test long content is cut to 100 characters in the message."""
        error = parsing_failed("x" * 500, "Invalid evaluation JSON")
        assert error.phase == ReflectionPhase.PARSING
        assert error.iteration == -1
        assert "x" * 100 in error.message
        assert "x" * 101 not in error.message

    def test_to_dict_has_phase(self):
        """Test serialization includes phase and iteration."""
        data = evaluation_failed("q", 2, "empty").to_dict()
        assert data["phase"] == "evaluation"
        assert data["iteration"] == 2
        assert data["query"] == "q"


class TestUserFriendlyMessage:
    """User-facing rendering."""

    def test_tool_error(self):
        """Test tool errors name the tool."""
        error = create_error("TOOL_FAILED", tool_name="weather_get-forecast", reason="HTTP 500")
        message = user_friendly_message(error)
        assert message.startswith("Issue with tool 'weather_get-forecast'")
        assert "connection 500" in message

    def test_reflection_error(self):
        """Test reflection errors name the phase."""
        message = user_friendly_message(evaluation_failed("q", 1, "empty"))
        assert "evaluation phase" in message

    def test_timeout(self):
        """Test plain timeouts get a retry hint."""
        assert "try again" in user_friendly_message(TimeoutError()).lower()

    def test_unexpected(self):
        """Test unknown exceptions are simplified."""
        message = user_friendly_message(ValueError("Bad JSON\ntrace"))
        assert message.startswith("Unexpected error: bad data")

    def test_simplify_empty(self):
        """Test an empty message renders as unknown error."""
        assert simplify_message(None) == "unknown error"
