"""Unit tests for tool invocation parsing."""

import pytest

from toolmind_core.inference import (
    FUNCTION_CALL_PREFIX,
    find_prefixed_calls,
    format_arguments,
    parse_action,
    parse_json_array_call,
    parse_prefixed_call,
)


class TestPrefixedCalls:
    """TOOL: and FUNCTION_CALL: forms."""

    def test_tool_form(self):
        """Test name and JSON arguments are split at the first colon."""
        call = parse_prefixed_call('TOOL:weather_get-forecast:{"latitude": 40.7, "longitude": -74}')
        assert call.tool_name == "weather_get-forecast"
        assert call.arguments == {"latitude": 40.7, "longitude": -74}

    def test_trailing_text_ignored(self):
        """Test text after the JSON object is ignored."""
        call = parse_prefixed_call('TOOL:t:{"a": "x:y"} and then some')
        assert call.arguments == {"a": "x:y"}

    def test_no_arguments(self):
        """Test a bare name yields empty arguments."""
        assert parse_prefixed_call("TOOL:ping").arguments == {}

    def test_not_an_invocation(self):
        """Test plain text is not a call."""
        assert parse_prefixed_call("The weather is nice") is None

    def test_invalid_json(self):
        """Test broken arguments raise ValueError."""
        with pytest.raises(ValueError):
            parse_prefixed_call("TOOL:t:{not json}")

    def test_missing_name(self):
        """Test an empty tool name raises ValueError."""
        with pytest.raises(ValueError, match="missing tool name"):
            parse_prefixed_call('TOOL::{"a": 1}')

    def test_find_all_skips_malformed(self):
        """Test every well-formed call is collected in order."""
        text = (
            'First FUNCTION_CALL:a_one:{"x": 1}\n'
            "then FUNCTION_CALL:b_two:{broken\n"
            'and FUNCTION_CALL:c_three:{"y": 2}'
        )
        calls = find_prefixed_calls(text, FUNCTION_CALL_PREFIX)
        assert [c.tool_name for c in calls] == ["a_one", "c_three"]


class TestActionParsing:
    """Action decisions."""

    def test_json_array(self):
        """Test the array form uses its first entry."""
        call = parse_json_array_call(
            '[{"name": "time_get_current_time", "parameters": {"timezone": "UTC"}}, '
            '{"name": "other", "parameters": {}}]'
        )
        assert call.tool_name == "time_get_current_time"
        assert call.arguments == {"timezone": "UTC"}

    @pytest.mark.parametrize(
        "text",
        ["[]", "[1, 2]", '[{"name": "x"}]', "[broken", "not an array"],
    )
    def test_json_array_rejects(self, text):
        """Test malformed arrays yield no call."""
        assert parse_json_array_call(text) is None

    def test_function_call_inside_text(self):
        """Test a FUNCTION_CALL anywhere in the decision is found."""
        call = parse_action('I will call FUNCTION_CALL:weather_get-alerts:{"state": "NY"}')
        assert call.tool_name == "weather_get-alerts"

    def test_array_fallback(self):
        """Test the array form is tried when no FUNCTION_CALL is present."""
        call = parse_action('[{"name": "a_b", "parameters": {"k": "v"}}]')
        assert call.tool_name == "a_b"

    @pytest.mark.parametrize("text", [None, "", "   ", "no action here"])
    def test_nothing_to_parse(self, text):
        """Test empty or plain text yields no action."""
        assert parse_action(text) is None

    def test_format_arguments(self):
        """Test arguments render as JSON, empty as {}."""
        assert format_arguments({}) == "{}"
        assert format_arguments({"a": 1}) == '{"a": 1}'
