"""Parsing of tool invocations written into model text.

Supported forms:
    TOOL:tool_name:{"param": "value"}
    FUNCTION_CALL:tool_name:{"param": "value"}
    [{"name": "tool_name", "parameters": {"param": "value"}}]
"""

import json
from typing import Any

from toolmind_core.llm import ToolCall

TOOL_PREFIX = "TOOL:"
FUNCTION_CALL_PREFIX = "FUNCTION_CALL:"

_decoder = json.JSONDecoder()


def _decode_arguments(text: str) -> dict[str, Any]:
    """Decode the JSON object at the start of text, empty when absent.

    Raises:
        ValueError: If an argument object is present but not valid JSON
    """
    rest = text.lstrip()
    if not rest.startswith("{"):
        return {}
    arguments, _ = _decoder.raw_decode(rest)
    if not isinstance(arguments, dict):
        raise ValueError("tool arguments must be a JSON object")
    return arguments


def parse_prefixed_call(text: str, prefix: str = TOOL_PREFIX) -> ToolCall | None:
    """Parse a ``PREFIXname:{json}`` invocation at the start of text.

    Args:
        text: Model output
        prefix: Invocation marker, TOOL: or FUNCTION_CALL:

    Returns:
        ToolCall, or None if text does not start with the prefix

    Raises:
        ValueError: If the arguments are not a valid JSON object
    """
    stripped = text.strip()
    if not stripped.startswith(prefix):
        return None
    body = stripped[len(prefix) :]
    name, sep, tail = body.partition(":")
    name = name.strip()
    if not name:
        raise ValueError("missing tool name")
    arguments = _decode_arguments(tail) if sep else {}
    return ToolCall(tool_name=name, arguments=arguments)


def find_prefixed_calls(text: str, prefix: str = FUNCTION_CALL_PREFIX) -> list[ToolCall]:
    """Collect every well-formed ``PREFIXname:{json}`` invocation in text.

    Malformed invocations are skipped.
    """
    calls: list[ToolCall] = []
    position = text.find(prefix)
    while position >= 0:
        try:
            call = parse_prefixed_call(text[position:], prefix)
        except ValueError:
            call = None
        if call is not None:
            calls.append(call)
        position = text.find(prefix, position + len(prefix))
    return calls


def parse_json_array_call(text: str) -> ToolCall | None:
    """Parse the first entry of a ``[{"name", "parameters"}]`` array."""
    stripped = text.strip()
    if not stripped.startswith("["):
        return None
    try:
        entries = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    if not isinstance(entries, list) or not entries:
        return None
    first = entries[0]
    if not isinstance(first, dict) or "name" not in first or "parameters" not in first:
        return None
    parameters = first["parameters"] if isinstance(first["parameters"], dict) else {}
    return ToolCall(tool_name=str(first["name"]), arguments=parameters)


def parse_action(text: str | None) -> ToolCall | None:
    """Parse an action decision: FUNCTION_CALL form first, then a JSON array."""
    if not text or not text.strip():
        return None
    calls = find_prefixed_calls(text, FUNCTION_CALL_PREFIX)
    if calls:
        return calls[0]
    return parse_json_array_call(text)


def format_arguments(arguments: dict[str, Any]) -> str:
    if not arguments:
        return "{}"
    return json.dumps(arguments, default=str)
