"""Prompt formatters for tool catalogs."""

from toolmind_core.mcp.types import ToolSpec

NO_TOOLS_TEXT = "(No tools available)"


def format_tool_signature(tool: ToolSpec) -> str:
    """Format one tool as a Name/Description/Parameters block.

    Args:
        tool: Tool to format

    Returns:
        Multi-line signature; required parameters are marked (Required)
    """
    lines = [
        f"Name: {tool.qualified_name}",
        f"Description: {tool.description}",
        "Parameters:",
    ]
    params = tool.parameters
    if not params:
        lines.append("  (No parameters needed)")
    for param in params:
        line = f"  - {param.name} ({param.type}): {param.description}"
        if param.required:
            line += " (Required)"
        lines.append(line)
    return "\n".join(lines)


def format_catalog_summary(tools: list[ToolSpec]) -> str:
    """Format the ready tools for a reasoning prompt.

    Args:
        tools: Tools to include

    Returns:
        "AVAILABLE TOOLS:" block, or NO_TOOLS_TEXT when empty
    """
    if not tools:
        return NO_TOOLS_TEXT
    blocks = [format_tool_signature(tool) for tool in tools]
    return "AVAILABLE TOOLS:\n" + "\n\n".join(blocks)


def format_tool_line(tool: ToolSpec) -> str:
    """Format one tool on a single line.

    Example:
        - weather_get-forecast: Get forecast [Parameters: latitude(number)*required*: Latitude]
    """
    line = f"- {tool.qualified_name}: {tool.description}"
    params = tool.parameters
    if params:
        rendered = []
        for param in params:
            text = f"{param.name}({param.type})"
            if param.required:
                text += "*required*"
            if param.description:
                text += f": {param.description}"
            rendered.append(text)
        line += f" [Parameters: {', '.join(rendered)}]"
    return line
