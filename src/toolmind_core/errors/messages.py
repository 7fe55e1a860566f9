"""User-facing rendering of engine errors."""

from .errors import EngineError, ErrorCategory, ReflectionError

_REPLACEMENTS = (
    ("HTTP", "connection"),
    ("JSON", "data"),
    ("timeout", "time limit exceeded"),
    ("connection refused", "service unavailable"),
)


def simplify_message(technical: str | None) -> str:
    """Reduce a technical message to its first line in plain words."""
    if not technical:
        return "unknown error"
    simplified = technical.split("\n")[0]
    for old, new in _REPLACEMENTS:
        simplified = simplified.replace(old, new)
    return simplified.lower()


def user_friendly_message(error: Exception) -> str:
    """Render an exception as a short message for the end user.

    Args:
        error: Any exception raised while answering a query

    Returns:
        Two-line message: what went wrong and what to try
    """
    if isinstance(error, ReflectionError):
        return (
            f"Reflection process issue in {error.phase.value} phase: "
            f"{simplify_message(error.message)}\n"
            "The system was trying to improve its response quality."
        )

    if isinstance(error, EngineError):
        summary = simplify_message(error.message)
        if error.category == ErrorCategory.TOOL:
            tool = error.tool_name or "unknown"
            return f"Issue with tool '{tool}': {summary}\nPlease check if the service is working."
        if error.category == ErrorCategory.SERVER:
            return f"Issue with tool server: {summary}\nPlease check if the service is working."
        if error.category == ErrorCategory.INFERENCE:
            return f"Issue with the language model: {summary}\nTry again in a few seconds."
        if error.category == ErrorCategory.VALIDATION:
            return f"Invalid input: {summary}\nPlease correct your message and try again."
        if error.code == "CONFIG_INVALID":
            return f"Configuration issue: {summary}\nPlease check your configuration file."

    if isinstance(error, TimeoutError):
        return "Connection timeout. Please try again in a few seconds."
    if isinstance(error, ConnectionError):
        return "Connectivity issue. Please check your internet connection."
    if isinstance(error, OSError):
        return "Communication problem. Please try again."

    return (
        f"Unexpected error: {simplify_message(str(error))}\n"
        "Try again or restart the application."
    )
