"""Helpers for building phase-tagged reflection errors."""

from toolmind_core.types import ReflectionPhase

from .errors import ReflectionError
from .factory import get_error_factory

_PARSE_PREVIEW_CHARS = 100


def initial_failed(query: str, reason: str) -> ReflectionError:
    return get_error_factory().reflection(ReflectionPhase.INITIAL, reason, 0, query)


def evaluation_failed(query: str, iteration: int, reason: str) -> ReflectionError:
    return get_error_factory().reflection(ReflectionPhase.EVALUATION, reason, iteration, query)


def improvement_failed(query: str, iteration: int, reason: str) -> ReflectionError:
    return get_error_factory().reflection(ReflectionPhase.IMPROVEMENT, reason, iteration, query)


def parsing_failed(
    content: str, reason: str, iteration: int = -1, query: str | None = None
) -> ReflectionError:
    """Build a parsing error; the offending content is previewed in the message."""
    preview = content if len(content) <= _PARSE_PREVIEW_CHARS else content[:_PARSE_PREVIEW_CHARS]
    return get_error_factory().reflection(
        ReflectionPhase.PARSING,
        f"{reason} (content: {preview})",
        iteration,
        query,
    )


def timed_out(query: str, iteration: int, timeout_seconds: float) -> ReflectionError:
    return get_error_factory().reflection(
        ReflectionPhase.TIMEOUT,
        f"no response within {timeout_seconds}s",
        iteration,
        query,
    )
