"""Error matchers for converting exceptions to EngineErrors."""

import asyncio
from typing import Any

from .errors import ErrorMatcher, MatchResult


class TimeoutErrorMatcher(ErrorMatcher):
    """Matches timeout errors."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, (asyncio.TimeoutError, TimeoutError))

    def extract(self, error: Exception) -> MatchResult:
        """Extract timeout error info.

        Returns:
            MatchResult with TOOL_TIMEOUT code
        """
        return MatchResult(
            code="TOOL_TIMEOUT",
            context={"timeout_seconds": "unknown", "detail": str(error) or None},
            retryable=True,
        )


class ConnectionErrorMatcher(ErrorMatcher):
    """Matches transport-level connection failures."""

    def matches(self, error: Exception) -> bool:
        return isinstance(error, (ConnectionError, EOFError))

    def extract(self, error: Exception) -> MatchResult:
        return MatchResult(
            code="SERVER_CONNECTION_FAILED",
            context={"server_name": "unknown", "detail": str(error) or type(error).__name__},
            retryable=True,
        )


class GenericErrorMatcher(ErrorMatcher):
    """Fallback matcher for any exception."""

    def matches(self, error: Exception) -> bool:
        return True

    def extract(self, error: Exception) -> MatchResult:
        """Extract generic error info.

        Returns:
            MatchResult with INTERNAL_ERROR code
        """
        context: dict[str, Any] = {
            "detail": str(error) or type(error).__name__,
            "error_type": type(error).__name__,
        }
        return MatchResult(
            code="INTERNAL_ERROR",
            context=context,
            retryable=False,
        )


class ErrorMatcherChain:
    """Ordered chain of matchers. First match wins."""

    def __init__(self) -> None:
        """Initialize matcher chain with built-in matchers."""
        self.matchers: list[ErrorMatcher] = []
        self._load_builtin_matchers()

    def match(self, error: Exception) -> MatchResult:
        """Find first matching matcher and extract result.

        Args:
            error: Exception to match

        Returns:
            MatchResult from first matching matcher
        """
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)

        return MatchResult(
            code="INTERNAL_ERROR",
            context={"detail": str(error)},
            retryable=False,
        )

    def _load_builtin_matchers(self) -> None:
        """Load built-in matchers in priority order."""
        # More specific matchers first
        self.matchers = [
            TimeoutErrorMatcher(),
            ConnectionErrorMatcher(),
            GenericErrorMatcher(),  # Fallback - must be last
        ]
