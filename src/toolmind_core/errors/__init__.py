"""toolmind error handling - Structured errors with context."""

from .errors import (
    EngineError,
    ErrorCategory,
    ErrorMatcher,
    ErrorTemplate,
    MatchResult,
    ReflectionError,
)
from .factory import ErrorFactory, create_error, get_error_factory
from .matchers import ErrorMatcherChain
from .messages import simplify_message, user_friendly_message
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "EngineError",
    "ReflectionError",
    "ErrorCategory",
    "ErrorTemplate",
    "MatchResult",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    "ErrorMatcherChain",
    "ErrorMatcher",
    # Convenience functions
    "get_error_factory",
    "create_error",
    # User-facing rendering
    "user_friendly_message",
    "simplify_message",
]
