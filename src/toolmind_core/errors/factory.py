"""Error factory for creating EngineErrors from any exception type."""

from typing import Any

from toolmind_core.types import ReflectionPhase

from .errors import EngineError, ReflectionError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Creates EngineErrors from any exception type."""

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        """Initialize error factory.

        Args:
            registry: Error registry (defaults to new ErrorRegistry())
            matcher_chain: Matcher chain (defaults to new ErrorMatcherChain())
        """
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(
        self,
        error: Exception,
        tool_name: str | None = None,
        server_name: str | None = None,
    ) -> EngineError:
        """Convert any exception to EngineError.

        Args:
            error: Exception to convert
            tool_name: Optional tool name
            server_name: Optional server name

        Returns:
            EngineError instance
        """
        if isinstance(error, EngineError):
            return error.with_context(tool_name=tool_name, server_name=server_name)

        match_result = self.matcher_chain.match(error)

        context = match_result.context.copy()
        if tool_name:
            context["tool_name"] = tool_name
        if server_name:
            context["server_name"] = server_name

        engine_error = self.registry.create(code=match_result.code, context=context)

        if match_result.retryable is not None:
            engine_error.retryable = match_result.retryable

        return engine_error

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> EngineError:
        """Create EngineError directly from code.

        Args:
            code: Error code
            context: Context variables for template interpolation
            **kwargs: Additional context variables

        Returns:
            EngineError instance
        """
        merged_context = dict(context or {})
        merged_context.update(kwargs)

        return self.registry.create(code=code, context=merged_context)

    def reflection(
        self,
        phase: ReflectionPhase,
        reason: str,
        iteration: int = -1,
        query: str | None = None,
    ) -> ReflectionError:
        """Create a ReflectionError tagged with phase, iteration and query."""
        base = self.registry.create(
            code="REFLECTION_FAILED",
            context={"phase": phase.value, "reason": reason},
        )
        return ReflectionError(
            code=base.code,
            category=base.category,
            message=base.message,
            detail=base.detail,
            suggestion=base.suggestion,
            retryable=base.retryable,
            phase=phase,
            iteration=iteration,
            query=query,
        )


# Convenience singleton
_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Get default error factory singleton.

    Returns:
        Default ErrorFactory instance
    """
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> EngineError:
    """Convenience function to create error.

    Args:
        code: Error code
        **context: Context variables for template interpolation

    Returns:
        EngineError instance
    """
    return get_error_factory().create(code, context)
