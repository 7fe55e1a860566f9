"""Engine error types."""

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from toolmind_core.types import ReflectionPhase


class ErrorCategory(str, Enum):
    """Error source categories."""

    TOOL = "TOOL"
    SERVER = "SERVER"
    VALIDATION = "VALIDATION"
    INFERENCE = "INFERENCE"
    SYSTEM = "SYSTEM"


@dataclass
class EngineError(Exception):
    """Structured error with context. Base exception for all engine errors."""

    # Identity
    code: str  # e.g., "TOOL_NOT_AVAILABLE"
    category: ErrorCategory

    # Messages
    message: str
    detail: str | None = None
    suggestion: str | None = None

    # Context
    retryable: bool = False
    tool_name: str | None = None  # Namespaced tool identity when known
    server_name: str | None = None

    # Error chain
    cause: "EngineError | None" = None

    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and diagnostics.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "retryable": self.retryable,
            "tool_name": self.tool_name,
            "server_name": self.server_name,
            "timestamp": self.timestamp.isoformat(),
            "cause": self.cause.to_dict() if self.cause else None,
        }

    def with_context(
        self,
        tool_name: str | None = None,
        server_name: str | None = None,
    ) -> "EngineError":
        """Return copy with additional context.

        Args:
            tool_name: Optional tool name
            server_name: Optional server name

        Returns:
            New error of the same type with updated context
        """
        return dataclasses.replace(
            self,
            tool_name=tool_name or self.tool_name,
            server_name=server_name or self.server_name,
        )


@dataclass
class ReflectionError(EngineError):
    """Failure inside the reflection cycle.

    Carries the phase and iteration where the cycle broke and the query
    being answered. Iteration is -1 when it does not apply.
    """

    phase: ReflectionPhase = ReflectionPhase.EVALUATION
    iteration: int = -1
    query: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "phase": self.phase.value,
                "iteration": self.iteration,
                "query": self.query,
            }
        )
        return data


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Tool not available: {tool_name}"
    detail_template: str | None = None
    suggestion_template: str | None = None
    default_retryable: bool = False


@dataclass
class MatchResult:
    """Result of matching an exception."""

    code: str
    context: dict[str, Any]
    retryable: bool | None = None  # None = use template default


class ErrorMatcher(ABC):
    """Base class for exception matchers."""

    @abstractmethod
    def matches(self, error: Exception) -> bool:
        """Check if this matcher handles the error."""

    @abstractmethod
    def extract(self, error: Exception) -> MatchResult:
        """Extract error code and context from the exception."""
