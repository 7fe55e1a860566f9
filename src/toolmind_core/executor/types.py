"""Tool executor types."""

from dataclasses import dataclass, field

from toolmind_core.errors import EngineError


@dataclass(frozen=True)
class CachedAvailability:
    """Cached readiness judgment for one tool."""

    available: bool
    checked_at: float  # Clock reading when the check ran


@dataclass
class ToolOperationResult:
    """Outcome of ToolExecutor.execute.

    Suggestions are never None; they are empty when nothing fits.
    """

    success: bool
    tool_name: str
    result: str | None = None
    error: EngineError | None = None
    suggestions: list[str] = field(default_factory=list)
    attempts: int = 0
    duration_ms: int = 0

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error else None

    def describe(self) -> str:
        """Render the outcome as text suitable for a model prompt."""
        if self.success:
            return self.result or ""
        text = f"Error: {self.error_message}"
        if self.suggestions:
            text += f" (suggested alternatives: {', '.join(self.suggestions)})"
        return text
