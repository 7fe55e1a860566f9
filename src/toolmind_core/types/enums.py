"""Shared enumerations for toolmind."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class MCPTransport(str, Enum):
    """MCP connection transport type."""

    STDIO = "stdio"
    HTTP = "http"


class ConnectionStatus(str, Enum):
    """MCP server connection status."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    CONNECTING = "connecting"


class ServerPriority(str, Enum):
    """Server priority class.

    Ordered by numeric weight, highest first.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNCLASSIFIED = "unclassified"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]

    @classmethod
    def from_value(cls, value: "int | str | ServerPriority | None") -> "ServerPriority":
        """Build a priority from a weight or a name.

        Unknown weights map to UNCLASSIFIED.

        Raises:
            ValueError: If a string does not name a priority class
        """
        if value is None:
            return cls.UNCLASSIFIED
        if isinstance(value, ServerPriority):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid server priority: {value!r}")
        if isinstance(value, int):
            for priority, weight in _PRIORITY_WEIGHTS.items():
                if weight == value:
                    return priority
            return cls.UNCLASSIFIED
        text = str(value).strip().lower()
        if text.isdigit():
            return cls.from_value(int(text))
        return cls(text)


_PRIORITY_WEIGHTS = {
    ServerPriority.HIGH: 3,
    ServerPriority.MEDIUM: 2,
    ServerPriority.LOW: 1,
    ServerPriority.UNCLASSIFIED: 0,
}


class RuntimeRequirement(str, Enum):
    """Runtime a tool server needs before it can be started."""

    NODEJS = "nodejs"
    ONLINE = "online"
    DOCKER = "docker"
    ENV = "env"


class EntityType(str, Enum):
    """Entity kinds detected in queries and inferred from tool parameters."""

    URL = "URL"
    FILE = "FILE"
    LOCATION = "LOCATION"
    TIME = "TIME"
    EMAIL = "EMAIL"
    NUMBER = "NUMBER"


class StrategyKind(str, Enum):
    """Reasoning strategy variants."""

    SIMPLE = "simple"
    REFLECTION = "reflection"
    REACT = "react"

    @classmethod
    def from_string(cls, value: str | None) -> "StrategyKind | None":
        """Parse a strategy name case-insensitively.

        Raises:
            ValueError: If the name is not a known strategy
        """
        if value is None:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Invalid inference strategy: {value}") from None


class ReflectionPhase(str, Enum):
    """Phase of the reflection cycle where a failure happened."""

    INITIAL = "initial"
    EVALUATION = "evaluation"
    IMPROVEMENT = "improvement"
    PARSING = "parsing"
    TIMEOUT = "timeout"


class ReflectionStepKind(str, Enum):
    """Entry kinds in the reflection log."""

    INITIAL = "initial_response"
    EVALUATION = "evaluation"
    IMPROVEMENT = "improvement"
    FINAL = "final"


class StepwiseStepKind(str, Enum):
    """Entry kinds in the stepwise reasoning trace."""

    THOUGHT = "THOUGHT"
    ACTION = "ACTION"
    OBSERVATION = "OBSERVATION"
    FINAL_ANSWER = "FINAL_ANSWER"
