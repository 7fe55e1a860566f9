"""toolmind configuration data models."""

from dataclasses import dataclass, field

from toolmind_core.types import (
    LogFormat,
    LogLevel,
    MCPTransport,
    RuntimeRequirement,
    ServerPriority,
    StrategyKind,
)


@dataclass
class RuntimeRequirements:
    """Runtimes a tool server needs before it can be started."""

    nodejs: bool = False
    online: bool = False
    docker: bool = False
    env_var: str | None = None  # Must be set and non-empty

    def required(self) -> list[RuntimeRequirement]:
        """List the flagged requirements in check order."""
        flags = []
        if self.nodejs:
            flags.append(RuntimeRequirement.NODEJS)
        if self.online:
            flags.append(RuntimeRequirement.ONLINE)
        if self.docker:
            flags.append(RuntimeRequirement.DOCKER)
        if self.env_var:
            flags.append(RuntimeRequirement.ENV)
        return flags


@dataclass
class ServerDescriptor:
    """Definition of an MCP tool server to connect to."""

    name: str
    transport: MCPTransport = MCPTransport.STDIO
    command: str | None = None  # For stdio: command line to spawn
    url: str | None = None  # For http: server URL
    priority: ServerPriority = ServerPriority.UNCLASSIFIED
    requires: RuntimeRequirements = field(default_factory=RuntimeRequirements)
    env: dict[str, str] = field(default_factory=dict)
    enabled: bool = True
    description: str = ""
    timeout: int = 30

    @property
    def target(self) -> str | None:
        """Connection target: command line for stdio, URL for http."""
        if self.transport == MCPTransport.HTTP:
            return self.url
        return self.command


@dataclass
class CatalogConfig:
    """Tool server catalog configuration."""

    servers: list[ServerDescriptor] = field(default_factory=list)
    connect_retries: int = 0
    network_check_url: str = "https://www.google.com"
    check_timeout: float = 5.0


@dataclass
class ExecutorConfig:
    """Tool execution configuration."""

    max_retries: int = 3
    backoff_seconds: float = 1.0  # Linear: attempt * backoff_seconds
    cache_ttl_seconds: float = 300.0
    max_suggestions: int = 3
    adaptive_retries: bool = False  # Use the server priority retry budget


@dataclass
class ReflectionConfig:
    """Reflection strategy configuration."""

    score_threshold: float = 0.6
    max_iterations: int = 3
    timeout_seconds: float | None = None  # Per model call; None waits indefinitely


@dataclass
class StepwiseConfig:
    """Stepwise (thought/action/observation) strategy configuration."""

    max_iterations: int = 10


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_params: bool = True
    show_results: bool = True
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)


@dataclass
class EngineConfig:
    """Root configuration object."""

    strategy: StrategyKind = StrategyKind.SIMPLE
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    reflection: ReflectionConfig = field(default_factory=ReflectionConfig)
    stepwise: StepwiseConfig = field(default_factory=StepwiseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
