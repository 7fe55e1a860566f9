"""Chat engine builder - wires configuration, catalog, policy and strategy."""

import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from toolmind_core.config import ConfigLoader, EngineConfig
from toolmind_core.executor import ToolExecutor
from toolmind_core.inference import create_strategy, strategy_options
from toolmind_core.logging import EngineLogger, LogConfig
from toolmind_core.mcp import DependencyChecker, ToolCatalog
from toolmind_core.policy import PolicyAdvisor
from toolmind_core.types import StrategyKind

from .engine import ChatEngine
from .types import ConversationMemory

if TYPE_CHECKING:
    from toolmind_core.llm import LanguageModel
    from toolmind_core.mcp import ConnectionFactory


class ChatEngineBuilder:
    """
    Build a ready-to-use ChatEngine.

    Initialization sequence:
    1. Config loading (unless a config object was given)
    2. Logger setup
    3. Dependency-check pass over the server descriptors
    4. Tool catalog connect and discovery
    5. Policy advisor and tool executor
    6. Reasoning strategy
    """

    def __init__(self, llm: "LanguageModel"):
        """Initialize builder.

        Args:
            llm: Language model the engine talks to
        """
        self._llm = llm
        self._config: EngineConfig | None = None
        self._config_path: str | Path | None = None
        self._strategy: StrategyKind | None = None
        self._connection_factory: ConnectionFactory | None = None
        self._dependency_checker: DependencyChecker | None = None
        self._memory: ConversationMemory | None = None
        self._log_output: TextIO | None = None

    def with_config(self, config: EngineConfig) -> "ChatEngineBuilder":
        self._config = config
        return self

    def with_config_path(self, path: str | Path) -> "ChatEngineBuilder":
        self._config_path = path
        return self

    def with_strategy(self, strategy: StrategyKind | str) -> "ChatEngineBuilder":
        """Override the configured strategy.

        Raises:
            ValueError: If the name is not a known strategy
        """
        if isinstance(strategy, str):
            strategy = StrategyKind.from_string(strategy)
        self._strategy = strategy
        return self

    def with_connection_factory(self, factory: "ConnectionFactory") -> "ChatEngineBuilder":
        self._connection_factory = factory
        return self

    def with_dependency_checker(self, checker: DependencyChecker) -> "ChatEngineBuilder":
        self._dependency_checker = checker
        return self

    def with_memory(self, memory: ConversationMemory) -> "ChatEngineBuilder":
        self._memory = memory
        return self

    def with_log_output(self, output: TextIO) -> "ChatEngineBuilder":
        self._log_output = output
        return self

    async def build(self) -> ChatEngine:
        """Run the initialization sequence and return the engine.

        Servers that fail to connect are left in ERROR state; the engine
        is still built.

        Raises:
            EngineError(CONFIG_INVALID): If the configuration cannot be loaded
        """
        # 1. Config
        config = self._config
        if config is None:
            config = ConfigLoader().load(self._config_path)

        # 2. Logger
        log_config = LogConfig(
            level=config.logging.level,
            format=config.logging.format,
            show_params=config.logging.show_params,
            show_results=config.logging.show_results,
            truncate_at=config.logging.truncate_at,
            components=dict(config.logging.components),
            output=self._log_output or sys.stderr,
        )
        logger = EngineLogger(log_config)

        # 3. Dependency checks
        checker = self._dependency_checker or DependencyChecker(
            network_check_url=config.catalog.network_check_url,
            check_timeout=config.catalog.check_timeout,
            logger=logger,
        )
        descriptors = await checker.apply(list(config.catalog.servers))

        # 4. Catalog
        catalog = ToolCatalog(
            descriptors,
            logger=logger,
            connection_factory=self._connection_factory,
            connect_retries=config.catalog.connect_retries,
        )
        await catalog.connect_all()

        # 5. Policy and execution
        advisor = PolicyAdvisor(catalog, logger=logger)
        executor = ToolExecutor(catalog, config.executor, advisor=advisor, logger=logger)

        # 6. Strategy
        kind = self._strategy or config.strategy
        strategy = create_strategy(
            kind,
            self._llm,
            catalog,
            executor,
            advisor=advisor,
            logger=logger,
            options=strategy_options(config, kind),
        )

        return ChatEngine(
            self._llm,
            strategy,
            catalog=catalog,
            memory=self._memory,
            logger=logger,
        )
