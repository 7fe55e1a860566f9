"""Strategy factory - build a reasoning strategy from its kind."""

from typing import TYPE_CHECKING, Any

from toolmind_core.executor import ToolExecutor
from toolmind_core.types import StrategyKind

from .base import ReasoningStrategy
from .reflection import ReflectionStrategy
from .single_shot import SingleShotStrategy
from .stepwise import StepwiseStrategy

if TYPE_CHECKING:
    from toolmind_core.config import EngineConfig
    from toolmind_core.llm import LanguageModel
    from toolmind_core.logging import EngineLogger
    from toolmind_core.mcp import ToolCatalog
    from toolmind_core.policy import PolicyAdvisor

STRATEGIES: dict[StrategyKind, type[ReasoningStrategy]] = {
    StrategyKind.SIMPLE: SingleShotStrategy,
    StrategyKind.REFLECTION: ReflectionStrategy,
    StrategyKind.REACT: StepwiseStrategy,
}


def strategy_options(config: "EngineConfig", kind: StrategyKind) -> dict[str, Any]:
    """Pick the strategy options out of an engine configuration."""
    if kind == StrategyKind.REFLECTION:
        return {
            "score_threshold": config.reflection.score_threshold,
            "max_iterations": config.reflection.max_iterations,
            "timeout_seconds": config.reflection.timeout_seconds,
        }
    if kind == StrategyKind.REACT:
        return {"max_iterations": config.stepwise.max_iterations}
    return {}


def create_strategy(
    kind: StrategyKind | str,
    llm: "LanguageModel | None",
    catalog: "ToolCatalog | None",
    executor: ToolExecutor | None = None,
    advisor: "PolicyAdvisor | None" = None,
    logger: "EngineLogger | None" = None,
    options: dict[str, Any] | None = None,
) -> ReasoningStrategy:
    """Create a reasoning strategy.

    Args:
        kind: Strategy kind, or its name (case-insensitive)
        llm: Language model the strategy talks to
        catalog: Tool catalog
        executor: Tool executor; one is built over the catalog when omitted
        advisor: Optional policy advisor
        logger: Optional logger
        options: Strategy-specific options

    Returns:
        The strategy instance

    Raises:
        ValueError: If the kind is unknown, or the model or catalog is missing
    """
    if isinstance(kind, str):
        kind = StrategyKind.from_string(kind)
    if kind not in STRATEGIES:
        raise ValueError(f"Invalid inference strategy: {kind}")
    if llm is None:
        raise ValueError("A language model is required to create a strategy")
    if catalog is None:
        raise ValueError("A tool catalog is required to create a strategy")

    if executor is None:
        executor = ToolExecutor(catalog, advisor=advisor, logger=logger)

    return STRATEGIES[kind](
        llm,
        catalog,
        executor,
        advisor=advisor,
        logger=logger,
        options=options,
    )
