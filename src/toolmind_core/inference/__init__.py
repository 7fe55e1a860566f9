"""toolmind inference - reasoning strategies over the tool catalog."""

from .base import ReasoningStrategy
from .factory import STRATEGIES, create_strategy, strategy_options
from .parsing import (
    FUNCTION_CALL_PREFIX,
    TOOL_PREFIX,
    find_prefixed_calls,
    format_arguments,
    parse_action,
    parse_json_array_call,
    parse_prefixed_call,
)
from .reflection import EvaluationResult, ReflectionStep, ReflectionStrategy
from .single_shot import SingleShotStrategy
from .stepwise import StepwiseStep, StepwiseStrategy, extract_final_answer

__all__ = [
    # Strategies
    "ReasoningStrategy",
    "SingleShotStrategy",
    "ReflectionStrategy",
    "StepwiseStrategy",
    # Factory
    "STRATEGIES",
    "create_strategy",
    "strategy_options",
    # Reflection and stepwise records
    "EvaluationResult",
    "ReflectionStep",
    "StepwiseStep",
    "extract_final_answer",
    # Parsing
    "TOOL_PREFIX",
    "FUNCTION_CALL_PREFIX",
    "parse_prefixed_call",
    "find_prefixed_calls",
    "parse_json_array_call",
    "parse_action",
    "format_arguments",
]
