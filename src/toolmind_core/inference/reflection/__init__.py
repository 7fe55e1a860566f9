"""Reflection strategy: generate, evaluate, improve."""

from .criteria import (
    CRITERIA,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_SCORE_THRESHOLD,
    build_evaluation_prompt,
    build_improvement_prompt,
    build_initial_prompt,
    query_needs_tools,
)
from .evaluation import EvaluationResult, ReflectionStep
from .strategy import ReflectionStrategy, should_continue

__all__ = [
    "ReflectionStrategy",
    "EvaluationResult",
    "ReflectionStep",
    "should_continue",
    # Criteria and prompts
    "CRITERIA",
    "DEFAULT_SCORE_THRESHOLD",
    "DEFAULT_MAX_ITERATIONS",
    "query_needs_tools",
    "build_initial_prompt",
    "build_evaluation_prompt",
    "build_improvement_prompt",
]
