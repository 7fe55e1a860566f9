"""Shared types for toolmind.

Import from here rather than submodules:
    from toolmind_core.types import LogLevel, ServerPriority
"""

from .enums import (
    ConnectionStatus,
    EntityType,
    LogFormat,
    LogLevel,
    MCPTransport,
    ReflectionPhase,
    ReflectionStepKind,
    RuntimeRequirement,
    ServerPriority,
    StepwiseStepKind,
    StrategyKind,
)
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Logging
    "LogLevel",
    "LogFormat",
    # Servers
    "MCPTransport",
    "ConnectionStatus",
    "ServerPriority",
    "RuntimeRequirement",
    # Heuristics
    "EntityType",
    # Inference
    "StrategyKind",
    "ReflectionPhase",
    "ReflectionStepKind",
    "StepwiseStepKind",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
