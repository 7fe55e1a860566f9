"""toolmind configuration - Config loading and models."""

from .loader import (
    ConfigLoader,
    deep_merge,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import (
    CatalogConfig,
    EngineConfig,
    ExecutorConfig,
    LoggingConfig,
    ReflectionConfig,
    RuntimeRequirements,
    ServerDescriptor,
    StepwiseConfig,
)

__all__ = [
    # Config models
    "EngineConfig",
    "CatalogConfig",
    "ServerDescriptor",
    "RuntimeRequirements",
    "ExecutorConfig",
    "ReflectionConfig",
    "StepwiseConfig",
    "LoggingConfig",
    # Loader
    "ConfigLoader",
    "get_config_loader",
    "load_config",
    # Utilities
    "resolve_env_vars",
    "deep_merge",
]
