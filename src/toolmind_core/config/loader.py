"""toolmind configuration loader."""

import os
import re
import shlex
import typing
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from toolmind_core.errors import create_error
from toolmind_core.types import (
    LogLevel,
    MCPTransport,
    ServerPriority,
    StrategyKind,
    ValidationIssue,
    ValidationResult,
)

from .models import EngineConfig, RuntimeRequirements, ServerDescriptor

# Environment keys that flag runtime requirements in the mcpServers form
_REQUIREMENT_ENV_KEYS = {
    "REQUIRES_NODEJS": "nodejs",
    "REQUIRES_ONLINE": "online",
    "REQUIRES_DOCKER": "docker",
}
_REQUIRES_ENV_KEY = "REQUIRES_ENV"

_VALID_KEYS = {
    "strategy",
    "servers",
    "mcpServers",
    "catalog",
    "executor",
    "reflection",
    "stepwise",
    "logging",
}


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Args:
        value: String with potential env var references

    Returns:
        String with env vars resolved

    Raises:
        EngineError: If required var not set
    """
    pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)  # default value or error message

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        if operator == "?":
            error_msg = operand or f"Required environment variable {var_name} not set"
            raise create_error("CONFIG_INVALID", detail=error_msg)
        raise create_error(
            "CONFIG_INVALID",
            detail=f"Required environment variable {var_name} not set",
        )

    return re.sub(pattern, replacer, value)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    else:
        return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class ConfigLoader:
    """Load and validate toolmind configuration."""

    def __init__(self, logger: Any = None):
        """Initialize config loader.

        Args:
            logger: Optional EngineLogger instance
        """
        self._config: EngineConfig | None = None
        self._config_path: Path | None = None
        self._logger = logger

    def _log(self, level: LogLevel, message: str) -> None:
        if self._logger:
            self._logger._log(level, "config", message)

    def load(
        self,
        path: str | Path | None = None,
        use_defaults: bool = True,
        overrides: dict[str, Any] | None = None,
    ) -> EngineConfig:
        """Load configuration from file.

        Resolution order if path not specified:
        1. TOOLMIND_CONFIG_PATH environment variable
        2. ./toolmind.yaml
        3. ~/.toolmind/config.yaml
        4. If use_defaults=True and no file found, use default configuration

        Args:
            path: Optional path to config file
            use_defaults: If True, use default config when no file found
            overrides: Optional values merged over the file contents

        Returns:
            Loaded EngineConfig instance

        Raises:
            EngineError: If file not found (when use_defaults=False) or invalid
        """
        if path is None:
            path = self._resolve_config_path()

        config_path = Path(path)

        if not config_path.exists():
            if use_defaults:
                self._log(LogLevel.INFO, "No config file found, using default configuration")
                return self.load_from_dict(overrides or {})
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Invalid YAML in config file: {e}",
            ) from e

        if not isinstance(data, dict):
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration root must be a mapping",
            )

        data = _resolve_env_vars_recursive(data)
        if overrides:
            data = deep_merge(data, overrides)

        return self.load_from_dict(data, config_path)

    def load_from_dict(self, data: dict[str, Any], config_path: Path | None = None) -> EngineConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary
            config_path: Optional path to config file (for tracking)

        Returns:
            Loaded EngineConfig instance

        Raises:
            EngineError: If configuration is invalid
        """
        validation = self.validate(data)
        for warning in validation.warnings:
            self._log(LogLevel.WARN, f"{warning.path}: {warning.message}")
        if not validation.valid:
            error_messages = [f"- {issue.path}: {issue.message}" for issue in validation.errors]
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + "\n".join(error_messages),
            )

        try:
            config = self._dict_to_config(data)
        except (TypeError, ValueError) as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Failed to parse configuration: {e}",
            ) from e

        self._config = config
        self._config_path = config_path
        self._log(
            LogLevel.INFO,
            f"Configuration loaded ({len(config.catalog.servers)} servers, "
            f"strategy={config.strategy.value})",
        )
        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for key in data:
            if key not in _VALID_KEYS:
                warnings.append(
                    ValidationIssue(
                        path=key,
                        message=f"Unknown configuration key: {key}",
                        severity="warning",
                    )
                )

        if "strategy" in data:
            try:
                StrategyKind.from_string(str(data["strategy"]))
            except ValueError as e:
                errors.append(ValidationIssue(path="strategy", message=str(e)))

        servers = data.get("servers", [])
        if not isinstance(servers, list):
            errors.append(ValidationIssue(path="servers", message="servers must be a list"))
        else:
            for index, server in enumerate(servers):
                errors.extend(self._validate_server(f"servers[{index}]", server))

        mcp_servers = data.get("mcpServers", {})
        if not isinstance(mcp_servers, dict):
            errors.append(
                ValidationIssue(path="mcpServers", message="mcpServers must be a mapping")
            )

        reflection = data.get("reflection", {})
        if isinstance(reflection, dict):
            threshold = reflection.get("score_threshold")
            if threshold is not None and (
                not isinstance(threshold, (int, float)) or not 0.0 <= threshold <= 1.0
            ):
                errors.append(
                    ValidationIssue(
                        path="reflection.score_threshold",
                        message="score_threshold must be a number between 0 and 1",
                    )
                )

        for section, key in (
            ("reflection", "max_iterations"),
            ("stepwise", "max_iterations"),
            ("executor", "max_retries"),
        ):
            value = data.get(section, {}).get(key) if isinstance(data.get(section), dict) else None
            if value is not None and (not isinstance(value, int) or value <= 0):
                errors.append(
                    ValidationIssue(
                        path=f"{section}.{key}",
                        message=f"{key} must be a positive integer",
                    )
                )

        return ValidationResult(valid=True, errors=errors, warnings=warnings)

    def _validate_server(self, path: str, server: Any) -> list[ValidationIssue]:
        if not isinstance(server, dict):
            return [ValidationIssue(path=path, message="server entry must be a mapping")]

        issues: list[ValidationIssue] = []
        if not server.get("name"):
            issues.append(ValidationIssue(path=f"{path}.name", message="name is required"))

        transport = str(server.get("transport", MCPTransport.STDIO.value)).lower()
        if transport not in (MCPTransport.STDIO.value, MCPTransport.HTTP.value):
            issues.append(
                ValidationIssue(
                    path=f"{path}.transport",
                    message=f"transport must be 'stdio' or 'http', got '{transport}'",
                )
            )
        elif transport == MCPTransport.STDIO.value and not server.get("command"):
            issues.append(
                ValidationIssue(path=f"{path}.command", message="stdio servers need a command")
            )
        elif transport == MCPTransport.HTTP.value and not server.get("url"):
            issues.append(ValidationIssue(path=f"{path}.url", message="http servers need a url"))

        if "priority" in server:
            try:
                ServerPriority.from_value(server["priority"])
            except ValueError:
                issues.append(
                    ValidationIssue(
                        path=f"{path}.priority",
                        message=f"Unknown priority: {server['priority']}",
                    )
                )
        return issues

    def get(self) -> EngineConfig:
        """Get current configuration.

        Raises:
            EngineError: If configuration not loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    def _resolve_config_path(self) -> Path:
        env_path = os.environ.get("TOOLMIND_CONFIG_PATH")
        if env_path:
            return Path(env_path)

        local_path = Path("toolmind.yaml")
        if local_path.exists():
            return local_path

        home_path = Path.home() / ".toolmind" / "config.yaml"
        if home_path.exists():
            return home_path

        return local_path

    def _dict_to_config(self, data: dict[str, Any]) -> EngineConfig:
        kwargs: dict[str, Any] = {}

        for config_field in fields(EngineConfig):
            if config_field.name in ("strategy", "catalog"):
                continue
            if config_field.name in data:
                kwargs[config_field.name] = self._convert_field(
                    config_field.type, data[config_field.name]
                )

        if "strategy" in data:
            kwargs["strategy"] = StrategyKind.from_string(str(data["strategy"]))

        config = EngineConfig(**kwargs)

        servers = [self._parse_server(entry) for entry in data.get("servers", [])]
        for name, entry in (data.get("mcpServers") or {}).items():
            servers.append(self._parse_mcp_server(name, entry or {}))
        config.catalog.servers = servers

        catalog = data.get("catalog", {})
        if isinstance(catalog, dict):
            for key in ("connect_retries", "network_check_url", "check_timeout"):
                if key in catalog:
                    setattr(config.catalog, key, catalog[key])

        return config

    def _parse_server(self, entry: dict[str, Any]) -> ServerDescriptor:
        """Build a descriptor from a ``servers:`` list entry."""
        requires = entry.get("requires") or {}
        env = {str(k): str(v) for k, v in (entry.get("env") or {}).items()}
        return ServerDescriptor(
            name=str(entry["name"]),
            transport=MCPTransport(str(entry.get("transport", "stdio")).lower()),
            command=entry.get("command"),
            url=entry.get("url"),
            priority=ServerPriority.from_value(entry.get("priority")),
            requires=RuntimeRequirements(
                nodejs=_as_bool(requires.get("nodejs", False)),
                online=_as_bool(requires.get("online", False)),
                docker=_as_bool(requires.get("docker", False)),
                env_var=requires.get("env_var") or None,
            ),
            env=env,
            enabled=_as_bool(entry.get("enabled", True)),
            description=str(entry.get("description", "")),
            timeout=int(entry.get("timeout", 30)),
        )

    def _parse_mcp_server(self, name: str, entry: dict[str, Any]) -> ServerDescriptor:
        """Build a descriptor from an ``mcpServers:`` mapping entry.

        REQUIRES_* keys in ``env`` become runtime requirements and are not
        passed to the server process.
        """
        env: dict[str, str] = {}
        requires = RuntimeRequirements()
        for key, value in (entry.get("env") or {}).items():
            if key in _REQUIREMENT_ENV_KEYS:
                setattr(requires, _REQUIREMENT_ENV_KEYS[key], _as_bool(value))
            elif key == _REQUIRES_ENV_KEY:
                requires.env_var = str(value) or None
            else:
                env[str(key)] = str(value)

        url = entry.get("url")
        command = entry.get("command")
        if command and entry.get("args"):
            command = " ".join([command, *(shlex.quote(str(arg)) for arg in entry["args"])])

        return ServerDescriptor(
            name=name,
            transport=MCPTransport.HTTP if url and not command else MCPTransport.STDIO,
            command=command,
            url=url,
            priority=ServerPriority.from_value(entry.get("priority", 1)),
            requires=requires,
            env=env,
            enabled=_as_bool(entry.get("enabled", True)),
            description=str(entry.get("description", "")),
            timeout=int(entry.get("timeout", 30)),
        )

    def _convert_field(self, field_type: Any, value: Any) -> Any:
        """Convert field value to appropriate type.

        Args:
            field_type: Expected field type
            value: Value to convert

        Returns:
            Converted value
        """
        if value is None:
            return None

        origin = typing.get_origin(field_type)

        if origin is list:
            if not isinstance(value, list):
                return value
            args = typing.get_args(field_type)
            if args:
                return [self._convert_field(args[0], item) for item in value]
            return value

        if origin is dict:
            if not isinstance(value, dict):
                return value
            args = typing.get_args(field_type)
            if args and len(args) == 2:
                value_type = args[1]
                return {k: self._convert_field(value_type, v) for k, v in value.items()}
            return value

        if hasattr(field_type, "__dataclass_fields__"):
            if isinstance(value, dict):
                kwargs = {}
                for f in fields(field_type):
                    if f.name in value:
                        kwargs[f.name] = self._convert_field(f.type, value[f.name])
                return field_type(**kwargs)
            return value

        if hasattr(field_type, "__mro__") and any(
            base.__name__ == "Enum" for base in field_type.__mro__
        ):
            if isinstance(value, str):
                return field_type(value)
            return value

        return value


# Convenience singleton
_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Get default config loader singleton."""
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Convenience function to load config.

    Args:
        path: Optional path to config file

    Returns:
        Loaded EngineConfig instance
    """
    return get_config_loader().load(path)
