"""Error registry for creating errors from templates."""

from typing import Any

from .errors import EngineError, ErrorCategory, ErrorTemplate


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def register(self, template: ErrorTemplate) -> None:
        """Register or replace a template."""
        self._templates[template.code] = template

    def list_codes(self) -> list[str]:
        """List all registered error codes."""
        return list(self._templates.keys())

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: EngineError | None = None,
    ) -> EngineError:
        """Create error instance from template + context.

        A ``detail`` entry in the context replaces the template detail.

        Args:
            code: Error code
            context: Context variables for template interpolation
            cause: Optional cause error

        Returns:
            EngineError instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        detail = context.get("detail") or self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        if message is None:
            message = f"Error {code}"

        return EngineError(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            retryable=template.default_retryable,
            tool_name=context.get("tool_name"),
            server_name=context.get("server_name"),
            cause=cause,
        )

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
    ) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables

        Returns:
            Interpolated string or None if template is None
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except KeyError:
            # Missing context variable - return template as-is
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # TOOL errors
        self._templates["TOOL_NOT_AVAILABLE"] = ErrorTemplate(
            code="TOOL_NOT_AVAILABLE",
            category=ErrorCategory.TOOL,
            message_template="Tool not available: {tool_name}",
            detail_template="The tool could not be resolved or its server is not connected",
            suggestion_template="Use one of the suggested tools or check the server status",
            default_retryable=False,
        )

        self._templates["TOOL_EXECUTION_FAILED"] = ErrorTemplate(
            code="TOOL_EXECUTION_FAILED",
            category=ErrorCategory.TOOL,
            message_template="Tool execution failed after {attempts} attempts: {reason}",
            detail_template="Every attempt to run '{tool_name}' failed",
            suggestion_template="Try one of the suggested tools",
            default_retryable=True,
        )

        self._templates["TOOL_TIMEOUT"] = ErrorTemplate(
            code="TOOL_TIMEOUT",
            category=ErrorCategory.TOOL,
            message_template="Tool '{tool_name}' timed out after {timeout_seconds}s",
            detail_template="The tool did not respond within the request timeout",
            suggestion_template="Increase the server timeout or check if the tool is stuck",
            default_retryable=True,
        )

        self._templates["TOOL_FAILED"] = ErrorTemplate(
            code="TOOL_FAILED",
            category=ErrorCategory.TOOL,
            message_template="{reason}",
            detail_template="Tool '{tool_name}' reported an error",
            suggestion_template="Check the tool arguments and the server logs",
            default_retryable=True,
        )

        # SERVER errors
        self._templates["SERVER_CONNECTION_FAILED"] = ErrorTemplate(
            code="SERVER_CONNECTION_FAILED",
            category=ErrorCategory.SERVER,
            message_template="Failed to connect to MCP server '{server_name}'",
            detail_template="The server could not be started or reached",
            suggestion_template="Check the server command or URL and its runtime requirements",
            default_retryable=True,
        )

        # VALIDATION errors
        self._templates["SCHEMA_VALIDATION_FAILED"] = ErrorTemplate(
            code="SCHEMA_VALIDATION_FAILED",
            category=ErrorCategory.VALIDATION,
            message_template="Invalid arguments for tool '{tool_name}': {reason}",
            detail_template="The arguments do not match the tool parameter schema",
            suggestion_template="Check the tool schema and provide valid parameters",
            default_retryable=False,
        )

        # INFERENCE errors
        self._templates["LLM_GENERATION_FAILED"] = ErrorTemplate(
            code="LLM_GENERATION_FAILED",
            category=ErrorCategory.INFERENCE,
            message_template="Language model generation failed: {reason}",
            detail_template="The language model returned no usable output",
            suggestion_template="Try again in a few seconds",
            default_retryable=True,
        )

        self._templates["REFLECTION_FAILED"] = ErrorTemplate(
            code="REFLECTION_FAILED",
            category=ErrorCategory.INFERENCE,
            message_template="Reflection failed during {phase}: {reason}",
            detail_template="The reflection cycle could not complete",
            suggestion_template="Retry the query or use a simpler strategy",
            default_retryable=False,
        )

        self._templates["QUERY_FAILED"] = ErrorTemplate(
            code="QUERY_FAILED",
            category=ErrorCategory.INFERENCE,
            message_template="{reason}",
            detail_template="The query could not be processed",
            suggestion_template="Try again or restart the session",
            default_retryable=False,
        )

        # SYSTEM errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.SYSTEM,
            message_template="Invalid configuration",
            detail_template="The toolmind configuration is invalid",
            suggestion_template="Check the configuration file and fix errors",
            default_retryable=False,
        )

        self._templates["INTERNAL_ERROR"] = ErrorTemplate(
            code="INTERNAL_ERROR",
            category=ErrorCategory.SYSTEM,
            message_template="Internal engine error",
            detail_template="An unexpected error occurred",
            suggestion_template="Check the logs and report this issue",
            default_retryable=False,
        )
