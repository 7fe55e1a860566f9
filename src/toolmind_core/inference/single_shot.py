"""Single-shot tool use: one analysis call, at most one tool, one synthesis call."""

from toolmind_core.types import LogLevel, StrategyKind

from .base import ReasoningStrategy
from .parsing import TOOL_PREFIX, parse_prefixed_call

TOOL_RESULT_TEMPLATE = (
    "Based on the tool execution:\n\n"
    "Tool: {tool_name}\n"
    "Result: {result}\n\n"
    "User Query: {query}\n\n"
    "Provide a comprehensive response incorporating the tool result."
)

_INSTRUCTIONS = (
    "INSTRUCTIONS:\n"
    f"- If you need to use a tool, respond with: {TOOL_PREFIX}tool_name:{{\"parameter\":\"value\"}}\n"
    "- If no tool is needed, respond directly to the user query\n"
    "- Use the tool names exactly as listed\n"
    "- Always include ALL required parameters as shown in the tool descriptions\n\n"
)


class SingleShotStrategy(ReasoningStrategy):
    """Answers directly or through a single tool invocation.

    Failures never propagate: they come back as the answer text.
    """

    kind = StrategyKind.SIMPLE

    def build_analysis_prompt(self, query: str) -> str:
        return (
            "Analyze this user query and decide if any tool is needed.\n\n"
            f"USER QUERY: {query}\n\n"
            f"{self._executor.formatted_catalog_summary()}\n\n"
            f"{_INSTRUCTIONS}"
            "RESPONSE:"
        )

    def build_system_prompt(self) -> str:
        return self.build_analysis_prompt("[System Prompt]")

    async def process_query(self, query: str) -> str:
        self._record("USER", query.strip() or "[EMPTY_QUERY]")
        self._log(LogLevel.INFO, f"Processing query with {self._llm.provider_name}")

        try:
            response = await self._llm.generate(self.build_analysis_prompt(query))
            if not response.success:
                return self._fail(f"LLM analysis failed: {response.error_message}")

            analysis = response.text
            if analysis.startswith(TOOL_PREFIX):
                self._record("ANALYSIS", "Need to use tool")
                return await self._execute_and_respond(analysis, query)

            self._record("ANALYSIS", analysis)
            self._record("ASSISTANT", analysis)
            return analysis
        except Exception as e:
            self._log(LogLevel.ERROR, f"Error processing query: {e}")
            return self._fail(f"I encountered an error while processing your request: {e}")

    async def _execute_and_respond(self, analysis: str, query: str) -> str:
        try:
            call = parse_prefixed_call(analysis, TOOL_PREFIX)
        except ValueError as e:
            return self._fail(f"Tool execution failed: {e}")
        if call is None:
            return self._fail("Tool execution failed: no tool invocation found")

        result = await self.run_tool(call)
        if not result.success:
            message = result.error_message or "unknown error"
            if result.suggestions:
                message += ". Try: " + ", ".join(result.suggestions)
            return message

        prompt = TOOL_RESULT_TEMPLATE.format(
            tool_name=call.tool_name,
            result=result.result,
            query=query,
        )
        final = await self._llm.generate(prompt)
        if not final.success:
            return self._fail(f"Failed to generate final response: {final.error_message}")

        self._record("ASSISTANT", final.text)
        return final.text

    def _fail(self, message: str) -> str:
        self._record("ERROR", message)
        return message
