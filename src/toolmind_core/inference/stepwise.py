"""Stepwise reasoning - thought, action, observation cycles."""

from dataclasses import dataclass
from typing import Any

from toolmind_core.llm import ToolCall
from toolmind_core.types import LogLevel, StepwiseStepKind, StrategyKind

from .base import ReasoningStrategy
from .parsing import format_arguments, parse_action

DEFAULT_MAX_ITERATIONS = 10
FINAL_ANSWER_MARKER = "FINAL ANSWER:"
ACTION_MARKERS = ("NEED ACTION:", "ACTION:", "USE TOOL", "CALL TOOL")
FALLBACK_PREFIX = "Reached maximum iterations. Last thoughts: "

_THOUGHT_GUIDANCE = """Now think about what to do next:
- Tools that need coordinates take latitude and longitude; use your knowledge of world cities
- If you have enough information to answer, start your response with "FINAL ANSWER:"
- If you need to use a tool, start your response with "NEED ACTION:"

Be explicit about your reasoning. What do you need to do?

THOUGHT:
"""


@dataclass(frozen=True)
class StepwiseStep:
    """One entry of the reasoning trace."""

    kind: StepwiseStepKind
    content: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.content}"


def wants_action(thought: str) -> bool:
    upper = thought.upper()
    return any(marker in upper for marker in ACTION_MARKERS)


def extract_final_answer(thought: str) -> str:
    """Text after FINAL ANSWER:, or the whole thought when nothing follows."""
    index = thought.upper().find(FINAL_ANSWER_MARKER)
    if index < 0:
        return thought
    answer = thought[index + len(FINAL_ANSWER_MARKER) :].strip()
    return answer or thought


class StepwiseStrategy(ReasoningStrategy):
    """Reason and act in THOUGHT -> ACTION -> OBSERVATION cycles.

    Stops at the first thought carrying FINAL ANSWER:, or after
    max_iterations thoughts. With a policy advisor, tool actions per query
    are capped at its optimal chain length.
    """

    kind = StrategyKind.REACT

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        max_iterations = self._options.get("max_iterations") or DEFAULT_MAX_ITERATIONS
        self.max_iterations = max_iterations if max_iterations > 0 else DEFAULT_MAX_ITERATIONS
        self._steps: list[StepwiseStep] = []

    @property
    def steps(self) -> list[StepwiseStep]:
        """Trace of the most recent query."""
        return list(self._steps)

    def build_system_prompt(self) -> str:
        return (
            "You are a ReAct (Reasoning + Acting) agent. You work in cycles of "
            "THOUGHT -> ACTION -> OBSERVATION.\n\n"
            "IMPORTANT RULES:\n"
            "- Think before acting\n"
            "- Act only when necessary\n"
            "- Continue until you have enough information to answer\n"
            '- Use "NEED ACTION:" when you need tools\n'
            '- Use "FINAL ANSWER:" when you can answer\n\n'
            f"AVAILABLE TOOLS:\n{self.tool_lines()}\n"
        )

    def close(self) -> None:
        self._steps.clear()

    async def process_query(self, query: str) -> str:
        self._steps = []
        self._record("USER", query.strip() or "[EMPTY_QUERY]")

        action_limit = self.max_iterations
        if self._advisor is not None:
            action_limit = self._advisor.optimal_chain_length(query)
        actions = 0

        try:
            for iteration in range(1, self.max_iterations + 1):
                self._log(LogLevel.DEBUG, f"Iteration {iteration}/{self.max_iterations}")

                response = await self._llm.generate(self._thought_prompt(query))
                if not response.success:
                    return self._fail(f"LLM reasoning failed: {response.error_message}")
                thought = response.text
                self._add(StepwiseStepKind.THOUGHT, thought)

                if FINAL_ANSWER_MARKER in thought.upper():
                    answer = extract_final_answer(thought)
                    self._add(StepwiseStepKind.FINAL_ANSWER, answer)
                    self._record("ASSISTANT", answer)
                    return answer

                if not wants_action(thought):
                    continue

                if actions >= action_limit:
                    self._add(
                        StepwiseStepKind.OBSERVATION,
                        f"Action limit reached ({action_limit}); answer with FINAL ANSWER:",
                    )
                    continue

                call = await self._decide_action(thought)
                if call is None:
                    self._log(LogLevel.DEBUG, "No action could be parsed from the decision")
                    continue

                actions += 1
                self._add(
                    StepwiseStepKind.ACTION,
                    f"{call.tool_name}({format_arguments(call.arguments)})",
                )
                result = await self.run_tool(call)
                self._add(StepwiseStepKind.OBSERVATION, result.describe())
        except Exception as e:
            self._log(LogLevel.ERROR, f"Error processing query: {e}")
            return self._fail(f"I encountered an error while processing your request: {e}")

        thoughts = [s.content for s in self._steps if s.kind == StepwiseStepKind.THOUGHT]
        answer = FALLBACK_PREFIX + "; ".join(thoughts)
        self._record("ASSISTANT", answer)
        return answer

    def _add(self, kind: StepwiseStepKind, content: str) -> None:
        self._steps.append(StepwiseStep(kind, content))

    def _fail(self, message: str) -> str:
        self._record("ERROR", message)
        return message

    def _thought_prompt(self, query: str) -> str:
        parts = [
            "You are in a ReAct (Reasoning + Acting) cycle. Think step by step.\n\n",
            f"ORIGINAL QUESTION: {query}\n\n",
        ]
        if self._steps:
            parts.append("EXECUTION HISTORY:\n")
            parts.extend(f"{step}\n" for step in self._steps)
            parts.append("\n")
        parts.append(f"AVAILABLE TOOLS:\n{self.tool_lines()}\n\n")
        parts.append(_THOUGHT_GUIDANCE)
        return "".join(parts)

    def _action_prompt(self, thought: str) -> str:
        return (
            "Based on your thinking, choose and execute the appropriate action.\n\n"
            f"YOUR THOUGHT: {thought}\n\n"
            f"AVAILABLE TOOLS:\n{self.tool_lines()}\n\n"
            "Respond with the exact function call format:\n"
            'FUNCTION_CALL:tool_name:{"parameter":"value"}\n'
        )

    async def _decide_action(self, thought: str) -> ToolCall | None:
        """Ask the model which tool to run for a thought.

        Native tool calls win; otherwise the text is parsed. An empty
        answer is retried once without tool declarations.
        """
        prompt = self._action_prompt(thought)
        response = await self._llm.generate_with_tools(prompt, self.tool_definitions())
        if response.success and response.tool_calls:
            return response.tool_calls[0]

        text = response.text if response.success else ""
        if not text:
            retry = await self._llm.generate(
                prompt + "\nRespond only with the FUNCTION_CALL line."
            )
            text = retry.text if retry.success else ""
        return parse_action(text)
