"""Reflection strategy - generate, evaluate and improve until good enough."""

import asyncio
from typing import Any

from toolmind_core.errors import ReflectionError
from toolmind_core.errors.reflection import (
    evaluation_failed,
    improvement_failed,
    initial_failed,
    timed_out,
)
from toolmind_core.llm import LlmResponse, ToolCall
from toolmind_core.types import LogLevel, ReflectionPhase, ReflectionStepKind, StrategyKind

from ..base import ReasoningStrategy
from ..parsing import FUNCTION_CALL_PREFIX, find_prefixed_calls
from .criteria import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_SCORE_THRESHOLD,
    SYNTHESIS_TEMPLATE,
    build_evaluation_prompt,
    build_improvement_prompt,
    build_initial_prompt,
    query_needs_tools,
)
from .evaluation import EvaluationResult, ReflectionStep


def should_continue(
    iteration: int,
    evaluation: EvaluationResult,
    max_iterations: int,
    score_threshold: float,
) -> bool:
    """Decide whether another improvement cycle runs after an evaluation."""
    return (
        iteration < max_iterations
        and evaluation.overall_score < score_threshold
        and evaluation.needs_improvement
    )


class ReflectionStrategy(ReasoningStrategy):
    """Generate an answer, then evaluate and improve it iteratively.

    State machine: Initial -> Evaluating -> (Improving -> Evaluating)* -> Final.
    Each query keeps its own step log, published as ``steps`` when the
    query ends. Empty or failed model output raises ReflectionError tagged
    with phase, iteration and query.

    Options:
        score_threshold: Stop once the overall score reaches this (default 0.6)
        max_iterations: Maximum number of evaluations (default 3)
        timeout_seconds: Per model call timeout, None to wait indefinitely
    """

    kind = StrategyKind.REFLECTION

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        max_iterations = self._options.get("max_iterations") or DEFAULT_MAX_ITERATIONS
        self.max_iterations = max_iterations if max_iterations > 0 else DEFAULT_MAX_ITERATIONS
        threshold = self._options.get("score_threshold")
        self.score_threshold = DEFAULT_SCORE_THRESHOLD if threshold is None else float(threshold)
        self.timeout_seconds: float | None = self._options.get("timeout_seconds")
        self._steps: list[ReflectionStep] = []

    @property
    def steps(self) -> list[ReflectionStep]:
        """Steps of the most recently finished query, in order."""
        return list(self._steps)

    def build_system_prompt(self) -> str:
        return (
            "You are a helpful AI assistant with reflection capabilities. "
            "You analyze and improve responses iteratively."
        )

    def close(self) -> None:
        self._steps.clear()

    async def process_query(self, query: str) -> str:
        """Run the reflection loop.

        Steps and tool-use tracking are local to the query; the step log is
        published when the query ends, so concurrent queries on one
        strategy do not mix.

        Raises:
            ReflectionError: If a phase gets no usable model output
        """
        steps: list[ReflectionStep] = []
        self._record("USER", query.strip() or "[EMPTY_QUERY]")

        try:
            response, used_tools = await self._generate(
                build_initial_prompt(query, self.tool_lines()),
                ReflectionPhase.INITIAL,
                query,
                0,
            )
            steps.append(ReflectionStep(ReflectionStepKind.INITIAL, 0, content=response))

            iteration = 1
            while True:
                evaluation = await self._evaluate(query, response, used_tools, iteration)
                steps.append(
                    ReflectionStep(
                        ReflectionStepKind.EVALUATION,
                        iteration,
                        content=evaluation.feedback,
                        evaluation=evaluation,
                    )
                )
                self._log(
                    LogLevel.INFO,
                    f"Iteration {iteration}/{self.max_iterations}: "
                    f"score={evaluation.overall_score:.2f}, threshold={self.score_threshold}",
                )
                if not should_continue(
                    iteration, evaluation, self.max_iterations, self.score_threshold
                ):
                    break

                iteration += 1
                response, used_tools = await self._generate(
                    build_improvement_prompt(
                        query,
                        response,
                        evaluation.feedback,
                        evaluation.suggestions,
                        self.tool_lines(),
                    ),
                    ReflectionPhase.IMPROVEMENT,
                    query,
                    iteration,
                )
                steps.append(
                    ReflectionStep(ReflectionStepKind.IMPROVEMENT, iteration, content=response)
                )
        except ReflectionError as e:
            self._record("ERROR", e.message)
            self._steps = steps
            raise

        steps.append(ReflectionStep(ReflectionStepKind.FINAL, iteration, content=response))
        self._steps = steps
        self._record("ASSISTANT", response)
        return response

    # ─────────────────────────────────────────────────────────────
    # Phases
    # ─────────────────────────────────────────────────────────────

    async def _generate(
        self, prompt: str, phase: ReflectionPhase, query: str, iteration: int
    ) -> tuple[str, bool]:
        """Produce an answer with tool use; tool results are synthesized.

        Returns:
            Answer text and whether any tool was called for it
        """
        response = await self._call(prompt, phase, query, iteration, with_tools=True)

        calls: list[ToolCall] = list(response.tool_calls)
        if not calls:
            calls = find_prefixed_calls(response.text, FUNCTION_CALL_PREFIX)
        if not calls:
            return response.text, False

        results = []
        for call in calls:
            result = await self.run_tool(call)
            if result.success:
                results.append(f"Tool {call.tool_name} result: {result.result}")
            else:
                results.append(f"Tool {call.tool_name} failed: {result.error_message}")

        synthesis = await self._call(
            SYNTHESIS_TEMPLATE.format(query=query, results="\n".join(results)),
            phase,
            query,
            iteration,
        )
        return synthesis.text, True

    async def _evaluate(
        self, query: str, response: str, used_tools: bool, iteration: int
    ) -> EvaluationResult:
        prompt = build_evaluation_prompt(query, response, self.tool_lines())
        raw = await self._call(prompt, ReflectionPhase.EVALUATION, query, iteration)
        evaluation = EvaluationResult.parse(raw.text, iteration, query)

        shows_tool_use = used_tools or FUNCTION_CALL_PREFIX in response
        if query_needs_tools(query) and not shows_tool_use:
            evaluation = evaluation.without_tool_usage()
        return evaluation

    async def _call(
        self,
        prompt: str,
        phase: ReflectionPhase,
        query: str,
        iteration: int,
        with_tools: bool = False,
    ) -> LlmResponse:
        """One model round trip; failures become phase-tagged errors."""
        if with_tools:
            request = self._llm.generate_with_tools(prompt, self.tool_definitions())
        else:
            request = self._llm.generate(prompt)

        try:
            if self.timeout_seconds:
                response = await asyncio.wait_for(request, timeout=self.timeout_seconds)
            else:
                response = await request
        except TimeoutError as e:
            raise timed_out(query, iteration, self.timeout_seconds or 0) from e

        if not response.success:
            raise self._phase_error(phase, query, iteration, response.error_message or "model error")
        if not response.text and not response.tool_calls:
            raise self._phase_error(phase, query, iteration, "empty model response")
        return response

    @staticmethod
    def _phase_error(
        phase: ReflectionPhase, query: str, iteration: int, reason: str
    ) -> ReflectionError:
        if phase == ReflectionPhase.INITIAL:
            return initial_failed(query, reason)
        if phase == ReflectionPhase.IMPROVEMENT:
            return improvement_failed(query, iteration, reason)
        return evaluation_failed(query, iteration, reason)
