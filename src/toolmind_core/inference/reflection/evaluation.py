"""Evaluation results and the reflection step log."""

import json
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from toolmind_core.errors.reflection import parsing_failed
from toolmind_core.types import ReflectionStepKind

from .criteria import NO_TOOL_SCORE_CAP, TOOL_USAGE

DEFAULT_OVERALL_SCORE = 0.5
DEFAULT_FEEDBACK = "No feedback provided"
# JSON evaluations without needs_improvement fall back to overall < this
NEEDS_IMPROVEMENT_BELOW = 0.8

# Keyword fallback for evaluations without JSON, checked in order
_KEYWORD_SCORES = (
    (("excellent", "perfect"), 0.8),
    (("good", "satisfactory"), 0.6),
    (("poor", "inadequate"), 0.3),
)
_KEYWORD_DEFAULT_SCORE = 0.4
_KEYWORD_NEEDS_IMPROVEMENT_BELOW = 0.6


def _score(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        score = float(value)
    except (TypeError, ValueError):
        return default
    return min(max(score, 0.0), 1.0)


@dataclass(frozen=True)
class EvaluationResult:
    """A scored judgment of one answer."""

    overall_score: float
    criteria_scores: dict[str, float] = field(default_factory=dict, hash=False)
    feedback: str = DEFAULT_FEEDBACK
    suggestions: tuple[str, ...] = ()
    needs_improvement: bool = True
    raw_response: str = ""

    @classmethod
    def parse(
        cls, text: str, iteration: int = -1, query: str | None = None
    ) -> "EvaluationResult":
        """Parse a model evaluation.

        The JSON object spans from the first '{' to the last '}'. Text
        without one is scored by keywords instead.

        Args:
            text: Raw model output
            iteration: Reflection iteration, for error reporting
            query: Query being answered, for error reporting

        Returns:
            EvaluationResult

        Raises:
            ReflectionError: Phase PARSING, if the JSON object is malformed
        """
        start = text.find("{")
        end = text.rfind("}")
        if start < 0 or end <= start:
            return cls.from_keywords(text)

        try:
            data = json.loads(text[start : end + 1])
        except json.JSONDecodeError as e:
            raise parsing_failed(
                text, f"Invalid evaluation JSON: {e.msg}", iteration, query
            ) from e
        if not isinstance(data, dict):
            raise parsing_failed(text, "Evaluation JSON is not an object", iteration, query)

        overall = _score(data.get("overall_score"), DEFAULT_OVERALL_SCORE)

        criteria: dict[str, float] = {}
        raw_criteria = data.get("criteria_scores")
        if isinstance(raw_criteria, dict):
            criteria = {str(k): _score(v, 0.0) for k, v in raw_criteria.items()}

        raw_suggestions = data.get("suggestions")
        suggestions = (
            tuple(str(s) for s in raw_suggestions) if isinstance(raw_suggestions, list) else ()
        )

        needs_improvement = data.get("needs_improvement")
        if not isinstance(needs_improvement, bool):
            needs_improvement = overall < NEEDS_IMPROVEMENT_BELOW

        feedback = data.get("feedback")
        return cls(
            overall_score=overall,
            criteria_scores=criteria,
            feedback=str(feedback) if feedback else DEFAULT_FEEDBACK,
            suggestions=suggestions,
            needs_improvement=needs_improvement,
            raw_response=text,
        )

    @classmethod
    def from_keywords(cls, text: str) -> "EvaluationResult":
        lowered = text.lower()
        score = _KEYWORD_DEFAULT_SCORE
        for keywords, keyword_score in _KEYWORD_SCORES:
            if any(keyword in lowered for keyword in keywords):
                score = keyword_score
                break
        return cls(
            overall_score=score,
            feedback=text,
            needs_improvement=score < _KEYWORD_NEEDS_IMPROVEMENT_BELOW,
            raw_response=text,
        )

    def without_tool_usage(self) -> "EvaluationResult":
        """Apply the missing-tool rule: tool_usage 0, overall capped at 0.5."""
        criteria = dict(self.criteria_scores)
        criteria[TOOL_USAGE] = 0.0
        return replace(
            self,
            overall_score=min(self.overall_score, NO_TOOL_SCORE_CAP),
            criteria_scores=criteria,
            needs_improvement=True,
        )


@dataclass(frozen=True)
class ReflectionStep:
    """One entry in the per-query reflection log."""

    kind: ReflectionStepKind
    iteration: int
    content: str | None = None
    evaluation: EvaluationResult | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def score(self) -> float | None:
        return self.evaluation.overall_score if self.evaluation else None
