"""Evaluation criteria and prompt templates for the reflection loop."""

from collections.abc import Sequence

ACCURACY = "accuracy"
COMPLETENESS = "completeness"
TOOL_USAGE = "tool_usage"
COHERENCE = "coherence"
CRITERIA = (ACCURACY, COMPLETENESS, TOOL_USAGE, COHERENCE)

DEFAULT_SCORE_THRESHOLD = 0.6
DEFAULT_MAX_ITERATIONS = 3

# Cap applied when a query needs a tool and the answer shows none
NO_TOOL_SCORE_CAP = 0.5

_TOOL_KEYWORDS = (
    # filesystem
    "file",
    "save",
    "create",
    "read",
    "arquivo",
    "salvar",
    # weather
    "weather",
    "temperature",
    "clima",
    "temperatura",
    # memory
    "remember",
    "store",
    "lembrar",
    "armazenar",
)

_INITIAL_TEMPLATE = """You are a helpful AI assistant with access to tools. Answer the user's query.

USER QUERY: {query}

AVAILABLE TOOLS:
{tools}

IMPORTANT: When you need to use tools, respond with:
FUNCTION_CALL:tool_name:{{"parameter":"value"}}

Examples:
- For weather: FUNCTION_CALL:weather_get-forecast:{{"latitude":40.7128,"longitude":-74.0060}}
- For time: FUNCTION_CALL:time_get_current_time:{{"timezone":"America/Sao_Paulo"}}

Use tools when the query requires them. Respond naturally otherwise.

RESPONSE:"""

_EVALUATION_TEMPLATE = """You are evaluating an AI assistant response. Rate it carefully.

ORIGINAL QUERY: {query}
RESPONSE TO EVALUATE: {response}
AVAILABLE TOOLS:
{tools}

CRITICAL RULE: If the query needs tools (file, weather, time operations) but response \
contains NO FUNCTION_CALL or tool results, set tool_usage=0.0 and overall_score<=0.5

EVALUATION CRITERIA (rate each 0.0-1.0):
- accuracy: How factually correct?
- completeness: Fully addresses query?
- tool_usage: Tools used when needed? (Check for FUNCTION_CALL: or tool results)
- coherence: Clear and structured?

JSON RESPONSE:
{{
    "overall_score": 0.85,
    "criteria_scores": {{
        "accuracy": 0.9,
        "completeness": 0.8,
        "tool_usage": 0.9,
        "coherence": 0.8
    }},
    "feedback": "Brief feedback",
    "suggestions": ["Improvement 1", "Improvement 2"],
    "needs_improvement": true
}}

JSON only:"""

SYNTHESIS_TEMPLATE = (
    "User query: {query}\n\n"
    "Tool results:\n{results}\n\n"
    "Provide a comprehensive response based on the tool results:"
)


def query_needs_tools(query: str) -> bool:
    """Keyword check for queries that cannot be answered without a tool."""
    lowered = query.lower()
    return any(keyword in lowered for keyword in _TOOL_KEYWORDS)


def build_initial_prompt(query: str, tools: str) -> str:
    return _INITIAL_TEMPLATE.format(query=query, tools=tools)


def build_evaluation_prompt(query: str, response: str, tools: str) -> str:
    return _EVALUATION_TEMPLATE.format(query=query, response=response, tools=tools)


def build_improvement_prompt(
    query: str,
    response: str,
    feedback: str,
    suggestions: Sequence[str],
    tools: str,
) -> str:
    """Build the prompt that asks for a revised answer.

    Args:
        query: Original user query
        response: Answer being improved
        feedback: Evaluation feedback
        suggestions: Evaluation suggestions, in order
        tools: Ready-tool listing

    Returns:
        Prompt text
    """
    parts = [
        "Improve this AI response based on feedback.\n\n",
        f"ORIGINAL QUERY: {query}\n\n",
        f"ORIGINAL RESPONSE: {response}\n\n",
        f"FEEDBACK: {feedback}\n",
    ]
    if suggestions:
        parts.append("SUGGESTIONS: " + "".join(f"{s}; " for s in suggestions) + "\n")
    parts.append(f"\nAVAILABLE TOOLS:\n{tools}\n\n")
    parts.append(
        'IMPORTANT: If tools are needed, use FUNCTION_CALL:tool_name:{"param":"value"}\n\n'
    )
    parts.append("IMPROVED RESPONSE:")
    return "".join(parts)
