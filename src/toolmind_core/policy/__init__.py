"""toolmind policy advisor - adaptive heuristics over catalog metadata."""

from .advisor import (
    DEFAULT_CHAIN_LENGTH,
    DEFAULT_RETRIES,
    DEFAULT_TIMEZONE,
    PolicyAdvisor,
    QueryComplexity,
)
from .entities import PARAMETER_PATTERNS, detect_entities, entities_for_parameters

__all__ = [
    # Advisor
    "PolicyAdvisor",
    "QueryComplexity",
    # Defaults
    "DEFAULT_RETRIES",
    "DEFAULT_CHAIN_LENGTH",
    "DEFAULT_TIMEZONE",
    # Entities
    "detect_entities",
    "entities_for_parameters",
    "PARAMETER_PATTERNS",
]
