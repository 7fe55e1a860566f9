"""Entity detection in queries and entity support inferred from tool parameters."""

import re
from collections.abc import Iterable

from toolmind_core.types import EntityType

_URL = re.compile(r"https?://")
_FILE = re.compile(r"\w+\.(txt|json|xml|csv|log)")
_NUMBER = re.compile(r"\d+")
_TIME = re.compile(
    r"hoje|agora|now|time|hora|when|date|today|tomorrow|yesterday|\d{4}-\d{2}-\d{2}"
)
_EMAIL = re.compile(r"\b[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}\b")
_CAPITALIZED = re.compile(r"\b[A-Z][a-z]+\b")
_SENTENCE_END = (".", "!", "?")

# Parameter-name fragments -> entity kind the parameter accepts
PARAMETER_PATTERNS: dict[EntityType, tuple[str, ...]] = {
    EntityType.URL: ("url", "link"),
    EntityType.FILE: ("file", "path"),
    EntityType.LOCATION: ("location", "latitude", "longitude", "city"),
    EntityType.TIME: ("time", "date", "timezone"),
    EntityType.EMAIL: ("email", "mail"),
    EntityType.NUMBER: ("number", "amount", "count"),
}


def _mentions_location(query: str) -> bool:
    # A capitalized word that does not open a sentence
    for match in _CAPITALIZED.finditer(query):
        before = query[: match.start()].rstrip()
        if before and not before.endswith(_SENTENCE_END):
            return True
    return False


def detect_entities(query: str) -> set[EntityType]:
    """Detect the entity kinds mentioned in a query.

    Pattern checks run on the lowercased query, except LOCATION which looks
    for capitalized words in the raw text.

    Args:
        query: Raw user query

    Returns:
        Set of detected entity kinds
    """
    lowered = query.lower()
    entities: set[EntityType] = set()
    if _URL.search(lowered):
        entities.add(EntityType.URL)
    if _FILE.search(lowered):
        entities.add(EntityType.FILE)
    if _mentions_location(query):
        entities.add(EntityType.LOCATION)
    if _NUMBER.search(lowered):
        entities.add(EntityType.NUMBER)
    if _TIME.search(lowered):
        entities.add(EntityType.TIME)
    if _EMAIL.search(lowered):
        entities.add(EntityType.EMAIL)
    return entities


def entities_for_parameters(parameter_names: Iterable[str]) -> set[EntityType]:
    """Infer the entity kinds a tool accepts from its parameter names."""
    entities: set[EntityType] = set()
    for name in parameter_names:
        lowered = name.lower()
        for entity, fragments in PARAMETER_PATTERNS.items():
            if any(fragment in lowered for fragment in fragments):
                entities.add(entity)
    return entities
