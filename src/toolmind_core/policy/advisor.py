"""Policy advisor - operating parameters derived from catalog metadata."""

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from toolmind_core.types import EntityType, LogLevel, ServerPriority

from .entities import detect_entities, entities_for_parameters

if TYPE_CHECKING:
    from toolmind_core.config.models import ServerDescriptor
    from toolmind_core.logging import EngineLogger
    from toolmind_core.mcp import ToolCatalog
    from toolmind_core.mcp.types import ToolSpec

DEFAULT_RETRIES = 2
DEFAULT_CHAIN_LENGTH = 3
DEFAULT_TIMEZONE = "UTC"

_RETRIES_BY_PRIORITY = {
    ServerPriority.HIGH: 5,
    ServerPriority.MEDIUM: 3,
    ServerPriority.LOW: 2,
    ServerPriority.UNCLASSIFIED: 2,
}

# Server description hint -> timezone
_TIMEZONE_HINTS = (
    (("brazil", "brasil"), "America/Sao_Paulo"),
    (("europe",), "Europe/London"),
    (("asia",), "Asia/Tokyo"),
)

_VALIDATION_KEYWORDS = ("validation", "required", "invalid")


@dataclass(frozen=True)
class QueryComplexity:
    """How many tools and servers a query appears to need."""

    tool_count: int
    requires_multiple_servers: bool
    is_complex: bool
    relevant_tools: list[str] = field(default_factory=list)
    entity_types: frozenset[EntityType] = frozenset()


class PolicyAdvisor:
    """Adaptive heuristics over the tool catalog.

    Schema and entity lookups are memoized per tool until clear_cache().
    """

    def __init__(self, catalog: "ToolCatalog", logger: "EngineLogger | None" = None):
        self._catalog = catalog
        self._logger = logger
        self._lock = threading.Lock()
        self._schema_cache: dict[str, dict[str, Any] | None] = {}
        self._entity_cache: dict[str, frozenset[EntityType]] = {}

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        if self._logger:
            self._logger._log(level, "policy", message, context)

    # ─────────────────────────────────────────────────────────────
    # Operating parameters
    # ─────────────────────────────────────────────────────────────

    def optimal_retries(self, tool_name: str) -> int:
        """Retry budget from the owning server's priority class.

        Args:
            tool_name: Simple or namespaced tool name

        Returns:
            5 for HIGH, 3 for MEDIUM, 2 otherwise or when the tool is unknown
        """
        descriptor = self._descriptor_for(tool_name)
        if descriptor is None:
            return DEFAULT_RETRIES
        return _RETRIES_BY_PRIORITY.get(descriptor.priority, DEFAULT_RETRIES)

    def default_timezone(self, tool_name: str) -> str:
        """Timezone for a tool: server TIMEZONE env, then description hints, then UTC."""
        descriptor = self._descriptor_for(tool_name)
        if descriptor is None:
            return DEFAULT_TIMEZONE

        timezone = descriptor.env.get("TIMEZONE")
        if timezone:
            return timezone

        description = descriptor.description.lower()
        for hints, zone in _TIMEZONE_HINTS:
            if any(hint in description for hint in hints):
                return zone
        return DEFAULT_TIMEZONE

    def optimal_chain_length(self, query: str) -> int:
        """Number of tool steps a multi-step strategy should plan for.

        Returns:
            5 when several servers are needed, 4 for more than two tools,
            3 for two tools, 2 otherwise; 3 if the analysis fails
        """
        try:
            complexity = self.query_complexity(query)
        except Exception as e:
            self._log(LogLevel.WARN, f"Chain length analysis failed: {e}")
            return DEFAULT_CHAIN_LENGTH

        if complexity.requires_multiple_servers:
            return 5
        if complexity.tool_count > 2:
            return 4
        if complexity.tool_count > 1:
            return 3
        return 2

    # ─────────────────────────────────────────────────────────────
    # Query analysis
    # ─────────────────────────────────────────────────────────────

    def query_complexity(self, query: str) -> QueryComplexity:
        """Count the connected tools relevant to a query.

        A tool is relevant when a query word longer than three characters
        appears in its description, or its simple name and the query contain
        one another.

        Args:
            query: Raw user query

        Returns:
            QueryComplexity; is_complex holds for more than one tool, more
            than one server, or more than one detected entity kind
        """
        lowered = query.lower()
        words = [w for w in lowered.split() if len(w) > 3]
        connected = set(self._catalog.connected_servers())

        relevant: list[str] = []
        servers: set[str] = set()
        for spec in self._catalog.list_tools():
            if spec.server not in connected:
                continue
            if self._is_relevant(lowered, words, spec):
                relevant.append(spec.qualified_name)
                servers.add(spec.server)

        entities = detect_entities(query)
        multiple = len(servers) > 1
        return QueryComplexity(
            tool_count=len(relevant),
            requires_multiple_servers=multiple,
            is_complex=len(relevant) > 1 or multiple or len(entities) > 1,
            relevant_tools=relevant,
            entity_types=frozenset(entities),
        )

    def is_complex(self, query: str) -> bool:
        return self.query_complexity(query).is_complex

    @staticmethod
    def _is_relevant(lowered_query: str, words: list[str], spec: "ToolSpec") -> bool:
        description = spec.description.lower()
        if any(word in description for word in words):
            return True
        name = spec.name.lower()
        return bool(name) and bool(lowered_query) and (
            name in lowered_query or lowered_query in name
        )

    def tool_relevance(self, query: str, tool_name: str) -> float:
        """Score how well a tool fits a query.

        Every (query word, description word) pair adds 0.3 on an exact match
        and 0.1 when one contains the other; query words of three characters
        or fewer are ignored. A server description overlapping the query
        adds 0.4, and each entity kind both detected in the query and
        accepted by the tool adds 0.2.

        Args:
            query: Raw user query
            tool_name: Simple or namespaced tool name

        Returns:
            Score in [0, 1]; 0.0 for unknown tools
        """
        resolved = self._catalog.resolve(tool_name)
        spec = self._catalog.lookup(resolved) if resolved else None
        descriptor = self._catalog.descriptor(spec.server) if spec else None
        if spec is None or descriptor is None:
            return 0.0

        lowered = query.lower()
        relevance = 0.0

        description_words = spec.description.lower().split()
        for query_word in lowered.split():
            if len(query_word) <= 3:
                continue
            for word in description_words:
                if query_word == word:
                    relevance += 0.3
                elif query_word in word or word in query_word:
                    relevance += 0.1

        server_description = descriptor.description.lower()
        if server_description and (server_description in lowered or lowered in server_description):
            relevance += 0.4

        supported = self.supported_entities(spec.qualified_name)
        for entity in detect_entities(query):
            if entity in supported:
                relevance += 0.2

        return min(relevance, 1.0)

    # ─────────────────────────────────────────────────────────────
    # Schema-derived knowledge
    # ─────────────────────────────────────────────────────────────

    def supported_entities(self, tool_name: str) -> frozenset[EntityType]:
        """Entity kinds a tool accepts, inferred from its parameter names."""
        with self._lock:
            cached = self._entity_cache.get(tool_name)
        if cached is not None:
            return cached

        schema = self._schema_for(tool_name) or {}
        properties = schema.get("properties") or {}
        entities = frozenset(entities_for_parameters(properties))

        with self._lock:
            self._entity_cache[tool_name] = entities
        return entities

    @staticmethod
    def detect_entities(query: str) -> set[EntityType]:
        return detect_entities(query)

    def is_validation_error(self, message: str | None, tool_name: str) -> bool:
        """Decide whether a tool error message reports bad arguments.

        With a known schema, the message must name one of the schema's
        property or required field names verbatim. Without one, it must
        contain validation, required or invalid.
        """
        if not message:
            return False

        schema = self._schema_for(tool_name)
        if not schema:
            lowered = message.lower()
            return any(keyword in lowered for keyword in _VALIDATION_KEYWORDS)

        for field_name in schema.get("properties") or {}:
            if field_name in message:
                return True
        for field_name in schema.get("required") or []:
            if str(field_name) in message:
                return True
        return False

    def clear_cache(self) -> None:
        with self._lock:
            self._schema_cache.clear()
            self._entity_cache.clear()
        self._log(LogLevel.INFO, "Policy advisor cache cleared")

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "cached_schemas": len(self._schema_cache),
                "cached_entities": len(self._entity_cache),
                "connected_servers": len(self._catalog.connected_servers()),
            }

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def _descriptor_for(self, tool_name: str) -> "ServerDescriptor | None":
        resolved = self._catalog.resolve(tool_name)
        server = self._catalog.server_of(resolved) if resolved else None
        return self._catalog.descriptor(server) if server else None

    def _schema_for(self, tool_name: str) -> dict[str, Any] | None:
        with self._lock:
            if tool_name in self._schema_cache:
                return self._schema_cache[tool_name]

        resolved = self._catalog.resolve(tool_name)
        spec = self._catalog.lookup(resolved) if resolved else None
        schema = dict(spec.input_schema) if spec and spec.input_schema else None

        with self._lock:
            self._schema_cache[tool_name] = schema
        return schema
