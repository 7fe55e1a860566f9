"""toolmind core - tool-augmented inference over MCP tool servers.

A language model answers user queries with the help of tools exposed by
MCP servers, using one of three reasoning strategies.
"""

from toolmind_core.engine import ChatEngine, ChatEngineBuilder

__version__ = "1.0.0"
__all__ = ["__version__", "ChatEngine", "ChatEngineBuilder"]
