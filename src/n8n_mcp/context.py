"""Shared context types for the MCP server.

Kept apart from server.py so tests can build an AppContext without
starting the server.
"""

from dataclasses import dataclass

from mcp.server.fastmcp import Context
from mcp.server.session import ServerSession

from .config import ServerConfig
from .engine import Dispatcher, RemoteClient, ToolRegistry


@dataclass
class AppContext:
    """Application context holding the resources shared by every tool call.

    Created once during server startup by the lifespan handler. The registry
    is frozen and the client is safe for concurrent use, so nothing here is
    mutated while requests are in flight.
    """

    config: ServerConfig
    registry: ToolRegistry
    client: RemoteClient
    dispatcher: Dispatcher


# Type alias for the FastMCP request context
AppContextType = Context[ServerSession, AppContext]


__all__ = ["AppContext", "AppContextType"]
