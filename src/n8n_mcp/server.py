"""FastMCP server initialization for n8n-mcp.

This module initializes the MCP server and manages shared resources via lifespan context.
The tool catalog lives in the tools module; this module only publishes it.

Following the official Anthropic Python SDK patterns:
- Lifespan context manager for resource initialization and cleanup
- Context injection for access to shared resources
- FastMCP server with stdio transport

Tools are not registered with @mcp.tool() decorators. The frozen ToolRegistry
is the single source of truth: tools/list is generated from its descriptors and
tools/call is routed through the Dispatcher, which validates the arguments
against those same descriptors.
"""

import json
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent, Tool, ToolAnnotations

from .config import ConfigError, get_log_level, load_config
from .context import AppContext, AppContextType
from .engine import Dispatcher, N8nClient, ToolCallRequest, ToolDescriptor
from .tools import create_default_registry

logger = logging.getLogger(__name__)

INSTRUCTIONS = """\
This server provides tools that interact with an n8n server.

n8n is an automation service that can be used on n8n's cloud offering or self-hosted.
Using this server, users can create, retrieve (in bulk and by id), update, activate,
deactivate, run and delete workflows, and read or replace the tags of a workflow.
They can also retrieve (in bulk and by id) and delete executions, and retrieve,
create, update and delete tags.

Every tool returns a JSON envelope with "status" set to "success" or "failure".
Failures carry a machine-readable "kind" and an "error" message.

If the user asks you to update or run a workflow (or assign a tag), you may need to
list workflows first to see which workflows exist.
"""

# =============================================================================
# Shared Resources and Lifespan Management
# =============================================================================


@asynccontextmanager
async def app_lifespan(_server: FastMCP) -> AsyncIterator[AppContext]:
    """Manage application lifecycle with resource initialization and cleanup.

    This lifespan context manager:
    1. Loads and validates configuration from the environment
    2. Builds and freezes the tool registry
    3. Opens the shared n8n HTTP client
    4. Yields context to make resources available to tool calls
    5. Closes the HTTP client on shutdown

    Args:
        _server: FastMCP server instance (unused, required by FastMCP signature)

    Yields:
        AppContext with initialized resources

    Raises:
        ConfigError: If required environment variables are missing or invalid
    """
    logger.info("Initializing MCP server resources...")

    config = load_config()
    logger.info(f"n8n instance: {config.base_url}")
    logger.info(
        f"Timeouts: request={config.request_timeout}s, tool={config.tool_timeout}s"
    )
    if not config.verify_ssl:
        logger.warning("TLS certificate verification is disabled (N8N_MCP_VERIFY_SSL)")
    if config.user and config.password is None:
        logger.warning("N8N_USER is set without N8N_PASSWORD; webhook calls will not use basic auth")

    registry = create_default_registry()
    client = N8nClient.from_config(config)
    dispatcher = Dispatcher(registry, client, default_timeout=config.tool_timeout)
    logger.info(f"Registered {len(registry)} tools")

    app_context = AppContext(
        config=config,
        registry=registry,
        client=client,
        dispatcher=dispatcher,
    )

    try:
        yield app_context
    finally:
        logger.info("Shutting down MCP server...")
        await client.aclose()
        logger.info("HTTP client closed")


# =============================================================================
# MCP Tool Surface
# =============================================================================


def to_mcp_tool(descriptor: ToolDescriptor) -> Tool:
    """Build the MCP tool listing entry for a descriptor."""
    hints = descriptor.hints
    return Tool(
        name=descriptor.name,
        title=hints.title,
        description=descriptor.description,
        inputSchema=descriptor.input_schema(),
        annotations=ToolAnnotations(
            title=hints.title,
            readOnlyHint=hints.read_only,
            destructiveHint=hints.destructive,
            idempotentHint=hints.idempotent,
            openWorldHint=hints.open_world,
        ),
    )


class N8nMCP(FastMCP):
    """FastMCP server whose tools come from the registry in the lifespan context."""

    def app_context(self) -> AppContext:
        ctx: AppContextType = self.get_context()
        return ctx.request_context.lifespan_context

    async def list_tools(self) -> list[Tool]:
        """List every registered tool with its generated input schema."""
        registry = self.app_context().registry
        return [to_mcp_tool(descriptor) for descriptor in registry.descriptors()]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
        """Dispatch a tool call and wrap the envelope as an MCP result.

        Failures are returned with isError set; they never raise out of here.
        Cancellation of the request task still propagates to the MCP runtime.
        """
        app_context = self.app_context()
        result = await app_context.dispatcher.dispatch(
            ToolCallRequest(tool_name=name, arguments=arguments or {}),
            timeout=app_context.config.tool_timeout,
        )
        response = result.to_response()
        return CallToolResult(
            content=[TextContent(type="text", text=json.dumps(response, indent=2))],
            structuredContent=response,
            isError=result.is_failure,
        )


# Initialize MCP server with lifespan management
# Following Python MCP naming convention: {service}_mcp
mcp = N8nMCP("n8n_mcp", instructions=INSTRUCTIONS, lifespan=app_lifespan)


# =============================================================================
# Server Entry Point
# =============================================================================


def main() -> None:
    """Entry point for running the MCP server.

    This function is called when the server is run directly via:
    - python -m n8n_mcp
    - n8n-mcp (console script declared in pyproject.toml)

    Defaults to stdio transport for MCP protocol communication.
    """
    log_level_str, warning = get_log_level()
    if warning:
        print(warning, file=sys.stderr)

    # Configure logging to stderr (MCP requirement). FastMCP already installed
    # a root handler when ``mcp`` was constructed, hence force=True.
    logging.basicConfig(
        level=getattr(logging, log_level_str),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )

    # Fail before the transport starts so the client sees a clear message
    try:
        load_config()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info("Starting MCP server (press Ctrl+C to stop)...")

    try:
        # anyio.run() (used internally by mcp.run()) raises KeyboardInterrupt on SIGINT
        mcp.run()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down gracefully...")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)

    logger.info("Server shutdown complete")


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "INSTRUCTIONS",
    "N8nMCP",
    "app_lifespan",
    "main",
    "mcp",
    "to_mcp_tool",
]
