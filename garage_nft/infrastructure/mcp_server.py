"""
Infrastructure Layer: MCP stdio server
Publishes the tool registry over the Model Context Protocol.
"""
from typing import Any, List

import structlog
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from garage_nft.application.tools import ToolRegistry

logger = structlog.get_logger()

SERVER_NAME = "garage-nft-mcp-server"


class ToolCallError(Exception):
    """Carries an `Error:` text back through the SDK, which flags it isError"""


def create_server(registry: ToolRegistry) -> Server:
    app = Server(SERVER_NAME)

    @app.list_tools()
    async def list_tools() -> List[Tool]:
        return [
            Tool(name=spec.name, description=spec.description, inputSchema=spec.input_schema())
            for spec in registry.list_tools()
        ]

    # The registry validates arguments itself so failures keep the `Error:` form
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Any) -> List[TextContent]:
        result = await registry.call(name, arguments or {})
        if result.is_error:
            raise ToolCallError(result.text)
        return [TextContent(type="text", text=result.text)]

    return app


async def serve_stdio(registry: ToolRegistry) -> None:
    app = create_server(registry)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("mcp_server_running", transport="stdio", tools=len(registry.list_tools()))
        await app.run(read_stream, write_stream, app.create_initialization_options())
