"""
MCP server exposing the Beacon tools over stdio.

Errors raised by a tool surface to the MCP client as an error result whose
text is the exception message.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from discord import Forbidden, HTTPException
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import ValidationError

from beacon import __version__
from beacon.errors import DiscordActionError, InvalidInputError, ToolError
from beacon.tools import ToolSpec

logger = logging.getLogger("beacon.server")

SERVER_NAME = "beacon"


def describe_validation_error(error: ValidationError) -> str:
    """Turn the first pydantic error into a caller-facing message."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "arguments"
    if first["type"] == "missing":
        return f"{field} cannot be null"
    return f"{field}: {first['msg']}"


class ToolDispatcher:
    """Looks tools up by name and normalizes their failures into ToolError."""

    def __init__(self, tools: list[ToolSpec]):
        self.tools = {tool.name: tool for tool in tools}
        if len(self.tools) != len(tools):
            raise ValueError("Tool names must be unique")

    def list_tools(self) -> list[Tool]:
        return [
            Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema())
            for tool in self.tools.values()
        ]

    async def call(self, name: str, arguments: Optional[dict[str, Any]]) -> str:
        """
        Run one tool call.

        Args:
            name: Tool name.
            arguments: Raw arguments as sent by the client.

        Returns:
            The tool's text output.

        Raises:
            ToolError: For every failure, with the original exception chained.
        """
        tool = self.tools.get(name)
        if tool is None:
            raise InvalidInputError(f"Unknown tool: {name}")

        logger.info(f"Tool call: {name}")
        try:
            return await tool.invoke(arguments)
        except ValidationError as e:
            error = InvalidInputError(describe_validation_error(e))
            logger.warning(f"Tool {name} rejected input: {error}")
            raise error from e
        except Forbidden as e:
            logger.warning(f"Tool {name} was forbidden: {e.text}")
            raise DiscordActionError(f"Bot lacks permission to {name.replace('_', ' ')}") from e
        except HTTPException as e:
            logger.warning(f"Tool {name} hit a Discord API error: {e.text}")
            raise DiscordActionError(f"Discord API error: {e.text}") from e
        except ToolError as e:
            logger.warning(f"Tool {name} failed: {e}")
            raise


def create_server(tools: list[ToolSpec]) -> Server:
    """Build the low-level MCP server around a set of tools."""
    dispatcher = ToolDispatcher(tools)
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return dispatcher.list_tools()

    # Arguments are validated by the tools' pydantic models.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        text = await dispatcher.call(name, arguments)
        return [TextContent(type="text", text=text)]

    return server


async def serve_stdio(server: Server) -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info("MCP stdio transport ready")
        await server.run(read_stream, write_stream, server.create_initialization_options())
