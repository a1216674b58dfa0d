#!/usr/bin/env python3
"""
Todoms MCP Server
Exposes the todoms TODO service as MCP tools over stdio.
"""

import asyncio
import logging
from typing import Optional

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import TextContent
from pydantic import ValidationError

from todoms_api_client import TodomsApiClient
from todoms_config import (
    HTTP_TIMEOUT,
    SERVER_NAME,
    SERVER_VERSION,
    TODOMS_API_URL,
    TODOMS_EMAIL,
    TODOMS_PASSWORD,
    setup_logging,
)
from todoms_models import LoginRequest
from todoms_repository import TodomsRepository
from todoms_tools import UnknownToolError, dispatch_tool, list_tools

logger = logging.getLogger(__name__)


def create_server(repository: TodomsRepository) -> Server:
    """Build an MCP server whose tools all act on the given repository."""
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools():
        """List available todoms tools."""
        return list_tools()

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict | None = None):
        """Handle tool execution."""
        try:
            return await dispatch_tool(repository, name, arguments)
        except UnknownToolError:
            # Reported to the host by the MCP framework
            raise
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: Tool execution failed: {str(e)}")]

    return server


async def login_from_env(
    repository: TodomsRepository,
    email: Optional[str] = TODOMS_EMAIL,
    password: Optional[str] = TODOMS_PASSWORD,
) -> bool:
    """Log in with configured credentials, if any. Returns whether a session was opened."""
    if not (email and password):
        logger.info("No TODOMS_EMAIL/TODOMS_PASSWORD configured - waiting for the login tool")
        return False

    try:
        request = LoginRequest(email=email, password=password)
    except ValidationError as e:
        logger.error(f"TODOMS_EMAIL/TODOMS_PASSWORD are invalid: {e.error_count()} error(s)")
        return False

    response = await repository.login(request)
    if not response.ok:
        logger.error(f"Startup login failed: {response.error.message}")
        return False
    return True


async def main():
    """Run the todoms MCP server."""
    log_file = setup_logging()
    logger.info(f"=== Todoms MCP Server Starting - Log file: {log_file} ===")
    logger.info(f"Using todoms API at {TODOMS_API_URL}")

    repository = TodomsRepository(TodomsApiClient(TODOMS_API_URL, HTTP_TIMEOUT))
    await login_from_env(repository)

    server = create_server(repository)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version=SERVER_VERSION,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={}
                ),
            ),
        )


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
