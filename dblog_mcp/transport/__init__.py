"""Transport implementations for MCP server."""

from .stdio_server import StdioTransport

__all__ = [
    'StdioTransport'
]
