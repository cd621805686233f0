"""Standard I/O transport for MCP server."""

import sys
import logging
from fastmcp import FastMCP

logger = logging.getLogger(__name__)


class StdioTransport:
    """Runs a FastMCP server over stdin/stdout.

    stdout is reserved for JSON-RPC frames, so nothing here prints; all
    diagnostics go through logging, which writes to stderr.
    """

    def __init__(self, mcp_instance: FastMCP):
        self.mcp = mcp_instance

    def run(self):
        """Serve until stdin closes or the process is interrupted."""
        logger.info(f"Serving '{self.mcp.name}' over stdio")

        try:
            self.mcp.run(transport="stdio")
        except KeyboardInterrupt:
            logger.info("Stdio server shutdown requested")
        except Exception as e:
            logger.error(f"Stdio server error: {e}")
            sys.exit(1)
