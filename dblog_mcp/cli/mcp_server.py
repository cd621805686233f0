"""MCP server entry point for database introspection and log queries."""

import sys
import os
import argparse
import threading
import signal
from typing import Optional

from fastmcp import FastMCP
from dblog_mcp.models.config import DatabaseConfig, ToolSettings
from dblog_mcp.services.connection_provider import ConnectionProvider
from dblog_mcp.services.health_api import HealthAPI
from dblog_mcp.services.release_notes import ReleaseNotesService
from dblog_mcp.lib import mcp_tools
from dblog_mcp.lib.prompts import code_review_message
from dblog_mcp.lib.formatting import format_error

from dblog_mcp.transport.stdio_server import StdioTransport

# Initialize logging
from dblog_mcp.lib.logging_config import setup_logging, get_logger

# Logs go to stderr; stdout carries the stdio protocol
setup_logging(
    level=os.getenv('LOG_LEVEL', 'INFO'),
    json_format=os.getenv('LOG_JSON', 'false').lower() == 'true',
    log_file=os.getenv('LOG_FILE')
)
logger = get_logger(__name__)

# Initialize MCP server
mcp = FastMCP("Database Log MCP Server")

provider: Optional[ConnectionProvider] = None
settings: Optional[ToolSettings] = None
release_notes = ReleaseNotesService()


def initialize_database():
    """Build the connection provider and tool settings from configuration."""
    global provider, settings
    try:
        config = DatabaseConfig()
        provider = ConnectionProvider(config.to_dict())
        settings = ToolSettings.from_env()
        logger.info(f"Database configuration loaded (profile: {config.current_profile.name})")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def _ensure_initialized():
    if provider is None or settings is None:
        initialize_database()


@mcp.tool(name="list_tables")
def list_tables() -> str:
    """Get a list of all tables in the database.

    Returns:
        JSON text with tableCount and tables, or "Error: <message>"
    """
    try:
        _ensure_initialized()
    except Exception as e:
        return format_error(str(e))
    return mcp_tools.list_tables(provider)


@mcp.tool(name="describe_table")
def describe_table(table_name: str) -> str:
    """Get structure information of the specified table.

    Args:
        table_name: Table name to describe (case-insensitive)

    Returns:
        JSON text with table, tableUpper, found, primaryKeyColumns,
        columnCount and columns, or "Error: <message>"
    """
    try:
        _ensure_initialized()
    except Exception as e:
        return format_error(str(e))
    return mcp_tools.describe_table(provider, table_name)


@mcp.tool(name="execute_sql")
def execute_sql(sql: str) -> str:
    """Execute a SQL statement.

    Reads (SELECT, including WITH ... SELECT) return a header line and one
    delimited line per row. Anything else returns "Success: N rows affected".

    Args:
        sql: SQL statement to execute
    """
    try:
        _ensure_initialized()
    except Exception as e:
        return format_error(str(e))
    return mcp_tools.execute_sql(provider, settings, sql)


@mcp.tool(name="retrieve_log")
def retrieve_log(comp_id: str, before_iso: str, max_records: int) -> str:
    """Retrieve log entries before a timestamp for a component identifier.

    Args:
        comp_id: Component identifier to search
        before_iso: Exclusive upper bound timestamp (ISO8601)
        max_records: Maximum number of records to return; negative for all

    Returns:
        JSON text with the matching records, newest first
    """
    try:
        _ensure_initialized()
    except Exception as e:
        return format_error(str(e))
    return mcp_tools.retrieve_log(provider, settings, comp_id, before_iso, max_records)


@mcp.tool(name="summarize_log")
def summarize_log(comp_id: str) -> str:
    """Summarize log entries for a component identifier.

    Args:
        comp_id: Component identifier to summarize

    Returns:
        JSON text with totalEntries plus the first and last entries
    """
    try:
        _ensure_initialized()
    except Exception as e:
        return format_error(str(e))
    return mcp_tools.summarize_log(provider, settings, comp_id)


@mcp.tool(name="search_log")
def search_log(start_iso: str, end_iso: str, comp_id: Optional[str] = None) -> str:
    """Search log entries inside an inclusive time window.

    Args:
        start_iso: Inclusive lower bound timestamp (ISO8601)
        end_iso: Inclusive upper bound timestamp (ISO8601)
        comp_id: Optional component identifier to narrow the search

    Returns:
        JSON text with the matching records, oldest first
    """
    try:
        _ensure_initialized()
    except Exception as e:
        return format_error(str(e))
    return mcp_tools.search_log(provider, settings, start_iso, end_iso, comp_id)


@mcp.resource(
    "relnote://index",
    name="releaseNotesIndex",
    description="Lists available release note versions",
    mime_type="application/json"
)
def release_notes_index() -> str:
    return release_notes.index()


@mcp.resource(
    "relnote://{version}",
    name="releaseNotesByVersion",
    description="Markdown content for a given release version",
    mime_type="text/markdown"
)
def release_notes_by_version(version: str) -> str:
    return release_notes.read(version)


@mcp.prompt(
    name="code_review",
    description="Review a source file for correctness and good coding hygiene."
)
def code_review(file_name: str) -> str:
    """Ask for a review of the named file."""
    return code_review_message(file_name)


def run_health_api(health_api: HealthAPI):
    """Run health API in a separate thread.

    Args:
        health_api: Health API instance to run
    """
    try:
        health_api.run()
    except Exception as e:
        logger.error(f"Health API error: {e}")


def shutdown_handler(signum, frame):
    """Handle shutdown signals gracefully.

    Args:
        signum: Signal number
        frame: Current stack frame
    """
    logger.info(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def main():
    """Main entry point for the MCP server."""
    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    parser = argparse.ArgumentParser(description="Database Log MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport mode: stdio (default) or sse"
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host for SSE server (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for SSE server (default: 3000)"
    )
    parser.add_argument(
        "--health-port",
        type=int,
        default=8080,
        help="Port for health API (default: 8080)"
    )
    parser.add_argument(
        "--no-health-api",
        action="store_true",
        help="Disable health API service"
    )

    args = parser.parse_args()

    try:
        initialize_database()

        if not args.no_health_api:
            logger.info(f"Starting Health API on port {args.health_port}")
            health_api = HealthAPI(
                provider=provider,
                host=args.host,
                port=args.health_port
            )
            health_thread = threading.Thread(
                target=run_health_api,
                args=(health_api,),
                daemon=True
            )
            health_thread.start()

        if args.transport == "stdio":
            logger.info("Starting Database Log MCP Server in stdio mode...")
            StdioTransport(mcp).run()
        else:  # sse
            logger.info(f"Starting Database Log MCP Server in SSE mode on {args.host}:{args.port}")
            mcp.run(
                transport="sse",
                host=args.host,
                port=args.port
            )

    except KeyboardInterrupt:
        logger.info("Server shutdown requested via keyboard interrupt")
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
