"""MCP tool text boundary.

The tool-calling transport only carries text, so every tool here returns a
string: JSON for structured results, delimited text for SQL reads, and
``Error: <message>`` whenever the operation fails. Implementations live in
the ``tools`` package and raise ``MCPError`` subclasses; this layer logs
each invocation and turns those errors into text.

Structure:
- tools/schema.py: list_tables, describe_table
- tools/query.py: execute_sql
- tools/log.py: retrieve_log, summarize_log, search_log
"""

import functools
from typing import Callable, Optional

from dblog_mcp.lib.formatting import format_error
from dblog_mcp.lib.logging_config import get_logger
from dblog_mcp.lib.tools import log as log_tools
from dblog_mcp.lib.tools import query as query_tools
from dblog_mcp.lib.tools import schema as schema_tools
from dblog_mcp.models.config import ToolSettings
from dblog_mcp.models.error_types import MCPError
from dblog_mcp.services.connection_provider import ConnectionProvider
from dblog_mcp.utils.logger import abbreviate_for_log, log_error_with_context

logger = get_logger(__name__)


def text_tool(name: str) -> Callable:
    """Wrap a tool so failures come back as ``Error:`` text."""
    tool_logger = get_logger(__name__, {'tool': name})

    def decorator(func: Callable[..., str]) -> Callable[..., str]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> str:
            try:
                return func(*args, **kwargs)
            except MCPError as e:
                tool_logger.warning(
                    f"{type(e).__name__}: {e.message}",
                    extra={'extra_fields': {'recoverable': e.recoverable}}
                )
                return format_error(e.message)
            except Exception as e:
                log_error_with_context(e, {'tool': name}, tool_logger)
                return format_error(str(e))
        return wrapper
    return decorator


@text_tool('list_tables')
def list_tables(provider: ConnectionProvider) -> str:
    """JSON list of the current schema's tables."""
    logger.info("list_tables tool invoked")
    return schema_tools.list_tables(provider).to_json()


@text_tool('describe_table')
def describe_table(provider: ConnectionProvider, table_name: str) -> str:
    """JSON description of one table's columns and primary key."""
    logger.info(f"describe_table tool invoked for table_name='{abbreviate_for_log(table_name)}'")
    return schema_tools.describe_table(provider, table_name).to_json()


@text_tool('execute_sql')
def execute_sql(provider: ConnectionProvider, settings: ToolSettings, sql: str) -> str:
    """Delimited rows for a read, affected-row count for a write."""
    logger.info(f"execute_sql tool invoked with sql='{abbreviate_for_log(sql)}'")
    return query_tools.execute_sql(
        provider,
        sql,
        max_lob_bytes=settings.max_lob_bytes,
        delimiter=settings.sql_delimiter
    )


@text_tool('retrieve_log')
def retrieve_log(provider: ConnectionProvider,
                 settings: ToolSettings,
                 comp_id: str,
                 before_iso: str,
                 max_records: int) -> str:
    """JSON log records before a timestamp, newest first."""
    logger.info(
        f"retrieve_log tool invoked with comp_id='{abbreviate_for_log(comp_id)}', "
        f"before_iso='{abbreviate_for_log(before_iso)}', max_records={max_records}"
    )
    return log_tools.retrieve_log(provider, settings, comp_id, before_iso, max_records).to_json()


@text_tool('summarize_log')
def summarize_log(provider: ConnectionProvider, settings: ToolSettings, comp_id: str) -> str:
    """Compact JSON count plus first and last entries."""
    logger.info(f"summarize_log tool invoked with comp_id='{abbreviate_for_log(comp_id)}'")
    return log_tools.summarize_log(provider, settings, comp_id).to_json(indent=None)


@text_tool('search_log')
def search_log(provider: ConnectionProvider,
               settings: ToolSettings,
               start_iso: str,
               end_iso: str,
               comp_id: Optional[str] = None) -> str:
    """JSON log records inside an inclusive time window, oldest first."""
    logger.info(
        f"search_log tool invoked with start_iso='{abbreviate_for_log(start_iso)}', "
        f"end_iso='{abbreviate_for_log(end_iso)}', comp_id='{abbreviate_for_log(comp_id)}'"
    )
    return log_tools.search_log(provider, settings, start_iso, end_iso, comp_id).to_json()


__all__ = [
    'text_tool',
    'list_tables',
    'describe_table',
    'execute_sql',
    'retrieve_log',
    'summarize_log',
    'search_log'
]
