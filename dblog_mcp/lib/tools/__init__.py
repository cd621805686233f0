"""MCP tool implementations, organized by what they operate on.

Structure:
- schema.py: table listing and table description
- query.py: arbitrary SQL execution
- log.py: application log retrieval, summary and search
"""

from .schema import list_tables, describe_table
from .query import execute_sql
from .log import retrieve_log, summarize_log, search_log

__all__ = [
    'list_tables',
    'describe_table',
    'execute_sql',
    'retrieve_log',
    'summarize_log',
    'search_log'
]
