"""Business logic services for the database log MCP server."""

from .connection_provider import ConnectionProvider, fetch_all, fetch_one, session_timezone
from .query_utils import validate_table_name, escape_identifier, classify_statement
from .release_notes import ReleaseNotesService

__all__ = [
    'ConnectionProvider',
    'fetch_all',
    'fetch_one',
    'session_timezone',
    'validate_table_name',
    'escape_identifier',
    'classify_statement',
    'ReleaseNotesService'
]
