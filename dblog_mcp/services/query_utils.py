"""Query utilities for input validation and statement classification."""

import re
from typing import Optional

import pglast
from pglast import ast

from dblog_mcp.models.error_types import ValidationError, InvalidTableError

READ = 'read'
WRITE = 'write'

_IDENTIFIER = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')


def validate_table_name(table_name: str) -> bool:
    """Validate table name to prevent SQL injection.

    Args:
        table_name: Table name to validate

    Returns:
        True if valid, False otherwise
    """
    # Allow alphanumeric, underscore, and dot (for schema.table)
    pattern = r'^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)?$'
    return bool(re.match(pattern, table_name))


def escape_identifier(identifier: str) -> str:
    """Quote a possibly schema-qualified identifier for safe use in queries.

    Args:
        identifier: Identifier to escape, e.g. ``log`` or ``app.log``

    Returns:
        Escaped identifier
    """
    return '.'.join(f'"{part.replace(chr(34), "")}"' for part in identifier.split('.'))


def require_text(value: Optional[str], field: str, message: str = None) -> str:
    """Return the trimmed value, rejecting None and blank strings.

    Raises:
        ValidationError: If the value is missing or blank
    """
    if value is None or not str(value).strip():
        raise ValidationError(message or f"{field} is required.", field=field)
    return str(value).strip()


def normalize_table_name(table_name: Optional[str]) -> tuple[str, str]:
    """Split a table argument into its echoed and lookup forms.

    Returns:
        Tuple of (trimmed name as given, uppercase name used for matching)

    Raises:
        InvalidTableError: If the name is missing or blank
    """
    if table_name is None or not table_name.strip():
        raise InvalidTableError(table_name or '', "table name is required.")
    trimmed = table_name.strip()
    return trimmed, trimmed.upper()


def resolve_log_table(name: str) -> str:
    """Validate a configured table name and return it quoted.

    Unquoted names are folded to lowercase first, matching how PostgreSQL
    stores identifiers created without quotes.

    Raises:
        InvalidTableError: If the name is not a plain or schema-qualified identifier
    """
    if not name or not validate_table_name(name):
        raise InvalidTableError(name or '', f"Configured table name '{name}' is not a valid identifier")
    return escape_identifier(name.lower())


def _prefix_kind(sql: str) -> str:
    """Classify by the leading keyword only."""
    return READ if sql.strip().upper().startswith('SELECT') else WRITE


def classify_statement(sql: str) -> str:
    """Decide whether a statement returns rows or reports a row count.

    The first statement is parsed with pglast; SELECT statements, including
    those led by a WITH clause or preceded by comments, are reads. Text that
    pglast cannot parse falls back to a leading-``SELECT`` keyword test and
    the database reports the actual syntax error.

    Args:
        sql: SQL text

    Returns:
        ``READ`` or ``WRITE``
    """
    try:
        parsed = pglast.parse_sql(sql)
    except pglast.Error:
        return _prefix_kind(sql)

    if not parsed:
        return _prefix_kind(sql)

    return READ if isinstance(parsed[0].stmt, ast.SelectStmt) else WRITE
