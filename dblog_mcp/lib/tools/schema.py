"""Schema-level MCP tools.

This module lists the tables of the connection's current schema and
describes a single table's columns and primary key.
"""

from typing import Optional

from dblog_mcp.lib.logging_config import get_logger
from dblog_mcp.models.tool_responses import (
    TableListResponse,
    ColumnDescriptor,
    DescribeTableResponse
)
from dblog_mcp.services.connection_provider import ConnectionProvider, fetch_all
from dblog_mcp.services.query_utils import normalize_table_name

logger = get_logger(__name__)

UNNAMED_TABLE = "(unnamed table)"

LIST_TABLES_QUERY = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = current_schema()
    AND table_type = 'BASE TABLE'
    ORDER BY table_name COLLATE "C"
"""

PRIMARY_KEY_QUERY = """
    SELECT kcu.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
        ON tc.constraint_name = kcu.constraint_name
        AND tc.table_schema = kcu.table_schema
        AND tc.table_name = kcu.table_name
    WHERE tc.constraint_type = 'PRIMARY KEY'
    AND tc.table_schema = current_schema()
    AND upper(tc.table_name) = %s
    ORDER BY kcu.ordinal_position
"""

COLUMNS_QUERY = """
    SELECT
        column_name,
        data_type,
        is_nullable,
        character_maximum_length AS data_length
    FROM information_schema.columns
    WHERE table_schema = current_schema()
    AND upper(table_name) = %s
    ORDER BY ordinal_position
"""


def _display_table_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    return name.strip() or UNNAMED_TABLE


def list_tables(provider: ConnectionProvider) -> TableListResponse:
    """List the base tables of the current schema, sorted by name.

    Args:
        provider: Connection provider

    Returns:
        TableListResponse with the table count and names
    """
    with provider.acquire() as conn:
        rows = fetch_all(conn, LIST_TABLES_QUERY)

    tables = [_display_table_name(row.get('table_name')) for row in rows]
    logger.debug(f"Listed {len(tables)} tables")
    return TableListResponse(table_count=len(tables), tables=tables)


def describe_table(provider: ConnectionProvider, table_name: str) -> DescribeTableResponse:
    """Describe a table's columns and primary key.

    Lookups match case-insensitively on the uppercase form of the name.
    A table without columns is reported with ``found=False`` rather than
    raised as an error.

    Args:
        provider: Connection provider
        table_name: Name of the table to describe

    Returns:
        DescribeTableResponse with primary-key columns in key order and
        columns in definition order

    Raises:
        InvalidTableError: If the table name is blank
    """
    trimmed, upper = normalize_table_name(table_name)

    with provider.acquire() as conn:
        pk_rows = fetch_all(conn, PRIMARY_KEY_QUERY, (upper,))
        column_rows = fetch_all(conn, COLUMNS_QUERY, (upper,))

    primary_key_columns = [row['column_name'] for row in pk_rows if row.get('column_name') is not None]
    pk_set = {name.upper() for name in primary_key_columns}

    columns = []
    for row in column_rows:
        name = row.get('column_name')
        nullable_flag = row.get('is_nullable')
        columns.append(ColumnDescriptor(
            name=name,
            data_type=row.get('data_type'),
            nullable=nullable_flag is not None and nullable_flag.upper() in ('YES', 'Y'),
            data_length=row.get('data_length'),
            primary_key=name is not None and name.upper() in pk_set
        ))

    found = bool(columns)
    if not found:
        primary_key_columns = []

    return DescribeTableResponse(
        table=trimmed,
        table_upper=upper,
        found=found,
        primary_key_columns=primary_key_columns,
        column_count=len(columns),
        columns=columns
    )
