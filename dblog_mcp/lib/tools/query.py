"""Query execution MCP tool.

Runs arbitrary SQL text. Statements are split into two shapes:

- reads (SELECT) stream their rows back as delimited text, header first
- writes (everything else, and reads that return no result set such as
  ``SELECT ... INTO``) report the number of affected rows

Classification parses the statement with pglast and falls back to a
leading-keyword test for text the parser rejects; see
``query_utils.classify_statement``.
"""

import psycopg2

from dblog_mcp.lib.formatting import format_delimited, materialize_value
from dblog_mcp.lib.logging_config import get_logger
from dblog_mcp.models.error_types import QueryError
from dblog_mcp.models.tool_responses import QueryResult
from dblog_mcp.services.connection_provider import ConnectionProvider
from dblog_mcp.services.query_utils import READ, classify_statement, require_text
from dblog_mcp.utils.logger import abbreviate_for_log, log_database_query

logger = get_logger(__name__)


def _read_result(cursor, max_lob_bytes: int) -> QueryResult:
    columns = [desc[0] for desc in cursor.description]
    rows = []
    for raw_row in cursor:
        rows.append([
            materialize_value(value, column, max_lob_bytes)
            for column, value in zip(columns, raw_row)
        ])
    return QueryResult(columns=columns, rows=rows)


def execute_sql(provider: ConnectionProvider,
                sql: str,
                max_lob_bytes: int = 0,
                delimiter: str = ',') -> str:
    """Execute one SQL statement and describe its outcome as text.

    Args:
        provider: Connection provider
        sql: SQL statement to execute
        max_lob_bytes: Byte ceiling for any single materialized value, 0 for none
        delimiter: Column delimiter for read output

    Returns:
        For reads, a header line and one line per row. For writes,
        ``Success: <N> rows affected``.

    Raises:
        ValidationError: If the statement is blank
        ConnectionError: If no connection can be opened
        QueryError: If the database rejects the statement or a value is too large
    """
    require_text(sql, 'sql', "SQL statement is required.")
    kind = classify_statement(sql)
    logger.debug(f"Statement classified as {kind}: {abbreviate_for_log(sql)}")
    log_database_query(sql, None, logger)

    with provider.acquire() as conn:
        try:
            with conn.cursor() as cursor:
                cursor.execute(sql)

                # SELECT ... INTO parses as a read but produces no result set
                if kind == READ and cursor.description is not None:
                    result = _read_result(cursor, max_lob_bytes)
                    logger.info(f"Query returned {len(result.rows)} rows")
                    return format_delimited(result, delimiter)

                affected = max(cursor.rowcount, 0)
        except psycopg2.Error as e:
            logger.error(f"Database error: {e}")
            raise QueryError(str(e).strip(), query=sql)

    logger.info(f"Statement affected {affected} rows")
    return f"Success: {affected} rows affected"
