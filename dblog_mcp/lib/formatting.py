"""Result formatting for tool output.

Two encodings leave the tools: delimited text for ``execute_sql`` reads and
JSON (through the pydantic models in ``models.tool_responses``) for every
other tool. This module owns the delimited side and the conversion of raw
driver values into plain scalars.
"""

from typing import Any, List, Optional

from dblog_mcp.models.error_types import QueryError
from dblog_mcp.models.tool_responses import QueryResult

NULL_TEXT = 'NULL'
READ_CHUNK = 2048


def _read_stream(handle, column: str, max_bytes: int) -> str:
    """Read a large-object handle to exhaustion."""
    parts: List[str] = []
    size = 0
    while True:
        chunk = handle.read(READ_CHUNK)
        if not chunk:
            break
        if isinstance(chunk, (bytes, bytearray)):
            chunk = chunk.decode('utf-8', errors='replace')
        size += len(chunk.encode('utf-8'))
        if max_bytes and size > max_bytes:
            raise QueryError(f"Value in column {column} exceeds the {max_bytes} byte limit")
        parts.append(chunk)
    return ''.join(parts)


def materialize_value(value: Any, column: str = '?', max_bytes: int = 0) -> Any:
    """Turn a driver value into a scalar that can be printed or serialized.

    Large-object handles (anything with ``read()``) are read fully into a
    string and binary buffers become hex text. Text is checked against
    ``max_bytes``.

    Args:
        value: Raw value from the cursor
        column: Column name, used in the size error
        max_bytes: Byte ceiling for text values, 0 for no limit

    Raises:
        QueryError: If a value is larger than ``max_bytes``
    """
    if value is None:
        return None

    if hasattr(value, 'read'):
        try:
            return _read_stream(value, column, max_bytes)
        finally:
            close = getattr(value, 'close', None)
            if callable(close):
                close()

    # bytea arrives as a buffer; render it the way PostgreSQL prints it
    if isinstance(value, (memoryview, bytes, bytearray)):
        value = '\\x' + bytes(value).hex()

    if isinstance(value, str) and max_bytes and len(value.encode('utf-8')) > max_bytes:
        raise QueryError(f"Value in column {column} exceeds the {max_bytes} byte limit")

    return value


def format_cell(value: Any) -> str:
    """Render one materialized value for delimited output."""
    if value is None:
        return NULL_TEXT
    return str(value)


def format_delimited(result: QueryResult, delimiter: str = ',') -> str:
    """Header line of column names, then one line per row.

    Every line, the header included, ends with a newline.
    """
    lines = [delimiter.join(result.columns)]
    for row in result.rows:
        lines.append(delimiter.join(format_cell(value) for value in row))
    return '\n'.join(lines) + '\n'


def format_error(message: Optional[str]) -> str:
    """Text returned to the tool caller when an operation fails."""
    return f"Error: {message}"
