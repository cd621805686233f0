"""Logging helpers shared by services and tools."""

import logging
from typing import Optional

logger = logging.getLogger('dblog_mcp')

ABBREVIATE_LIMIT = 200


def abbreviate_for_log(value: Optional[str], max_length: int = ABBREVIATE_LIMIT) -> Optional[str]:
    """Trim a tool argument so it can be logged on one line."""
    if value is None:
        return None
    trimmed = str(value).strip()
    if len(trimmed) <= max_length:
        return trimmed
    return trimmed[:max_length] + "..."


def log_database_query(query: str, params: Optional[tuple] = None, logger_instance: Optional[logging.Logger] = None):
    """Log database queries for debugging.

    Args:
        query: SQL query string
        params: Query parameters
        logger_instance: Logger to use (defaults to package logger)
    """
    if logger_instance is None:
        logger_instance = logger

    # Truncate very long queries
    display_query = query[:500] + "..." if len(query) > 500 else query
    display_query = ' '.join(display_query.split())

    if params:
        logger_instance.debug(f"SQL Query: {display_query} | Params: {params}")
    else:
        logger_instance.debug(f"SQL Query: {display_query}")


def log_error_with_context(error: Exception, context: dict, logger_instance: Optional[logging.Logger] = None):
    """Log an error with additional context information.

    Args:
        error: Exception that occurred
        context: Dictionary with context information
        logger_instance: Logger to use (defaults to package logger)
    """
    if logger_instance is None:
        logger_instance = logger

    logger_instance.error(
        f"{error.__class__.__name__}: {error} | Context: {context}",
        exc_info=True
    )


__all__ = [
    'logger',
    'abbreviate_for_log',
    'log_database_query',
    'log_error_with_context'
]
