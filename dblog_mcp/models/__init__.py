"""Data models for the database log MCP server."""

from .config import DatabaseConfig, ToolSettings
from .error_types import (
    MCPError,
    ValidationError,
    InvalidTableError,
    ConnectionError,
    QueryError,
    NotFoundError
)

__all__ = [
    'DatabaseConfig',
    'ToolSettings',
    'MCPError',
    'ValidationError',
    'InvalidTableError',
    'ConnectionError',
    'QueryError',
    'NotFoundError'
]
