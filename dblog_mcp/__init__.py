"""MCP server for database introspection, SQL execution and application log queries."""

__version__ = "1.0.0"
