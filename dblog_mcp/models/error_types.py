"""Error types for the database log MCP server."""

class MCPError(Exception):
    """Base error class for MCP operations."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class ValidationError(MCPError):
    """Error raised when tool input is missing or malformed.

    Always raised before a database connection is opened.
    """

    def __init__(self, message: str, field: str = None):
        super().__init__(message, recoverable=False)
        self.field = field


class InvalidTableError(ValidationError):
    """Error raised when a table name is blank or not a valid identifier."""

    def __init__(self, table_name: str, message: str = None):
        if message is None:
            message = f"Table name '{table_name}' is invalid"
        super().__init__(message, field='table_name')
        self.table_name = table_name


class ConnectionError(MCPError):
    """Error raised when database connection fails."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=True)


class QueryError(MCPError):
    """Error raised when a statement fails inside the database or while reading its results."""

    def __init__(self, message: str, query: str = None):
        super().__init__(message, recoverable=False)
        self.query = query


class NotFoundError(MCPError):
    """Error raised when a requested document does not exist."""

    def __init__(self, message: str, key: str = None):
        super().__init__(message, recoverable=False)
        self.key = key
