"""Short-lived PostgreSQL connections, one per tool invocation."""

import psycopg2
from psycopg2.extras import RealDictCursor
from typing import List, Dict, Any, Optional
from contextlib import contextmanager

from dblog_mcp.lib.logging_config import get_logger
from dblog_mcp.models.error_types import ConnectionError, QueryError
from dblog_mcp.utils.logger import log_database_query, log_error_with_context

logger = get_logger(__name__)


class ConnectionProvider:
    """Opens a fresh database connection for every call.

    There is no pool: every ``acquire()`` connects, and the connection is
    closed when the ``with`` block exits, whether it returns or raises.
    """

    def __init__(self, config: Dict[str, Any]):
        """Initialize the provider.

        Args:
            config: Connection dictionary, see ``DatabaseConfig.to_dict``
        """
        self.config = config
        self.timezone = config.get('timezone') or None
        self.query_timeout = config.get('query_timeout', 0) * 1000  # Convert to ms

    def _connect_options(self) -> str:
        """Server-side session settings passed through libpq ``options``.

        Without a configured zone the server's own ``timezone`` setting applies.
        """
        options = []
        if self.timezone:
            options.append(f"-c TimeZone={self.timezone}")
        if self.query_timeout > 0:
            options.append(f"-c statement_timeout={self.query_timeout}")
        return ' '.join(options)

    def connect(self):
        """Open a new connection.

        Returns:
            psycopg2 connection in autocommit mode

        Raises:
            ConnectionError: If the server is unreachable or rejects the credentials
        """
        logger.debug(f"Connecting to database: {self.config.get('host')}:{self.config.get('port')}/{self.config.get('database')}")
        try:
            conn = psycopg2.connect(
                host=self.config['host'],
                port=self.config['port'],
                dbname=self.config['database'],
                user=self.config['user'],
                password=self.config['password'],
                connect_timeout=self.config.get('connect_timeout', 10),
                options=self._connect_options() or None
            )
        except psycopg2.Error as e:
            log_error_with_context(e, {'host': self.config.get('host'), 'database': self.config.get('database')}, logger)
            raise ConnectionError(str(e).strip())

        # Each statement commits on its own, as it would through a driver call.
        conn.autocommit = True
        return conn

    @contextmanager
    def acquire(self):
        """Yield a connection that is closed on every exit path.

        Yields:
            psycopg2 connection object

        Raises:
            ConnectionError: If the connection cannot be opened
        """
        conn = self.connect()
        try:
            yield conn
        finally:
            try:
                conn.close()
                logger.debug("Connection closed")
            except psycopg2.Error as e:
                logger.warning(f"Error closing connection: {e}")


def fetch_all(conn, query: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
    """Run a parameterized query and return its rows as dictionaries.

    Raises:
        QueryError: If the database rejects the statement
    """
    log_database_query(query, params, logger)
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(query, params)
            results = cursor.fetchall()
    except psycopg2.Error as e:
        logger.error(f"Database error: {e}")
        raise QueryError(str(e).strip(), query=query)

    logger.debug(f"Query returned {len(results)} rows")
    return [dict(row) for row in results]


def fetch_one(conn, query: str, params: Optional[tuple] = None) -> Optional[Dict[str, Any]]:
    """Run a parameterized query and return its first row, or None."""
    rows = fetch_all(conn, query, params)
    return rows[0] if rows else None


def session_timezone(conn, configured: Optional[str] = None) -> Optional[str]:
    """Name of the session time zone: the configured one, else the server's."""
    if configured:
        return configured
    row = fetch_one(conn, "SELECT current_setting('TimeZone') AS timezone")
    return row.get('timezone') if row else None
