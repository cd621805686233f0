"""Shared fixtures: a scripted stand-in for a psycopg2 connection."""

from contextlib import contextmanager
from typing import Any, List, Optional

import pytest

from dblog_mcp.models.config import ToolSettings


class ScriptedResult:
    """What the next ``execute`` call should produce.

    ``rows`` are dicts for dictionary cursors and tuples for plain cursors.
    """

    def __init__(self, rows: Optional[List[Any]] = None, columns: Optional[List[str]] = None,
                 rowcount: int = -1, error: Optional[Exception] = None):
        self.rows = rows or []
        self.columns = columns
        self.rowcount = rowcount
        self.error = error


class FakeCursor:
    def __init__(self, connection: 'FakeConnection'):
        self.connection = connection
        self.description = None
        self.rowcount = -1
        self._rows: List[Any] = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=None):
        self.connection.executed.append((' '.join(query.split()), params))
        if not self.connection.results:
            raise AssertionError(f"Unexpected query: {query}")

        result = self.connection.results.pop(0)
        if result.error is not None:
            raise result.error

        self._rows = list(result.rows)
        self.rowcount = len(self._rows) if result.columns is not None else result.rowcount
        if result.columns is not None:
            self.description = [(name, None, None, None, None, None, None) for name in result.columns]
        else:
            self.description = None

    def fetchall(self):
        return list(self._rows)

    def __iter__(self):
        return iter(self._rows)


class FakeConnection:
    """Connection whose cursors replay ``results`` in order."""

    def __init__(self, results: Optional[List[ScriptedResult]] = None):
        self.results = list(results or [])
        self.executed: List[tuple] = []
        self.closed = False
        self.autocommit = True

    def cursor(self, cursor_factory=None):
        return FakeCursor(self)

    def close(self):
        self.closed = True


class FakeProvider:
    """ConnectionProvider replacement handing out one FakeConnection."""

    def __init__(self, connection: FakeConnection, timezone: str = 'UTC'):
        self.connection = connection
        self.timezone = timezone
        self.config = {'database': 'testdb'}
        self.acquire_count = 0

    @contextmanager
    def acquire(self):
        self.acquire_count += 1
        try:
            yield self.connection
        finally:
            self.connection.close()


@pytest.fixture
def make_provider():
    """Build a FakeProvider scripted with the given results."""
    def factory(*results, timezone: str = 'UTC') -> FakeProvider:
        scripted = []
        for result in results:
            if isinstance(result, ScriptedResult):
                scripted.append(result)
            elif isinstance(result, Exception):
                scripted.append(ScriptedResult(error=result))
            else:
                scripted.append(ScriptedResult(rows=result))
        return FakeProvider(FakeConnection(scripted), timezone=timezone)
    return factory


@pytest.fixture
def scripted():
    """The ScriptedResult class, for results that need columns or a rowcount."""
    return ScriptedResult


@pytest.fixture
def tool_settings():
    """Default tool settings with no value-size ceiling."""
    return ToolSettings(max_lob_bytes=0)
