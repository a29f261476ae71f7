"""Shared fixtures: an in-memory stand-in for the ODBC driver.

``FakeDriver`` replaces ``connection_factory.connect`` and
``connection_factory.connect_async``.  Each execution returns the result
sets scripted with ``FakeDriver.script``; ``None`` in a script stands for
a row-count result without columns.  Statements run on a connection with
autocommit disabled are only recorded in ``FakeDriver.committed`` after
``commit()``, which lets tests check what a fresh connection would see.
"""

from typing import Any, List, Optional, Sequence, Tuple

import pytest

from sqlapi.infra.db import connection_factory


class ResultSet:
    def __init__(self, columns: Sequence[str], rows: Sequence[Sequence[Any]] = ()) -> None:
        self.columns = tuple(columns)
        self.rows = [tuple(r) for r in rows]


class FakeCursor:
    def __init__(self, connection: "FakeConnection") -> None:
        self.connection = connection
        self.driver = connection.driver
        self._sets: List[Optional[ResultSet]] = []
        self._set_index = 0
        self._row_index = 0
        self.fetched = 0

    # ------------------------------------------------------------------

    def _current(self) -> Optional[ResultSet]:
        if self._set_index < len(self._sets):
            return self._sets[self._set_index]
        return None

    def execute(self, sql: str, *values: Any) -> "FakeCursor":
        self.driver.executed.append((sql, values))
        if self.driver.execute_error is not None:
            raise self.driver.execute_error
        self.connection.record_write((sql, values))
        self._sets = list(self.driver.scripts.pop(0)) if self.driver.scripts else []
        self._set_index = 0
        self._row_index = 0
        return self

    @property
    def description(self) -> Optional[Tuple[Tuple[Any, ...], ...]]:
        current = self._current()
        if current is None:
            return None
        return tuple((name, str, None, None, None, None, True) for name in current.columns)

    def fetchone(self) -> Optional[Tuple[Any, ...]]:
        current = self._current()
        if current is None:
            raise RuntimeError("No results. Previous SQL was not a query.")
        if self._row_index >= len(current.rows):
            return None
        row = current.rows[self._row_index]
        self._row_index += 1
        self.fetched += 1
        return row

    def nextset(self) -> bool:
        if self.driver.nextset_error is not None:
            raise self.driver.nextset_error
        self._set_index += 1
        self._row_index = 0
        return self._set_index < len(self._sets)

    def close(self) -> None:
        self.driver.open_cursors -= 1


class FakeConnection:
    def __init__(self, driver: "FakeDriver", autocommit: bool) -> None:
        self.driver = driver
        self.autocommit = autocommit
        self.pending: List[Tuple[str, Tuple[Any, ...]]] = []
        self.closed = False

    def record_write(self, statement: Tuple[str, Tuple[Any, ...]]) -> None:
        if self.autocommit:
            self.driver.committed.append(statement)
        else:
            self.pending.append(statement)

    def cursor(self) -> FakeCursor:
        self.driver.open_cursors += 1
        self.driver.cursors.append(FakeCursor(self))
        return self.driver.cursors[-1]

    def commit(self) -> None:
        self.driver.commits += 1
        self.driver.committed.extend(self.pending)
        self.pending = []

    def rollback(self) -> None:
        self.driver.rollbacks += 1
        if self.driver.rollback_error is not None:
            raise self.driver.rollback_error
        self.pending = []

    def close(self) -> None:
        # Uncommitted work is discarded, as pyodbc does on close
        self.pending = []
        self.closed = True
        self.driver.open_connections -= 1


class AsyncFakeCursor:
    def __init__(self, cursor: FakeCursor) -> None:
        self._cursor = cursor

    @property
    def description(self) -> Optional[Tuple[Tuple[Any, ...], ...]]:
        return self._cursor.description

    async def execute(self, sql: str, *values: Any) -> "AsyncFakeCursor":
        self._cursor.execute(sql, *values)
        return self

    async def fetchone(self) -> Optional[Tuple[Any, ...]]:
        return self._cursor.fetchone()

    async def nextset(self) -> bool:
        return self._cursor.nextset()

    async def close(self) -> None:
        self._cursor.close()


class AsyncFakeConnection:
    def __init__(self, connection: FakeConnection) -> None:
        self._connection = connection

    async def cursor(self) -> AsyncFakeCursor:
        return AsyncFakeCursor(self._connection.cursor())

    async def commit(self) -> None:
        self._connection.commit()

    async def rollback(self) -> None:
        self._connection.rollback()

    async def close(self) -> None:
        self._connection.close()


class FakeDriver:
    def __init__(self) -> None:
        self.scripts: List[List[Optional[ResultSet]]] = []
        self.executed: List[Tuple[str, Tuple[Any, ...]]] = []
        self.committed: List[Tuple[str, Tuple[Any, ...]]] = []
        self.cursors: List[FakeCursor] = []
        self.connect_calls: List[Tuple[str, bool]] = []
        self.open_connections = 0
        self.open_cursors = 0
        self.commits = 0
        self.rollbacks = 0
        self.connect_error: Optional[BaseException] = None
        self.execute_error: Optional[BaseException] = None
        self.rollback_error: Optional[BaseException] = None
        self.nextset_error: Optional[BaseException] = None

    def script(self, *result_sets: Optional[ResultSet]) -> "FakeDriver":
        self.scripts.append(list(result_sets))
        return self

    def connect(self, connection_string: str, autocommit: bool = True, config: Any = None) -> FakeConnection:
        self.connect_calls.append((connection_string, autocommit))
        if self.connect_error is not None:
            raise self.connect_error
        self.open_connections += 1
        return FakeConnection(self, autocommit)

    async def connect_async(self, connection_string: str, autocommit: bool = True, config: Any = None) -> AsyncFakeConnection:
        return AsyncFakeConnection(self.connect(connection_string, autocommit, config))


@pytest.fixture
def driver(monkeypatch: pytest.MonkeyPatch) -> FakeDriver:
    fake = FakeDriver()
    monkeypatch.setattr(connection_factory, "connect", fake.connect)
    monkeypatch.setattr(connection_factory, "connect_async", fake.connect_async)
    return fake
