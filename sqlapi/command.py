"""
Command builder.

A ``Command`` accumulates a statement, its parameters and an optional
transactional flag, then runs exactly one terminal operation.  Every
terminal operation opens its own connection, executes the statement,
reads the results into caller-supplied functions and closes the cursor
and the connection before returning, whether it succeeds or fails.

Example::

    sql = Sql(connection_string)

    create = sql.procedure("dbo.CreateUser").param("name", "ada")
    new_id = create.out_param("id", SqlType.INT)
    create.transactional().execute()
    print(new_id.value)

    users = sql.text("SELECT id, name FROM dbo.Users WHERE active = ?") \\
        .param("active", True) \\
        .query(lambda r: User(r["id"], r["name"]))

Synchronous operations use ``pyodbc``; the ``*_async`` operations use
``aioodbc`` and must be awaited.
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from .config import Config
from .errors import CommandAlreadyExecutedError, DuplicateKeyError
from .infra.db import connection_factory
from .parameters import DB_NULL, Parameter, SqlType
from .records import Record
from .statement import CommandType, RenderedStatement, column_names, is_output_set, render

log = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")

Map = Callable[[Record], T]
Read = Callable[[Record], Any]
ReadIndexed = Callable[[Record, int], Any]


class Command:
    """A single statement plus parameters, executed at most once.

    Instances are normally created through ``Sql.procedure`` or
    ``Sql.text``.  Builder methods return the command itself so calls
    can be chained; terminal methods consume it.
    """

    def __init__(
        self,
        connection_string: str,
        command_text: str,
        command_type: CommandType,
        param_count: int = 0,
        config: Optional[Config] = None,
    ) -> None:
        self._connection_string = connection_string
        self._command_text = command_text
        self._command_type = command_type
        self._param_count = param_count
        self._config = config
        self._parameters: List[Parameter] = []
        self._transactional = False
        self._executed = False

    @property
    def command_text(self) -> str:
        return self._command_text

    @property
    def command_type(self) -> CommandType:
        return self._command_type

    @property
    def parameters(self) -> Tuple[Parameter, ...]:
        return tuple(self._parameters)

    @property
    def is_transactional(self) -> bool:
        return self._transactional

    @property
    def executed(self) -> bool:
        return self._executed

    def __repr__(self) -> str:
        return (
            f"Command({self._command_text!r}, {self._command_type.name}, "
            f"parameters={len(self._parameters)}/{self._param_count}, "
            f"transactional={self._transactional}, executed={self._executed})"
        )

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def _check_not_executed(self) -> None:
        if self._executed:
            raise CommandAlreadyExecutedError(self._command_text)

    def param(self, parameter: Union[Parameter, str], value: Any = None) -> "Command":
        """Append a parameter.

        Accepts either a ``Parameter`` or a name and a value.  A missing
        value is bound as ``DB_NULL``.
        """
        self._check_not_executed()
        if not isinstance(parameter, Parameter):
            parameter = Parameter(parameter, value)
        self._parameters.append(parameter)
        return self

    def out_param(self, name: str, sql_type: SqlType, size: Optional[int] = None) -> Parameter:
        """Append an output parameter and return it.

        The returned handle's ``value`` holds the value assigned by the
        database once the terminal operation has completed.
        """
        self._check_not_executed()
        parameter = Parameter.output(name, sql_type, size)
        self._parameters.append(parameter)
        return parameter

    def params(self, collection: Iterable[Parameter]) -> "Command":
        self._check_not_executed()
        self._parameters.extend(collection)
        return self

    def transactional(self) -> "Command":
        """Run the terminal operation inside a transaction.

        The transaction is committed when the operation succeeds and
        rolled back when it raises.  Unlike a transaction object that is
        disposed without a commit, work done on the success path is kept:
        ``pyodbc`` would discard it when the connection closes.
        """
        self._check_not_executed()
        self._transactional = True
        return self

    # ------------------------------------------------------------------
    # Synchronous terminal operations
    # ------------------------------------------------------------------

    def execute(self) -> None:
        """Run the statement and discard any results."""
        self._using_command(lambda cursor, statement: None)

    def query_one(self, map: Map[T]) -> Optional[T]:
        """Map the first row, or return ``None`` when there are no rows."""

        def body(cursor: Any, statement: RenderedStatement) -> Optional[T]:
            if not _advance(cursor, statement, first=True):
                return None
            row = cursor.fetchone()
            if row is None:
                return None
            return map(Record(column_names(cursor.description), row))

        return self._using_command(body)

    def query(self, map: Map[T]) -> List[T]:
        """Map every row of the first result set, in order."""
        result: List[T] = []
        self.query_each(lambda r: result.append(map(r)))
        return result

    def query_each(self, read: Read) -> None:
        """Call ``read`` once per row of the first result set."""

        def body(cursor: Any, statement: RenderedStatement) -> None:
            if not _advance(cursor, statement, first=True):
                return
            _read_rows(cursor, read)

        self._using_command(body)

    def query_as_dict(self, read_key: Callable[[Record], K], read_element: Callable[[Record], V]) -> Dict[K, V]:
        """Build a dictionary from the first result set.

        Raises:
            DuplicateKeyError: If ``read_key`` returns the same key twice.
        """
        result: Dict[K, V] = {}
        self.query_each(lambda r: _add(result, read_key(r), read_element(r)))
        return result

    def query_multiple(self, read: ReadIndexed) -> None:
        """Call ``read(record, result_index)`` for every row of every result set."""

        def body(cursor: Any, statement: RenderedStatement) -> None:
            index = 0
            more = _advance(cursor, statement, first=True)
            while more:
                _read_rows(cursor, lambda r: read(r, index))
                index += 1
                more = _advance(cursor, statement, first=False)

        self._using_command(body)

    # ------------------------------------------------------------------
    # Asynchronous terminal operations
    # ------------------------------------------------------------------

    async def execute_async(self) -> None:
        """Run the statement and discard any results."""

        async def body(cursor: Any, statement: RenderedStatement) -> None:
            pass

        await self._using_command_async(body)

    async def query_one_async(self, map: Map[T]) -> Optional[T]:
        """Map the first row, or return ``None`` when there are no rows.

        Only the first row is fetched even if the statement returns more.
        """

        async def body(cursor: Any, statement: RenderedStatement) -> Optional[T]:
            if not await _advance_async(cursor, statement, first=True):
                return None
            row = await cursor.fetchone()
            if row is None:
                return None
            return map(Record(column_names(cursor.description), row))

        return await self._using_command_async(body)

    async def query_async(self, map: Map[T]) -> List[T]:
        result: List[T] = []
        await self.query_each_async(lambda r: result.append(map(r)))
        return result

    async def query_each_async(self, read: Read) -> None:
        async def body(cursor: Any, statement: RenderedStatement) -> None:
            if not await _advance_async(cursor, statement, first=True):
                return
            await _read_rows_async(cursor, read)

        await self._using_command_async(body)

    async def query_as_dict_async(
        self, read_key: Callable[[Record], K], read_element: Callable[[Record], V]
    ) -> Dict[K, V]:
        result: Dict[K, V] = {}
        await self.query_each_async(lambda r: _add(result, read_key(r), read_element(r)))
        return result

    async def query_multiple_async(self, read: ReadIndexed) -> None:
        """Call ``read(record, result_index)`` for every row of every result set.

        ``result_index`` starts at 0 and grows by one per result set,
        empty result sets included.
        """

        async def body(cursor: Any, statement: RenderedStatement) -> None:
            index = 0
            more = await _advance_async(cursor, statement, first=True)
            while more:
                await _read_rows_async(cursor, lambda r: read(r, index))
                index += 1
                more = await _advance_async(cursor, statement, first=False)

        await self._using_command_async(body)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _start(self) -> RenderedStatement:
        self._check_not_executed()
        self._executed = True
        statement = render(self._command_text, self._command_type, self._parameters)
        log.info(
            "[command] executing",
            extra={
                "command_text": self._command_text,
                "command_type": self._command_type.value,
                "param_count": len(self._parameters),
                "transactional": self._transactional,
            },
        )
        return statement

    def _using_command(self, body: Callable[[Any, RenderedStatement], T]) -> T:
        statement = self._start()
        connection = connection_factory.connect(
            self._connection_string, autocommit=not self._transactional, config=self._config
        )
        try:
            cursor = connection.cursor()
            try:
                if self._transactional:
                    return self._using_transaction(connection, cursor, statement, body)
                return _run(cursor, statement, body)
            finally:
                cursor.close()
        finally:
            connection.close()

    def _using_transaction(
        self, connection: Any, cursor: Any, statement: RenderedStatement, body: Callable[[Any, RenderedStatement], T]
    ) -> T:
        try:
            result = _run(cursor, statement, body)
        except BaseException:
            log.warning("[command] rolling back", extra={"command_text": self._command_text})
            connection.rollback()
            raise
        connection.commit()
        return result

    async def _using_command_async(self, body: Callable[[Any, RenderedStatement], Awaitable[T]]) -> T:
        statement = self._start()
        connection = await connection_factory.connect_async(
            self._connection_string, autocommit=not self._transactional, config=self._config
        )
        try:
            cursor = await connection.cursor()
            try:
                if self._transactional:
                    return await self._using_transaction_async(connection, cursor, statement, body)
                return await _run_async(cursor, statement, body)
            finally:
                await cursor.close()
        finally:
            await connection.close()

    async def _using_transaction_async(
        self,
        connection: Any,
        cursor: Any,
        statement: RenderedStatement,
        body: Callable[[Any, RenderedStatement], Awaitable[T]],
    ) -> T:
        try:
            result = await _run_async(cursor, statement, body)
        except BaseException:
            log.warning("[command] rolling back", extra={"command_text": self._command_text})
            await connection.rollback()
            raise
        await connection.commit()
        return result


def _add(result: Dict[K, V], key: K, element: V) -> None:
    if key in result:
        raise DuplicateKeyError(key)
    result[key] = element


def _store_outputs(statement: RenderedStatement, row: Any) -> None:
    for parameter, value in zip(statement.outputs, row):
        parameter.value = DB_NULL if value is None else value


def _run(cursor: Any, statement: RenderedStatement, body: Callable[[Any, RenderedStatement], T]) -> T:
    cursor.execute(statement.sql, *statement.values)
    result = body(cursor, statement)
    if statement.outputs:
        _read_outputs(cursor, statement)
    else:
        # Errors raised by later statements of the batch only surface
        # while the remaining results are consumed
        while cursor.nextset():
            pass
    return result


def _advance(cursor: Any, statement: RenderedStatement, first: bool) -> bool:
    """Move to the next result set that has columns.

    Row counts produced by DML statements carry no description and are
    skipped.  Returns ``False`` once the results are exhausted or the
    output-parameter select is reached.
    """
    if not first and not cursor.nextset():
        return False
    while cursor.description is None:
        if not cursor.nextset():
            return False
    return not is_output_set(cursor.description, statement.outputs)


def _read_rows(cursor: Any, read: Read) -> int:
    names = column_names(cursor.description)
    count = 0
    while True:
        row = cursor.fetchone()
        if row is None:
            break
        read(Record(names, row))
        count += 1
    log.debug("[command] result set read", extra={"row_count": count})
    return count


def _read_outputs(cursor: Any, statement: RenderedStatement) -> None:
    while not is_output_set(cursor.description, statement.outputs):
        if not cursor.nextset():
            log.warning("[command] output parameters were not returned")
            return
    row = cursor.fetchone()
    if row is not None:
        _store_outputs(statement, row)


async def _run_async(
    cursor: Any, statement: RenderedStatement, body: Callable[[Any, RenderedStatement], Awaitable[T]]
) -> T:
    await cursor.execute(statement.sql, *statement.values)
    result = await body(cursor, statement)
    if statement.outputs:
        await _read_outputs_async(cursor, statement)
    else:
        while await cursor.nextset():
            pass
    return result


async def _advance_async(cursor: Any, statement: RenderedStatement, first: bool) -> bool:
    if not first and not await cursor.nextset():
        return False
    while cursor.description is None:
        if not await cursor.nextset():
            return False
    return not is_output_set(cursor.description, statement.outputs)


async def _read_rows_async(cursor: Any, read: Read) -> int:
    names = column_names(cursor.description)
    count = 0
    while True:
        row = await cursor.fetchone()
        if row is None:
            break
        read(Record(names, row))
        count += 1
    log.debug("[command] result set read", extra={"row_count": count})
    return count


async def _read_outputs_async(cursor: Any, statement: RenderedStatement) -> None:
    while not is_output_set(cursor.description, statement.outputs):
        if not await cursor.nextset():
            log.warning("[command] output parameters were not returned")
            return
    row = await cursor.fetchone()
    if row is not None:
        _store_outputs(statement, row)
