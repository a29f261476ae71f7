"""
Command parameters.

A ``Parameter`` carries a name, a value, a direction and, for output
parameters, the T-SQL type used to declare the variable that receives
the database-assigned value.  Missing values are stored as the
``DB_NULL`` marker so that a parameter whose value is unknown is
distinguishable from one that was never given a value by mistake.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from .errors import OutputParameterError


class _DBNullType:
    """Type of the ``DB_NULL`` singleton."""

    _instance: Optional["_DBNullType"] = None

    def __new__(cls) -> "_DBNullType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DB_NULL"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "DB_NULL"


#: Explicit database NULL.  Bound to the driver as ``None``.
DB_NULL = _DBNullType()


class Direction(enum.Enum):
    INPUT = "input"
    OUTPUT = "output"
    INPUT_OUTPUT = "input_output"


class SqlType(enum.Enum):
    """T-SQL data types usable in output parameter declarations."""

    BIT = "BIT"
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INT = "INT"
    BIGINT = "BIGINT"
    DECIMAL = "DECIMAL"
    FLOAT = "FLOAT"
    REAL = "REAL"
    MONEY = "MONEY"
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    NCHAR = "NCHAR"
    NVARCHAR = "NVARCHAR"
    BINARY = "BINARY"
    VARBINARY = "VARBINARY"
    DATE = "DATE"
    TIME = "TIME"
    DATETIME = "DATETIME"
    DATETIME2 = "DATETIME2"
    DATETIMEOFFSET = "DATETIMEOFFSET"
    UNIQUEIDENTIFIER = "UNIQUEIDENTIFIER"
    XML = "XML"

    @property
    def sized(self) -> bool:
        return self in _SIZED_TYPES


_SIZED_TYPES = frozenset({
    SqlType.CHAR,
    SqlType.VARCHAR,
    SqlType.NCHAR,
    SqlType.NVARCHAR,
    SqlType.BINARY,
    SqlType.VARBINARY,
})

# Lengths used when a sized type is declared without an explicit size.
_DEFAULT_SIZE = {
    SqlType.CHAR: 1,
    SqlType.NCHAR: 1,
    SqlType.BINARY: 1,
    SqlType.VARCHAR: 8000,
    SqlType.NVARCHAR: 4000,
    SqlType.VARBINARY: 8000,
}


def normalize_name(name: str) -> str:
    """Return ``name`` with exactly one leading ``@``."""
    name = (name or "").strip()
    if not name.lstrip("@"):
        raise ValueError("Parameter name must not be empty")
    return "@" + name.lstrip("@")


class Parameter:
    """A single command parameter.

    Args:
        name: Parameter name, with or without the leading ``@``.
        value: Parameter value.  ``None`` is stored as ``DB_NULL``.
        direction: Whether the value flows in, out, or both.
        sql_type: T-SQL type, required unless the direction is ``INPUT``.
        size: Length for sized types; ``-1`` declares ``MAX``.
    """

    __slots__ = ("name", "value", "direction", "sql_type", "size")

    def __init__(
        self,
        name: str,
        value: Any = None,
        direction: Direction = Direction.INPUT,
        sql_type: Optional[SqlType] = None,
        size: Optional[int] = None,
    ) -> None:
        self.name = normalize_name(name)
        self.value = DB_NULL if value is None else value
        self.direction = direction
        self.sql_type = sql_type
        self.size = size

    @classmethod
    def output(cls, name: str, sql_type: SqlType, size: Optional[int] = None) -> "Parameter":
        return cls(name, direction=Direction.OUTPUT, sql_type=sql_type, size=size)

    @property
    def is_input(self) -> bool:
        return self.direction is not Direction.OUTPUT

    @property
    def is_output(self) -> bool:
        return self.direction is not Direction.INPUT

    @property
    def is_null(self) -> bool:
        return self.value is DB_NULL

    def bind_value(self) -> Any:
        """Value handed to the driver; ``DB_NULL`` becomes ``None``."""
        return None if self.value is DB_NULL else self.value

    def declaration(self) -> str:
        """Render the T-SQL type of this parameter, e.g. ``NVARCHAR(50)``."""
        if self.sql_type is None:
            raise OutputParameterError(
                f"Parameter {self.name} has direction {self.direction.value} but no SQL type"
            )
        if not self.sql_type.sized:
            return self.sql_type.value
        size = self.size if self.size is not None else _DEFAULT_SIZE[self.sql_type]
        return f"{self.sql_type.value}({'MAX' if size == -1 else size})"

    def __repr__(self) -> str:
        return (
            f"Parameter({self.name!r}, {self.value!r}, direction={self.direction.name}"
            f"{', sql_type=' + self.sql_type.name if self.sql_type else ''}"
            f"{', size=' + str(self.size) if self.size is not None else ''})"
        )
