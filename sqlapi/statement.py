"""
Rendering of commands into the T-SQL batch sent through ODBC.

ODBC binds parameters positionally through ``?`` markers, so the
parameter list is rendered in insertion order:

* text commands are sent verbatim and their ``?`` markers take the
  input parameters in order;
* stored procedures become ``EXEC name @a = ?, @b = ?``.

``pyodbc`` has no support for output parameters, so a command with
output parameters is wrapped in a batch which declares one variable per
output parameter, runs the body and finally selects the variables::

    SET NOCOUNT ON;
    DECLARE @id INT;
    EXEC dbo.CreateUser @name = ?, @id = @id OUTPUT;
    SELECT @id AS [@id];

The trailing select is the last result set of the batch.  Its column
names are the parameter names, which is how ``is_output_set`` tells it
apart from the result sets produced by the body.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from .parameters import Direction, Parameter


class CommandType(enum.Enum):
    STORED_PROCEDURE = "stored_procedure"
    TEXT = "text"


@dataclass(frozen=True)
class RenderedStatement:
    """The SQL handed to ``cursor.execute`` and its positional values."""

    sql: str
    values: Tuple[Any, ...] = ()
    outputs: Tuple[Parameter, ...] = field(default=())


def _procedure_call(name: str, parameters: Sequence[Parameter]) -> Tuple[str, List[Any]]:
    args: List[str] = []
    values: List[Any] = []
    for p in parameters:
        if p.is_output:
            args.append(f"{p.name} = {p.name} OUTPUT")
        else:
            args.append(f"{p.name} = ?")
            values.append(p.bind_value())
    if not args:
        return f"EXEC {name}", values
    return f"EXEC {name} " + ", ".join(args), values


def render(command_text: str, command_type: CommandType, parameters: Sequence[Parameter]) -> RenderedStatement:
    """Render ``command_text`` and ``parameters`` for execution."""
    outputs = tuple(p for p in parameters if p.is_output)

    if command_type is CommandType.STORED_PROCEDURE:
        body, body_values = _procedure_call(command_text, parameters)
    else:
        body = command_text
        body_values = [p.bind_value() for p in parameters if not p.is_output]

    if not outputs:
        return RenderedStatement(body, tuple(body_values))

    lines = ["SET NOCOUNT ON;"]
    values: List[Any] = []
    for p in outputs:
        if p.direction is Direction.INPUT_OUTPUT:
            lines.append(f"DECLARE {p.name} {p.declaration()} = ?;")
            values.append(p.bind_value())
        else:
            lines.append(f"DECLARE {p.name} {p.declaration()};")
    lines.append(body.rstrip().rstrip(";") + ";")
    lines.append("SELECT " + ", ".join(f"{p.name} AS [{p.name}]" for p in outputs) + ";")
    values.extend(body_values)
    return RenderedStatement("\n".join(lines), tuple(values), outputs)


def column_names(description: Optional[Sequence[Sequence[Any]]]) -> Tuple[str, ...]:
    """Column names from a DB-API ``cursor.description``."""
    if not description:
        return ()
    return tuple(col[0] for col in description)


def is_output_set(description: Optional[Sequence[Sequence[Any]]], outputs: Sequence[Parameter]) -> bool:
    """Whether the current result set is the trailing output-parameter select."""
    if not outputs:
        return False
    return column_names(description) == tuple(p.name for p in outputs)
