"""
Fluent commands for SQL Server.

``Sql`` builds stored procedure calls and text statements; ``Command``
binds their parameters and runs them through ``pyodbc`` or ``aioodbc``,
mapping each result row with a caller-supplied function.  See
``sqlapi.command`` for the full list of operations.
"""

from .command import Command  # noqa: F401
from .errors import (  # noqa: F401
    CommandAlreadyExecutedError,
    DuplicateKeyError,
    OutputParameterError,
    SqlApiError,
)
from .parameters import DB_NULL, Direction, Parameter, SqlType  # noqa: F401
from .records import Record  # noqa: F401
from .session import Sql  # noqa: F401
from .statement import CommandType  # noqa: F401
