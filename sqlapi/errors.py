"""
Exceptions raised by ``sqlapi`` itself.

Errors coming from the ODBC driver (``pyodbc.Error`` and its
subclasses) and exceptions raised inside caller-supplied mapping
functions are never wrapped; they reach the caller unchanged.
"""

from __future__ import annotations

from typing import Any


class SqlApiError(Exception):
    """Base class for every error raised by this package."""


class CommandAlreadyExecutedError(SqlApiError, RuntimeError):
    """Raised when a ``Command`` is used after its terminal operation."""

    def __init__(self, command_text: str) -> None:
        super().__init__(f"Command has already been executed: {command_text}")
        self.command_text = command_text


class DuplicateKeyError(SqlApiError, ValueError):
    """Raised by the dictionary queries when a key is produced twice."""

    def __init__(self, key: Any) -> None:
        super().__init__(f"An item with the same key has already been added: {key!r}")
        self.key = key


class OutputParameterError(SqlApiError, ValueError):
    """Raised for output parameters that cannot be declared in T-SQL."""
