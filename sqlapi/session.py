"""
Session factory.

``Sql`` holds a connection string and hands out ``Command`` builders.
It opens no connection itself and performs no validation; each command
connects when its terminal operation runs.
"""

from __future__ import annotations

from typing import Optional

from .command import Command
from .config import Config, get_config
from .statement import CommandType


class Sql:
    """Factory for commands against one database."""

    def __init__(self, connection_string: str, config: Optional[Config] = None) -> None:
        self._connection_string = connection_string
        self._config = config

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "Sql":
        """Create a session from ``SQLAPI_CONNECTION_STRING``.

        Raises:
            ValueError: If the variable is not set.
        """
        config = config or get_config()
        return cls(config.require_connection_string(), config)

    @property
    def connection_string(self) -> str:
        return self._connection_string

    def procedure(self, procedure_name: str, param_count: int = 0) -> Command:
        """Build a stored procedure call."""
        return Command(
            self._connection_string,
            procedure_name,
            CommandType.STORED_PROCEDURE,
            param_count,
            self._config,
        )

    def text(self, sql: str, param_count: int = 0) -> Command:
        """Build a literal SQL statement with ``?`` parameter markers."""
        return Command(
            self._connection_string,
            sql,
            CommandType.TEXT,
            param_count,
            self._config,
        )
