"""
Database connection factory.

Every terminal operation of a ``Command`` opens its own connection
through this module and closes it before returning.  Pooling is left to
the ODBC driver manager.  ``pyodbc`` serves the synchronous operations
and ``aioodbc`` (which runs ``pyodbc`` calls on a thread pool) the
asynchronous ones.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ...config import Config, get_config
from .mssql import to_odbc

log = logging.getLogger(__name__)


def _odbc_string(connection_string: str, config: Config) -> str:
    return to_odbc(connection_string, config.SQLAPI_ODBC_DRIVER)


def connect(connection_string: str, autocommit: bool = True, config: Optional[Config] = None) -> Any:
    """Open a new ``pyodbc`` connection.

    Args:
        connection_string: Any form accepted by ``mssql.to_odbc``.
        autocommit: ``False`` starts an implicit transaction that must be
            committed or rolled back by the caller.
        config: Configuration supplying the driver name and login timeout.

    Returns:
        An open ``pyodbc.Connection``.
    """
    import pyodbc  # type: ignore[import]

    config = config or get_config()
    log.debug("[db] connect", extra={"autocommit": autocommit})
    return pyodbc.connect(
        _odbc_string(connection_string, config),
        autocommit=autocommit,
        timeout=config.SQLAPI_LOGIN_TIMEOUT,
    )


async def connect_async(connection_string: str, autocommit: bool = True, config: Optional[Config] = None) -> Any:
    """Open a new ``aioodbc`` connection; see ``connect``."""
    import aioodbc  # type: ignore[import]

    config = config or get_config()
    log.debug("[db] connect_async", extra={"autocommit": autocommit})
    return await aioodbc.connect(
        dsn=_odbc_string(connection_string, config),
        autocommit=autocommit,
        timeout=config.SQLAPI_LOGIN_TIMEOUT,
    )
