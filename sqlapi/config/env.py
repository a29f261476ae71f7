"""
Environment configuration loader.

Settings are read from the process environment after loading a
``.env`` file, if present, and exposed via a simple ``Config`` class.

Supported variables:

* ``SQLAPI_CONNECTION_STRING`` – connection string used by
  ``Sql.from_config`` and the command-line tools.
* ``SQLAPI_ODBC_DRIVER`` – ODBC driver name used when the connection
  string does not name one (default ``'ODBC Driver 17 for SQL Server'``).
* ``SQLAPI_LOGIN_TIMEOUT`` – login timeout in seconds (default ``0``,
  meaning the driver default).
* ``SQLAPI_LOG_LEVEL`` – logging level for the command-line tools
  (default ``'INFO'``).

Unlike the connection settings of an application, nothing here is read
at import time: ``get_config`` loads the configuration on first use.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_ODBC_DRIVER = "ODBC Driver 17 for SQL Server"


@dataclass
class Config:
    """Holds environment configuration for the package."""

    SQLAPI_CONNECTION_STRING: Optional[str] = None
    SQLAPI_ODBC_DRIVER: str = DEFAULT_ODBC_DRIVER
    SQLAPI_LOGIN_TIMEOUT: int = 0
    SQLAPI_LOG_LEVEL: str = "INFO"

    def require_connection_string(self) -> str:
        if not self.SQLAPI_CONNECTION_STRING:
            raise ValueError("Environment variable SQLAPI_CONNECTION_STRING is required")
        return self.SQLAPI_CONNECTION_STRING


def load_config() -> Config:
    """Load configuration from environment variables.

    Raises:
        ValueError: If ``SQLAPI_LOGIN_TIMEOUT`` is not an integer.

    Returns:
        Config: A populated configuration dataclass.
    """
    load_dotenv()

    timeout_raw = os.environ.get("SQLAPI_LOGIN_TIMEOUT") or "0"
    try:
        login_timeout = int(timeout_raw)
    except ValueError:
        raise ValueError(f"SQLAPI_LOGIN_TIMEOUT must be an integer, got {timeout_raw!r}") from None

    return Config(
        SQLAPI_CONNECTION_STRING=os.environ.get("SQLAPI_CONNECTION_STRING") or None,
        SQLAPI_ODBC_DRIVER=os.environ.get("SQLAPI_ODBC_DRIVER") or DEFAULT_ODBC_DRIVER,
        SQLAPI_LOGIN_TIMEOUT=login_timeout,
        SQLAPI_LOG_LEVEL=(os.environ.get("SQLAPI_LOG_LEVEL") or "INFO").upper(),
    )


_config: Optional[Config] = None


def get_config() -> Config:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration so the next call reloads it."""
    global _config
    _config = None
