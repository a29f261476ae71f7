"""
Database connections for SQL Server.

This subpackage wraps ``pyodbc`` and ``aioodbc``.  It exposes
``connect`` and ``connect_async`` which open a fresh connection from a
connection string in ADO.NET, URL or ODBC form.
"""

from .mssql import parse_connection_string, to_odbc  # noqa: F401
from .connection_factory import connect, connect_async  # noqa: F401
