"""
Expose the environment configuration.

Example:

    from sqlapi.config import get_config
    print(get_config().SQLAPI_ODBC_DRIVER)
"""

from .env import Config, DEFAULT_ODBC_DRIVER, get_config, load_config, reset_config  # noqa: F401
