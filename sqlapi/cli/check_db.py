"""
Test database connectivity.

Runs ``SELECT 1 AS ok`` against ``SQLAPI_CONNECTION_STRING``, once
through the synchronous driver and once through the asynchronous one,
and logs the outcome of each.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from ..config import get_config
from ..session import Sql


def main() -> int:
    config = get_config()
    logging.basicConfig(level=config.SQLAPI_LOG_LEVEL)
    sql = Sql.from_config(config)
    failed = False
    try:
        res1 = sql.text('SELECT 1 AS ok').query_one(lambda r: r['ok'])
        logging.info('SYNC DB OK: %s', res1)
    except Exception as e:
        logging.error('SYNC DB FAIL:', exc_info=e)
        failed = True
    try:
        res2 = asyncio.run(sql.text('SELECT 1 AS ok').query_one_async(lambda r: r['ok']))
        logging.info('ASYNC DB OK: %s', res2)
    except Exception as e:
        logging.error('ASYNC DB FAIL:', exc_info=e)
        failed = True
    return 2 if failed else 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except Exception as err:
        logging.error('Error executing cli/check_db', exc_info=err)
        sys.exit(2)
