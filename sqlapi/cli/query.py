"""
Run a single statement from the command line.

Accepts the statement (or, with ``--procedure``, a procedure name) and
any number of ``--param name=value`` arguments.  Parameters are bound in
the order given.  Rows of the first result set are printed as JSON, or
written to ``--output`` when a file is given.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from ..config import get_config
from ..infra.reporting.json_reporter import to_json, write_json
from ..parameters import Parameter
from ..session import Sql


def _parse_param(raw: str) -> Parameter:
    if '=' not in raw:
        raise argparse.ArgumentTypeError(f'Expected name=value, got {raw!r}')
    name, value = raw.split('=', 1)
    # An empty value binds NULL
    return Parameter(name, value if value != '' else None)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Run a SQL statement and print its rows as JSON')
    parser.add_argument('statement', help='SQL text with ? markers, or a procedure name with --procedure')
    parser.add_argument('--procedure', action='store_true', help='Treat the statement as a stored procedure name')
    parser.add_argument('--param', dest='params', type=_parse_param, action='append', default=[],
                        help='Parameter as name=value; repeat for several. An empty value binds NULL')
    parser.add_argument('--transactional', action='store_true', help='Run inside a transaction')
    parser.add_argument('--output', type=str, help='Write the rows to this JSON file instead of stdout')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = get_config()
    logging.basicConfig(level=config.SQLAPI_LOG_LEVEL)
    logging.info('[cli/query] Parsed arguments', extra={'procedure': args.procedure, 'param_count': len(args.params)})
    sql = Sql.from_config(config)
    command = sql.procedure(args.statement) if args.procedure else sql.text(args.statement)
    command.params(args.params)
    if args.transactional:
        command.transactional()
    rows = command.query(lambda r: r.as_dict())
    if args.output:
        write_json(args.output, rows)
    else:
        print(json.dumps(to_json(rows), indent=2, ensure_ascii=False))
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except Exception as err:
        logging.error('Error executing cli/query', exc_info=err)
        sys.exit(2)
