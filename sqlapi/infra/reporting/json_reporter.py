"""
JSON reporting utilities.

Converts query results into JSON-friendly values and writes them to
disk, creating the target directory when needed.
"""

from __future__ import annotations

import base64
import datetime
import decimal
import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any


def to_json(value: Any) -> Any:
    """Recursively convert driver values into JSON-serialisable ones.

    Dates and times become ISO strings, decimals and UUIDs strings and
    binary values base64 text.
    """
    if isinstance(value, dict):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (decimal.Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode('ascii')
    return value


def ensure_dir(directory: str) -> None:
    """Ensure a directory exists, creating it recursively if necessary."""
    if not directory:
        return
    logging.info("[jsonReporter] ensure_dir", extra={"dir": directory})
    Path(directory).mkdir(parents=True, exist_ok=True)


def write_json(file_path: str, data: Any) -> None:
    """Write an object to a JSON file, ensuring the directory exists."""
    ensure_dir(os.path.dirname(file_path))
    logging.info("[jsonReporter] write_json", extra={"file": file_path})
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(to_json(data), f, indent=2, ensure_ascii=False)
