"""I/O utilities for JSON files and in-memory JSON payloads.

orjson-backed: jurisdiction definitions are read with :func:`load_json`,
item records are written with :func:`save_json`, and embedded field payloads
go through :func:`loads_json`.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def loads_json(payload: str | bytes) -> Any:
    """Decode a JSON document held in memory.

    Raises ``orjson.JSONDecodeError`` (a ``ValueError``) on malformed input.
    """
    return orjson.loads(payload)


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories as needed.

    Keys keep their insertion order.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_INDENT_2 if pretty else 0
    path.write_bytes(orjson.dumps(obj, option=opts))
