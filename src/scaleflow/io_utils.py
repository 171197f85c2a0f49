"""Utilities for reading and writing JSON pipeline artifacts."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import orjson

from .errors import DataAccessError

_DUMP_OPTIONS = orjson.OPT_INDENT_2 | orjson.OPT_SERIALIZE_NUMPY | orjson.OPT_NON_STR_KEYS


def _coerce_path(path: str | Path) -> Path:
    """Convert input to a Path."""
    if isinstance(path, Path):
        return path
    return Path(path)


def write_json(path: str | Path, payload: Mapping[str, Any]) -> None:
    """Write a single JSON document, creating parent directories."""
    resolved_path = _coerce_path(path)
    try:
        resolved_path.parent.mkdir(parents=True, exist_ok=True)
        resolved_path.write_bytes(orjson.dumps(dict(payload), option=_DUMP_OPTIONS))
    except OSError as exc:
        raise DataAccessError(f"Could not write {resolved_path}: {exc}") from exc


def read_json(path: str | Path) -> Any:
    """Read a JSON document, mapping I/O and decode failures to DataAccessError."""
    resolved_path = _coerce_path(path)
    try:
        return orjson.loads(resolved_path.read_bytes())
    except OSError as exc:
        raise DataAccessError(f"Could not read {resolved_path}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise DataAccessError(f"{resolved_path} is not valid JSON: {exc}") from exc
