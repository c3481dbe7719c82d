"""Utility functions for the file-backed store.

Store files are written atomically with the temp file + rename pattern,
which is atomic on POSIX systems, so a crash never leaves a half-written
store behind.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

STORE_FILE_SUFFIX = ".json"

_SAFE_NAME = re.compile(r"[A-Za-z0-9_-]{1,200}")


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """Write JSON data atomically using temp file + rename.

    Args:
        path: Target file path
        data: Dictionary to serialize as JSON
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def load_json(path: Path) -> dict[str, Any]:
    """Load JSON data from file.

    Returns empty dict if file doesn't exist.
    """
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def store_path(data_dir: Path, name: str) -> Path:
    """File that holds the store with the given (prefixed) name.

    Names that are not plain identifiers are hex-encoded so they can never
    escape data_dir or collide with each other.
    """
    if _SAFE_NAME.fullmatch(name):
        stem = name
    else:
        stem = "=" + name.encode("utf-8").hex()
    return data_dir / f"{stem}{STORE_FILE_SUFFIX}"


def list_store_files(data_dir: Path) -> list[Path]:
    """All store files under data_dir, sorted by name."""
    if not data_dir.exists():
        return []
    return sorted(data_dir.glob(f"*{STORE_FILE_SUFFIX}"))
