"""
Local key-value storage — string values under string keys.

Each key lives in its own JSON file under STORAGE_DIR. Writes go through a
temp file and os.replace, so a reader sees either the old or the new value.
There is no locking between writers: the last write wins.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from medglosa.config import settings

logger = logging.getLogger(__name__)


def _path(key: str) -> Path:
    return Path(settings.storage_dir) / f"{key}.json"


def get_item(key: str) -> Optional[str]:
    path = _path(key)
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def set_item(key: str, value: str) -> None:
    path = _path(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise
    logger.debug("Stored %d bytes under %s", len(value), key)
