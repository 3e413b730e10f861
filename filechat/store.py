"""Flat JSON cache mapping resource names to remote identifiers."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = "config.json"

# Cache keys.
VECTOR_STORE_ID = "vector_store_id"
ASSISTANT_ID = "assistant_id"
THREAD_ID = "thread_id"
FILES_PROCESSED = "files_processed"


class ConfigStore:
    """In-memory mapping mirrored to a JSON file after every mutation.

    The file is read once by :meth:`load`; later writes by other processes are
    not picked up. Every :meth:`set` and :meth:`clear` rewrites the whole file
    through a temporary file and an atomic rename, so the file on disk always
    holds the mapping as of the last successful call.
    """

    def __init__(self, path: str | os.PathLike[str] = DEFAULT_CACHE_FILE) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] = {}

    def load(self) -> "ConfigStore":
        p = self.path
        if not p.exists():
            self._data = {}
            return self
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable cache file %s: %s", p, exc)
            raw = {}
        if not isinstance(raw, dict):
            logger.warning("ignoring cache file %s: expected a JSON object", p)
            raw = {}
        self._data = raw
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()
        logger.debug("cache %s=%r", key, value)

    def clear(self) -> None:
        self._data = {}
        self._save()

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def _save(self) -> None:
        p = self.path
        p.parent.mkdir(parents=True, exist_ok=True)

        encoded = json.dumps(self._data, ensure_ascii=False, indent=2) + "\n"

        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=str(p.parent),
                delete=False,
                prefix=".cache.",
                suffix=".tmp",
            ) as f:
                f.write(encoded)
                tmp_path = Path(f.name)
            tmp_path.replace(p)
            tmp_path = None
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
