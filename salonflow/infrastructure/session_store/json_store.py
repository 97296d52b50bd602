from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from ...application.ports.session_store import SessionStore


class JsonFileSessionStore(SessionStore):
    """One JSON document holding every key; writes are atomic (temp file + replace)."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._logger = logging.getLogger(__name__)

    def _read_all(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self._logger.warning("Session file unreadable, starting empty", extra={"error": str(e)})
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".session-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._read_all().get(key)
        return value if isinstance(value, dict) else None

    def save(self, key: str, value: Dict[str, Any]) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)
