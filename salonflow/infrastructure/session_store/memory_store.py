from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from ...application.ports.session_store import SessionStore


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def save(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
