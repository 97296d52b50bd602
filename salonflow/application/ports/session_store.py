from typing import Any, Dict, Optional, Protocol


class SessionStore(Protocol):
    """Durable key-value storage for the client-side session blob."""

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def save(self, key: str, value: Dict[str, Any]) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
