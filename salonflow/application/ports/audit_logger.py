from typing import Any, Dict, Optional, Protocol


class AuditLogger(Protocol):
    """Sink for phone-verification events (otp_sent, otp_verified, session_created, ...)."""

    def log(self, action: str, phone: str, user_id: Optional[str] = None, success: bool = True,
            details: Optional[Dict[str, Any]] = None) -> None:
        ...
