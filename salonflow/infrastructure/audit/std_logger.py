import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ...application.ports.audit_logger import AuditLogger
from ...utils import hash_phone_number


class StdAuditLogger(AuditLogger):
    """Writes one ``AUDIT: {json}`` line per event; phones appear only as hashes."""

    def __init__(self, logger_name: str = "salonflow.audit") -> None:
        self._logger = logging.getLogger(logger_name)

    def log(self, action: str, phone: str, user_id: Optional[str] = None, success: bool = True,
            details: Optional[Dict[str, Any]] = None) -> None:
        entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "action": action,
            "phone_hash": hash_phone_number(phone)[:16],
            "success": success,
        }
        if user_id:
            entry["user_id"] = user_id
        if details:
            entry["details"] = details
        level = logging.INFO if success else logging.WARNING
        self._logger.log(level, f"AUDIT: {json.dumps(entry, default=str)}")
