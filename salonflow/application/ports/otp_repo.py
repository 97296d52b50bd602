from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class OtpRecordDto:
    id: str
    phone: str
    otp: str
    created_at: datetime
    expires_at: datetime
    verified: bool
    attempts: int


class ActiveRecordConflict(Exception):
    """Another request already holds the active OTP record for this phone."""


class OtpRepository:
    def get_active(self, phone: str, now: datetime) -> Optional[OtpRecordDto]:
        """The authoritative unverified, unexpired record for ``phone``."""
        ...

    def get_latest_verified(self, phone: str, now: datetime) -> Optional[OtpRecordDto]:
        ...

    def insert_active(self, phone: str, otp: str, created_at: datetime, expires_at: datetime) -> OtpRecordDto:
        """Supersede any previous active record and store a new one.

        Raises ActiveRecordConflict when a concurrent insert won the race.
        """
        ...

    def increment_attempts(self, record_id: str) -> int:
        ...

    def mark_verified(self, record_id: str) -> None:
        ...
