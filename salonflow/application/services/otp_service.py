import hmac
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..ports.audit_logger import AuditLogger
from ..ports.identity_provider import AuthSession, IdentityProvider
from ..ports.otp_repo import ActiveRecordConflict, OtpRepository
from ..ports.sms_gateway import SmsGateway
from ...exceptions import (
    BookingFlowError,
    InvalidCode,
    NotFoundOrExpired,
    RateLimited,
    SessionError,
    TooManyAttempts,
    ValidationError,
)
from ...utils import generate_otp, hash_phone_number, normalize_phone

logger = logging.getLogger(__name__)

OTP_MESSAGE_TEMPLATE = "Your SalonFlow booking verification code is: {code}. Valid for {minutes} minutes."


@dataclass
class OtpPolicy:
    length: int = 6
    ttl_minutes: int = 5
    cooldown_seconds: int = 60
    max_attempts: int = 3


@dataclass
class OtpIssueResult:
    phone: str
    expires_at: datetime
    delivered: bool
    debug_code: Optional[str] = None


@dataclass
class OtpService:
    """Issues and verifies booking OTPs, then hands verified phones to the identity provider."""

    otp_repo: OtpRepository
    sms_gateway: SmsGateway
    identity_provider: IdentityProvider
    policy: OtpPolicy = field(default_factory=OtpPolicy)
    audit: Optional[AuditLogger] = None
    # Echo the code back when it could not be delivered (never in production)
    expose_debug_code: bool = False
    clock: Callable[[], datetime] = datetime.utcnow

    def issue(self, phone: Optional[str]) -> OtpIssueResult:
        if not phone or not phone.strip():
            raise ValidationError("Phone number is required")
        phone = normalize_phone(phone)
        now = self.clock()

        existing = self.otp_repo.get_active(phone, now)
        if existing and (now - existing.created_at).total_seconds() < self.policy.cooldown_seconds:
            self._audit("otp_send_rate_limited", phone, success=False)
            raise RateLimited()

        code = generate_otp(self.policy.length)
        expires_at = now + timedelta(minutes=self.policy.ttl_minutes)
        try:
            self.otp_repo.insert_active(phone, code, now, expires_at)
        except ActiveRecordConflict:
            self._audit("otp_send_rate_limited", phone, success=False, details={"race": True})
            raise RateLimited()

        if not self.sms_gateway.is_configured():
            logger.warning("SMS gateway not configured; OTP stored for %s but not sent", hash_phone_number(phone)[:12])
            self._audit("otp_sent", phone, details={"delivered": False})
            return OtpIssueResult(
                phone=phone,
                expires_at=expires_at,
                delivered=False,
                debug_code=code if self.expose_debug_code else None,
            )

        message = OTP_MESSAGE_TEMPLATE.format(code=code, minutes=self.policy.ttl_minutes)
        try:
            self.sms_gateway.send(phone, message)
        except BookingFlowError:
            # The stored code stays valid until it expires or is superseded
            self._audit("otp_send_failed", phone, success=False)
            raise
        self._audit("otp_sent", phone, details={"delivered": True})
        return OtpIssueResult(phone=phone, expires_at=expires_at, delivered=True)

    def verify(self, phone: Optional[str], code: Optional[str]) -> AuthSession:
        if not phone or not code:
            raise ValidationError("Phone and OTP are required")
        phone = normalize_phone(phone)
        code = code.strip()

        record = self.otp_repo.get_active(phone, self.clock())
        if record is None:
            self._audit("otp_verify_missing", phone, success=False)
            raise NotFoundOrExpired()
        if record.attempts >= self.policy.max_attempts:
            self._audit("otp_verify_locked", phone, success=False, details={"attempts": record.attempts})
            raise TooManyAttempts()

        # Every check, right or wrong, consumes an attempt
        attempts = self.otp_repo.increment_attempts(record.id)
        if not hmac.compare_digest(record.otp, code):
            self._audit("otp_verify_invalid", phone, success=False, details={"attempts": attempts})
            raise InvalidCode()

        self.otp_repo.mark_verified(record.id)
        self._audit("otp_verified", phone)
        return self._open_session(phone)

    def retry_session(self, phone: Optional[str], code: Optional[str]) -> AuthSession:
        """Open a session for a phone whose latest code was already verified.

        Covers the case where verification succeeded but session creation failed.
        The caller must present that same code again; each retry consumes an
        attempt on the verified record and shares its attempt cap.
        """
        if not phone or not code:
            raise ValidationError("Phone and OTP are required")
        phone = normalize_phone(phone)
        code = code.strip()

        record = self.otp_repo.get_latest_verified(phone, self.clock())
        if record is None:
            self._audit("session_retry_missing", phone, success=False)
            raise NotFoundOrExpired()
        if record.attempts >= self.policy.max_attempts:
            self._audit("session_retry_locked", phone, success=False, details={"attempts": record.attempts})
            raise TooManyAttempts()

        attempts = self.otp_repo.increment_attempts(record.id)
        if not hmac.compare_digest(record.otp, code):
            self._audit("session_retry_invalid", phone, success=False, details={"attempts": attempts})
            raise InvalidCode()
        return self._open_session(phone)

    def _open_session(self, phone: str) -> AuthSession:
        try:
            session = self.identity_provider.resolve_session(phone)
        except SessionError:
            self._audit("session_failed", phone, success=False)
            raise
        except Exception:
            logger.exception("Identity provider failed after OTP verification")
            self._audit("session_failed", phone, success=False)
            raise SessionError()
        self._audit("session_created", phone, user_id=session.user_id)
        return session

    def _audit(self, action: str, phone: str, user_id: Optional[str] = None, success: bool = True, details: Optional[dict] = None) -> None:
        if self.audit is not None:
            self.audit.log(action, phone, user_id=user_id, success=success, details=details)
