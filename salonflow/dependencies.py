# Request-scoped wiring of services to their SQL and SMS adapters
import logging

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from .application.ports.audit_logger import AuditLogger
from .application.ports.rate_limiter import RateLimiter
from .application.ports.sms_gateway import SmsGateway
from .application.services.availability_service import AvailabilityService, BusinessHours
from .application.services.booking_service import BookingService
from .application.services.confirmation_service import ConfirmationService
from .application.services.otp_service import OtpPolicy, OtpService
from .config import settings
from .database import get_session
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.identity.local_identity_provider import LocalIdentityProvider
from .infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from .infrastructure.persistence.sqlalchemy.repositories.catalog_repository_sql import SqlCatalogRepository
from .infrastructure.persistence.sqlalchemy.repositories.otp_repository_sql import SqlOtpRepository
from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from .infrastructure.sms import build_sms_gateway
from .utils import decode_jwt_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()

_rate_limiter = InMemoryRateLimiter()
_audit_logger = StdAuditLogger()
_sms_gateway = None


def get_rate_limiter() -> RateLimiter:
    return _rate_limiter


def get_audit_logger() -> AuditLogger:
    return _audit_logger


def get_sms_gateway() -> SmsGateway:
    global _sms_gateway
    if _sms_gateway is None:
        _sms_gateway = build_sms_gateway(settings)
    return _sms_gateway


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_otp_service(
    session: Session = Depends(get_session),
    sms_gateway: SmsGateway = Depends(get_sms_gateway),
    audit: AuditLogger = Depends(get_audit_logger),
) -> OtpService:
    policy = OtpPolicy(
        length=settings.OTP_LENGTH,
        ttl_minutes=settings.OTP_TTL_MINUTES,
        cooldown_seconds=settings.OTP_RESEND_COOLDOWN_SECONDS,
        max_attempts=settings.OTP_MAX_ATTEMPTS,
    )
    return OtpService(
        otp_repo=SqlOtpRepository(session),
        sms_gateway=sms_gateway,
        identity_provider=LocalIdentityProvider(session),
        policy=policy,
        audit=audit,
        expose_debug_code=not settings.is_production,
    )


def get_availability_service(session: Session = Depends(get_session)) -> AvailabilityService:
    hours = BusinessHours(
        start=settings.BUSINESS_DAY_START,
        end=settings.BUSINESS_DAY_END,
        slot_interval=settings.SLOT_INTERVAL_MINUTES,
    )
    return AvailabilityService(catalog=SqlCatalogRepository(session), hours=hours)


def get_booking_service(
    session: Session = Depends(get_session),
    availability: AvailabilityService = Depends(get_availability_service),
) -> BookingService:
    return BookingService(
        repo=SqlAppointmentsRepository(session),
        availability=availability,
        booking_window_days=settings.BOOKING_WINDOW_DAYS,
    )


def get_confirmation_service(sms_gateway: SmsGateway = Depends(get_sms_gateway)) -> ConfirmationService:
    return ConfirmationService(sms_gateway=sms_gateway, expose_debug_message=not settings.is_production)


def get_current_session(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """Claims of a valid access token: ``sub`` (user id) and ``phone``."""
    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type")
    if not payload.get("sub") or not payload.get("phone"):
        raise HTTPException(status_code=401, detail="Invalid token: missing claims")
    return payload
