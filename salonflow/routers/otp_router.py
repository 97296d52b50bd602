import logging

from fastapi import APIRouter, Depends, Request

from ..application.ports.rate_limiter import RateLimiter
from ..application.services.otp_service import OtpService
from ..config import settings
from ..dependencies import get_client_ip, get_otp_service, get_rate_limiter
from ..exceptions import RateLimited
from ..schemas import RetrySessionRequest, SendOtpRequest, SendOtpResponse, VerifyOtpRequest, VerifyOtpResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/otp", tags=["Phone Verification"])


@router.post("/send", response_model=SendOtpResponse, response_model_exclude_none=True)
def send_otp(
    payload: SendOtpRequest,
    request: Request,
    otp_service: OtpService = Depends(get_otp_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Send a booking verification code to the given phone."""
    client_ip = get_client_ip(request)
    if not limiter.allow(f"otp_send:{client_ip}", settings.OTP_SEND_MAX_PER_IP, settings.OTP_SEND_WINDOW_SECONDS):
        logger.warning("OTP send limit reached for %s", client_ip)
        raise RateLimited("Too many requests. Please try again later.")

    result = otp_service.issue(payload.phone)
    if result.delivered:
        return SendOtpResponse(message="OTP sent successfully")
    return SendOtpResponse(message="OTP generated (SMS not configured)", debug_otp=result.debug_code)


@router.post("/verify", response_model=VerifyOtpResponse)
def verify_otp(payload: VerifyOtpRequest, otp_service: OtpService = Depends(get_otp_service)):
    session = otp_service.verify(payload.phone, payload.otp)
    return {"success": True, "message": "Phone verified successfully", "session": session.to_dict()}


@router.post("/session", response_model=VerifyOtpResponse)
def retry_session(payload: RetrySessionRequest, otp_service: OtpService = Depends(get_otp_service)):
    """Open a session for a phone that was verified but did not get one."""
    session = otp_service.retry_session(payload.phone, payload.otp)
    return {"success": True, "message": "Session created", "session": session.to_dict()}
