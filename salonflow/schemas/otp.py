from typing import Optional

from pydantic import BaseModel, Field


# Fields stay optional so a missing value reaches the service and gets its message
class SendOtpRequest(BaseModel):
    phone: Optional[str] = Field(None, description="Phone number, local (07...) or with 94 prefix")


class SendOtpResponse(BaseModel):
    success: bool = True
    message: str
    debug_otp: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    phone: Optional[str] = Field(None, description="Phone number the code was sent to")
    otp: Optional[str] = Field(None, description="6-digit code")


class SessionUser(BaseModel):
    id: str
    phone: str


class SessionPayload(BaseModel):
    access_token: str
    refresh_token: str
    expires_at: int
    user: SessionUser


class VerifyOtpResponse(BaseModel):
    success: bool = True
    message: str
    session: SessionPayload


class RetrySessionRequest(BaseModel):
    phone: Optional[str] = Field(None, description="Phone number that was verified")
    otp: Optional[str] = Field(None, description="The code that verified it")


__all__ = [
    "SendOtpRequest",
    "SendOtpResponse",
    "VerifyOtpRequest",
    "VerifyOtpResponse",
    "SessionPayload",
    "SessionUser",
    "RetrySessionRequest",
]
