# salonflow/db/models/auth/otp.py
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional
import uuid

class OtpRecord(SQLModel, table=True):
    __tablename__ = "booking_otps"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    phone: str = Field(max_length=20, index=True)
    otp: str = Field(max_length=6)
    expires_at: datetime = Field(index=True)
    verified: bool = Field(default=False)
    attempts: int = Field(default=0)
    # Set to ``phone`` while this is the one authoritative record for the phone,
    # cleared once verified or superseded. Unique, so two racing issues cannot both win.
    active_phone: Optional[str] = Field(default=None, max_length=20, unique=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
