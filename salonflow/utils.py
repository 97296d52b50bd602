import hashlib
import re
import secrets
import uuid
from datetime import date, datetime, timedelta
from typing import Optional

import jwt

from .config import settings

COUNTRY_CODE = "94"
TRUNK_PREFIX = "0"

_NON_DIGITS = re.compile(r"\D")


# =========================
# Phone numbers
# =========================
def normalize_phone(phone: str) -> str:
    """Canonicalize a phone number into the national key used for every lookup.

    ``0771234567``, ``771234567``, ``+94 77 123 4567`` all become ``94771234567``.
    """
    cleaned = _NON_DIGITS.sub("", phone or "")
    if cleaned.startswith(TRUNK_PREFIX):
        cleaned = COUNTRY_CODE + cleaned[1:]
    if not cleaned.startswith(COUNTRY_CODE):
        cleaned = COUNTRY_CODE + cleaned
    return cleaned


def hash_phone_number(phone: str) -> str:
    """Hash phone number for logs (one-way hash)"""
    return hashlib.sha256(phone.encode()).hexdigest()


# =========================
# OTP Generation
# =========================
def generate_otp(length: int = 6) -> str:
    """Generate a uniformly random numeric OTP with no leading zero."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


# =========================
# JWT Token Handling
# =========================
def _require_secret() -> str:
    if not settings.SECRET_KEY:
        raise ValueError("SECRET_KEY not properly configured")
    return settings.SECRET_KEY


def create_jwt_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "type": "access", "jti": str(uuid.uuid4())})
    return jwt.encode(to_encode, _require_secret(), algorithm=settings.ALGORITHM)


def create_refresh_token(data: dict) -> str:
    """Create JWT refresh token"""
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire, "type": "refresh", "jti": str(uuid.uuid4())})
    return jwt.encode(to_encode, _require_secret(), algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(token, _require_secret(), algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


# =========================
# Display formatting
# =========================
def format_time_12h(value: str) -> str:
    """'14:05' -> '2:05 PM'"""
    if not value:
        return ""
    hours, minutes = (int(part) for part in value.split(":")[:2])
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"


def format_date_short(value: str) -> str:
    """'2025-03-07' -> 'Mar 7'"""
    d = value if isinstance(value, date) else date.fromisoformat(value)
    return f"{d.strftime('%b')} {d.day}"


def format_price(amount: float) -> str:
    """1500 -> '1,500'; keeps cents only when present."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"
