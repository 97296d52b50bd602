# Routers package
from . import booking_router
from . import otp_router
from . import sms_router

__all__ = [
    "booking_router",
    "otp_router",
    "sms_router",
]
