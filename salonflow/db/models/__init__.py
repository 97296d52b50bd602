# Models package (re-export feature modules for stable imports)
from .auth.otp import OtpRecord
from .users.customer import Customer
from .users.session import UserSession
from .salon.service import Service
from .salon.stylist import Stylist, StylistBreak, StylistUnavailability
from .salon.appointment import Appointment, BLOCKING_STATUSES, slot_lock_key

__all__ = [
    "OtpRecord",
    "Customer",
    "UserSession",
    "Service",
    "Stylist",
    "StylistBreak",
    "StylistUnavailability",
    "Appointment",
    "BLOCKING_STATUSES",
    "slot_lock_key",
]
