import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from ..ports.sms_gateway import SmsGateway
from ...exceptions import ValidationError
from ...utils import format_date_short, format_price, format_time_12h, hash_phone_number, normalize_phone

logger = logging.getLogger(__name__)


def compose_confirmation(appointments: Sequence[Dict[str, Any]], total_price: float) -> str:
    lines = "\n".join(
        f"{i}. {apt['serviceName']} - {format_date_short(apt['date'])} at {format_time_12h(apt['time'])}"
        for i, apt in enumerate(appointments, start=1)
    )
    return (
        "SalonFlow Booking Confirmed!\n\n"
        f"{lines}\n\n"
        f"Total: Rs {format_price(total_price)}\n\n"
        "We look forward to seeing you!"
    )


@dataclass
class ConfirmationService:
    """Best-effort booking summary over SMS. Never raises past input validation."""

    sms_gateway: SmsGateway
    expose_debug_message: bool = False

    def notify(self, phone: str, appointments: List[Dict[str, Any]], total_price: float) -> Dict[str, Any]:
        if not phone or not appointments:
            raise ValidationError("Phone and appointments are required")
        phone = normalize_phone(phone)
        try:
            message = compose_confirmation(appointments, total_price)
        except (KeyError, ValueError) as e:
            raise ValidationError(f"Invalid appointment details: {e}")

        if not self.sms_gateway.is_configured():
            logger.info("SMS gateway not configured - confirmation not sent")
            response: Dict[str, Any] = {"success": True, "message": "Confirmation generated (SMS not configured)"}
            if self.expose_debug_message:
                response["debug_message"] = message
            return response

        try:
            self.sms_gateway.send(phone, message)
        except Exception:
            logger.error("Confirmation SMS failed for %s", hash_phone_number(phone)[:12], exc_info=True)
            return {"success": False, "error": "Failed to send confirmation SMS"}

        logger.info("Confirmation SMS sent to %s", hash_phone_number(phone)[:12])
        return {"success": True, "message": "Confirmation SMS sent successfully"}
