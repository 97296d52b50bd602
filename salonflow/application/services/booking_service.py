import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ..ports.appointments_repo import AppointmentsRepository
from ..ports.booking_gateway import NO_PREFERENCE
from ..utils.intervals import is_valid_hhmm, to_hhmm, to_minutes
from .availability_service import AvailabilityService
from ...exceptions import Forbidden, SlotUnavailable, ValidationError
from ...utils import normalize_phone

logger = logging.getLogger(__name__)

OFF_GRID_MESSAGE = "Appointment time must be one of the offered slots"


@dataclass
class BookingService:
    """Creates one appointment after re-checking availability at write time."""

    repo: AppointmentsRepository
    availability: AvailabilityService
    booking_window_days: int = 30
    clock: Callable[[], datetime] = datetime.now

    def create_booking(self, session_phone: str, customer: Dict[str, Any], appointment: Dict[str, Any]) -> Dict[str, Any]:
        name = (customer.get("name") or "").strip()
        if not name:
            raise ValidationError("Customer name is required")
        if not customer.get("phone"):
            raise ValidationError("Customer phone is required")
        phone = normalize_phone(customer["phone"])
        if phone != normalize_phone(session_phone):
            raise Forbidden("Your verified phone number does not match this booking")
        email = (customer.get("email") or "").strip() or None

        appointment_date = self._parse_date(appointment.get("date"))
        start_time = appointment.get("time") or ""
        if not is_valid_hhmm(start_time):
            raise ValidationError("Invalid appointment time format. Use HH:MM")
        start_time = to_hhmm(to_minutes(start_time))

        service = self.availability.get_service(appointment.get("service_id") or "")
        stylist_id = appointment.get("stylist_id") or NO_PREFERENCE

        if stylist_id == NO_PREFERENCE:
            if not self.availability.is_slot_start(start_time):
                raise ValidationError(OFF_GRID_MESSAGE)
            stylist = self.availability.pick_stylist(service.id, appointment_date, start_time, service.duration)
            if stylist is None:
                raise SlotUnavailable()
        else:
            stylist = self.availability.get_stylist(stylist_id)
            if service.id not in stylist.specializations:
                raise ValidationError("This stylist does not offer the selected service")
            if not self.availability.is_slot_start(start_time, stylist, appointment_date):
                raise ValidationError(OFF_GRID_MESSAGE)
            if not self.availability.is_stylist_free(stylist, appointment_date, start_time, service.duration):
                raise SlotUnavailable()

        customer_id = self.repo.upsert_customer(phone, name, email)
        created = self.repo.create(
            customer_id=customer_id,
            customer_name=name,
            customer_phone=phone,
            customer_email=email,
            stylist_id=stylist.id,
            service_id=service.id,
            appointment_date=appointment_date,
            start_time=start_time,
            duration=service.duration,
            notes=appointment.get("notes"),
        )
        logger.info("Appointment %s booked with stylist %s on %s at %s", created.id, stylist.id, appointment_date, start_time)
        return {
            "appointment_id": created.id,
            "date": appointment_date.isoformat(),
            "time": start_time,
            "status": created.status,
            "service": {"id": service.id, "name": service.name, "duration": service.duration, "price": service.price},
            "stylist": {"id": stylist.id, "name": stylist.name},
        }

    def _parse_date(self, value: Optional[str]) -> date:
        try:
            parsed = datetime.strptime(value or "", "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError("Invalid appointment date format. Use YYYY-MM-DD")
        today = self.clock().date()
        if parsed < today:
            raise ValidationError("Appointment date cannot be in the past")
        if parsed > today + timedelta(days=self.booking_window_days):
            raise ValidationError(f"Appointments can be booked at most {self.booking_window_days} days ahead")
        return parsed
