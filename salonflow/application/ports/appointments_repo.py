from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class AppointmentDto:
    id: str
    customer_id: str
    stylist_id: str
    service_id: str
    appointment_date: date
    start_time: str
    duration: int
    status: str
    notes: Optional[str]
    created_at: datetime


class AppointmentsRepository:
    def upsert_customer(self, phone: str, name: str, email: Optional[str]) -> str:
        """Stage new contact details for the customer keyed by ``phone``; returns its id.

        The change is committed by the following ``create`` and discarded if it fails.
        """
        ...

    def create(self, customer_id: str, customer_name: str, customer_phone: str, customer_email: Optional[str],
               stylist_id: str, service_id: str, appointment_date: date, start_time: str, duration: int,
               notes: Optional[str]) -> AppointmentDto:
        """Raises SlotUnavailable when the stylist slot is already taken."""
        ...
