# salonflow/db/models/salon/appointment.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime, date
import uuid

# Statuses that occupy the stylist's time
BLOCKING_STATUSES = ("Pending", "Confirmed", "InService")


def slot_lock_key(stylist_id: str, appointment_date: date, start_time: str) -> str:
    hours, minutes = start_time.strip().split(":")[:2]
    return f"{stylist_id}|{appointment_date.isoformat()}|{int(hours):02d}:{int(minutes):02d}"


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    customer_id: str = Field(foreign_key="customers.id", index=True)
    customer_name: str = Field(max_length=100)
    customer_phone: str = Field(max_length=20)
    customer_email: Optional[str] = Field(default=None, max_length=100)
    stylist_id: str = Field(foreign_key="stylists.id", index=True)
    service_id: str = Field(foreign_key="services.id")
    appointment_date: date = Field(index=True)
    start_time: str = Field(max_length=5)
    duration: int
    status: str = Field(default="Pending", max_length=20)
    notes: Optional[str] = None
    # stylist|date|time while the status is blocking, NULL otherwise.
    # Unique, so two racing bookings for one slot cannot both commit.
    slot_lock: Optional[str] = Field(default=None, max_length=80, unique=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
