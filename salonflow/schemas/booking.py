from typing import List, Optional

from pydantic import BaseModel, Field


class CustomerIn(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class AppointmentIn(BaseModel):
    service_id: Optional[str] = None
    stylist_id: Optional[str] = Field("any", description="Stylist id, or 'any' for no preference")
    date: Optional[str] = Field(None, description="YYYY-MM-DD")
    time: Optional[str] = Field(None, description="HH:MM, 24-hour")
    notes: Optional[str] = None


class BookRequest(BaseModel):
    customer: CustomerIn
    appointment: AppointmentIn


class ConfirmationAppointment(BaseModel):
    serviceName: str
    date: str
    time: str
    price: Optional[float] = None


class ConfirmationRequest(BaseModel):
    phone: Optional[str] = None
    appointments: List[ConfirmationAppointment] = []
    totalPrice: float = 0


class ServiceOut(BaseModel):
    id: str
    name: str
    category: str
    price: float
    duration: int
    gender: Optional[str] = None
    description: Optional[str] = None


class StylistOut(BaseModel):
    id: str
    name: str
    specializations: List[str] = []
    working_days: List[str] = []
    working_hours: Optional[dict] = None


class SlotOut(BaseModel):
    time: str
    available: bool
    reason: Optional[str] = None


class ConsolidatedSlotOut(BaseModel):
    time: str
    available: bool
    availableStylistCount: int = 0
    reason: Optional[str] = None


__all__ = [
    "CustomerIn",
    "AppointmentIn",
    "BookRequest",
    "ConfirmationAppointment",
    "ConfirmationRequest",
    "ServiceOut",
    "StylistOut",
    "SlotOut",
    "ConsolidatedSlotOut",
]
