from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

# Stylist preference meaning "any qualified stylist"
NO_PREFERENCE = "any"


@dataclass
class CustomerDetails:
    name: str
    phone: str
    email: Optional[str] = None


@dataclass
class BookingRequest:
    customer: CustomerDetails
    service_id: str
    stylist_id: str
    date: str
    time: str
    notes: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        customer: Dict[str, Any] = {"name": self.customer.name, "phone": self.customer.phone}
        if self.customer.email:
            customer["email"] = self.customer.email
        appointment: Dict[str, Any] = {
            "service_id": self.service_id,
            "stylist_id": self.stylist_id,
            "date": self.date,
            "time": self.time,
        }
        if self.notes:
            appointment["notes"] = self.notes
        return {"customer": customer, "appointment": appointment}


@dataclass
class BookedAppointment:
    appointment_id: str
    date: str
    time: str
    status: str
    service_name: str
    duration: int
    price: float
    stylist_name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookedAppointment":
        service = data.get("service") or {}
        stylist = data.get("stylist") or {}
        return cls(
            appointment_id=str(data["appointment_id"]),
            date=data["date"],
            time=data["time"],
            status=data.get("status", "Pending"),
            service_name=service.get("name", ""),
            duration=int(service.get("duration", 0)),
            price=float(service.get("price", 0)),
            stylist_name=stylist.get("name", ""),
        )


class BookingGateway(Protocol):
    async def create_booking(self, request: BookingRequest, access_token: str) -> BookedAppointment:
        """Create one appointment; raises a BookingFlowError subclass on failure."""
        ...


class ConfirmationGateway(Protocol):
    async def send_confirmation(self, phone: str, appointments: List[Dict[str, Any]], total_price: float) -> bool:
        ...
