import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..application.services.availability_service import AvailabilityService
from ..application.services.booking_service import BookingService
from ..dependencies import get_availability_service, get_booking_service, get_current_session
from ..exceptions import ValidationError, create_success_response
from ..schemas import BookRequest, ConsolidatedSlotOut, ServiceOut, SlotOut, StylistOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["Public Booking"])


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")


@router.get("/services")
def list_services(
    category: Optional[str] = None,
    gender: Optional[str] = None,
    availability: AvailabilityService = Depends(get_availability_service),
):
    services = availability.list_services(category=category, gender=gender)
    return create_success_response(data=[ServiceOut(**vars(s)).model_dump() for s in services])


@router.get("/stylists")
def list_stylists(
    service_id: str,
    date: Optional[str] = None,
    availability: AvailabilityService = Depends(get_availability_service),
):
    availability.get_service(service_id)
    on = _parse_date(date) if date else None
    stylists = availability.stylists_for_service(service_id, on)
    return create_success_response(
        data=[
            StylistOut(
                id=s.id,
                name=s.name,
                specializations=s.specializations,
                working_days=s.working_days,
                working_hours=s.working_hours,
            ).model_dump()
            for s in stylists
        ]
    )


@router.get("/availability")
def stylist_availability(
    stylist_id: str,
    date: str,
    duration: int = Query(..., description="Service duration in minutes"),
    availability: AvailabilityService = Depends(get_availability_service),
):
    slots = availability.slots_for_stylist(stylist_id, _parse_date(date), duration)
    return create_success_response(
        data=[SlotOut(time=s.time, available=s.available, reason=s.reason).model_dump() for s in slots],
        availableCount=sum(1 for s in slots if s.available),
    )


@router.get("/consolidated-availability")
def consolidated_availability(
    service_id: str,
    date: str,
    duration: Optional[int] = None,
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Slots open with at least one qualified stylist, for "no preference" bookings."""
    result = availability.consolidated_slots(service_id, _parse_date(date), duration)
    return create_success_response(
        service={"id": result.service.id, "name": result.service.name, "duration": result.service.duration},
        data=[
            ConsolidatedSlotOut(
                time=s.time,
                available=s.available,
                availableStylistCount=s.available_stylist_count,
                reason=s.reason,
            ).model_dump()
            for s in result.slots
        ],
        availableSlots=result.available_count,
        qualifiedStylistCount=result.qualified_stylist_count,
    )


@router.post("/book")
def book_appointment(
    payload: BookRequest,
    claims: dict = Depends(get_current_session),
    booking_service: BookingService = Depends(get_booking_service),
):
    booked = booking_service.create_booking(
        session_phone=claims["phone"],
        customer=payload.customer.model_dump(),
        appointment=payload.appointment.model_dump(),
    )
    return create_success_response(data=booked)
