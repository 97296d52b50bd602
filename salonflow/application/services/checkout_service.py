import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..ports.booking_gateway import BookedAppointment, BookingGateway, BookingRequest, ConfirmationGateway, CustomerDetails
from ..ports.identity_provider import AuthSession
from .cart import Cart, CartItem
from ...exceptions import BookingFlowError, PartialBookingFailure, PersistenceError, SessionError, SlotConflict, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    appointments: List[BookedAppointment] = field(default_factory=list)
    total_price: float = 0.0
    total_duration: int = 0
    confirmation_sent: bool = False


@dataclass
class CheckoutService:
    """Submits every cart item, one at a time and in cart order.

    There is no transaction across items: when item k fails, items before it stay
    booked, items after it are never sent, and PartialBookingFailure says which is which.
    """

    booking_gateway: BookingGateway
    confirmation_gateway: Optional[ConfirmationGateway] = None
    clock: Callable[[], float] = time.time

    async def submit(self, cart: Cart, customer: CustomerDetails, session: Optional[AuthSession]) -> CheckoutResult:
        if session is None or session.expires_at <= self.clock():
            raise SessionError("Please verify your phone number to continue")
        if cart.is_empty:
            raise ValidationError("Your cart is empty")
        if not customer.name or not customer.name.strip():
            raise ValidationError("Please enter your name")
        if not customer.phone:
            raise ValidationError("Please enter your phone number")
        if cart.conflicts():
            raise SlotConflict()

        items = list(cart.items)
        committed: List[BookedAppointment] = []
        committed_ids: List[str] = []
        for index, item in enumerate(items):
            request = BookingRequest(
                customer=customer,
                service_id=item.service.id,
                stylist_id=item.stylist_id,
                date=item.date,
                time=item.time,
                notes=item.notes,
            )
            try:
                booked = await self.booking_gateway.create_booking(request, session.access_token)
            except Exception as exc:
                if not isinstance(exc, BookingFlowError):
                    logger.exception("Booking gateway failed unexpectedly")
                    exc = PersistenceError("Booking service is unavailable. Please try again.")
                # Already-created appointments must not be resubmitted on retry
                cart.remove_many(committed_ids)
                logger.warning("Checkout stopped at item %d of %d: %s", index + 1, len(items), exc.message)
                raise PartialBookingFailure(committed, item, items[index + 1:], exc) from exc
            committed.append(booked)
            committed_ids.append(item.id)

        cart.clear()
        result = CheckoutResult(
            appointments=committed,
            total_price=sum(item.price for item in items),
            total_duration=sum(item.duration for item in items),
        )
        result.confirmation_sent = await self._send_confirmation(customer.phone, items, result.total_price)
        return result

    async def _send_confirmation(self, phone: str, items: List[CartItem], total_price: float) -> bool:
        if self.confirmation_gateway is None:
            return False
        appointments: List[Dict[str, Any]] = [
            {"serviceName": item.service.name, "date": item.date, "time": item.time, "price": item.price}
            for item in items
        ]
        try:
            return await self.confirmation_gateway.send_confirmation(phone, appointments, total_price)
        except Exception:
            # A failed confirmation never invalidates completed bookings
            logger.warning("Confirmation SMS could not be sent", exc_info=True)
            return False
