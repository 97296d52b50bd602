import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import Appointment, Customer, slot_lock_key
from .....application.ports.appointments_repo import AppointmentDto, AppointmentsRepository
from .....exceptions import PersistenceError, SlotUnavailable

logger = logging.getLogger(__name__)


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            customer_id=a.customer_id,
            stylist_id=a.stylist_id,
            service_id=a.service_id,
            appointment_date=a.appointment_date,
            start_time=a.start_time,
            duration=a.duration,
            status=a.status,
            notes=a.notes,
            created_at=a.created_at,
        )

    def upsert_customer(self, phone: str, name: str, email: Optional[str]) -> str:
        try:
            customer = self.session.exec(select(Customer).where(Customer.phone == phone)).first()
            if customer is None:
                raise PersistenceError("Customer identity not found; verify your phone number again")
            customer.name = name
            if email:
                customer.email = email
            customer.updated_at = datetime.utcnow()
            self.session.add(customer)
            # Committed together with the appointment in create()
            self.session.flush()
            return customer.id
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error updating customer: {e}")
            raise PersistenceError() from e

    def create(self, customer_id: str, customer_name: str, customer_phone: str, customer_email: Optional[str],
               stylist_id: str, service_id: str, appointment_date: date, start_time: str, duration: int,
               notes: Optional[str]) -> AppointmentDto:
        appt = Appointment(
            customer_id=customer_id,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_email=customer_email,
            stylist_id=stylist_id,
            service_id=service_id,
            appointment_date=appointment_date,
            start_time=start_time,
            duration=duration,
            status="Pending",
            notes=notes,
            slot_lock=slot_lock_key(stylist_id, appointment_date, start_time),
        )
        try:
            self.session.add(appt)
            self.session.commit()
            self.session.refresh(appt)
        except IntegrityError as e:
            self.session.rollback()
            logger.info(f"Slot already taken for stylist {stylist_id} on {appointment_date} at {start_time}")
            raise SlotUnavailable() from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Error creating appointment: {e}")
            raise PersistenceError("Failed to book appointment") from e
        return self._appt_to_dto(appt)
