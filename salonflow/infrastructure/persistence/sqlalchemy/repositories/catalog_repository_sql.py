from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
import logging

from .....db.models import Appointment, BLOCKING_STATUSES, Service, Stylist, StylistBreak, StylistUnavailability
from .....application.ports.catalog_repo import (
    BookedIntervalDto,
    BreakDto,
    CatalogRepository,
    ServiceDto,
    StylistDto,
    UnavailabilityDto,
)
from .....exceptions import PersistenceError

logger = logging.getLogger(__name__)


class SqlCatalogRepository(CatalogRepository):
    def __init__(self, session: Session):
        self.session = session

    def _service_to_dto(self, s: Service) -> ServiceDto:
        return ServiceDto(
            id=s.id,
            name=s.name,
            category=s.category,
            price=s.price,
            duration=s.duration,
            gender=s.gender,
            description=s.description,
            is_active=s.is_active,
        )

    def _stylist_to_dto(self, s: Stylist) -> StylistDto:
        return StylistDto(
            id=s.id,
            name=s.name,
            specializations=list(s.specializations or []),
            working_days=list(s.working_days or []),
            working_hours=dict(s.working_hours) if s.working_hours else None,
            is_active=s.is_active,
            is_emergency_unavailable=s.is_emergency_unavailable,
        )

    def _all(self, statement):
        try:
            return self.session.exec(statement).all()
        except SQLAlchemyError as e:
            logger.error(f"Catalog query failed: {e}")
            raise PersistenceError("Failed to load availability data") from e

    def list_services(self, category: Optional[str] = None, gender: Optional[str] = None) -> List[ServiceDto]:
        statement = select(Service).where(Service.is_active == True)  # noqa: E712
        if category:
            statement = statement.where(Service.category == category)
        if gender:
            statement = statement.where(Service.gender.in_([gender, "Unisex"]))
        return [self._service_to_dto(s) for s in self._all(statement.order_by(Service.category, Service.name))]

    def get_service(self, service_id: str) -> Optional[ServiceDto]:
        rows = self._all(select(Service).where(Service.id == service_id))
        return self._service_to_dto(rows[0]) if rows else None

    def list_stylists(self) -> List[StylistDto]:
        statement = select(Stylist).where(Stylist.is_active == True).order_by(Stylist.name, Stylist.id)  # noqa: E712
        return [self._stylist_to_dto(s) for s in self._all(statement)]

    def get_stylist(self, stylist_id: str) -> Optional[StylistDto]:
        rows = self._all(select(Stylist).where(Stylist.id == stylist_id))
        return self._stylist_to_dto(rows[0]) if rows else None

    def breaks_for(self, stylist_id: str) -> List[BreakDto]:
        rows = self._all(select(StylistBreak).where(StylistBreak.stylist_id == stylist_id))
        return [BreakDto(start_time=b.start_time, end_time=b.end_time, day_of_week=b.day_of_week) for b in rows]

    def unavailability_for(self, stylist_id: str, on: date) -> List[UnavailabilityDto]:
        rows = self._all(
            select(StylistUnavailability)
            .where(StylistUnavailability.stylist_id == stylist_id)
            .where(StylistUnavailability.unavailable_date == on)
        )
        return [UnavailabilityDto(unavailable_date=u.unavailable_date, start_time=u.start_time, end_time=u.end_time) for u in rows]

    def bookings_for(self, stylist_id: str, on: date) -> List[BookedIntervalDto]:
        rows = self._all(
            select(Appointment)
            .where(Appointment.stylist_id == stylist_id)
            .where(Appointment.appointment_date == on)
            .where(Appointment.status.in_(BLOCKING_STATUSES))
            .order_by(Appointment.start_time)
        )
        return [BookedIntervalDto(start_time=a.start_time, duration=a.duration) for a in rows]
