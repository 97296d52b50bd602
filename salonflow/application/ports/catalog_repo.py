from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional


@dataclass
class ServiceDto:
    id: str
    name: str
    category: str
    price: float
    duration: int
    gender: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True


@dataclass
class StylistDto:
    id: str
    name: str
    specializations: List[str] = field(default_factory=list)
    working_days: List[str] = field(default_factory=list)
    working_hours: Optional[Dict[str, str]] = None
    is_active: bool = True
    is_emergency_unavailable: bool = False


@dataclass
class BreakDto:
    start_time: str
    end_time: str
    day_of_week: Optional[int] = None


@dataclass
class UnavailabilityDto:
    unavailable_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None


@dataclass
class BookedIntervalDto:
    start_time: str
    duration: int


class CatalogRepository:
    def list_services(self, category: Optional[str] = None, gender: Optional[str] = None) -> List[ServiceDto]:
        ...

    def get_service(self, service_id: str) -> Optional[ServiceDto]:
        ...

    def list_stylists(self) -> List[StylistDto]:
        """Active stylists ordered by name."""
        ...

    def get_stylist(self, stylist_id: str) -> Optional[StylistDto]:
        ...

    def breaks_for(self, stylist_id: str) -> List[BreakDto]:
        ...

    def unavailability_for(self, stylist_id: str, on: date) -> List[UnavailabilityDto]:
        ...

    def bookings_for(self, stylist_id: str, on: date) -> List[BookedIntervalDto]:
        """Intervals of appointments whose status still occupies the stylist."""
        ...
