import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from ..ports.catalog_repo import CatalogRepository, ServiceDto, StylistDto
from ..utils.intervals import is_overlapping, slot_starts, to_hhmm, to_minutes
from ...exceptions import NotFound, ValidationError

logger = logging.getLogger(__name__)

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

REASON_BOOKED = "Already booked"
REASON_BREAK = "Break"
REASON_UNAVAILABLE = "Unavailable"
REASON_PAST = "Past"
REASON_NO_STYLIST = "No stylists available"

# (start minute, duration, reason)
Block = Tuple[int, int, str]


@dataclass
class BusinessHours:
    start: str = "09:00"
    end: str = "18:00"
    slot_interval: int = 30


@dataclass
class TimeSlot:
    time: str
    available: bool
    reason: Optional[str] = None


@dataclass
class ConsolidatedSlot:
    time: str
    available: bool
    available_stylist_count: int = 0
    reason: Optional[str] = None


@dataclass
class ConsolidatedAvailability:
    service: ServiceDto
    slots: List[ConsolidatedSlot] = field(default_factory=list)
    qualified_stylist_count: int = 0

    @property
    def available_count(self) -> int:
        return sum(1 for s in self.slots if s.available)


@dataclass
class _StylistDay:
    stylist: StylistDto
    window: Tuple[int, int]
    blocks: List[Block]


@dataclass
class AvailabilityService:
    """Computes bookable slots from bookings, breaks and unavailability."""

    catalog: CatalogRepository
    hours: BusinessHours = field(default_factory=BusinessHours)
    clock: Callable[[], datetime] = datetime.now

    # ---- catalog -------------------------------------------------------

    def list_services(self, category: Optional[str] = None, gender: Optional[str] = None) -> List[ServiceDto]:
        return self.catalog.list_services(category=category, gender=gender)

    def get_service(self, service_id: str) -> ServiceDto:
        service = self.catalog.get_service(service_id)
        if service is None or not service.is_active:
            raise NotFound("Service not found")
        return service

    def get_stylist(self, stylist_id: str) -> StylistDto:
        stylist = self.catalog.get_stylist(stylist_id)
        if stylist is None or not stylist.is_active:
            raise NotFound("Stylist not found")
        return stylist

    def stylists_for_service(self, service_id: str, on: Optional[date] = None) -> List[StylistDto]:
        """Active stylists who perform the service (and work that date, when given)."""
        stylists = [s for s in self.catalog.list_stylists() if s.is_active and service_id in s.specializations]
        if on is not None:
            stylists = [s for s in stylists if self._working_window(s, on) is not None]
        return stylists

    # ---- slots ---------------------------------------------------------

    def slots_for_stylist(self, stylist_id: str, on: date, duration: int) -> List[TimeSlot]:
        self._check_duration(duration)
        stylist = self.get_stylist(stylist_id)
        day = self._stylist_day(stylist, on)
        if day is None:
            return []

        slots = []
        for start in slot_starts(day.window[0], day.window[1], self.hours.slot_interval, duration):
            reason = self._blocking_reason(day, on, start, duration)
            slots.append(TimeSlot(time=to_hhmm(start), available=reason is None, reason=reason))
        return slots

    def consolidated_slots(self, service_id: str, on: date, duration: Optional[int] = None) -> ConsolidatedAvailability:
        service = self.get_service(service_id)
        duration = duration or service.duration
        self._check_duration(duration)

        days = [d for d in (self._stylist_day(s, on) for s in self.stylists_for_service(service_id)) if d is not None]
        result = ConsolidatedAvailability(service=service, qualified_stylist_count=len(days))

        day_start, day_end = to_minutes(self.hours.start), to_minutes(self.hours.end)
        for start in slot_starts(day_start, day_end, self.hours.slot_interval, duration):
            free = sum(1 for d in days if self._blocking_reason(d, on, start, duration) is None)
            if free:
                result.slots.append(ConsolidatedSlot(time=to_hhmm(start), available=True, available_stylist_count=free))
            else:
                reason = REASON_PAST if self._is_past(on, start) else REASON_NO_STYLIST
                result.slots.append(ConsolidatedSlot(time=to_hhmm(start), available=False, reason=reason))
        logger.debug("Consolidated availability for %s on %s: %d/%d slots from %d stylists",
                     service_id, on, result.available_count, len(result.slots), len(days))
        return result

    def is_stylist_free(self, stylist: StylistDto, on: date, start_time: str, duration: int) -> bool:
        day = self._stylist_day(stylist, on)
        return day is not None and self._blocking_reason(day, on, to_minutes(start_time), duration) is None

    def is_slot_start(self, start_time: str, stylist: Optional[StylistDto] = None, on: Optional[date] = None) -> bool:
        """Whether ``start_time`` falls on the slot grid (the stylist's own window when given)."""
        origin = to_minutes(self.hours.start)
        if stylist is not None and on is not None:
            window = self._working_window(stylist, on)
            if window is not None:
                origin = window[0]
        return (to_minutes(start_time) - origin) % self.hours.slot_interval == 0

    def pick_stylist(self, service_id: str, on: date, start_time: str, duration: int) -> Optional[StylistDto]:
        """First qualified stylist (by name) free for the whole interval."""
        for stylist in self.stylists_for_service(service_id, on):
            if self.is_stylist_free(stylist, on, start_time, duration):
                return stylist
        return None

    # ---- internals -----------------------------------------------------

    def _check_duration(self, duration: int) -> None:
        if duration is None or duration <= 0:
            raise ValidationError("Duration must be a positive number of minutes")

    def _working_window(self, stylist: StylistDto, on: date) -> Optional[Tuple[int, int]]:
        if not stylist.is_active or stylist.is_emergency_unavailable:
            return None
        if stylist.working_days and WEEKDAYS[on.weekday()] not in stylist.working_days:
            return None
        hours = stylist.working_hours or {}
        start = to_minutes(hours.get("start") or self.hours.start)
        end = to_minutes(hours.get("end") or self.hours.end)
        if end <= start:
            return None
        return start, end

    def _stylist_day(self, stylist: StylistDto, on: date) -> Optional[_StylistDay]:
        window = self._working_window(stylist, on)
        if window is None:
            return None

        blocks: List[Block] = []
        for booking in self.catalog.bookings_for(stylist.id, on):
            blocks.append((to_minutes(booking.start_time), booking.duration, REASON_BOOKED))
        for brk in self.catalog.breaks_for(stylist.id):
            if brk.day_of_week is None or brk.day_of_week == on.weekday():
                start = to_minutes(brk.start_time)
                blocks.append((start, to_minutes(brk.end_time) - start, REASON_BREAK))
        for off in self.catalog.unavailability_for(stylist.id, on):
            if off.start_time and off.end_time:
                start = to_minutes(off.start_time)
                blocks.append((start, to_minutes(off.end_time) - start, REASON_UNAVAILABLE))
            else:
                blocks.append((0, 24 * 60, REASON_UNAVAILABLE))
        return _StylistDay(stylist=stylist, window=window, blocks=blocks)

    def _is_past(self, on: date, start: int) -> bool:
        now = self.clock()
        if on != now.date():
            return on < now.date()
        return start <= now.hour * 60 + now.minute

    def _blocking_reason(self, day: _StylistDay, on: date, start: int, duration: int) -> Optional[str]:
        if start < day.window[0] or start + duration > day.window[1]:
            return REASON_UNAVAILABLE
        if self._is_past(on, start):
            return REASON_PAST
        for block_start, block_duration, reason in day.blocks:
            if is_overlapping(start, duration, block_start, block_duration):
                return reason
        return None

