import uuid
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..ports.booking_gateway import NO_PREFERENCE
from ..ports.catalog_repo import ServiceDto
from ..utils.intervals import end_time, is_overlapping, is_valid_hhmm, to_minutes
from .availability_service import TimeSlot
from ...exceptions import SlotConflict, SlotUnavailable, ValidationError

REASON_IN_CART = "In your cart"


@dataclass
class CartItem:
    id: str
    service: ServiceDto
    stylist_id: str
    date: str
    time: str
    stylist_name: Optional[str] = None
    notes: Optional[str] = None

    @property
    def duration(self) -> int:
        return self.service.duration

    @property
    def price(self) -> float:
        return self.service.price

    @property
    def end_time(self) -> str:
        return end_time(self.time, self.duration)

    @property
    def has_preference(self) -> bool:
        return self.stylist_id != NO_PREFERENCE

    def overlaps(self, date: str, time: str, duration: int) -> bool:
        return self.date == date and is_overlapping(to_minutes(self.time), self.duration, to_minutes(time), duration)


class Cart:
    """Pending appointments of one checkout session.

    Items on the same date never overlap: ``add`` refuses a conflicting item, so
    the cart cannot hold an internally conflicting set.
    """

    def __init__(self) -> None:
        self._items: List[CartItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(list(self._items))

    @property
    def items(self) -> Tuple[CartItem, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def total_price(self) -> float:
        return sum(item.price for item in self._items)

    @property
    def total_duration(self) -> int:
        return sum(item.duration for item in self._items)

    def add(self, service: ServiceDto, stylist_id: str, date: str, time: str, slots: Sequence[TimeSlot],
            stylist_name: Optional[str] = None, notes: Optional[str] = None) -> CartItem:
        """Add an appointment picked from ``slots``, the list the picker offered."""
        if service is None:
            raise ValidationError("Please choose a service")
        if not stylist_id:
            raise ValidationError("Please choose a stylist or no preference")
        if not date:
            raise ValidationError("Please choose a date")
        if not time or not is_valid_hhmm(time):
            raise ValidationError("Please choose a time")

        offered = next((s for s in slots if s.time == time), None)
        if offered is None or not offered.available:
            raise SlotUnavailable("Selected time is not available")

        clash = self.find_conflict(date, time, service.duration)
        if clash is not None:
            raise SlotConflict(f"This time overlaps {clash.service.name} at {clash.time}-{clash.end_time}")

        item = CartItem(
            id=str(uuid.uuid4()),
            service=service,
            stylist_id=stylist_id,
            date=date,
            time=time,
            stylist_name=stylist_name,
            notes=notes,
        )
        self._items.append(item)
        return item

    def remove(self, item_id: str) -> bool:
        before = len(self._items)
        self._items = [item for item in self._items if item.id != item_id]
        return len(self._items) != before

    def remove_many(self, item_ids: Iterable[str]) -> None:
        ids = set(item_ids)
        self._items = [item for item in self._items if item.id not in ids]

    def clear(self) -> None:
        self._items = []

    def find_conflict(self, date: str, time: str, duration: int, exclude_item_id: Optional[str] = None) -> Optional[CartItem]:
        for item in self._items:
            if item.id != exclude_item_id and item.overlaps(date, time, duration):
                return item
        return None

    def blocked_intervals(self, date: str, exclude_item_id: Optional[str] = None) -> List[Tuple[int, int]]:
        return [
            (to_minutes(item.time), item.duration)
            for item in self._items
            if item.date == date and item.id != exclude_item_id
        ]

    def mark_blocked(self, slots: Sequence[TimeSlot], date: str, duration: int,
                     exclude_item_id: Optional[str] = None) -> List[TimeSlot]:
        """Slots for a new pick on ``date`` with times taken by the cart made unavailable."""
        blocked = self.blocked_intervals(date, exclude_item_id)
        marked = []
        for slot in slots:
            start = to_minutes(slot.time)
            if slot.available and any(is_overlapping(start, duration, b_start, b_dur) for b_start, b_dur in blocked):
                slot = replace(slot, available=False, reason=REASON_IN_CART)
            marked.append(slot)
        return marked

    def conflicts(self) -> List[Tuple[CartItem, CartItem]]:
        pairs = []
        for i, first in enumerate(self._items):
            for second in self._items[i + 1:]:
                if first.overlaps(second.date, second.time, second.duration):
                    pairs.append((first, second))
        return pairs
