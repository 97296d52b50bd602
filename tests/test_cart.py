import pytest

from salonflow.application.ports.catalog_repo import ServiceDto
from salonflow.application.services.availability_service import TimeSlot
from salonflow.application.services.cart import Cart
from salonflow.exceptions import SlotConflict, SlotUnavailable, ValidationError

CUT = ServiceDto(id="cut", name="Haircut", category="Hair", price=1500, duration=60)
WASH = ServiceDto(id="wash", name="Hair Wash", category="Hair", price=500, duration=30)
DAY = "2025-03-10"


def open_slots(*times):
    return [TimeSlot(time=t, available=True) for t in times]


SLOTS = open_slots("09:00", "09:30", "10:00", "10:30", "11:00", "11:30")


def test_add_and_totals():
    cart = Cart()
    cart.add(CUT, "alice", DAY, "10:00", SLOTS, stylist_name="Alice")
    cart.add(WASH, "any", DAY, "11:00", SLOTS)

    assert len(cart) == 2
    assert cart.total_price == 2000
    assert cart.total_duration == 90
    assert cart.items[0].end_time == "11:00"
    assert cart.items[0].has_preference is True
    assert cart.items[1].has_preference is False


def test_overlapping_item_is_rejected():
    cart = Cart()
    cart.add(CUT, "alice", DAY, "10:00", SLOTS)

    with pytest.raises(SlotConflict):
        cart.add(WASH, "bob", DAY, "10:30", SLOTS)
    assert len(cart) == 1


def test_back_to_back_items_are_accepted():
    cart = Cart()
    cart.add(CUT, "alice", DAY, "10:00", SLOTS)
    cart.add(WASH, "alice", DAY, "11:00", SLOTS)
    assert cart.conflicts() == []


def test_same_time_on_another_day_is_accepted():
    cart = Cart()
    cart.add(CUT, "alice", DAY, "10:00", SLOTS)
    cart.add(CUT, "alice", "2025-03-11", "10:00", SLOTS)
    assert len(cart) == 2


def test_unavailable_slot_is_rejected():
    cart = Cart()
    slots = [TimeSlot(time="10:00", available=False, reason="Already booked")]
    with pytest.raises(SlotUnavailable):
        cart.add(CUT, "alice", DAY, "10:00", slots)
    with pytest.raises(SlotUnavailable):
        cart.add(CUT, "alice", DAY, "12:00", SLOTS)


def test_missing_selection_is_rejected():
    cart = Cart()
    with pytest.raises(ValidationError):
        cart.add(CUT, "", DAY, "10:00", SLOTS)
    with pytest.raises(ValidationError):
        cart.add(CUT, "alice", DAY, "10am", SLOTS)


def test_mark_blocked_hides_times_taken_by_the_cart():
    cart = Cart()
    item = cart.add(CUT, "alice", DAY, "10:00", SLOTS)

    marked = {s.time: s for s in cart.mark_blocked(SLOTS, DAY, 30)}
    assert marked["09:30"].available is True
    assert marked["10:00"].available is False
    assert marked["10:00"].reason == "In your cart"
    assert marked["10:30"].available is False
    assert marked["11:00"].available is True

    # editing the item itself frees its own interval
    edited = {s.time: s for s in cart.mark_blocked(SLOTS, DAY, 30, exclude_item_id=item.id)}
    assert edited["10:00"].available is True

    # the offered list is left untouched
    assert all(s.available for s in SLOTS)


def test_remove_and_clear():
    cart = Cart()
    first = cart.add(CUT, "alice", DAY, "09:00", SLOTS)
    cart.add(WASH, "alice", DAY, "11:00", SLOTS)

    assert cart.remove(first.id) is True
    assert cart.remove(first.id) is False
    assert len(cart) == 1
    cart.clear()
    assert cart.is_empty
