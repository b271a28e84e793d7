# ============================================================================
# agenda/services/availability/slot_engine.py
# Pure slot computation - no I/O, no clock, fully deterministic
# ============================================================================
"""
Slot computation engine.

Given the schedule that applies to one day, a service duration and the busy
intervals of that day (bookings and blocks, as minute offsets from local
midnight), produce the ordered, de-duplicated list of bookable start times
as minute-of-day integers.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from agenda.core.exceptions import ValidationError
from agenda.schemas.scheduling import AvailabilitySlot, DaySchedule, ResolvedSchedule

DEFAULT_INTERVAL_MINUTES = 30


@dataclass(frozen=True)
class BusyInterval:
    """Half-open [start, end) range in minutes from the day's local midnight"""
    start: int
    end: int

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end and end > self.start


def eligible_slots(schedule, service_id: str) -> List[AvailabilitySlot]:
    """Intervals of an open schedule that accept `service_id`"""
    if schedule is None or not schedule.is_open:
        return []
    return [slot for slot in schedule.slots if slot.applies_to(service_id)]


def candidate_starts(slot: AvailabilitySlot, duration_minutes: int, interval_minutes: int) -> Iterable[int]:
    """Start times stepping from slot.start whose end still fits inside the slot"""
    start, end = slot.start_minute, slot.end_minute
    current = start
    while current + duration_minutes <= end:
        yield current
        current += interval_minutes


def _validate(duration_minutes: int, interval_minutes: int) -> None:
    if not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise ValidationError(
            f"Service duration must be a positive number of minutes, got {duration_minutes!r}",
            {"duration_minutes": duration_minutes}
        )
    if not isinstance(interval_minutes, int) or interval_minutes <= 0:
        raise ValidationError(
            f"Slot interval must be a positive number of minutes, got {interval_minutes!r}",
            {"interval_minutes": interval_minutes}
        )


def compute_slots(
        service_id: str,
        duration_minutes: int,
        schedule: Optional[DaySchedule | ResolvedSchedule],
        bookings: Sequence[BusyInterval] = (),
        blocks: Sequence[BusyInterval] = (),
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        not_before: Optional[int] = None
) -> List[int]:
    """
    Bookable start times for one day.

    Args:
        service_id: Service being booked; slots scoped to other services are skipped
        duration_minutes: Service duration, sizes every candidate
        schedule: Resolved schedule for the day (override or weekly entry)
        bookings: Busy intervals from existing bookings
        blocks: Busy intervals from blocks
        interval_minutes: Step between candidate starts
        not_before: Minute offset of "now" from the day's midnight; earlier
            candidates are dropped. None disables the check.

    Returns:
        Ascending minute-of-day values, each appearing once
    """
    _validate(duration_minutes, interval_minutes)

    slots = eligible_slots(schedule, service_id)
    if not slots:
        return []

    busy = list(bookings) + list(blocks)
    result = set()

    for slot in slots:
        for start in candidate_starts(slot, duration_minutes, interval_minutes):
            if not_before is not None and start < not_before:
                continue
            end = start + duration_minutes
            if any(interval.overlaps(start, end) for interval in busy):
                continue
            result.add(start)

    return sorted(result)


def slot_price(
        schedule,
        service_id: str,
        start_minute: int,
        duration_minutes: int,
        default_price: float
) -> float:
    """
    Price of a booking starting at `start_minute`.

    The first eligible interval that fully contains the booking and defines a
    custom price wins; otherwise the service price applies.
    """
    end_minute = start_minute + duration_minutes
    for slot in eligible_slots(schedule, service_id):
        if slot.custom_price is None:
            continue
        if slot.start_minute <= start_minute and end_minute <= slot.end_minute:
            return float(slot.custom_price)
    return float(default_price)
