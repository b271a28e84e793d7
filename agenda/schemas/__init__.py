# agenda/schemas/__init__.py
from .base import DocumentModel

from .scheduling import (
    DEFAULT_PROFESSIONAL_ID,
    TimeInterval,
    AvailabilitySlot,
    DaySchedule,
    WeeklySchedule,
    DateOverride,
    ScheduleSource,
    ResolvedSchedule,
    OverrideConfig,
)

from .booking import (
    BookingStatus,
    BookingSource,
    CommissionType,
    Booking,
    Block,
    BookingRequest,
    BookingStatusUpdate,
    BlockRequest,
)

from .catalog import (
    Business,
    Service,
)

__all__ = [
    "DocumentModel",
    "DEFAULT_PROFESSIONAL_ID",
    "TimeInterval",
    "AvailabilitySlot",
    "DaySchedule",
    "WeeklySchedule",
    "DateOverride",
    "ScheduleSource",
    "ResolvedSchedule",
    "OverrideConfig",
    "BookingStatus",
    "BookingSource",
    "CommissionType",
    "Booking",
    "Block",
    "BookingRequest",
    "BookingStatusUpdate",
    "BlockRequest",
    "Business",
    "Service",
]
