# ===== agenda/services/availability/availability_service.py =====
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
import logging

from agenda.config.settings import get_settings
from agenda.core.exceptions import ValidationError
from agenda.schemas.booking import BookingStatus
from agenda.schemas.catalog import Business, Service
from agenda.schemas.scheduling import DEFAULT_PROFESSIONAL_ID, ResolvedSchedule
from agenda.services.availability.slot_engine import (
    BusyInterval,
    compute_slots,
    eligible_slots,
    slot_price,
)
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.schedule.schedule_service import ScheduleService
from agenda.services.store.document_store import BLOCKS, BOOKINGS, DocumentStore
from agenda.utils.time_utils import (
    day_bounds_ms,
    epoch_ms_to_day_offset,
    format_minutes,
    now_ms as current_ms,
    parse_date,
)

logger = logging.getLogger(__name__)


def capacity_scope(professional_id: Optional[str]) -> Optional[str]:
    """
    Professional whose bookings and blocks limit a slot list.

    The shared default professional (public bookings) is not a real resource,
    so it competes with every booking of the business: None.
    """
    if professional_id is None or professional_id == DEFAULT_PROFESSIONAL_ID:
        return None
    return professional_id


def busy_intervals_for_day(
        reader,
        collection: str,
        business_id: str,
        day: date,
        tz,
        professional_id: Optional[str] = None
) -> List[BusyInterval]:
    """
    Bookings or blocks intersecting the local day, as minute offsets.

    `reader` is anything with list(collection, **filters): the store itself or
    a transaction-bound reader. Cancelled bookings do not hold capacity.
    """
    day_start, day_end = day_bounds_ms(day, tz)
    filters = {"businessId": business_id}
    scope = capacity_scope(professional_id)
    if scope is not None:
        filters["professionalId"] = scope

    intervals = []
    for doc in reader.list(collection, **filters):
        if doc.get("status") == BookingStatus.CANCELLED.value:
            continue
        start, end = doc.get("startTime"), doc.get("endTime")
        if not isinstance(start, int) or not isinstance(end, int):
            logger.warning(f"Skipping {collection}/{doc.get('id')} without numeric startTime/endTime")
            continue
        if start >= day_end or end <= day_start:
            continue
        intervals.append(BusyInterval(
            start=epoch_ms_to_day_offset(start, day, tz),
            end=epoch_ms_to_day_offset(end, day, tz, round_up=True),
        ))
    return intervals


class AvailabilityService:
    """Loads a day's schedule, bookings and blocks and runs the slot engine"""

    @staticmethod
    def load_day(
            reader,
            business_id: str,
            day: date,
            tz,
            professional_id: Optional[str] = None
    ) -> Tuple[List[BusyInterval], List[BusyInterval]]:
        bookings = busy_intervals_for_day(reader, BOOKINGS, business_id, day, tz, professional_id)
        blocks = busy_intervals_for_day(reader, BLOCKS, business_id, day, tz, professional_id)
        return bookings, blocks

    @staticmethod
    def slots_for(
            reader,
            business: Business,
            service: Service,
            schedule: ResolvedSchedule,
            day: date,
            now: Optional[int] = None,
            professional_id: Optional[str] = None,
            interval_minutes: Optional[int] = None
    ) -> List[int]:
        """Engine run with inputs already resolved; shared by reads and the booking writer"""
        tz = CatalogService.business_zone(business)
        bookings, blocks = AvailabilityService.load_day(reader, business.id, day, tz, professional_id)
        now = current_ms() if now is None else now

        return compute_slots(
            service_id=service.id,
            duration_minutes=service.duration_minutes,
            schedule=schedule,
            bookings=bookings,
            blocks=blocks,
            interval_minutes=interval_minutes or get_settings().SLOT_INTERVAL_MINUTES,
            not_before=epoch_ms_to_day_offset(now, day, tz, round_up=True),
        )

    @staticmethod
    def get_available_slots(
            store: DocumentStore,
            business_id: str,
            service_id: str,
            day,
            now: Optional[int] = None,
            professional_id: Optional[str] = None,
            interval_minutes: Optional[int] = None
    ) -> List[str]:
        """Bookable start times for a service on a date, as HH:MM strings"""
        availability = AvailabilityService.get_day_availability(
            store, business_id, service_id, day, now, professional_id, interval_minutes
        )
        return availability["slots"]

    @staticmethod
    def get_day_availability(
            store: DocumentStore,
            business_id: str,
            service_id: str,
            day,
            now: Optional[int] = None,
            professional_id: Optional[str] = None,
            interval_minutes: Optional[int] = None
    ) -> Dict[str, Any]:
        """Slots plus the schedule they came from, with per-slot prices"""
        target = parse_date(day)
        business = CatalogService.get_business(store, business_id)
        service = CatalogService.get_service(store, business_id, service_id)
        if not service.is_active:
            raise ValidationError("Service is not active", {"service_id": service_id})
        schedule = ScheduleService.resolve_schedule_for_date(store, business_id, target)

        starts = AvailabilityService.slots_for(
            store, business, service, schedule, target, now, professional_id, interval_minutes
        )

        logger.info(
            f"Computed {len(starts)} slots for business {business_id}, service {service_id} "
            f"on {target.isoformat()} (source={schedule.source.value})"
        )

        return {
            "business_id": business_id,
            "service_id": service_id,
            "date": target.isoformat(),
            "timezone": CatalogService.business_zone(business).key,
            "duration_minutes": service.duration_minutes,
            "source": schedule.source.value,
            "is_open": schedule.is_open,
            "intervals": [
                slot.model_dump(by_alias=True, mode="json")
                for slot in eligible_slots(schedule, service_id)
            ],
            "slots": [format_minutes(start) for start in starts],
            "prices": {
                format_minutes(start): slot_price(schedule, service_id, start, service.duration_minutes, service.price)
                for start in starts
            },
        }
