# ============================================================================
# agenda/services/booking/booking_service.py
# Booking writer - re-validates the slot and writes under a concurrency guard
# ============================================================================
"""
Booking writer.

A booking is only written if its start time is still one of the slots the
engine returns for that date and service. The check and the insert run in one
guarded transaction keyed on (business, date), so two customers racing for
the same slot cannot both succeed. Taking a cancelled booking back goes
through the same guard.
"""
import logging
import uuid
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from agenda.config.settings import get_settings
from agenda.core.exceptions import ConflictError, NotFoundError, ValidationError
from agenda.schemas.base import describe_errors
from agenda.schemas.booking import (
    Booking,
    BookingRequest,
    BookingSource,
    BookingStatus,
    CommissionType,
)
from agenda.schemas.catalog import Service
from agenda.services.availability.availability_service import AvailabilityService
from agenda.services.availability.slot_engine import compute_slots, slot_price
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.schedule.schedule_service import ScheduleService
from agenda.services.store.document_store import BOOKINGS, DocumentReader, DocumentStore
from agenda.utils.time_utils import (
    MS_PER_MINUTE,
    day_bounds_ms,
    epoch_ms_to_day_offset,
    epoch_ms_to_local_date,
    minute_to_epoch_ms,
    now_ms as current_ms,
    parse_date,
    parse_hhmm,
)

logger = logging.getLogger(__name__)

_INITIAL_STATUS = {
    BookingSource.PUBLIC: BookingStatus.PENDING,
    BookingSource.STAFF: BookingStatus.CONFIRMED,
}

_FINAL_STATUSES = {BookingStatus.CANCELLED, BookingStatus.COMPLETED}


def commission_amount(service: Service, total_price: float) -> Optional[float]:
    if service.commission_type is None or service.commission_value is None:
        return None
    if service.commission_type == CommissionType.PERCENTAGE:
        return round(total_price * service.commission_value / 100, 2)
    return round(float(service.commission_value), 2)


def booking_guard_key(business_id: str, day: date) -> str:
    """Every booking write of a business day is serialized on one token"""
    return f"{BOOKINGS}:{business_id}:{day.isoformat()}"


def idempotent_booking_id(business_id: str, key: str) -> str:
    return uuid.uuid5(uuid.NAMESPACE_URL, f"{business_id}/{key}").hex


class BookingService:
    """Creates and manages bookings"""

    @staticmethod
    def _parse_request(request: BookingRequest | Dict[str, Any]) -> BookingRequest:
        if isinstance(request, BookingRequest):
            return request
        try:
            return BookingRequest.model_validate(request)
        except PydanticValidationError as e:
            raise ValidationError("Invalid booking request", {"errors": describe_errors(e)}) from e

    @staticmethod
    def create_booking(
            store: DocumentStore,
            request: BookingRequest | Dict[str, Any],
            source: BookingSource = BookingSource.PUBLIC,
            now: Optional[int] = None
    ) -> Booking:
        """
        Persist a booking for a slot the engine currently offers.

        Raises:
            ValidationError: unknown or inactive service, unknown business, or a
                start time that is never bookable (outside hours, in the past,
                not on the slot grid)
            ConflictError: the slot was taken by a booking or block since it was shown
        """
        request = BookingService._parse_request(request)
        now = current_ms() if now is None else now

        try:
            business = CatalogService.get_business(store, request.business_id)
            service = CatalogService.get_service(store, request.business_id, request.service_id)
        except NotFoundError as e:
            raise ValidationError(e.message, e.details) from e
        if not service.is_active:
            raise ValidationError("Service is not active", {"service_id": service.id})

        doc_id = uuid.uuid4().hex
        if request.idempotency_key:
            doc_id = idempotent_booking_id(business.id, request.idempotency_key)
            existing = store.get(BOOKINGS, doc_id)
            if existing:
                logger.info(f"Returning existing booking {doc_id} for idempotency key")
                return Booking.from_document(existing)

        tz = CatalogService.business_zone(business)
        day = parse_date(request.date)
        start_minute = parse_hhmm(request.time)
        schedule = ScheduleService.resolve_schedule_for_date(store, business.id, day)
        interval = get_settings().SLOT_INTERVAL_MINUTES

        offered = compute_slots(
            service_id=service.id,
            duration_minutes=service.duration_minutes,
            schedule=schedule,
            interval_minutes=interval,
            not_before=epoch_ms_to_day_offset(now, day, tz, round_up=True),
        )
        if start_minute not in offered:
            logger.warning(f"Rejected booking at {request.date} {request.time}: not a bookable time")
            raise ValidationError(
                "Requested time is not a bookable slot",
                {"date": request.date, "time": request.time}
            )

        start_ms = minute_to_epoch_ms(day, start_minute, tz)
        total_price = slot_price(schedule, service.id, start_minute, service.duration_minutes, service.price)

        booking = Booking(
            business_id=business.id,
            customer_id=request.customer_id,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            service_id=service.id,
            service_name=service.name,
            professional_id=request.professional_id,
            start_time=start_ms,
            end_time=start_ms + service.duration_minutes * MS_PER_MINUTE,
            status=_INITIAL_STATUS[source],
            total_price=total_price,
            commission_type=service.commission_type,
            commission_value=service.commission_value,
            commission_amount=commission_amount(service, total_price),
            notes=request.notes,
            idempotency_key=request.idempotency_key,
            created_at=now,
        )

        def still_free(reader: DocumentReader) -> None:
            slots = AvailabilityService.slots_for(
                reader, business, service, schedule, day,
                now=now, professional_id=request.professional_id, interval_minutes=interval
            )
            if start_minute not in slots:
                raise ConflictError(
                    "Slot no longer available, please pick another",
                    {"date": request.date, "time": request.time}
                )

        try:
            stored = store.insert_guarded(
                BOOKINGS,
                doc_id,
                booking.to_document(),
                guard_key=booking_guard_key(business.id, day),
                check=still_free,
            )
        except ConflictError:
            if request.idempotency_key:
                existing = store.get(BOOKINGS, doc_id)
                if existing:
                    return Booking.from_document(existing)
            logger.warning(f"Booking conflict for business {business.id} at {request.date} {request.time}")
            raise

        logger.info(
            f"Created booking {doc_id} for business {business.id}: {service.name} "
            f"{request.date} {request.time} ({booking.status.value})"
        )
        return Booking.from_document(stored)

    @staticmethod
    def get_booking(store: DocumentStore, business_id: str, booking_id: str) -> Booking:
        doc = store.get(BOOKINGS, booking_id)
        if not doc or doc.get("businessId") != business_id:
            raise NotFoundError("Booking not found", {"booking_id": booking_id})
        return Booking.from_document(doc)

    @staticmethod
    def update_booking_status(
            store: DocumentStore,
            business_id: str,
            booking_id: str,
            status: BookingStatus | str
    ) -> Booking:
        """Manual status change; finished bookings cannot return to pending"""
        try:
            status = BookingStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown booking status: {status!r}", {"status": status})

        booking = BookingService.get_booking(store, business_id, booking_id)
        if booking.status in _FINAL_STATUSES and status == BookingStatus.PENDING:
            raise ValidationError(
                f"Cannot move a {booking.status.value} booking back to pending",
                {"booking_id": booking_id, "status": booking.status.value}
            )

        updated = booking.model_copy(update={"status": status})
        if booking.status == BookingStatus.CANCELLED and status != BookingStatus.CANCELLED:
            BookingService._reactivate(store, booking, updated)
        else:
            store.upsert(BOOKINGS, booking_id, updated.to_document())
        logger.info(f"Booking {booking_id} status {booking.status.value} -> {status.value}")
        return updated

    @staticmethod
    def _reactivate(store: DocumentStore, booking: Booking, updated: Booking) -> None:
        """A cancelled booking only takes its time back if nothing else took it meanwhile"""
        business = CatalogService.get_business(store, booking.business_id)
        tz = CatalogService.business_zone(business)
        day = epoch_ms_to_local_date(booking.start_time, tz)
        start = epoch_ms_to_day_offset(booking.start_time, day, tz)
        end = epoch_ms_to_day_offset(booking.end_time, day, tz, round_up=True)

        def still_free(reader: DocumentReader) -> None:
            bookings, blocks = AvailabilityService.load_day(
                reader, business.id, day, tz, booking.professional_id
            )
            if any(interval.overlaps(start, end) for interval in bookings + blocks):
                raise ConflictError(
                    "Time was taken while the booking was cancelled",
                    {"booking_id": booking.id}
                )

        try:
            store.update_guarded(
                BOOKINGS,
                booking.id,
                updated.to_document(),
                guard_key=booking_guard_key(business.id, day),
                check=still_free,
            )
        except ConflictError:
            logger.warning(f"Cannot reactivate booking {booking.id}: its time is no longer free")
            raise

    @staticmethod
    def list_bookings(store: DocumentStore, business_id: str, start_ms: int, end_ms: int) -> List[Booking]:
        """Bookings starting inside [start_ms, end_ms], earliest first"""
        bookings = [
            Booking.from_document(doc)
            for doc in store.list(BOOKINGS, businessId=business_id)
            if start_ms <= doc.get("startTime", -1) <= end_ms
        ]
        return sorted(bookings, key=lambda b: b.start_time)

    @staticmethod
    def list_bookings_for_date(store: DocumentStore, business_id: str, day) -> List[Booking]:
        business = CatalogService.get_business(store, business_id)
        start_ms, end_ms = day_bounds_ms(parse_date(day), CatalogService.business_zone(business))
        return BookingService.list_bookings(store, business_id, start_ms, end_ms - 1)

    @staticmethod
    def summarize(bookings: Iterable[Booking]) -> Dict[str, Any]:
        """Revenue figures for a set of bookings"""
        bookings = list(bookings)
        earned = [b for b in bookings if b.status in (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)]
        active = [b for b in bookings if b.status != BookingStatus.CANCELLED]

        return {
            "total_bookings": len(bookings),
            "completed_bookings": sum(1 for b in bookings if b.status == BookingStatus.COMPLETED),
            "cancelled_bookings": sum(1 for b in bookings if b.status == BookingStatus.CANCELLED),
            "total_revenue": round(sum(b.total_price for b in earned), 2),
            "expected_revenue": round(sum(b.total_price for b in active), 2),
            "average_ticket": round(sum(b.total_price for b in bookings) / len(bookings), 2) if bookings else 0,
            "total_commission": round(sum(b.commission_amount or 0 for b in earned), 2),
        }
