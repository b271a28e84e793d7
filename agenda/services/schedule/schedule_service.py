# ============================================================================
# agenda/services/schedule/schedule_service.py
# Weekly default hours, date overrides and schedule resolution
# ============================================================================
"""
Schedule model.

Two sources describe a business day: the weekly default entry for its day of
week and an optional override for the exact date. An override shadows the
weekly entry completely; the two interval lists are never merged.
"""
import calendar
import copy
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from agenda.config.settings import get_settings
from agenda.core.exceptions import ValidationError
from agenda.schemas.scheduling import (
    DEFAULT_PROFESSIONAL_ID,
    AvailabilitySlot,
    DateOverride,
    DaySchedule,
    ResolvedSchedule,
    ScheduleSource,
    WeeklySchedule,
)
from agenda.services.store.document_store import BUSINESS_HOURS, OVERRIDES, DocumentStore
from agenda.utils.time_utils import day_of_week, now_ms, parse_date

logger = logging.getLogger(__name__)

_WORKDAY = [{"start": "08:00", "end": "12:00"}, {"start": "13:00", "end": "18:00"}]


def override_doc_id(business_id: str, day) -> str:
    """Composite identity: one override per (business, date)"""
    return f"{business_id}_{parse_date(day).isoformat()}"


def build_override(
        business_id: str,
        day,
        is_open: bool,
        slots: List[Any],
        professional_id: str = DEFAULT_PROFESSIONAL_ID,
        updated_at: Optional[int] = None
) -> DateOverride:
    """Validated override document; raises ValidationError on malformed intervals"""
    return DateOverride.from_document({
        "businessId": business_id,
        "professionalId": professional_id,
        "date": parse_date(day).isoformat(),
        "isOpen": is_open,
        "slots": [
            slot.model_dump(by_alias=True) if isinstance(slot, AvailabilitySlot) else slot
            for slot in (slots or [])
        ],
        "updatedAt": updated_at,
    })


def fallback_schedule(open_time: Optional[str] = None, close_time: Optional[str] = None) -> ResolvedSchedule:
    """Window used when a business never saved weekly hours"""
    settings = get_settings()
    interval = AvailabilitySlot(
        start=open_time or settings.FALLBACK_OPEN_TIME,
        end=close_time or settings.FALLBACK_CLOSE_TIME,
    )
    return ResolvedSchedule(is_open=True, slots=[interval], source=ScheduleSource.FALLBACK)


class ScheduleService:
    """Reads, writes and resolves schedule documents"""

    @staticmethod
    def default_weekly_schedule(business_id: str) -> WeeklySchedule:
        """Sunday closed, weekdays split around lunch, Saturday mornings"""
        days = {0: {"isOpen": False, "slots": []}}
        for day in range(1, 6):
            days[day] = {"isOpen": True, "slots": copy.deepcopy(_WORKDAY)}
        days[6] = {"isOpen": True, "slots": [{"start": "08:00", "end": "12:00"}]}
        return WeeklySchedule.from_document({"businessId": business_id, "days": days})

    @staticmethod
    def copy_day_to_all(schedule: WeeklySchedule, source_day: int) -> WeeklySchedule:
        """Apply one day's configuration to every other day of the week"""
        if source_day not in range(7):
            raise ValidationError(f"Day of week must be 0-6, got {source_day}", {"day": source_day})
        source = schedule.days.get(source_day, DaySchedule())
        days = {day: source.model_copy(deep=True) for day in range(7)}
        return WeeklySchedule(business_id=schedule.business_id, days=days)

    @staticmethod
    def get_weekly_schedule(store: DocumentStore, business_id: str) -> Optional[WeeklySchedule]:
        doc = store.get(BUSINESS_HOURS, business_id)
        return WeeklySchedule.from_document(doc) if doc else None

    @staticmethod
    def save_weekly_schedule(
            store: DocumentStore,
            business_id: str,
            schedule: Dict[str, Any] | WeeklySchedule
    ) -> WeeklySchedule:
        """Validate every interval and replace the stored weekly schedule"""
        if isinstance(schedule, WeeklySchedule):
            payload = schedule.to_document()
        else:
            payload = dict(schedule)
        payload["businessId"] = business_id

        weekly = WeeklySchedule.from_document(payload)
        store.upsert(BUSINESS_HOURS, business_id, weekly.to_document())
        logger.info(f"Saved weekly schedule for business {business_id}")
        return weekly

    # ------------------------------------------------------------------
    # Overrides
    # ------------------------------------------------------------------

    @staticmethod
    def get_override(store: DocumentStore, business_id: str, day) -> Optional[DateOverride]:
        doc = store.get(OVERRIDES, override_doc_id(business_id, day))
        return DateOverride.from_document(doc) if doc else None

    @staticmethod
    def save_override(
            store: DocumentStore,
            business_id: str,
            day,
            is_open: bool,
            slots: List[Any],
            professional_id: str = DEFAULT_PROFESSIONAL_ID
    ) -> DateOverride:
        """Create or replace the override of one date"""
        override = build_override(business_id, day, is_open, slots, professional_id, updated_at=now_ms())
        doc_id = override_doc_id(business_id, override.date)
        store.upsert(OVERRIDES, doc_id, override.to_document())
        logger.info(f"Saved override {doc_id} (open={is_open}, slots={len(override.slots)})")
        return override.model_copy(update={"id": doc_id})

    @staticmethod
    def delete_override(store: DocumentStore, business_id: str, day) -> bool:
        """Drop an override so the date falls back to the weekly schedule"""
        deleted = store.delete(OVERRIDES, override_doc_id(business_id, day))
        if deleted:
            logger.info(f"Deleted override for business {business_id} on {parse_date(day)}")
        return deleted

    @staticmethod
    def list_overrides_for_month(
            store: DocumentStore,
            business_id: str,
            year: int,
            month: int
    ) -> List[DateOverride]:
        if not 1 <= month <= 12:
            raise ValidationError(f"Month must be 1-12, got {month}", {"month": month})
        first = date(year, month, 1).isoformat()
        last = date(year, month, calendar.monthrange(year, month)[1]).isoformat()

        overrides = [
            DateOverride.from_document(doc)
            for doc in store.list(OVERRIDES, businessId=business_id)
            if first <= str(doc.get("date", "")) <= last
        ]
        return sorted(overrides, key=lambda o: o.date)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    @staticmethod
    def resolve_schedule_for_date(store: DocumentStore, business_id: str, day) -> ResolvedSchedule:
        """
        The schedule that applies to `day`.

        Override if present (even open with no intervals), else the weekly entry
        for the day of week (missing entry means closed), else the fallback
        window when no weekly schedule document exists at all.
        """
        target = parse_date(day)

        override = ScheduleService.get_override(store, business_id, target)
        if override is not None:
            return ResolvedSchedule(is_open=override.is_open, slots=override.slots, source=ScheduleSource.OVERRIDE)

        weekly = ScheduleService.get_weekly_schedule(store, business_id)
        if weekly is None:
            return fallback_schedule()

        entry = weekly.days.get(day_of_week(target))
        if entry is None:
            return ResolvedSchedule(is_open=False, slots=[], source=ScheduleSource.WEEKLY)
        return ResolvedSchedule(is_open=entry.is_open, slots=entry.slots, source=ScheduleSource.WEEKLY)
