# ============================================================================
# agenda/services/schedule/bulk_override_service.py
# Apply one override configuration to many dates in a single atomic write
# ============================================================================
import calendar
import logging
from datetime import date
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError as PydanticValidationError

from agenda.core.exceptions import PartialFailure, StoreUnavailable, ValidationError
from agenda.schemas.base import describe_errors
from agenda.schemas.scheduling import DEFAULT_PROFESSIONAL_ID, DateOverride, OverrideConfig
from agenda.services.schedule.schedule_service import build_override, override_doc_id
from agenda.services.store.document_store import OVERRIDES, DocumentStore
from agenda.utils.time_utils import day_of_week, now_ms, parse_date

logger = logging.getLogger(__name__)


def days_in_month(year: int, month: int) -> List[date]:
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be 1-12, got {month}", {"month": month})
    return [date(year, month, day) for day in range(1, calendar.monthrange(year, month)[1] + 1)]


def dates_matching_weekdays(year: int, month: int, weekdays: Iterable[int]) -> List[str]:
    """Dates of the month whose day of week (0=Sunday) is in `weekdays`"""
    wanted = set(weekdays)
    invalid = [d for d in wanted if d not in range(7)]
    if invalid:
        raise ValidationError(f"Day of week must be 0-6, got {sorted(invalid)}", {"weekdays": sorted(invalid)})
    return [d.isoformat() for d in days_in_month(year, month) if day_of_week(d) in wanted]


def weekdays_in_month(year: int, month: int) -> List[str]:
    """Monday to Friday"""
    return dates_matching_weekdays(year, month, range(1, 6))


def _to_config(config) -> OverrideConfig:
    if isinstance(config, OverrideConfig):
        return config
    try:
        return OverrideConfig.model_validate(config)
    except PydanticValidationError as e:
        raise ValidationError("Invalid override configuration", {"errors": describe_errors(e)}) from e


def _same_schedule(existing: Dict[str, Any], override: DateOverride) -> bool:
    current = DateOverride.from_document(existing)
    return (
        current.is_open == override.is_open
        and current.professional_id == override.professional_id
        and current.slots == override.slots
    )


class BulkOverrideService:
    """Bulk override writer"""

    @staticmethod
    def bulk_apply(
            store: DocumentStore,
            business_id: str,
            dates: Iterable[Any],
            config: OverrideConfig | Dict[str, Any],
            professional_id: str = DEFAULT_PROFESSIONAL_ID
    ) -> List[DateOverride]:
        """
        Write `config` as the override of every date, all or nothing.

        Each date's override is fully replaced. Dates whose stored override
        already matches keep their document untouched, so re-applying the same
        configuration changes nothing.

        Raises:
            ValidationError: malformed dates or intervals, or more dates than
                one atomic batch accepts. Nothing is written.
            PartialFailure: the store rejected the batch; every date is
                reported as failed since the batch was rolled back.
        """
        config = _to_config(config)

        unique_dates = sorted({parse_date(d).isoformat() for d in dates})
        if not unique_dates:
            raise ValidationError("No dates selected")
        if len(unique_dates) > store.max_batch_writes:
            raise ValidationError(
                f"Cannot apply to {len(unique_dates)} dates at once; the limit is {store.max_batch_writes}",
                {"size": len(unique_dates), "limit": store.max_batch_writes}
            )

        stamp = now_ms()
        overrides = [
            build_override(business_id, day, config.is_open, config.slots, professional_id, updated_at=stamp)
            for day in unique_dates
        ]

        existing = {
            doc["id"]: doc
            for doc in store.list(OVERRIDES, businessId=business_id)
            if doc.get("date") in unique_dates
        }

        items = []
        result = []
        for override in overrides:
            doc_id = override_doc_id(business_id, override.date)
            current = existing.get(doc_id)
            if current is not None and _same_schedule(current, override):
                result.append(DateOverride.from_document(current))
                continue
            items.append((doc_id, override.to_document()))
            result.append(override.model_copy(update={"id": doc_id}))

        try:
            store.batch_upsert(OVERRIDES, items)
        except StoreUnavailable as e:
            logger.error(f"Bulk override write failed for business {business_id}: {e.message}")
            raise PartialFailure(
                "Bulk override was not applied",
                failed_dates=unique_dates,
                succeeded_dates=[]
            ) from e

        logger.info(
            f"Applied override (open={config.is_open}) to {len(unique_dates)} dates "
            f"for business {business_id}; {len(items)} documents written"
        )
        return result

    @staticmethod
    def bulk_apply_weekdays(
            store: DocumentStore,
            business_id: str,
            year: int,
            month: int,
            weekdays: Iterable[int],
            config: OverrideConfig | Dict[str, Any],
            professional_id: str = DEFAULT_PROFESSIONAL_ID
    ) -> List[DateOverride]:
        """e.g. close every Sunday of a month"""
        dates = dates_matching_weekdays(year, month, weekdays)
        return BulkOverrideService.bulk_apply(store, business_id, dates, config, professional_id)
