# tests/test_bulk_override_service.py
import pytest

from agenda.core.exceptions import PartialFailure, StoreUnavailable, ValidationError
from agenda.schemas.scheduling import ScheduleSource
from agenda.services.schedule.bulk_override_service import (
    BulkOverrideService,
    dates_matching_weekdays,
    weekdays_in_month,
)
from agenda.services.schedule.schedule_service import ScheduleService
from agenda.services.store.document_store import OVERRIDES, DocumentStore

SUNDAYS = ["2026-01-04", "2026-01-11", "2026-01-18"]
CLOSED = {"isOpen": False, "slots": []}


def test_close_three_sundays(store):
    ScheduleService.save_weekly_schedule(store, "biz1", {"0": {"isOpen": True, "slots": [{"start": "09:00", "end": "13:00"}]}})

    BulkOverrideService.bulk_apply(store, "biz1", SUNDAYS, CLOSED)

    for day in SUNDAYS:
        resolved = ScheduleService.resolve_schedule_for_date(store, "biz1", day)
        assert resolved.source == ScheduleSource.OVERRIDE
        assert resolved.is_open is False
    assert ScheduleService.resolve_schedule_for_date(store, "biz1", "2026-01-25").is_open is True


def test_bulk_apply_fully_replaces_existing_override(store):
    ScheduleService.save_override(
        store, "biz1", SUNDAYS[0], is_open=True,
        slots=[{"start": "08:00", "end": "10:00", "customPrice": 70}],
    )

    BulkOverrideService.bulk_apply(store, "biz1", SUNDAYS, {"isOpen": True, "slots": [{"start": "14:00", "end": "16:00"}]})

    override = ScheduleService.get_override(store, "biz1", SUNDAYS[0])
    assert [(s.start, s.end, s.custom_price) for s in override.slots] == [("14:00", "16:00", None)]


def test_reapplying_same_configuration_is_a_no_op(store):
    BulkOverrideService.bulk_apply(store, "biz1", SUNDAYS, CLOSED)
    first = {doc["id"]: doc for doc in store.list(OVERRIDES, businessId="biz1")}

    BulkOverrideService.bulk_apply(store, "biz1", SUNDAYS, CLOSED)
    second = {doc["id"]: doc for doc in store.list(OVERRIDES, businessId="biz1")}

    assert first == second
    assert len(second) == 3


def test_duplicate_dates_write_one_document_each(store):
    result = BulkOverrideService.bulk_apply(store, "biz1", SUNDAYS + SUNDAYS[:1], CLOSED)
    assert [o.date for o in result] == SUNDAYS


def test_empty_date_set_rejected(store):
    with pytest.raises(ValidationError):
        BulkOverrideService.bulk_apply(store, "biz1", [], CLOSED)


def test_malformed_config_writes_nothing(store):
    with pytest.raises(ValidationError):
        BulkOverrideService.bulk_apply(store, "biz1", SUNDAYS, {"isOpen": True, "slots": [{"start": "10:00", "end": "09:00"}]})
    assert store.list(OVERRIDES, businessId="biz1") == []


def test_malformed_date_writes_nothing(store):
    with pytest.raises(ValidationError):
        BulkOverrideService.bulk_apply(store, "biz1", SUNDAYS + ["2026-13-01"], CLOSED)
    assert store.list(OVERRIDES, businessId="biz1") == []


def test_batch_above_atomic_limit_fails_whole_call(session_factory):
    small_store = DocumentStore(session_factory, max_batch_writes=2)

    with pytest.raises(ValidationError) as exc:
        BulkOverrideService.bulk_apply(small_store, "biz1", SUNDAYS, CLOSED)

    assert exc.value.details == {"size": 3, "limit": 2}
    assert small_store.list(OVERRIDES, businessId="biz1") == []


def test_store_failure_reports_every_date(store, monkeypatch):
    def failing_batch(collection, items):
        raise StoreUnavailable("Document store unavailable")

    monkeypatch.setattr(store, "batch_upsert", failing_batch)

    with pytest.raises(PartialFailure) as exc:
        BulkOverrideService.bulk_apply(store, "biz1", SUNDAYS, CLOSED)

    assert exc.value.failed_dates == SUNDAYS
    assert exc.value.succeeded_dates == []


def test_dates_matching_weekdays():
    assert dates_matching_weekdays(2026, 1, [0]) == ["2026-01-04", "2026-01-11", "2026-01-18", "2026-01-25"]
    assert len(weekdays_in_month(2026, 3)) == 22

    with pytest.raises(ValidationError):
        dates_matching_weekdays(2026, 1, [7])
    with pytest.raises(ValidationError):
        dates_matching_weekdays(2026, 13, [0])


def test_bulk_apply_weekdays_closes_every_sunday(store):
    result = BulkOverrideService.bulk_apply_weekdays(store, "biz1", 2026, 3, [0], CLOSED)

    assert [o.date for o in result] == ["2026-03-01", "2026-03-08", "2026-03-15", "2026-03-22", "2026-03-29"]
    assert all(o.is_open is False for o in result)
