# tests/test_availability_service.py
import pytest

from agenda.core.exceptions import ValidationError
from agenda.services.availability.availability_service import AvailabilityService
from agenda.services.booking.block_service import BlockService
from agenda.services.booking.booking_service import BookingService
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.schedule.schedule_service import ScheduleService

from tests.conftest import MONDAY, at

WEEKLY = {"1": {"isOpen": True, "slots": [{"start": "08:00", "end": "12:00"}, {"start": "13:00", "end": "18:00"}]}}


def test_day_availability_for_weekday(store, service, early_now):
    ScheduleService.save_weekly_schedule(store, service.business_id, WEEKLY)

    result = AvailabilityService.get_day_availability(store, service.business_id, service.id, MONDAY, now=early_now)

    assert result["source"] == "weekly"
    assert result["timezone"] == "America/Sao_Paulo"
    assert result["slots"][0] == "08:00"
    assert result["slots"][-1] == "17:00"
    assert "17:30" not in result["slots"]
    assert len(result["slots"]) == 16
    assert set(result["prices"].values()) == {50.0}


def test_existing_booking_is_projected_onto_the_day(store, service, early_now):
    ScheduleService.save_weekly_schedule(store, service.business_id, WEEKLY)
    BookingService.create_booking(store, {
        "businessId": service.business_id,
        "serviceId": service.id,
        "date": MONDAY,
        "time": "09:00",
        "customerName": "Ana",
    }, now=early_now)

    slots = AvailabilityService.get_available_slots(store, service.business_id, service.id, MONDAY, now=early_now)
    assert slots[:4] == ["08:00", "10:00", "10:30", "11:00"]


def test_block_crossing_midnight_only_covers_its_part_of_the_day(store, service, early_now):
    BlockService.create_block(store, service.business_id, {
        "startTime": at("2026-03-01", "22:00"),
        "endTime": at(MONDAY, "09:00"),
    })

    slots = AvailabilityService.get_available_slots(store, service.business_id, service.id, MONDAY, now=early_now)
    assert slots[0] == "09:00"


def test_now_hides_earlier_slots_today(store, service):
    slots = AvailabilityService.get_available_slots(
        store, service.business_id, service.id, MONDAY, now=at(MONDAY, "13:05")
    )
    assert slots[0] == "13:30"


def test_professional_filter_scopes_busy_time(store, service, early_now):
    BookingService.create_booking(store, {
        "businessId": service.business_id,
        "serviceId": service.id,
        "date": MONDAY,
        "time": "08:00",
        "customerName": "Ana",
        "professionalId": "p1",
    }, now=early_now)

    everyone = AvailabilityService.get_available_slots(store, service.business_id, service.id, MONDAY, now=early_now)
    only_p2 = AvailabilityService.get_available_slots(
        store, service.business_id, service.id, MONDAY, now=early_now, professional_id="p2"
    )
    assert "08:00" not in everyone
    assert "08:00" in only_p2


def test_inactive_service_is_rejected(store, business, service, early_now):
    CatalogService.update_service(store, business.id, service.id, {"is_active": False})
    with pytest.raises(ValidationError):
        AvailabilityService.get_day_availability(store, business.id, service.id, MONDAY, now=early_now)


def test_override_prices_and_scoped_intervals(store, business, service, early_now):
    ScheduleService.save_override(store, business.id, MONDAY, is_open=True, slots=[
        {"start": "09:00", "end": "11:00", "customPrice": 75},
        {"start": "14:00", "end": "16:00", "serviceIds": ["another-service"]},
    ])

    result = AvailabilityService.get_day_availability(store, business.id, service.id, MONDAY, now=early_now)
    assert result["source"] == "override"
    assert result["slots"] == ["09:00", "09:30", "10:00"]
    assert result["prices"] == {"09:00": 75.0, "09:30": 75.0, "10:00": 75.0}
    assert len(result["intervals"]) == 1
