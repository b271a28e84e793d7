"""
Weekly business hours API
File: agenda/api/v1/dashboard/business_hours.py
"""
from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field
from typing import Dict
import logging

from agenda.api.dependencies import BusinessContext, get_business_context, to_http_exception
from agenda.config.database import get_document_store
from agenda.core.exceptions import AgendaError
from agenda.schemas.scheduling import DaySchedule
from agenda.services.schedule.schedule_service import ScheduleService
from agenda.services.store.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter()


class WeeklyHoursUpdate(BaseModel):
    days: Dict[int, DaySchedule] = Field(..., description="Keyed by day of week, 0=Sunday")


def _response(schedule, saved: bool):
    return {
        "business_id": schedule.business_id,
        "saved": saved,
        "days": {
            str(day): entry.model_dump(by_alias=True, mode="json")
            for day, entry in sorted(schedule.days.items())
        },
    }


@router.get("")
def get_business_hours(
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """Stored weekly hours, or the suggested defaults when none were saved yet"""
    try:
        schedule = ScheduleService.get_weekly_schedule(store, context.business_id)
    except AgendaError as e:
        raise to_http_exception(e)

    if schedule is None:
        return _response(ScheduleService.default_weekly_schedule(context.business_id), saved=False)
    return _response(schedule, saved=True)


@router.put("")
def save_business_hours(
        payload: WeeklyHoursUpdate,
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        schedule = ScheduleService.save_weekly_schedule(
            store, context.business_id, {"days": payload.days}
        )
    except AgendaError as e:
        raise to_http_exception(e)
    return _response(schedule, saved=True)


@router.post("/copy/{day}")
def copy_day(
        day: int = Path(..., ge=0, le=6, description="Day of week to copy, 0=Sunday"),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """Apply one day's hours to the whole week and save"""
    try:
        current = ScheduleService.get_weekly_schedule(store, context.business_id)
        if current is None:
            current = ScheduleService.default_weekly_schedule(context.business_id)
        schedule = ScheduleService.save_weekly_schedule(
            store, context.business_id, ScheduleService.copy_day_to_all(current, day)
        )
    except AgendaError as e:
        raise to_http_exception(e)
    return _response(schedule, saved=True)
