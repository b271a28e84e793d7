"""
Date override API - per-day exceptions to the weekly hours
File: agenda/api/v1/dashboard/overrides.py
"""
from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, Field
from typing import List
import logging

from agenda.api.dependencies import BusinessContext, get_business_context, to_http_exception
from agenda.config.database import get_document_store
from agenda.core.exceptions import AgendaError
from agenda.schemas.scheduling import AvailabilitySlot, OverrideConfig
from agenda.services.schedule.bulk_override_service import BulkOverrideService
from agenda.services.schedule.schedule_service import ScheduleService
from agenda.services.store.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# REQUEST MODELS
# ============================================================================

class OverrideUpdate(BaseModel):
    is_open: bool
    slots: List[AvailabilitySlot] = Field(default_factory=list)


class BulkOverrideRequest(BaseModel):
    dates: List[str] = Field(..., description="YYYY-MM-DD dates to overwrite")
    config: OverrideConfig


class WeekdayOverrideRequest(BaseModel):
    year: int = Field(..., ge=1970, le=9999)
    month: int = Field(..., ge=1, le=12)
    weekdays: List[int] = Field(..., description="Days of week, 0=Sunday")
    config: OverrideConfig


def _dump(overrides):
    return [o.model_dump(mode="json") for o in overrides]


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/{year}/{month}")
def list_month_overrides(
        year: int = Path(..., ge=1970, le=9999),
        month: int = Path(..., ge=1, le=12),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """Overrides of one month, for the calendar view"""
    try:
        overrides = ScheduleService.list_overrides_for_month(store, context.business_id, year, month)
    except AgendaError as e:
        raise to_http_exception(e)
    return {"overrides": _dump(overrides)}


@router.put("/{date}")
def save_override(
        payload: OverrideUpdate,
        date: str = Path(..., description="YYYY-MM-DD"),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        override = ScheduleService.save_override(
            store, context.business_id, date, payload.is_open, payload.slots,
            professional_id=context.professional_id
        )
    except AgendaError as e:
        raise to_http_exception(e)
    return override.model_dump(mode="json")


@router.delete("/{date}")
def delete_override(
        date: str = Path(..., description="YYYY-MM-DD"),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """Remove an override; the date returns to the weekly hours"""
    try:
        deleted = ScheduleService.delete_override(store, context.business_id, date)
    except AgendaError as e:
        raise to_http_exception(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Override not found")
    return {"deleted": True, "date": date}


@router.post("/bulk")
def bulk_apply(
        payload: BulkOverrideRequest,
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """Apply one configuration to every selected date, all or nothing"""
    try:
        overrides = BulkOverrideService.bulk_apply(
            store, context.business_id, payload.dates, payload.config,
            professional_id=context.professional_id
        )
    except AgendaError as e:
        raise to_http_exception(e)
    return {"applied": len(overrides), "overrides": _dump(overrides)}


@router.post("/bulk/weekdays")
def bulk_apply_weekdays(
        payload: WeekdayOverrideRequest,
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """e.g. close every Sunday of the month"""
    try:
        overrides = BulkOverrideService.bulk_apply_weekdays(
            store, context.business_id, payload.year, payload.month, payload.weekdays, payload.config,
            professional_id=context.professional_id
        )
    except AgendaError as e:
        raise to_http_exception(e)
    return {"applied": len(overrides), "overrides": _dump(overrides)}
