"""
Bookings API - staff view of the agenda
File: agenda/api/v1/dashboard/bookings.py
"""
from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, Field
from typing import Optional
import logging

from agenda.api.dependencies import BusinessContext, get_business_context, to_http_exception
from agenda.config.database import get_document_store
from agenda.core.exceptions import AgendaError
from agenda.schemas.booking import BookingRequest, BookingSource, BookingStatusUpdate
from agenda.services.booking.booking_service import BookingService
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.store.document_store import DocumentStore
from agenda.utils.time_utils import day_bounds_ms, parse_date

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# REQUEST MODELS
# ============================================================================

class StaffBookingRequest(BaseModel):
    service_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM")
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_phone: str = Field("", max_length=40)
    customer_id: Optional[str] = None
    professional_id: Optional[str] = None
    notes: Optional[str] = None


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("")
def list_bookings(
        date: str = Query(..., description="YYYY-MM-DD"),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        bookings = BookingService.list_bookings_for_date(store, context.business_id, date)
    except AgendaError as e:
        raise to_http_exception(e)
    return {"bookings": [b.model_dump(mode="json") for b in bookings]}


@router.get("/summary")
def bookings_summary(
        start: str = Query(..., description="First day (YYYY-MM-DD)"),
        end: str = Query(..., description="Last day, inclusive (YYYY-MM-DD)"),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """Revenue and counts for a date range"""
    try:
        business = CatalogService.get_business(store, context.business_id)
        tz = CatalogService.business_zone(business)
        start_ms, _ = day_bounds_ms(parse_date(start), tz)
        _, end_ms = day_bounds_ms(parse_date(end), tz)
        bookings = BookingService.list_bookings(store, context.business_id, start_ms, end_ms - 1)
    except AgendaError as e:
        raise to_http_exception(e)
    return {"start": start, "end": end, **BookingService.summarize(bookings)}


@router.post("", status_code=201)
def create_staff_booking(
        payload: StaffBookingRequest,
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """Booking entered by staff; starts confirmed"""
    data = payload.model_dump()
    data["professional_id"] = payload.professional_id or context.professional_id
    try:
        request = BookingRequest(business_id=context.business_id, **data)
        booking = BookingService.create_booking(store, request, source=BookingSource.STAFF)
    except AgendaError as e:
        raise to_http_exception(e)
    return booking.model_dump(mode="json")


@router.patch("/{booking_id}/status")
def update_status(
        payload: BookingStatusUpdate,
        booking_id: str = Path(...),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        booking = BookingService.update_booking_status(store, context.business_id, booking_id, payload.status)
    except AgendaError as e:
        raise to_http_exception(e)
    return booking.model_dump(mode="json")
