"""
Public mini-site API - slot listing and booking for end customers
File: agenda/api/v1/public/booking.py
"""
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, Field
from typing import Optional
import logging

from agenda.api.dependencies import to_http_exception
from agenda.config.database import get_document_store
from agenda.core.exceptions import AgendaError
from agenda.schemas.booking import BookingRequest, BookingSource
from agenda.services.availability.availability_service import AvailabilityService
from agenda.services.booking.booking_service import BookingService
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.notification.whatsapp_link import build_whatsapp_link
from agenda.services.store.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# REQUEST MODELS
# ============================================================================

class PublicBookingRequest(BaseModel):
    service_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM, one of the listed slots")
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_phone: str = Field("", max_length=40)
    notes: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, max_length=200)


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/by-slug/{slug}")
def get_business_by_slug(
        slug: str = Path(..., description="Public mini-site slug"),
        store: DocumentStore = Depends(get_document_store)
):
    """Mini-site lookup: slug to business"""
    try:
        business = CatalogService.get_business_by_slug(store, slug)
    except AgendaError as e:
        raise to_http_exception(e)
    if business is None:
        raise HTTPException(status_code=404, detail="Business not found")
    return business.model_dump(mode="json")


@router.get("/{business_id}/services")
def list_public_services(
        business_id: str = Path(..., description="The business ID"),
        store: DocumentStore = Depends(get_document_store)
):
    """Active services shown on the mini-site"""
    try:
        CatalogService.get_business(store, business_id)
        services = CatalogService.list_services(store, business_id, active_only=True)
    except AgendaError as e:
        raise to_http_exception(e)
    return {"services": [s.model_dump(mode="json") for s in services]}


@router.get("/{business_id}/slots")
def get_slots(
        business_id: str = Path(..., description="The business ID"),
        service_id: str = Query(..., description="Service to book"),
        date: str = Query(..., description="Day to list (YYYY-MM-DD)"),
        professional_id: Optional[str] = Query(None, description="Restrict capacity to one professional"),
        store: DocumentStore = Depends(get_document_store)
):
    """
    Bookable start times for a service on a day.
    No authentication required.
    """
    try:
        return AvailabilityService.get_day_availability(
            store=store,
            business_id=business_id,
            service_id=service_id,
            day=date,
            professional_id=professional_id
        )
    except AgendaError as e:
        raise to_http_exception(e)


@router.post("/{business_id}/bookings", status_code=201)
def create_public_booking(
        payload: PublicBookingRequest,
        business_id: str = Path(..., description="The business ID"),
        store: DocumentStore = Depends(get_document_store)
):
    """
    Book a listed slot. The booking starts as pending.
    Responds 409 when the slot was taken in the meantime; fetch slots again.
    """
    try:
        request = BookingRequest(business_id=business_id, **payload.model_dump())
        booking = BookingService.create_booking(store, request, source=BookingSource.PUBLIC)
        business = CatalogService.get_business(store, business_id)
    except AgendaError as e:
        raise to_http_exception(e)

    return {
        "booking": booking.model_dump(mode="json"),
        "whatsapp_url": build_whatsapp_link(business, booking),
    }
