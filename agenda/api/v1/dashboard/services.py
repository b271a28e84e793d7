# agenda/api/v1/dashboard/services.py
"""
Service Management API Endpoints
Handles the catalog of bookable services of a business
"""
from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, Field
from typing import Optional
import logging

from agenda.api.dependencies import BusinessContext, get_business_context, to_http_exception
from agenda.config.database import get_document_store
from agenda.core.exceptions import AgendaError
from agenda.schemas.booking import CommissionType
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.store.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class ServiceCreate(BaseModel):
    """Request model for creating a service"""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: float = Field(0, ge=0)
    duration_minutes: int = Field(..., gt=0, description="Duration in minutes")
    is_active: bool = True
    category: Optional[str] = None
    commission_type: Optional[CommissionType] = None
    commission_value: Optional[float] = Field(None, ge=0)


class ServiceUpdate(BaseModel):
    """Request model for updating a service"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None
    category: Optional[str] = None
    commission_type: Optional[CommissionType] = None
    commission_value: Optional[float] = Field(None, ge=0)


# ============================================================================
# Endpoints
# ============================================================================

@router.get("")
def list_services(
        active_only: bool = Query(False),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        services = CatalogService.list_services(store, context.business_id, active_only=active_only)
    except AgendaError as e:
        raise to_http_exception(e)
    return {"total": len(services), "services": [s.model_dump(mode="json") for s in services]}


@router.post("", status_code=201)
def create_service(
        payload: ServiceCreate,
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        service = CatalogService.create_service(store, context.business_id, payload.model_dump(mode="json"))
    except AgendaError as e:
        raise to_http_exception(e)
    return service.model_dump(mode="json")


@router.patch("/{service_id}")
def update_service(
        payload: ServiceUpdate,
        service_id: str = Path(...),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    """Partial update; only the fields sent are changed"""
    try:
        service = CatalogService.update_service(
            store, context.business_id, service_id,
            payload.model_dump(exclude_unset=True, mode="json")
        )
    except AgendaError as e:
        raise to_http_exception(e)
    return service.model_dump(mode="json")
