"""
Business Management Dashboard Routes
Registration of a business and its profile as seen by the signed-in staff
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import Optional
import logging

from agenda.api.dependencies import BusinessContext, get_business_context, to_http_exception
from agenda.config.database import get_document_store
from agenda.core.exceptions import AgendaError
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.store.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter(tags=["dashboard-business"])


class BusinessCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: str = ""
    address: str = ""
    phone: str = ""
    whatsapp: str = ""
    category: Optional[str] = None
    owner_id: Optional[str] = None
    timezone: Optional[str] = Field(None, description="IANA zone, e.g. America/Sao_Paulo")


@router.post("", status_code=201)
def create_business(
        payload: BusinessCreateRequest,
        store: DocumentStore = Depends(get_document_store)
):
    """Onboarding: register a business and its public slug"""
    try:
        business = CatalogService.create_business(store, payload.model_dump())
    except AgendaError as e:
        raise to_http_exception(e)
    return business.model_dump(mode="json")


@router.get("/me")
def get_my_business(
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        business = CatalogService.get_business(store, context.business_id)
    except AgendaError as e:
        raise to_http_exception(e)
    return business.model_dump(mode="json")

