"""
Blocks API - time off and manual closures
File: agenda/api/v1/dashboard/blocks.py
"""
from fastapi import APIRouter, Depends, Path, Query
import logging

from agenda.api.dependencies import BusinessContext, get_business_context, to_http_exception
from agenda.config.database import get_document_store
from agenda.core.exceptions import AgendaError
from agenda.schemas.booking import BlockRequest
from agenda.services.booking.block_service import BlockService
from agenda.services.store.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
def list_blocks(
        date: str = Query(..., description="YYYY-MM-DD"),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        blocks = BlockService.list_blocks_for_date(store, context.business_id, date)
    except AgendaError as e:
        raise to_http_exception(e)
    return {"blocks": [b.model_dump(mode="json") for b in blocks]}


@router.post("", status_code=201)
def create_block(
        payload: BlockRequest,
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        block = BlockService.create_block(store, context.business_id, payload.model_dump(by_alias=True))
    except AgendaError as e:
        raise to_http_exception(e)
    return block.model_dump(mode="json")


@router.delete("/{block_id}")
def delete_block(
        block_id: str = Path(...),
        context: BusinessContext = Depends(get_business_context),
        store: DocumentStore = Depends(get_document_store)
):
    try:
        BlockService.delete_block(store, context.business_id, block_id)
    except AgendaError as e:
        raise to_http_exception(e)
    return {"deleted": True, "id": block_id}
