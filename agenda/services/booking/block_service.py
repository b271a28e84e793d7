# agenda/services/booking/block_service.py
"""Service for managing blocks (bloqueios): time off, breaks, manual closures"""
import logging
import uuid
from typing import Any, Dict, List

from agenda.core.exceptions import NotFoundError
from agenda.schemas.booking import Block
from agenda.services.catalog.catalog_service import CatalogService
from agenda.services.store.document_store import BLOCKS, DocumentStore
from agenda.utils.time_utils import day_bounds_ms, now_ms, parse_date

logger = logging.getLogger(__name__)


class BlockService:
    """Handles block operations"""

    @staticmethod
    def create_block(store: DocumentStore, business_id: str, data: Dict[str, Any]) -> Block:
        """Validate (startTime < endTime, business exists) and store a block"""
        CatalogService.get_business(store, business_id)
        block = Block.from_document({**data, "businessId": business_id, "createdAt": now_ms()})

        block_id = uuid.uuid4().hex
        store.upsert(BLOCKS, block_id, block.to_document())
        logger.info(f"Created block {block_id} for business {business_id}: {block.reason or 'no reason'}")
        return block.model_copy(update={"id": block_id})

    @staticmethod
    def list_blocks_for_date(store: DocumentStore, business_id: str, day) -> List[Block]:
        """Blocks intersecting the business's local day"""
        business = CatalogService.get_business(store, business_id)
        start_ms, end_ms = day_bounds_ms(parse_date(day), CatalogService.business_zone(business))
        blocks = [
            Block.from_document(doc)
            for doc in store.list(BLOCKS, businessId=business_id)
            if doc.get("startTime", end_ms) < end_ms and doc.get("endTime", start_ms) > start_ms
        ]
        return sorted(blocks, key=lambda b: b.start_time)

    @staticmethod
    def delete_block(store: DocumentStore, business_id: str, block_id: str) -> None:
        doc = store.get(BLOCKS, block_id)
        if not doc or doc.get("businessId") != business_id:
            raise NotFoundError("Block not found", {"block_id": block_id})
        store.delete(BLOCKS, block_id)
        logger.info(f"Deleted block {block_id} for business {business_id}")
