# ============================================================================
# agenda/services/catalog/catalog_service.py
# Businesses (empresas) and the services they offer (servicos)
# ============================================================================
import logging
import uuid
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from agenda.config.settings import get_settings
from agenda.core.exceptions import NotFoundError, ValidationError
from agenda.schemas.catalog import Business, Service
from agenda.services.store.document_store import BUSINESSES, SERVICES, DocumentStore
from agenda.utils.time_utils import get_zone, now_ms

logger = logging.getLogger(__name__)


class CatalogService:
    """Business and service documents"""

    # ------------------------------------------------------------------
    # Businesses
    # ------------------------------------------------------------------

    @staticmethod
    def create_business(store: DocumentStore, data: Dict[str, Any], business_id: Optional[str] = None) -> Business:
        business = Business.from_document({**data, "createdAt": now_ms()})
        if business.timezone:
            get_zone(business.timezone)
        if store.list(BUSINESSES, slug=business.slug):
            raise ValidationError(f"Slug '{business.slug}' is already taken", {"slug": business.slug})

        business_id = business_id or uuid.uuid4().hex
        store.upsert(BUSINESSES, business_id, business.to_document())
        logger.info(f"Created business {business_id}: {business.name}")
        return business.model_copy(update={"id": business_id})

    @staticmethod
    def get_business(store: DocumentStore, business_id: str) -> Business:
        doc = store.get(BUSINESSES, business_id)
        if not doc:
            raise NotFoundError("Business not found", {"business_id": business_id})
        return Business.from_document(doc)

    @staticmethod
    def get_business_by_slug(store: DocumentStore, slug: str) -> Optional[Business]:
        docs = store.list(BUSINESSES, slug=slug)
        return Business.from_document(docs[0]) if docs else None

    @staticmethod
    def business_zone(business: Business) -> ZoneInfo:
        """The business's own zone, or the configured default"""
        return get_zone(business.timezone or get_settings().DEFAULT_TIMEZONE)

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    @staticmethod
    def _check_duration(service: Service) -> None:
        limit = get_settings().MAX_SERVICE_DURATION_MINUTES
        if service.duration_minutes > limit:
            raise ValidationError(
                f"Service duration cannot exceed {limit} minutes",
                {"duration_minutes": service.duration_minutes}
            )

    @staticmethod
    def create_service(store: DocumentStore, business_id: str, data: Dict[str, Any]) -> Service:
        CatalogService.get_business(store, business_id)
        service = Service.from_document({**data, "businessId": business_id})
        CatalogService._check_duration(service)

        service_id = uuid.uuid4().hex
        store.upsert(SERVICES, service_id, service.to_document())
        logger.info(f"Created service {service_id}: {service.name}")
        return service.model_copy(update={"id": service_id})

    @staticmethod
    def get_service(store: DocumentStore, business_id: str, service_id: str) -> Service:
        """Service of this business; other tenants' services are reported as missing"""
        doc = store.get(SERVICES, service_id)
        if not doc or doc.get("businessId") != business_id:
            raise NotFoundError("Service not found", {"service_id": service_id})
        return Service.from_document(doc)

    @staticmethod
    def list_services(store: DocumentStore, business_id: str, active_only: bool = False) -> List[Service]:
        services = [Service.from_document(doc) for doc in store.list(SERVICES, businessId=business_id)]
        if active_only:
            services = [s for s in services if s.is_active]
        return services

    @staticmethod
    def update_service(store: DocumentStore, business_id: str, service_id: str, changes: Dict[str, Any]) -> Service:
        current = CatalogService.get_service(store, business_id, service_id)
        merged = {**current.model_dump(exclude={"id"}), **changes, "business_id": business_id}
        service = Service.from_document(merged)
        CatalogService._check_duration(service)

        store.upsert(SERVICES, service_id, service.to_document())
        logger.info(f"Updated service {service_id}")
        return service.model_copy(update={"id": service_id})
