"""Health checks and monitoring endpoints"""
from fastapi import APIRouter, Depends

from agenda.config.database import get_document_store
from agenda.core.exceptions import StoreUnavailable
from agenda.services.store.document_store import DocumentStore

health_router = APIRouter()


@health_router.get("/")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "agenda-api"}


@health_router.get("/detailed")
def detailed_health_check(store: DocumentStore = Depends(get_document_store)):
    """Detailed health check with the document store round-trip"""
    checks = {
        "api": "healthy",
        "document_store": "unknown",
        "overall": "unknown"
    }

    try:
        store.ping()
        checks["document_store"] = "healthy"
    except StoreUnavailable as e:
        checks["document_store"] = f"unhealthy: {e.message}"

    if all(status == "healthy" for key, status in checks.items() if key != "overall"):
        checks["overall"] = "healthy"
    else:
        checks["overall"] = "degraded"

    return checks
