"""
API v1 router setup
Organized into: public (mini-site) and dashboard (business staff) routes
"""
from fastapi import APIRouter

from agenda.api.v1.public import booking
from agenda.api.v1.dashboard import blocks, bookings, business, business_hours, overrides, services

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    booking.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES (business identity forwarded by the auth layer)
# ============================================================================
api_v1_router.include_router(
    business.router,
    prefix="/dashboard/business",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    services.router,
    prefix="/dashboard/services",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    business_hours.router,
    prefix="/dashboard/business-hours",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    overrides.router,
    prefix="/dashboard/overrides",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    blocks.router,
    prefix="/dashboard/blocks",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    bookings.router,
    prefix="/dashboard/bookings",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "dashboard": "X-Business-Id header set by the auth layer",
        }
    }
