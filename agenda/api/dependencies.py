# ============================================================================
# FILE: agenda/api/dependencies.py
# Caller identity and error mapping shared by the route modules
# ============================================================================
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, status

from agenda.core.exceptions import (
    AgendaError,
    ConflictError,
    NotFoundError,
    PartialFailure,
    StoreUnavailable,
    ValidationError,
)
from agenda.schemas.scheduling import DEFAULT_PROFESSIONAL_ID


@dataclass(frozen=True)
class BusinessContext:
    """Identity supplied by the authenticated dashboard session"""
    business_id: str
    professional_id: str = DEFAULT_PROFESSIONAL_ID


def get_business_context(
        x_business_id: Optional[str] = Header(None, description="Business of the signed-in staff member"),
        x_professional_id: Optional[str] = Header(None, description="Professional of the signed-in staff member")
) -> BusinessContext:
    """
    Trust the business/professional identity forwarded by the auth layer.
    Authentication itself happens upstream.
    """
    if not x_business_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User not associated with a business"
        )
    return BusinessContext(
        business_id=x_business_id,
        professional_id=x_professional_id or DEFAULT_PROFESSIONAL_ID
    )


_STATUS_CODES = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PartialFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def to_http_exception(error: AgendaError) -> HTTPException:
    """Map a scheduling error to its HTTP status, keeping the structured details"""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.to_dict())
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.to_dict())
