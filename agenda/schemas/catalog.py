# agenda/schemas/catalog.py
from __future__ import annotations
from typing import Optional

from pydantic import Field

from agenda.schemas.base import DocumentModel
from agenda.schemas.booking import CommissionType


class Business(DocumentModel):
    """Tenant operating one scheduling calendar"""
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    address: str = ""
    phone: str = ""
    whatsapp: str = ""
    category: Optional[str] = None
    owner_id: Optional[str] = None
    plan: str = "basic"
    timezone: Optional[str] = Field(None, description="IANA zone; settings default when absent")
    created_at: Optional[int] = None


class Service(DocumentModel):
    """A bookable service; its duration sizes every slot"""
    business_id: str
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: float = Field(0, ge=0)
    duration_minutes: int = Field(..., gt=0)
    is_active: bool = True
    category: Optional[str] = None
    commission_type: Optional[CommissionType] = None
    commission_value: Optional[float] = Field(None, ge=0)
