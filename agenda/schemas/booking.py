# agenda/schemas/booking.py
from __future__ import annotations
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from agenda.core.exceptions import AgendaError
from agenda.schemas.base import DocumentModel
from agenda.schemas.scheduling import DEFAULT_PROFESSIONAL_ID
from agenda.utils.time_utils import parse_date, parse_hhmm


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class BookingSource(str, Enum):
    PUBLIC = "public"
    STAFF = "staff"


class CommissionType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Booking(DocumentModel):
    """A reservation of one slot; times are epoch milliseconds"""
    business_id: str
    customer_id: Optional[str] = None
    customer_name: str
    customer_phone: str = ""
    service_id: str
    service_name: str = ""
    professional_id: str = DEFAULT_PROFESSIONAL_ID
    start_time: int
    end_time: int
    status: BookingStatus = BookingStatus.PENDING
    total_price: float = Field(0, ge=0)
    commission_type: Optional[CommissionType] = None
    commission_value: Optional[float] = None
    commission_amount: Optional[float] = None
    notes: Optional[str] = None
    idempotency_key: Optional[str] = None
    created_at: Optional[int] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("Booking end time must be after start time")
        return self


class Block(DocumentModel):
    """Manually removed capacity (time off, lunch break)"""
    business_id: str
    professional_id: str = DEFAULT_PROFESSIONAL_ID
    start_time: int
    end_time: int
    reason: str = ""
    created_at: Optional[int] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("Block end time must be after start time")
        return self


class BookingRequest(BaseModel):
    """Booking request for a date and a start time picked from the slot list"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    business_id: str = Field(..., description="Business identifier")
    service_id: str = Field(..., description="Requested service")
    date: str = Field(..., description="Calendar day (YYYY-MM-DD)")
    time: str = Field(..., description="Start time (HH:MM)")
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_phone: str = Field("", max_length=40)
    customer_id: Optional[str] = None
    professional_id: str = DEFAULT_PROFESSIONAL_ID
    notes: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, max_length=200)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        try:
            return parse_date(v).isoformat()
        except AgendaError:
            raise ValueError("Date must be YYYY-MM-DD")

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        try:
            parse_hhmm(v)
        except AgendaError:
            raise ValueError("Time must be HH:MM")
        return v


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BlockRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    professional_id: str = DEFAULT_PROFESSIONAL_ID
    start_time: int = Field(..., description="Epoch milliseconds")
    end_time: int = Field(..., description="Epoch milliseconds")
    reason: str = ""
