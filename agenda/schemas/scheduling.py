# agenda/schemas/scheduling.py
"""Schedule sources: weekly default hours and date-specific overrides"""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from agenda.core.exceptions import AgendaError
from agenda.schemas.base import DocumentModel
from agenda.utils.time_utils import parse_date, parse_hhmm

DEFAULT_PROFESSIONAL_ID = "default"


class TimeInterval(BaseModel):
    """Half-open [start, end) time-of-day range written as HH:MM"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    start: str = Field(..., description="Start time (HH:MM)")
    end: str = Field(..., description="End time (HH:MM)")

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        try:
            parse_hhmm(v)
        except AgendaError:
            raise ValueError("Time must be HH:MM between 00:00 and 23:59")
        return v

    @model_validator(mode="after")
    def start_before_end(self):
        if parse_hhmm(self.start) >= parse_hhmm(self.end):
            raise ValueError(f"Interval start {self.start} must be before end {self.end}")
        return self

    @property
    def start_minute(self) -> int:
        return parse_hhmm(self.start)

    @property
    def end_minute(self) -> int:
        return parse_hhmm(self.end)


class AvailabilitySlot(TimeInterval):
    """Override interval, optionally scoped to services and priced"""
    service_ids: List[str] = Field(default_factory=list, description="Empty means every service")
    custom_price: Optional[float] = Field(None, ge=0)

    @field_validator("service_ids", mode="before")
    @classmethod
    def none_means_all(cls, v):
        return v or []

    def applies_to(self, service_id: str) -> bool:
        return not self.service_ids or service_id in self.service_ids


class DaySchedule(BaseModel):
    """Open/closed flag plus ordered intervals; slots are ignored when closed"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    is_open: bool = False
    slots: List[AvailabilitySlot] = Field(default_factory=list)


class WeeklySchedule(DocumentModel):
    """
    Default recurring hours keyed by day of week (0=Sunday ... 6=Saturday).

    Persisted flat as {"businessId": ..., "0": {...}, ..., "6": {...}}.
    """
    business_id: str
    days: Dict[int, DaySchedule] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def collect_days(cls, data: Any):
        if not isinstance(data, dict) or "days" in data:
            return data
        days = {k: v for k, v in data.items() if str(k).isdigit()}
        rest = {k: v for k, v in data.items() if not str(k).isdigit()}
        return {**rest, "days": days}

    @field_validator("days")
    @classmethod
    def valid_weekdays(cls, v: Dict[int, DaySchedule]) -> Dict[int, DaySchedule]:
        for day in v:
            if not 0 <= int(day) <= 6:
                raise ValueError(f"Day of week must be 0-6, got {day}")
        return v

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"businessId": self.business_id}
        for day, schedule in sorted(self.days.items()):
            doc[str(day)] = schedule.model_dump(by_alias=True, mode="json")
        return doc


class DateOverride(DocumentModel):
    """Schedule for one calendar date that replaces the weekly default"""
    business_id: str
    professional_id: str = DEFAULT_PROFESSIONAL_ID
    date: str = Field(..., description="Calendar day (YYYY-MM-DD)")
    is_open: bool
    slots: List[AvailabilitySlot] = Field(default_factory=list)
    updated_at: Optional[int] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        try:
            return parse_date(v).isoformat()
        except AgendaError:
            raise ValueError("Date must be YYYY-MM-DD")


class ScheduleSource(str, Enum):
    OVERRIDE = "override"
    WEEKLY = "weekly"
    FALLBACK = "fallback"


class ResolvedSchedule(BaseModel):
    """The single schedule that applies to a date"""
    is_open: bool
    slots: List[AvailabilitySlot] = Field(default_factory=list)
    source: ScheduleSource


class OverrideConfig(BaseModel):
    """One open/closed + intervals configuration applied to one or more dates"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    is_open: bool
    slots: List[AvailabilitySlot] = Field(default_factory=list)
