# =====================================================
# metrocal/schemas/calendar.py - Calibration calendar schemas
# =====================================================
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional
from datetime import datetime
import uuid

from .instrument import InstrumentSchedule
from .policy import CalibrationPolicyIn, CalibrationPolicyOut


class CalendarBase(BaseModel):
    """Base schema for CalibrationCalendar"""
    name: str = Field(..., min_length=1, max_length=150, description="Calendar name")
    description: Optional[str] = Field(None, description="Calendar description")
    active: bool = Field(default=True, description="Inactive calendars fall back to the instrument policy")
    calibration_method_id: Optional[uuid.UUID] = Field(None, description="Source method, if any")


class CalendarCreate(CalendarBase, CalibrationPolicyIn):
    """Schema for creating calendar (policy fields inline)"""
    instrument_ids: List[uuid.UUID] = Field(default_factory=list, description="Instruments to assign")

    def calendar_fields(self) -> dict:
        return self.model_dump(include=set(CalendarBase.model_fields))


class CalendarUpdate(BaseModel):
    """
    Schema for updating calendar.

    instrument_ids, se presente, è il NUOVO insieme completo dei membri.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    active: Optional[bool] = None
    calibration_method_id: Optional[uuid.UUID] = None
    policy: Optional[CalibrationPolicyIn] = None
    instrument_ids: Optional[List[uuid.UUID]] = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        # Omessi = invariati; null esplicito su colonne NOT NULL = errore
        nulls = [name for name in ("name", "active") if name in self.model_fields_set and getattr(self, name) is None]
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self

    def calendar_fields(self) -> dict:
        return self.model_dump(exclude_unset=True, include=set(CalendarBase.model_fields))


class CalendarToggle(BaseModel):
    active: bool


class CalendarSummary(CalibrationPolicyOut):
    """Calendario senza membri"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    active: bool
    calibration_method_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class CalendarResponse(CalendarSummary):
    instrument_count: int = 0


class CalendarDetail(CalendarResponse):
    instruments: List[InstrumentSchedule] = Field(default_factory=list)


class CalendarList(BaseModel):
    items: List[CalendarResponse]
    count: int


class ReconcileResponse(BaseModel):
    calendar: CalendarResponse
    detached: List[uuid.UUID]
    attached: List[uuid.UUID]
    kept: List[uuid.UUID]


class CalendarDeleteResponse(BaseModel):
    id: uuid.UUID
    detached_count: int
