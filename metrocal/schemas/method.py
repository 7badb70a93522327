# =====================================================
# metrocal/schemas/method.py - Calibration method schemas
# =====================================================
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional
from datetime import datetime
import uuid

from .calendar import CalendarResponse
from .instrument import InstrumentSchedule
from .policy import CalibrationPolicyIn, CalibrationPolicyOut


class MethodBase(BaseModel):
    """Base schema for CalibrationMethod"""
    name: str = Field(..., min_length=1, max_length=150, description="Method name")
    description: Optional[str] = Field(None, description="Method description")
    procedure: Optional[str] = Field(None, description="Calibration procedure")
    required_equipment: Optional[str] = Field(None, description="Reference equipment needed")
    estimated_duration: Optional[int] = Field(None, gt=0, description="Estimated duration in minutes")
    instrument_type: Optional[str] = Field(None, max_length=100, description="Instrument type label")


class MethodCreate(MethodBase, CalibrationPolicyIn):
    """Schema for creating method (policy fields inline)"""

    def method_fields(self) -> dict:
        return self.model_dump(include=set(MethodBase.model_fields))


class MethodUpdate(BaseModel):
    """Schema for updating method. I calendari già creati non cambiano."""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    procedure: Optional[str] = None
    required_equipment: Optional[str] = None
    estimated_duration: Optional[int] = Field(None, gt=0)
    instrument_type: Optional[str] = Field(None, max_length=100)
    policy: Optional[CalibrationPolicyIn] = None

    @model_validator(mode="after")
    def reject_null_name(self):
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("name cannot be null")
        return self

    def method_fields(self) -> dict:
        return self.model_dump(exclude_unset=True, include=set(MethodBase.model_fields))


class MethodResponse(CalibrationPolicyOut):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    procedure: Optional[str] = None
    required_equipment: Optional[str] = None
    estimated_duration: Optional[int] = None
    instrument_type: Optional[str] = None
    calendar_count: int = 0
    created_at: datetime
    updated_at: datetime


class MethodApplyRequest(BaseModel):
    instrument_ids: List[uuid.UUID] = Field(..., min_length=1, description="Instruments to assign")
    calendar_name: Optional[str] = Field(None, min_length=1, max_length=150)


class MethodRemoveRequest(BaseModel):
    instrument_ids: List[uuid.UUID] = Field(..., min_length=1)


class ApplyResponse(BaseModel):
    calendar: CalendarResponse
    affected_count: int
    instrument_ids: List[uuid.UUID]


class RemoveResponse(BaseModel):
    method_id: uuid.UUID
    affected_count: int


class MethodUsageItem(BaseModel):
    instrument: InstrumentSchedule
    calendar_id: uuid.UUID
    calendar_name: str
