# =====================================================
# metrocal/schemas/intervention.py - Intervention schemas
# =====================================================
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
from datetime import date, datetime
import uuid

from metrocal.models.intervention import ConformityResult, InterventionStatus, InterventionType


class InterventionCompletion(BaseModel):
    """Chiusura di un intervento: data e, opzionalmente, prossima scadenza"""
    completed_date: date = Field(..., description="Completion date")
    next_calibration_date: Optional[date] = Field(
        None, description="Explicit next due date (overrides the recurrence)"
    )
    conformity_result: Optional[ConformityResult] = None

    @model_validator(mode="after")
    def validate_next_date(self):
        if self.next_calibration_date is not None and self.next_calibration_date <= self.completed_date:
            raise ValueError("Next calibration date must be after the completion date")
        return self


class InterventionRecord(InterventionCompletion):
    """Intervento già eseguito, registrato in un colpo solo"""
    instrument_id: uuid.UUID = Field(..., description="Instrument ID")
    intervention_type: InterventionType = Field(..., description="Type of intervention")
    certificate_number: Optional[str] = Field(None, max_length=100)
    observations: Optional[str] = None


class InterventionPlan(BaseModel):
    instrument_id: uuid.UUID
    intervention_type: InterventionType
    scheduled_date: date
    observations: Optional[str] = None


class InterventionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    instrument_id: uuid.UUID
    intervention_type: InterventionType
    status: InterventionStatus
    conformity_result: Optional[ConformityResult] = None
    certificate_number: Optional[str] = None
    observations: Optional[str] = None
    scheduled_date: date
    completed_date: Optional[date] = None
    next_calibration_date: Optional[date] = None
    created_at: datetime
