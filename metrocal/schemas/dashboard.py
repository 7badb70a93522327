# =====================================================
# metrocal/schemas/dashboard.py - Dashboard / timeline / planning
# =====================================================
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import date

from metrocal.engine import ComplianceStatus
from .instrument import InstrumentSchedule


class ToleranceStatsResponse(BaseModel):
    """Conteggi per stato (chiavi ON_TIME, OVERDUE_TOLERATED, ...)"""
    total: int
    counts: Dict[str, int]
    details: Dict[str, List[InstrumentSchedule]]


class ScheduleEntryOut(BaseModel):
    instrument: InstrumentSchedule
    status: ComplianceStatus
    days_until_due: Optional[int] = None


class TimelineResponse(BaseModel):
    start: date
    end: date
    days: Dict[str, List[ScheduleEntryOut]]


class PlanningResponse(BaseModel):
    items: List[ScheduleEntryOut]
    count: int
