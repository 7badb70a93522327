# =====================================================
# metrocal/api/dashboard.py - Dashboard, timeline, planning
# =====================================================
from fastapi import APIRouter, Depends, Query
from datetime import date, timedelta
from typing import List, Optional

from metrocal.config import DUE_SOON_DAYS, TIMELINE_DAYS
from metrocal.engine import ComplianceStatus
from metrocal.engine.aggregation import ScheduleEntry
from metrocal.schemas import (
    InstrumentSchedule,
    PlanningResponse,
    ScheduleEntryOut,
    TimelineResponse,
    ToleranceStatsResponse,
)
from metrocal.services import DashboardService
from .dependencies import get_dashboard_service

dashboard_router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def entry_out(entry: ScheduleEntry) -> ScheduleEntryOut:
    return ScheduleEntryOut(
        instrument=InstrumentSchedule.from_entry(entry),
        status=entry.status,
        days_until_due=entry.days_until_due,
    )


def entries_out(entries: List[ScheduleEntry]) -> List[ScheduleEntryOut]:
    return [entry_out(entry) for entry in entries]


@dashboard_router.get("/tolerance-stats", response_model=ToleranceStatsResponse, summary="Report per fascia di tolleranza")
def tolerance_stats(
    now: Optional[date] = Query(None, description="Reference date (default: today)"),
    service: DashboardService = Depends(get_dashboard_service),
):
    stats = service.tolerance_stats(now)
    return ToleranceStatsResponse(
        total=stats.total,
        counts={status.value: count for status, count in stats.counts.items()},
        details={
            status.value: [InstrumentSchedule.at(i, stats.now) for i in members]
            for status, members in stats.details.items()
        },
    )


@dashboard_router.get("/timeline", response_model=TimelineResponse, summary="Scadenze per giorno")
def timeline(
    days: int = Query(TIMELINE_DAYS, ge=1, le=366, description="Window length in days"),
    start: Optional[date] = Query(None, description="Window start (default: today)"),
    now: Optional[date] = Query(None, description="Reference date (default: today)"),
    service: DashboardService = Depends(get_dashboard_service),
):
    now = now or date.today()
    start = start or now
    grouped = service.timeline(now=now, days=days, start=start)
    return TimelineResponse(
        start=start,
        end=start + timedelta(days=days),
        days={day: entries_out(entries) for day, entries in grouped.items()},
    )


@dashboard_router.get("/planning", response_model=PlanningResponse, summary="Lista di pianificazione")
def planning(
    status: Optional[ComplianceStatus] = Query(None, description="Filter by compliance status"),
    due_soon: bool = Query(False, description=f"Only due within the next {DUE_SOON_DAYS} days"),
    overdue: bool = Query(False, description="Only past their due date"),
    now: Optional[date] = Query(None, description="Reference date (default: today)"),
    service: DashboardService = Depends(get_dashboard_service),
):
    entries = service.planning(now=now, status=status, due_soon=due_soon, overdue=overdue)
    return PlanningResponse(items=entries_out(entries), count=len(entries))
