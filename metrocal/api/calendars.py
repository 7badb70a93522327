# =====================================================
# metrocal/api/calendars.py - Calibration calendar routes
# =====================================================
from fastapi import APIRouter, Depends, Query, status
from datetime import date
from typing import Optional
import uuid

from metrocal.models.calibration_calendar import CalibrationCalendar
from metrocal.schemas import (
    CalendarCreate,
    CalendarDeleteResponse,
    CalendarDetail,
    CalendarList,
    CalendarResponse,
    CalendarSummary,
    CalendarToggle,
    CalendarUpdate,
    InstrumentSchedule,
    ReconcileResponse,
)
from metrocal.services import CalendarService
from .dependencies import get_calendar_service

# =====================================================
# ROUTER SETUP
# =====================================================

calendars_router = APIRouter(prefix="/calendars", tags=["Calibration calendars"])


def calendar_response(calendar: CalibrationCalendar, instrument_count: Optional[int] = None) -> CalendarResponse:
    summary = CalendarSummary.model_validate(calendar)
    if instrument_count is None:
        instrument_count = calendar.instrument_count
    return CalendarResponse(**summary.model_dump(exclude={"frequency_label", "tolerance_label"}),
                            instrument_count=instrument_count)


# =====================================================
# QUERIES
# =====================================================

@calendars_router.get("", response_model=CalendarList, summary="Lista calendari")
def list_calendars(
    calibration_method_id: Optional[uuid.UUID] = Query(None, description="Filter by source method"),
    active: Optional[bool] = Query(None, description="Filter by active flag"),
    service: CalendarService = Depends(get_calendar_service),
):
    rows = service.list_calendars(calibration_method_id, active)
    items = [calendar_response(calendar, count) for calendar, count in rows]
    return CalendarList(items=items, count=len(items))


@calendars_router.get("/{calendar_id}", response_model=CalendarDetail, summary="Dettaglio calendario")
def get_calendar(
    calendar_id: uuid.UUID,
    now: Optional[date] = Query(None, description="Reference date for member status (default: today)"),
    service: CalendarService = Depends(get_calendar_service),
):
    now = now or date.today()
    calendar = service.get_calendar(calendar_id)
    response = calendar_response(calendar)
    return CalendarDetail(
        **response.model_dump(exclude={"frequency_label", "tolerance_label"}),
        instruments=[InstrumentSchedule.at(i, now) for i in calendar.instruments],
    )


# =====================================================
# COMMANDS
# =====================================================

@calendars_router.post(
    "",
    response_model=CalendarResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crea calendario (con strumenti opzionali)"
)
def create_calendar(payload: CalendarCreate, service: CalendarService = Depends(get_calendar_service)):
    calendar = service.create_calendar(
        payload.to_policy(),
        payload.calendar_fields(),
        instrument_ids=payload.instrument_ids,
    )
    return calendar_response(calendar, len(set(payload.instrument_ids)))


@calendars_router.put("/{calendar_id}", response_model=ReconcileResponse, summary="Aggiorna calendario")
def update_calendar(
    calendar_id: uuid.UUID,
    payload: CalendarUpdate,
    service: CalendarService = Depends(get_calendar_service),
):
    """
    Aggiorna metadati e policy. Se instrument_ids è presente i membri
    vengono riconciliati: staccati quelli assenti, attaccati i nuovi.
    """
    calendar, result = service.update_calendar(
        calendar_id,
        payload.calendar_fields(),
        policy=payload.policy.to_policy() if payload.policy is not None else None,
        instrument_ids=payload.instrument_ids,
    )
    return ReconcileResponse(
        calendar=calendar_response(calendar, len(result.kept | result.attached)),
        detached=sorted(result.detached, key=str),
        attached=sorted(result.attached, key=str),
        kept=sorted(result.kept, key=str),
    )


@calendars_router.patch("/{calendar_id}/active", response_model=CalendarResponse, summary="Attiva / disattiva")
def toggle_calendar(
    calendar_id: uuid.UUID,
    payload: CalendarToggle,
    service: CalendarService = Depends(get_calendar_service),
):
    return calendar_response(service.set_active(calendar_id, payload.active))


@calendars_router.delete("/{calendar_id}", response_model=CalendarDeleteResponse, summary="Elimina calendario")
def delete_calendar(calendar_id: uuid.UUID, service: CalendarService = Depends(get_calendar_service)):
    detached = service.delete_calendar(calendar_id)
    return CalendarDeleteResponse(id=calendar_id, detached_count=detached)
