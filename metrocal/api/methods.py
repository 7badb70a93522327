# =====================================================
# metrocal/api/methods.py - Calibration method routes
# =====================================================
from fastapi import APIRouter, Depends, Query, Response, status
from datetime import date
from typing import List, Optional
import uuid

from metrocal.schemas import (
    ApplyResponse,
    InstrumentSchedule,
    MethodApplyRequest,
    MethodCreate,
    MethodRemoveRequest,
    MethodResponse,
    MethodUpdate,
    MethodUsageItem,
    RemoveResponse,
)
from metrocal.services import MethodService
from .calendars import calendar_response
from .dependencies import get_method_service

# =====================================================
# ROUTER SETUP
# =====================================================

methods_router = APIRouter(prefix="/methods", tags=["Calibration methods"])

# =====================================================
# CRUD
# =====================================================

@methods_router.get("", response_model=List[MethodResponse], summary="Lista metodi")
def list_methods(
    instrument_type: Optional[str] = Query(None, description="Filter by instrument type"),
    service: MethodService = Depends(get_method_service),
):
    return service.list_methods(instrument_type)


@methods_router.get("/{method_id}", response_model=MethodResponse, summary="Dettaglio metodo")
def get_method(method_id: uuid.UUID, service: MethodService = Depends(get_method_service)):
    return service.get_method(method_id)


@methods_router.post("", response_model=MethodResponse, status_code=status.HTTP_201_CREATED, summary="Crea metodo")
def create_method(payload: MethodCreate, service: MethodService = Depends(get_method_service)):
    return service.create_method(payload.to_policy(), payload.method_fields())


@methods_router.put("/{method_id}", response_model=MethodResponse, summary="Aggiorna metodo")
def update_method(
    method_id: uuid.UUID,
    payload: MethodUpdate,
    service: MethodService = Depends(get_method_service),
):
    """I calendari già creati dal metodo NON vengono modificati"""
    return service.update_method(
        method_id,
        payload.method_fields(),
        policy=payload.policy.to_policy() if payload.policy is not None else None,
    )


@methods_router.delete("/{method_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Elimina metodo")
def delete_method(method_id: uuid.UUID, service: MethodService = Depends(get_method_service)):
    service.delete_method(method_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =====================================================
# BULK APPLY / REMOVE
# =====================================================

@methods_router.post("/{method_id}/apply", response_model=ApplyResponse, summary="Applica metodo a più strumenti")
def apply_method(
    method_id: uuid.UUID,
    payload: MethodApplyRequest,
    service: MethodService = Depends(get_method_service),
):
    """
    Crea un nuovo calendario clonato dalla policy del metodo e lo
    assegna a tutti gli strumenti indicati (tutto o niente).
    """
    result = service.apply_to_instruments(method_id, payload.instrument_ids, payload.calendar_name)
    return ApplyResponse(
        calendar=calendar_response(result.calendar, result.affected_count),
        affected_count=result.affected_count,
        instrument_ids=[instrument.id for instrument in result.instruments],
    )


@methods_router.post("/{method_id}/remove", response_model=RemoveResponse, summary="Rimuovi metodo da più strumenti")
def remove_method(
    method_id: uuid.UUID,
    payload: MethodRemoveRequest,
    service: MethodService = Depends(get_method_service),
):
    affected = service.remove_from_instruments(method_id, payload.instrument_ids)
    return RemoveResponse(method_id=method_id, affected_count=affected)


@methods_router.get("/{method_id}/instruments", response_model=List[MethodUsageItem], summary="Strumenti che usano il metodo")
def method_instruments(
    method_id: uuid.UUID,
    now: Optional[date] = Query(None, description="Reference date for instrument status (default: today)"),
    service: MethodService = Depends(get_method_service),
):
    now = now or date.today()
    return [
        MethodUsageItem(
            instrument=InstrumentSchedule.at(usage.instrument, now),
            calendar_id=usage.calendar.id,
            calendar_name=usage.calendar.name,
        )
        for usage in service.instruments_using(method_id)
    ]
