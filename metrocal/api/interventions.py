# =====================================================
# metrocal/api/interventions.py - Intervention routes
# =====================================================
from fastapi import APIRouter, Depends, Query, status
from typing import List
import uuid

from metrocal.schemas import InterventionCompletion, InterventionPlan, InterventionRecord, InterventionResponse
from metrocal.services import ScheduleService
from .dependencies import get_schedule_service

interventions_router = APIRouter(prefix="/interventions", tags=["Interventions"])


@interventions_router.post(
    "",
    response_model=InterventionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registra intervento completato"
)
def record_intervention(payload: InterventionRecord, service: ScheduleService = Depends(get_schedule_service)):
    """
    Taratura / verifica completata: lo schedule dello strumento viene
    ricalcolato (data esplicita se fornita, altrimenti dalla policy).
    """
    return service.record_completed_intervention(
        payload.instrument_id,
        payload.intervention_type,
        payload.completed_date,
        next_calibration_date=payload.next_calibration_date,
        conformity_result=payload.conformity_result,
        certificate_number=payload.certificate_number,
        observations=payload.observations,
    )


@interventions_router.post(
    "/planned",
    response_model=InterventionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Pianifica intervento"
)
def plan_intervention(payload: InterventionPlan, service: ScheduleService = Depends(get_schedule_service)):
    return service.plan_intervention(
        payload.instrument_id,
        payload.intervention_type,
        payload.scheduled_date,
        observations=payload.observations,
    )


@interventions_router.post("/{intervention_id}/complete", response_model=InterventionResponse, summary="Completa intervento")
def complete_intervention(
    intervention_id: uuid.UUID,
    payload: InterventionCompletion,
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.complete_intervention(
        intervention_id,
        payload.completed_date,
        next_calibration_date=payload.next_calibration_date,
        conformity_result=payload.conformity_result,
    )


@interventions_router.get("", response_model=List[InterventionResponse], summary="Storico interventi di uno strumento")
def list_interventions(
    instrument_id: uuid.UUID = Query(..., description="Instrument ID"),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.list_interventions(instrument_id)
