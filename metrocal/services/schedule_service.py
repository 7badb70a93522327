# =====================================================
# metrocal/services/schedule_service.py - Schedule materialization
# =====================================================
"""
Scrive le date risolte sullo strumento.

Le date cambiano solo quando una taratura/verifica viene completata,
oppure su richiesta esplicita (recompute_schedule). Cambiare policy
o calendario NON ricalcola nulla retroattivamente.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
import logging
import uuid

from sqlalchemy.orm import Session

from metrocal.database.exceptions import ValidationError
from metrocal.engine import compute_next_date, tolerance_expiry_for
from metrocal.models.instrument import Instrument
from metrocal.models.intervention import (
    ConformityResult,
    Intervention,
    InterventionStatus,
    InterventionType,
    SCHEDULE_RESETTING_TYPES,
)
from .unit_of_work import UnitOfWork

module_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSchedule:
    next_calibration_date: date
    tolerance_expiry_date: date


def resolve_schedule(
    instrument: Instrument,
    last_date: date,
    next_date: Optional[date] = None,
) -> ResolvedSchedule:
    """
    Prossima scadenza + fine tolleranza secondo la policy effettiva.

    Una next_date esplicita (es. riportata sul certificato) ha la
    precedenza sulla ricorrenza; la tolleranza viene sempre dalla policy.
    """
    policy = instrument.effective_policy
    if next_date is None:
        next_date = compute_next_date(last_date, policy)
    elif next_date <= last_date:
        raise ValidationError("Next calibration date must be after the completion date")
    return ResolvedSchedule(next_date, tolerance_expiry_for(next_date, policy.tolerance))


class ScheduleService:
    """Registrazione interventi completati e aggiornamento dello schedule"""

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self.uow = UnitOfWork(db)
        self.repos = self.uow.repositories
        self.logger = logger or module_logger

    def _get_instrument(self, instrument_id: uuid.UUID) -> Instrument:
        instrument = self.repos.instruments.require(instrument_id)
        return instrument

    def list_interventions(self, instrument_id: uuid.UUID) -> List[Intervention]:
        """Storico interventi, dal più recente"""
        self._get_instrument(instrument_id)
        return self.repos.interventions.get_by_instrument(instrument_id)

    def _materialize(self, instrument: Instrument, intervention: Intervention,
                     next_date: Optional[date]) -> None:
        schedule = resolve_schedule(instrument, intervention.completed_date, next_date)
        instrument.last_calibration_date = intervention.completed_date
        instrument.set_schedule(schedule.next_calibration_date, schedule.tolerance_expiry_date)
        intervention.next_calibration_date = schedule.next_calibration_date
        self.logger.info(
            "Instrument %s rescheduled: next %s, tolerance until %s",
            instrument.serial_number,
            schedule.next_calibration_date,
            schedule.tolerance_expiry_date,
        )

    def record_completed_intervention(
        self,
        instrument_id: uuid.UUID,
        intervention_type: InterventionType,
        completed_date: date,
        next_calibration_date: Optional[date] = None,
        conformity_result: Optional[ConformityResult] = None,
        certificate_number: Optional[str] = None,
        observations: Optional[str] = None,
    ) -> Intervention:
        """
        Registra un intervento già completato.

        Per CALIBRATION/VERIFICATION lo schedule dello strumento viene
        aggiornato nella stessa transazione.
        """
        with self.uow.transaction():
            instrument = self._get_instrument(instrument_id)
            intervention = self.repos.interventions.create({
                "instrument_id": instrument.id,
                "intervention_type": intervention_type,
                "status": InterventionStatus.COMPLETED,
                "scheduled_date": completed_date,
                "completed_date": completed_date,
                "conformity_result": conformity_result,
                "certificate_number": certificate_number,
                "observations": observations,
            })
            if intervention_type in SCHEDULE_RESETTING_TYPES:
                self._materialize(instrument, intervention, next_calibration_date)
            self.uow.db.flush()
        return intervention

    def plan_intervention(
        self,
        instrument_id: uuid.UUID,
        intervention_type: InterventionType,
        scheduled_date: date,
        observations: Optional[str] = None,
    ) -> Intervention:
        with self.uow.transaction():
            instrument = self._get_instrument(instrument_id)
            intervention = self.repos.interventions.create({
                "instrument_id": instrument.id,
                "intervention_type": intervention_type,
                "status": InterventionStatus.PLANNED,
                "scheduled_date": scheduled_date,
                "observations": observations,
            })
        return intervention

    def complete_intervention(
        self,
        intervention_id: uuid.UUID,
        completed_date: date,
        next_calibration_date: Optional[date] = None,
        conformity_result: Optional[ConformityResult] = None,
    ) -> Intervention:
        """Chiude un intervento pianificato"""
        with self.uow.transaction():
            intervention = self.repos.interventions.require(intervention_id)
            if intervention.status in (InterventionStatus.COMPLETED, InterventionStatus.CANCELLED):
                raise ValidationError(f"Intervention is already {intervention.status.value.lower()}")

            intervention.mark_as_completed(completed_date, conformity_result)
            if intervention.resets_schedule:
                self._materialize(intervention.instrument, intervention, next_calibration_date)
            self.uow.db.flush()
        return intervention

    def recompute_schedule(self, instrument_id: uuid.UUID) -> Instrument:
        """
        Ricalcolo esplicito dall'ultima taratura con la policy effettiva
        corrente. Senza ultima taratura lo schedule resta invariato.
        """
        with self.uow.transaction():
            instrument = self._get_instrument(instrument_id)
            if instrument.last_calibration_date is None:
                last = self.repos.interventions.get_last_completed_calibration(instrument_id)
                if last is None or last.completed_date is None:
                    self.logger.warning("Instrument %s has no completed calibration", instrument.serial_number)
                    return instrument
                instrument.last_calibration_date = last.completed_date

            schedule = resolve_schedule(instrument, instrument.last_calibration_date)
            instrument.set_schedule(schedule.next_calibration_date, schedule.tolerance_expiry_date)
            self.uow.db.flush()
        return instrument
