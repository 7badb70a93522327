# =====================================================
# metrocal/services/method_service.py - Calibration method templates
# =====================================================
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
import logging
import uuid

from sqlalchemy.orm import Session

from metrocal.database.exceptions import EntityNotFoundError, ValidationError
from metrocal.engine.policy import CalibrationPolicy
from metrocal.models.calibration_calendar import CalibrationCalendar
from metrocal.models.calibration_method import CalibrationMethod
from metrocal.models.instrument import Instrument
from .calendar_service import ApplyResult, CalendarService

module_logger = logging.getLogger(__name__)

METHOD_FIELDS = (
    "name",
    "description",
    "procedure",
    "required_equipment",
    "estimated_duration",
    "instrument_type",
)


@dataclass
class MethodUsage:
    """Strumento che usa un metodo, tramite uno dei suoi calendari"""
    instrument: Instrument
    calendar: CalibrationCalendar


class MethodService:
    """CRUD dei metodi + applicazione bulk agli strumenti"""

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self.logger = logger or module_logger
        self.calendars = CalendarService(db, logger=self.logger)
        self.uow = self.calendars.uow
        self.repos = self.uow.repositories

    def get_method(self, method_id: uuid.UUID) -> CalibrationMethod:
        method = self.repos.methods.get_with_calendars(method_id)
        if method is None:
            raise EntityNotFoundError(f"Calibration method {method_id} not found")
        return method

    def list_methods(self, instrument_type: Optional[str] = None) -> List[CalibrationMethod]:
        return self.repos.methods.get_filtered(instrument_type)

    def create_method(self, policy: CalibrationPolicy, data: Dict[str, Any]) -> CalibrationMethod:
        method_data = {key: data[key] for key in METHOD_FIELDS if key in data}
        method_data.update(policy.to_fields())
        with self.uow.transaction():
            method = self.repos.methods.create(method_data)
        return method

    def update_method(
        self,
        method_id: uuid.UUID,
        data: Dict[str, Any],
        policy: Optional[CalibrationPolicy] = None,
    ) -> CalibrationMethod:
        """
        Aggiorna il template. I calendari già creati dal metodo sono
        copie indipendenti e NON vengono modificati.
        """
        with self.uow.transaction():
            method = self.repos.methods.require(method_id)
            for key in METHOD_FIELDS:
                if key in data:
                    setattr(method, key, data[key])
            if policy is not None:
                method.apply_policy(policy)
        return method

    def delete_method(self, method_id: uuid.UUID) -> None:
        """Rifiutato finché esistono calendari derivati dal metodo"""
        with self.uow.transaction():
            self.repos.methods.require(method_id)
            calendar_count = self.repos.calendars.count_by_method(method_id)
            if calendar_count > 0:
                raise ValidationError(
                    f"Method is used by {calendar_count} calendar(s); delete those calendars first"
                )
            self.repos.methods.delete(method_id)

    # ==========================================
    # BULK APPLY / REMOVE
    # ==========================================

    def apply_to_instruments(
        self,
        method_id: uuid.UUID,
        instrument_ids: Iterable[uuid.UUID],
        calendar_name: Optional[str] = None,
    ) -> ApplyResult:
        """
        Clona la policy del metodo in un nuovo calendario e lo assegna.
        Lettura del metodo e apply nella stessa transazione bulk:
        anche un errore al commit diventa BulkAssociationError.
        """
        ids = set(instrument_ids)
        if not ids:
            raise ValidationError("At least one instrument is required")

        with self.calendars._bulk("apply method", len(ids)):
            method = self.repos.methods.require(method_id)

            return self.calendars.apply_policy(
                method.policy,
                ids,
                name=calendar_name or f"{method.name} - automatic calendar",
                description=f"Calendar created automatically to apply method {method.name}",
                calibration_method_id=method.id,
            )

    def remove_from_instruments(self, method_id: uuid.UUID, instrument_ids: Iterable[uuid.UUID]) -> int:
        """
        Stacca il calendario solo dove il calendario attuale deriva dal metodo.

        Returns:
            Numero di strumenti effettivamente staccati
        """
        ids = set(instrument_ids)
        if not ids:
            raise ValidationError("At least one instrument is required")
        self.repos.methods.require(method_id)

        with self.calendars._bulk("remove method", len(ids)):
            affected = self.repos.instruments.detach_from_method(ids, method_id)

        self.logger.info("Method %s removed from %d/%d instrument(s)", method_id, affected, len(ids))
        return affected

    def instruments_using(self, method_id: uuid.UUID) -> List[MethodUsage]:
        """Strumenti di tutti i calendari del metodo, appiattiti"""
        method = self.get_method(method_id)
        return [
            MethodUsage(instrument=instrument, calendar=calendar)
            for calendar in method.calendars
            for instrument in calendar.instruments
        ]
