# =====================================================
# metrocal/services/calendar_service.py - Calendar <-> Instrument association
# =====================================================
"""
Layer di associazione calendario <-> strumenti.

Ogni operazione (apply / remove / reconcile / delete) è UNA transazione:
o commit completo o rollback completo. Un fallimento viene riportato
come un solo BulkAssociationError per tutto il batch.
Overlap concorrenti: last writer wins sulla foreign key.
"""
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from metrocal.database.exceptions import (
    BulkAssociationError,
    DatabaseError,
    EntityNotFoundError,
    ValidationError,
)
from metrocal.engine.policy import CalibrationPolicy
from metrocal.models.calibration_calendar import CalibrationCalendar
from metrocal.models.instrument import Instrument
from .unit_of_work import UnitOfWork

module_logger = logging.getLogger(__name__)

CALENDAR_FIELDS = ("name", "description", "active", "calibration_method_id")


@dataclass
class ApplyResult:
    """Esito di un apply-to-many"""
    calendar: CalibrationCalendar
    instruments: List[Instrument]

    @property
    def affected_count(self) -> int:
        return len(self.instruments)


@dataclass
class ReconcileResult:
    """Differenza tra membri precedenti e nuovo insieme"""
    calendar_id: uuid.UUID
    detached: Set[uuid.UUID] = field(default_factory=set)
    attached: Set[uuid.UUID] = field(default_factory=set)
    kept: Set[uuid.UUID] = field(default_factory=set)

    @property
    def is_noop(self) -> bool:
        return not self.detached and not self.attached


class CalendarService:
    """Gestione calendari e delle loro associazioni con gli strumenti"""

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self.uow = UnitOfWork(db)
        self.repos = self.uow.repositories
        self.logger = logger or module_logger

    # ==========================================
    # TRANSACTION HELPERS
    # ==========================================

    @contextmanager
    def _bulk(self, operation: str, attempted_count: int):
        """
        Transazione bulk: errori di persistenza -> un solo BulkAssociationError.

        Passano invariati solo gli EntityNotFoundError dei controlli
        preliminari (translate_error non li produce mai) e i
        BulkAssociationError di un _bulk annidato. Validazioni sugli
        input vanno fatte prima di entrare.
        """
        try:
            with self.uow.transaction():
                yield
        except (EntityNotFoundError, BulkAssociationError):
            raise
        except (DatabaseError, SQLAlchemyError) as e:
            self.logger.error("%s rolled back (%d instruments): %s", operation, attempted_count, e)
            raise BulkAssociationError(operation, attempted_count, str(e)) from e

    def _require_instruments(self, ids: Set[uuid.UUID]) -> None:
        missing = self.repos.instruments.find_missing_ids(ids)
        if missing:
            raise EntityNotFoundError(
                f"{len(missing)} instrument(s) not found: {', '.join(sorted(str(i) for i in missing))}"
            )

    def _require_method(self, method_id: Optional[uuid.UUID]) -> None:
        if method_id is not None:
            self.repos.methods.require(method_id)

    def get_calendar(self, calendar_id: uuid.UUID) -> CalibrationCalendar:
        calendar = self.repos.calendars.get_with_instruments(calendar_id)
        if calendar is None:
            raise EntityNotFoundError(f"Calibration calendar {calendar_id} not found")
        return calendar

    def list_calendars(
        self,
        calibration_method_id: Optional[uuid.UUID] = None,
        active: Optional[bool] = None,
    ) -> List[Tuple[CalibrationCalendar, int]]:
        """(calendario, numero strumenti), dal più recente"""
        return self.repos.calendars.get_filtered(calibration_method_id, active)

    # ==========================================
    # CALENDAR CRUD
    # ==========================================

    def create_calendar(
        self,
        policy: CalibrationPolicy,
        data: Dict[str, Any],
        instrument_ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> CalibrationCalendar:
        """
        Crea un calendario e, se indicati, gli associa gli strumenti.

        Args:
            policy: Ricorrenza + tolleranza
            data: name, description, active, calibration_method_id
            instrument_ids: Strumenti da associare subito
        """
        ids = set(instrument_ids or ())
        with self._bulk("create calendar", len(ids)):
            self._require_method(data.get("calibration_method_id"))
            self._require_instruments(ids)

            calendar_data = {key: data[key] for key in CALENDAR_FIELDS if key in data}
            calendar_data.update(policy.to_fields())
            calendar = self.repos.calendars.create(calendar_data)
            self.repos.instruments.assign_calendar(ids, calendar.id)

        self.logger.info("Calendar %s created with %d instrument(s)", calendar.id, len(ids))
        return calendar

    def update_calendar(
        self,
        calendar_id: uuid.UUID,
        data: Dict[str, Any],
        policy: Optional[CalibrationPolicy] = None,
        instrument_ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> Tuple[CalibrationCalendar, ReconcileResult]:
        """
        Aggiorna metadati / policy e, se instrument_ids è fornito,
        riconcilia i membri nella STESSA transazione.

        Lo schedule già risolto degli strumenti non viene ricalcolato.
        Senza instrument_ids il risultato riporta i membri come "kept".
        """
        ids = set(instrument_ids) if instrument_ids is not None else None
        with self._bulk("update calendar", len(ids or ())):
            calendar = self.repos.calendars.require(calendar_id)
            self._require_method(data.get("calibration_method_id"))

            for key in CALENDAR_FIELDS:
                if key in data:
                    setattr(calendar, key, data[key])
            if policy is not None:
                calendar.apply_policy(policy)
            self.uow.db.flush()

            if ids is not None:
                result = self._reconcile(calendar_id, ids)
            else:
                result = ReconcileResult(
                    calendar_id=calendar_id,
                    kept=self.repos.instruments.get_ids_by_calendar(calendar_id),
                )

        return calendar, result

    def set_active(self, calendar_id: uuid.UUID, active: bool) -> CalibrationCalendar:
        with self.uow.transaction():
            calendar = self.repos.calendars.set_active(calendar_id, active)
            if calendar is None:
                raise EntityNotFoundError(f"Calibration calendar {calendar_id} not found")
        return calendar

    def delete_calendar(self, calendar_id: uuid.UUID) -> int:
        """
        Stacca tutti gli strumenti (fallback sulla policy denormalizzata),
        poi elimina il calendario.

        Returns:
            Numero di strumenti staccati
        """
        calendar = self.repos.calendars.require(calendar_id)
        members = self.repos.instruments.get_ids_by_calendar(calendar_id)

        with self._bulk("delete calendar", len(members)):
            detached = self.repos.instruments.detach_from_calendar(calendar_id)
            self.uow.db.expire(calendar, ["instruments"])
            self.repos.calendars.delete(calendar_id)

        self.logger.info("Calendar %s deleted, %d instrument(s) detached", calendar_id, detached)
        return detached

    # ==========================================
    # MEMBERSHIP
    # ==========================================

    def reconcile_instruments(self, calendar_id: uuid.UUID, instrument_ids: Iterable[uuid.UUID]) -> ReconcileResult:
        """
        Porta i membri del calendario esattamente a instrument_ids.

        Set-difference in un'unica patch: stacca (attuali - nuovi),
        attacca tutti i nuovi qualunque fosse il loro calendario.
        Idempotente: una seconda chiamata con lo stesso insieme è un no-op.
        """
        ids = set(instrument_ids)
        with self._bulk("reconcile calendar", len(ids)):
            self.repos.calendars.require(calendar_id)
            result = self._reconcile(calendar_id, ids)

        if not result.is_noop:
            self.logger.info(
                "Calendar %s reconciled: %d detached, %d attached",
                calendar_id, len(result.detached), len(result.attached),
            )
        return result

    def _reconcile(self, calendar_id: uuid.UUID, ids: Set[uuid.UUID]) -> ReconcileResult:
        self._require_instruments(ids)
        current = self.repos.instruments.get_ids_by_calendar(calendar_id)

        result = ReconcileResult(
            calendar_id=calendar_id,
            detached=current - ids,
            attached=ids - current,
            kept=current & ids,
        )
        self.repos.instruments.detach_from_calendar(calendar_id, keep_ids=ids)
        self.repos.instruments.assign_calendar(result.attached, calendar_id)
        return result

    def apply_policy(
        self,
        policy: CalibrationPolicy,
        instrument_ids: Iterable[uuid.UUID],
        name: str,
        description: Optional[str] = None,
        calibration_method_id: Optional[uuid.UUID] = None,
    ) -> ApplyResult:
        """
        Apply-to-many: un nuovo calendario clonato dalla policy,
        assegnato a tutti gli strumenti indicati. Atomico.
        """
        ids = set(instrument_ids)
        if not ids:
            raise ValidationError("At least one instrument is required")

        with self._bulk("apply calendar", len(ids)):
            self._require_instruments(ids)
            calendar_data = {
                "name": name,
                "description": description,
                "active": True,
                "calibration_method_id": calibration_method_id,
            }
            calendar_data.update(policy.to_fields())
            calendar = self.repos.calendars.create(calendar_data)
            self.repos.instruments.assign_calendar(ids, calendar.id)

        instruments = self.repos.instruments.get_by_ids(ids)
        self.logger.info("Calendar %s applied to %d instrument(s)", calendar.id, len(instruments))
        return ApplyResult(calendar=calendar, instruments=instruments)
