# =====================================================
# metrocal/repositories/instrument_repository.py
# =====================================================
from typing import Iterable, List, Optional, Set
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, select, update
from datetime import date
import uuid

from metrocal.models.calibration_calendar import CalibrationCalendar
from metrocal.models.instrument import Instrument
from metrocal.database.exceptions import handle_database_errors
from .base import BaseRepository

class InstrumentRepository(BaseRepository[Instrument]):
    """
    Repository per Instruments: query di schedule e update bulk
    della foreign key verso il calendario.
    """

    entity_name = "Instrument"

    def __init__(self, db: Session):
        super().__init__(Instrument, db)

    # ==========================================
    # QUERIES
    # ==========================================

    def get_by_serial_number(self, serial_number: str) -> Optional[Instrument]:
        """Get instrument by serial number"""
        return self.db.query(Instrument).filter(Instrument.serial_number == serial_number).first()

    def get_active(self, include_calendar: bool = False) -> List[Instrument]:
        """Get active instruments ordered by due date"""
        query = self.db.query(Instrument).filter(Instrument.active == True)
        if include_calendar:
            query = query.options(joinedload(Instrument.calibration_calendar))
        return query.order_by(Instrument.next_calibration_date).all()

    def get_ids_by_calendar(self, calendar_id: uuid.UUID) -> Set[uuid.UUID]:
        result = self.db.execute(
            select(Instrument.id).where(Instrument.calibration_calendar_id == calendar_id)
        )
        return set(result.scalars().all())

    def get_by_method(self, method_id: uuid.UUID) -> List[Instrument]:
        """Get instruments whose current calendar derives from method"""
        return self.db.query(Instrument).join(Instrument.calibration_calendar).filter(
            CalibrationCalendar.calibration_method_id == method_id
        ).order_by(Instrument.name).all()

    def get_due_between(self, start_date: date, end_date: date) -> List[Instrument]:
        """Get active instruments due in date range (inclusive)"""
        return self.db.query(Instrument).filter(
            and_(
                Instrument.active == True,
                Instrument.next_calibration_date >= start_date,
                Instrument.next_calibration_date <= end_date
            )
        ).order_by(Instrument.next_calibration_date).all()

    def get_overdue(self, today: Optional[date] = None) -> List[Instrument]:
        """Get active instruments past their due date"""
        today = today or date.today()
        return self.db.query(Instrument).filter(
            and_(
                Instrument.active == True,
                Instrument.next_calibration_date < today
            )
        ).order_by(Instrument.next_calibration_date).all()

    def find_missing_ids(self, ids: Iterable[uuid.UUID]) -> Set[uuid.UUID]:
        """IDs richiesti che non esistono nel database"""
        wanted = set(ids)
        return wanted - self.existing_ids(wanted)

    # ==========================================
    # BULK CALENDAR ASSIGNMENT
    # ==========================================

    @handle_database_errors("Instrument")
    def _set_calendar(self, ids: List[uuid.UUID], calendar_id: Optional[uuid.UUID]) -> int:
        if not ids:
            return 0
        self.db.execute(
            update(Instrument)
            .where(Instrument.id.in_(ids))
            .values(calibration_calendar_id=calendar_id)
            .execution_options(synchronize_session="evaluate")
        )
        return len(ids)

    def assign_calendar(self, ids: Iterable[uuid.UUID], calendar_id: uuid.UUID) -> int:
        """Punta gli strumenti al calendario (last writer wins)"""
        return self._set_calendar(list(set(ids)), calendar_id)

    def detach_from_calendar(self, calendar_id: uuid.UUID, keep_ids: Iterable[uuid.UUID] = ()) -> int:
        """Stacca dal calendario tutti gli strumenti tranne keep_ids"""
        targets = self.get_ids_by_calendar(calendar_id) - set(keep_ids)
        return self._set_calendar(list(targets), None)

    def detach_from_method(self, ids: Iterable[uuid.UUID], method_id: uuid.UUID) -> int:
        """
        Stacca solo gli strumenti il cui calendario ATTUALE deriva dal metodo.

        Update condizionale filtrato via join: strumenti riassegnati
        altrove nel frattempo non vengono toccati.
        """
        ids = list(set(ids))
        if not ids:
            return 0
        result = self.db.execute(
            select(Instrument.id)
            .join(CalibrationCalendar, Instrument.calibration_calendar_id == CalibrationCalendar.id)
            .where(
                and_(
                    Instrument.id.in_(ids),
                    CalibrationCalendar.calibration_method_id == method_id
                )
            )
        )
        return self._set_calendar(list(result.scalars().all()), None)
