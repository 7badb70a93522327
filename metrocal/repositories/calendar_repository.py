# =====================================================
# metrocal/repositories/calendar_repository.py
# =====================================================
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc, func
import uuid

from metrocal.models.calibration_calendar import CalibrationCalendar
from metrocal.models.instrument import Instrument
from .base import BaseRepository

class CalendarRepository(BaseRepository[CalibrationCalendar]):
    """Repository per CalibrationCalendars"""

    entity_name = "Calibration calendar"

    def __init__(self, db: Session):
        super().__init__(CalibrationCalendar, db)

    def get_with_instruments(self, calendar_id: uuid.UUID) -> Optional[CalibrationCalendar]:
        """Get calendar with its instruments and method loaded"""
        return self.db.query(CalibrationCalendar).options(
            selectinload(CalibrationCalendar.instruments),
            selectinload(CalibrationCalendar.calibration_method),
        ).filter(CalibrationCalendar.id == calendar_id).first()

    def get_filtered(
        self,
        calibration_method_id: Optional[uuid.UUID] = None,
        active: Optional[bool] = None,
    ) -> List[Tuple[CalibrationCalendar, int]]:
        """
        Calendari filtrati per metodo / flag attivo, con conteggio strumenti.

        Returns:
            Lista di (calendar, instrument_count) ordinata dal più recente
        """
        instrument_count = func.count(Instrument.id).label("instrument_count")
        query = self.db.query(CalibrationCalendar, instrument_count).outerjoin(
            Instrument, Instrument.calibration_calendar_id == CalibrationCalendar.id
        )
        if calibration_method_id is not None:
            query = query.filter(CalibrationCalendar.calibration_method_id == calibration_method_id)
        if active is not None:
            query = query.filter(CalibrationCalendar.active == active)

        rows = query.group_by(CalibrationCalendar.id).order_by(desc(CalibrationCalendar.created_at)).all()
        return [(calendar, count) for calendar, count in rows]

    def count_by_method(self, method_id: uuid.UUID) -> int:
        return self.db.query(CalibrationCalendar).filter(
            CalibrationCalendar.calibration_method_id == method_id
        ).count()

    def set_active(self, calendar_id: uuid.UUID, active: bool) -> Optional[CalibrationCalendar]:
        """Attiva / disattiva calendario"""
        return self.update(calendar_id, {"active": active})
