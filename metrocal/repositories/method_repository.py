# =====================================================
# metrocal/repositories/method_repository.py
# =====================================================
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc
import uuid

from metrocal.models.calibration_calendar import CalibrationCalendar
from metrocal.models.calibration_method import CalibrationMethod
from .base import BaseRepository

class MethodRepository(BaseRepository[CalibrationMethod]):
    """Repository per CalibrationMethods"""

    entity_name = "Calibration method"

    def __init__(self, db: Session):
        super().__init__(CalibrationMethod, db)

    def get_filtered(self, instrument_type: Optional[str] = None) -> List[CalibrationMethod]:
        """Get methods, optionally filtered by instrument type"""
        query = self.db.query(CalibrationMethod).options(selectinload(CalibrationMethod.calendars))
        if instrument_type:
            query = query.filter(CalibrationMethod.instrument_type == instrument_type)
        return query.order_by(desc(CalibrationMethod.created_at)).all()

    def get_with_calendars(self, method_id: uuid.UUID) -> Optional[CalibrationMethod]:
        """Get method with calendars and their instruments"""
        return self.db.query(CalibrationMethod).options(
            selectinload(CalibrationMethod.calendars).selectinload(CalibrationCalendar.instruments)
        ).filter(CalibrationMethod.id == method_id).first()
