# =====================================================
# metrocal/schemas/instrument.py - Instrument schedule view
# =====================================================
from pydantic import BaseModel
from typing import Optional
from datetime import date
import uuid

from metrocal.engine import ComplianceStatus
from metrocal.engine.aggregation import ScheduleEntry, entry_for

STATUS_FIELDS = ("calibration_status", "days_until_due")


class InstrumentSchedule(BaseModel):
    """
    Strumento con lo schedule risolto e lo stato calcolato a una data.

    Costruire con at() / from_entry(): lo stato dipende dal "now"
    della richiesta, mai dalla data di sistema.
    """

    id: uuid.UUID
    serial_number: str
    name: str
    instrument_type: Optional[str] = None
    site: Optional[str] = None
    active: bool = True
    calibration_calendar_id: Optional[uuid.UUID] = None
    last_calibration_date: Optional[date] = None
    next_calibration_date: Optional[date] = None
    tolerance_expiry_date: Optional[date] = None
    calibration_status: ComplianceStatus
    days_until_due: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: ScheduleEntry) -> "InstrumentSchedule":
        data = {
            name: getattr(entry.item, name)
            for name in cls.model_fields
            if name not in STATUS_FIELDS
        }
        return cls(**data, calibration_status=entry.status, days_until_due=entry.days_until_due)

    @classmethod
    def at(cls, instrument, now: date) -> "InstrumentSchedule":
        return cls.from_entry(entry_for(instrument, now))
