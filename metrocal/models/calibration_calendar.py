# =====================================================
# metrocal/models/calibration_calendar.py - SQLAlchemy 2.0
# =====================================================
from sqlalchemy import String, Text, Boolean, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional
import uuid

from .base import BaseModel
from .policy import CalibrationPolicyMixin

# Forward references
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .calibration_method import CalibrationMethod
    from .instrument import Instrument

class CalibrationCalendar(CalibrationPolicyMixin, BaseModel):
    """
    CalibrationCalendar - istanza concreta e attivabile di una policy.

    Può derivare da un CalibrationMethod (calibration_method_id) oppure
    esistere in modo indipendente. Governa N strumenti.
    """

    __tablename__ = "calibration_calendars"

    # ==========================================
    # FOREIGN KEYS & RELATIONSHIPS
    # ==========================================

    calibration_method_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("calibration_methods.id", ondelete="RESTRICT"),
        nullable=True,
        index=True
    )

    calibration_method: Mapped[Optional["CalibrationMethod"]] = relationship(
        "CalibrationMethod",
        back_populates="calendars"
    )

    instruments: Mapped[List["Instrument"]] = relationship(
        "Instrument",
        back_populates="calibration_calendar"
    )

    # ==========================================
    # CALENDAR INFO
    # ==========================================

    name: Mapped[str] = mapped_column(String(150), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    # ==========================================
    # CONSTRAINTS
    # ==========================================

    __table_args__ = (
        CheckConstraint('tolerance_value >= 0', name='chk_calendar_tolerance_positive'),
    )

    def __str__(self) -> str:
        return f"CalibrationCalendar(name={self.name}, active={self.active})"

    @property
    def instrument_count(self) -> int:
        return len(self.instruments)
