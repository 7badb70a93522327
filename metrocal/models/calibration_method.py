# =====================================================
# metrocal/models/calibration_method.py - SQLAlchemy 2.0
# =====================================================
from sqlalchemy import String, Text, Integer, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional

from .base import BaseModel
from .policy import CalibrationPolicyMixin

# Forward references
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .calibration_calendar import CalibrationCalendar

class CalibrationMethod(CalibrationPolicyMixin, BaseModel):
    """
    CalibrationMethod - template riutilizzabile di politica di taratura.

    Aggiunge solo metadati documentali (procedura, attrezzatura, durata):
    nessun comportamento di scheduling oltre ai campi della policy.
    """

    __tablename__ = "calibration_methods"

    # ==========================================
    # RELATIONSHIPS
    # ==========================================

    calendars: Mapped[List["CalibrationCalendar"]] = relationship(
        "CalibrationCalendar",
        back_populates="calibration_method"
    )

    # ==========================================
    # METHOD INFO
    # ==========================================

    name: Mapped[str] = mapped_column(String(150), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    procedure: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    required_equipment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    estimated_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minuti
    instrument_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    # ==========================================
    # CONSTRAINTS
    # ==========================================

    __table_args__ = (
        CheckConstraint('tolerance_value >= 0', name='chk_method_tolerance_positive'),
        CheckConstraint(
            'estimated_duration IS NULL OR estimated_duration > 0',
            name='chk_method_duration_positive'
        ),
    )

    def __str__(self) -> str:
        return f"CalibrationMethod(name={self.name}, recurrence={self.recurrence_type})"

    @property
    def calendar_count(self) -> int:
        return len(self.calendars)
