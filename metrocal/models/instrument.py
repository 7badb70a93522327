# =====================================================
# metrocal/models/instrument.py - SQLAlchemy 2.0
# =====================================================
from sqlalchemy import String, Integer, Boolean, Date, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import date
from typing import List, Optional
import uuid

from metrocal.engine import (
    CalibrationPolicy,
    ComplianceStatus,
    FixedInterval,
    FrequencyUnit,
    Tolerance,
    ToleranceUnit,
    classify,
)
from .base import BaseModel

# Forward references
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .calibration_calendar import CalibrationCalendar
    from .intervention import Intervention

class Instrument(BaseModel):
    """
    Instrument model - strumento di misura soggetto a taratura periodica.

    Conserva lo schedule già risolto (next_calibration_date,
    tolerance_expiry_date) e il calendario che lo governa. Senza
    calendario vale la policy di fallback denormalizzata.
    """

    __tablename__ = "instruments"

    # ==========================================
    # FOREIGN KEYS & RELATIONSHIPS
    # ==========================================

    calibration_calendar_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("calibration_calendars.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    calibration_calendar: Mapped[Optional["CalibrationCalendar"]] = relationship(
        "CalibrationCalendar",
        back_populates="instruments"
    )

    interventions: Mapped[List["Intervention"]] = relationship(
        "Intervention",
        back_populates="instrument",
        cascade="all, delete-orphan"
    )

    # ==========================================
    # IDENTIFICATION
    # ==========================================

    serial_number: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(150))
    internal_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    brand: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    instrument_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    site: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    # ==========================================
    # FALLBACK POLICY (senza calendario)
    # ==========================================

    calibration_frequency_value: Mapped[int] = mapped_column(Integer, default=12)
    calibration_frequency_unit: Mapped[str] = mapped_column(String(10), default="MONTHS")
    tolerance_value: Mapped[int] = mapped_column(Integer, default=0)
    tolerance_unit: Mapped[str] = mapped_column(String(10), default="DAYS")

    # ==========================================
    # RESOLVED SCHEDULE
    # ==========================================

    last_calibration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    next_calibration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    tolerance_expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # ==========================================
    # CONSTRAINTS
    # ==========================================

    __table_args__ = (
        CheckConstraint('calibration_frequency_value > 0', name='chk_instrument_frequency_positive'),
        CheckConstraint('tolerance_value >= 0', name='chk_instrument_tolerance_positive'),
        CheckConstraint(
            'tolerance_expiry_date IS NULL OR next_calibration_date IS NULL '
            'OR tolerance_expiry_date >= next_calibration_date',
            name='chk_tolerance_after_due_date'
        ),
    )

    # ==========================================
    # BUSINESS LOGIC
    # ==========================================

    def __str__(self) -> str:
        return f"Instrument(serial_number={self.serial_number}, name={self.name})"

    @property
    def fallback_policy(self) -> CalibrationPolicy:
        """Policy denormalizzata usata quando nessun calendario è assegnato"""
        try:
            unit = FrequencyUnit(self.calibration_frequency_unit)
        except ValueError:
            unit = FrequencyUnit.MONTHS
        try:
            tolerance_unit = ToleranceUnit(self.tolerance_unit)
        except ValueError:
            tolerance_unit = ToleranceUnit.DAYS
        return CalibrationPolicy(
            FixedInterval(self.calibration_frequency_value or 12, unit),
            Tolerance(self.tolerance_value or 0, tolerance_unit),
        )

    @property
    def effective_policy(self) -> CalibrationPolicy:
        """Policy del calendario attivo assegnato, altrimenti fallback"""
        calendar = self.calibration_calendar
        if calendar is not None and calendar.active:
            return calendar.policy
        return self.fallback_policy

    def compliance_status(self, now: Optional[date] = None) -> ComplianceStatus:
        """Stato di conformità calcolato on demand (default: oggi)"""
        return classify(self.next_calibration_date, self.tolerance_expiry_date, now or date.today())

    def set_schedule(self, next_date: Optional[date], tolerance_expiry: Optional[date]) -> None:
        """Materializza lo schedule risolto"""
        self.next_calibration_date = next_date
        self.tolerance_expiry_date = tolerance_expiry if next_date is not None else None
