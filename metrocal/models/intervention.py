# =====================================================
# metrocal/models/intervention.py - SQLAlchemy 2.0
# =====================================================
from sqlalchemy import String, Text, Date, ForeignKey, CheckConstraint, Enum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import date
from typing import Optional
import enum
import uuid

from .base import BaseModel

# Forward references
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .instrument import Instrument

class InterventionType(enum.Enum):
    """Tipi di intervento"""
    CALIBRATION = "CALIBRATION"
    VERIFICATION = "VERIFICATION"
    MAINTENANCE = "MAINTENANCE"
    REPAIR = "REPAIR"

class InterventionStatus(enum.Enum):
    """Stati dell'intervento"""
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

class ConformityResult(enum.Enum):
    CONFORMING = "CONFORMING"
    NON_CONFORMING = "NON_CONFORMING"
    WITH_RESERVATIONS = "WITH_RESERVATIONS"

# Solo questi tipi azzerano l'orologio di conformità
SCHEDULE_RESETTING_TYPES = (InterventionType.CALIBRATION, InterventionType.VERIFICATION)

class Intervention(BaseModel):
    """
    Intervention model - taratura, verifica o manutenzione di uno strumento.

    Quando una taratura/verifica viene completata, il service layer
    ricalcola e persiste lo schedule dello strumento.
    """

    __tablename__ = "interventions"

    # ==========================================
    # FOREIGN KEYS & RELATIONSHIPS
    # ==========================================

    instrument_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("instruments.id", ondelete="CASCADE"),
        index=True
    )

    instrument: Mapped["Instrument"] = relationship("Instrument", back_populates="interventions")

    # ==========================================
    # INTERVENTION INFO
    # ==========================================

    intervention_type: Mapped[InterventionType] = mapped_column(Enum(InterventionType), index=True)
    status: Mapped[InterventionStatus] = mapped_column(
        Enum(InterventionStatus),
        default=InterventionStatus.PLANNED,
        index=True
    )
    conformity_result: Mapped[Optional[ConformityResult]] = mapped_column(Enum(ConformityResult), nullable=True)
    certificate_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    observations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ==========================================
    # SCHEDULING
    # ==========================================

    scheduled_date: Mapped[date] = mapped_column(Date)
    completed_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    next_calibration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # ==========================================
    # CONSTRAINTS
    # ==========================================

    __table_args__ = (
        CheckConstraint(
            'next_calibration_date IS NULL OR completed_date IS NULL OR next_calibration_date > completed_date',
            name='chk_next_calibration_after_completion'
        ),
    )

    def __str__(self) -> str:
        return f"Intervention(instrument={self.instrument_id}, type={self.intervention_type.value}, status={self.status.value})"

    @property
    def is_completed(self) -> bool:
        return self.status == InterventionStatus.COMPLETED

    @property
    def resets_schedule(self) -> bool:
        """Taratura o verifica completata"""
        return self.is_completed and self.intervention_type in SCHEDULE_RESETTING_TYPES

    def mark_as_completed(self, completed_date: date, conformity: Optional[ConformityResult] = None) -> None:
        self.status = InterventionStatus.COMPLETED
        self.completed_date = completed_date
        if conformity is not None:
            self.conformity_result = conformity
