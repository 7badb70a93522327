# =====================================================
# metrocal/repositories/intervention_repository.py
# =====================================================
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, desc
import uuid

from metrocal.models.intervention import (
    Intervention,
    InterventionStatus,
    SCHEDULE_RESETTING_TYPES,
)
from .base import BaseRepository

class InterventionRepository(BaseRepository[Intervention]):
    """Repository per Interventions"""

    entity_name = "Intervention"

    def __init__(self, db: Session):
        super().__init__(Intervention, db)

    def get_by_instrument(self, instrument_id: uuid.UUID) -> List[Intervention]:
        """Get interventions for instrument, most recent first"""
        return self.db.query(Intervention).filter(
            Intervention.instrument_id == instrument_id
        ).order_by(desc(Intervention.scheduled_date)).all()

    def get_last_completed_calibration(self, instrument_id: uuid.UUID) -> Optional[Intervention]:
        """Ultima taratura/verifica completata"""
        return self.db.query(Intervention).filter(
            and_(
                Intervention.instrument_id == instrument_id,
                Intervention.status == InterventionStatus.COMPLETED,
                Intervention.intervention_type.in_(SCHEDULE_RESETTING_TYPES)
            )
        ).order_by(desc(Intervention.completed_date)).first()
