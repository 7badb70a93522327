# =====================================================
# metrocal/services/repository_factory.py - Dependency Injection Helper
# =====================================================
from sqlalchemy.orm import Session

from ..repositories import MethodRepository
from ..repositories import CalendarRepository
from ..repositories import InstrumentRepository
from ..repositories import InterventionRepository

class RepositoryFactory:
    """
    Factory per creare repository con dependency injection.

    PATTERN: Centralizza creazione repository per easy testing e DI
    """

    def __init__(self, db: Session):
        self.db = db

    @property
    def methods(self) -> MethodRepository:
        return MethodRepository(self.db)

    @property
    def calendars(self) -> CalendarRepository:
        return CalendarRepository(self.db)

    @property
    def instruments(self) -> InstrumentRepository:
        return InstrumentRepository(self.db)

    @property
    def interventions(self) -> InterventionRepository:
        return InterventionRepository(self.db)
