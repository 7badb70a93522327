# =====================================================
# metrocal/repositories/__init__.py - Export tutti i repository
# =====================================================

from .base import BaseRepository
from .method_repository import MethodRepository
from .calendar_repository import CalendarRepository
from .instrument_repository import InstrumentRepository
from .intervention_repository import InterventionRepository

__all__ = [
    "BaseRepository",
    "MethodRepository",
    "CalendarRepository",
    "InstrumentRepository",
    "InterventionRepository",
]
