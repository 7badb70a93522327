# =====================================================
# metrocal/models/__init__.py
# =====================================================
"""
Models package initialization.

Import all models to ensure they are registered with SQLAlchemy metadata.
This is CRITICAL for foreign key resolution during create_all() operations.

IMPORTANT: Every time you add a new model, import it here!
"""

# Base model MUST be imported first
from .base import Base, BaseModel

# Core models (order matters for foreign keys)
from .calibration_method import CalibrationMethod
from .calibration_calendar import CalibrationCalendar
from .instrument import Instrument
from .intervention import (
    Intervention,
    InterventionType,
    InterventionStatus,
    ConformityResult,
)

__all__ = [
    # Base
    "Base",
    "BaseModel",

    # Policy templates
    "CalibrationMethod",
    "CalibrationCalendar",

    # Instruments
    "Instrument",
    "Intervention",
    "InterventionType",
    "InterventionStatus",
    "ConformityResult",
]
