# =====================================================
# metrocal/engine/__init__.py
# =====================================================
"""
Engine di ricorrenza e tolleranza.

Tre funzioni pure, utilizzabili indipendentemente:
    compute_next_date(last_date, policy)
    compute_tolerance_expiry(next_date, value, unit)
    classify(next_date, tolerance_expiry, now)
"""

from .units import DayOfWeek, FrequencyUnit, ToleranceUnit, format_duration
from .policy import (
    CalibrationPolicy,
    DailyRecurrence,
    FixedInterval,
    MonthlyRecurrence,
    RecurrenceType,
    Tolerance,
    WeeklyRecurrence,
    YearlyRecurrence,
    policy_from_fields,
)
from .recurrence import compute_next_date
from .tolerance import compute_tolerance_expiry, tolerance_expiry_for
from .status import ComplianceStatus, classify

__all__ = [
    "DayOfWeek",
    "FrequencyUnit",
    "ToleranceUnit",
    "format_duration",
    "CalibrationPolicy",
    "DailyRecurrence",
    "FixedInterval",
    "MonthlyRecurrence",
    "RecurrenceType",
    "Tolerance",
    "WeeklyRecurrence",
    "YearlyRecurrence",
    "policy_from_fields",
    "compute_next_date",
    "compute_tolerance_expiry",
    "tolerance_expiry_for",
    "ComplianceStatus",
    "classify",
]
