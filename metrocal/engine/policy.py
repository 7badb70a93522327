# =====================================================
# metrocal/engine/policy.py - Calibration policy (tagged union)
# =====================================================
"""
Politica di taratura come tagged union.

Ogni variante di ricorrenza porta SOLO i campi che le servono.
La forma "piatta" con colonne nullable (recurrence_type + campi opzionali)
esiste solo al confine con il database: `policy_from_fields()` la converte.
"""
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Optional, Union
import enum
import logging

from .units import DayOfWeek, FrequencyUnit, ToleranceUnit

logger = logging.getLogger(__name__)


class RecurrenceType(str, enum.Enum):
    """Tag di ricorrenza come salvato nel database"""
    FIXED_INTERVAL = "FIXED_INTERVAL"
    CALENDAR_DAILY = "CALENDAR_DAILY"
    CALENDAR_WEEKLY = "CALENDAR_WEEKLY"
    CALENDAR_MONTHLY = "CALENDAR_MONTHLY"
    CALENDAR_YEARLY = "CALENDAR_YEARLY"


# ==========================================
# RECURRENCE VARIANTS
# ==========================================

@dataclass(frozen=True)
class FixedInterval:
    value: int
    unit: FrequencyUnit

    recurrence_type = RecurrenceType.FIXED_INTERVAL


@dataclass(frozen=True)
class DailyRecurrence:
    recurrence_type = RecurrenceType.CALENDAR_DAILY


@dataclass(frozen=True)
class WeeklyRecurrence:
    # Vuoto = stesso giorno della settimana successiva
    days: FrozenSet[DayOfWeek] = frozenset()

    recurrence_type = RecurrenceType.CALENDAR_WEEKLY


@dataclass(frozen=True)
class MonthlyRecurrence:
    day_of_month: int

    recurrence_type = RecurrenceType.CALENDAR_MONTHLY


@dataclass(frozen=True)
class YearlyRecurrence:
    month: int
    day: int

    recurrence_type = RecurrenceType.CALENDAR_YEARLY


Recurrence = Union[FixedInterval, DailyRecurrence, WeeklyRecurrence, MonthlyRecurrence, YearlyRecurrence]

# TODO: confirm with metrology owners whether 12 months is an intended default
# or an accident of legacy data; kept for compatibility.
DEFAULT_RECURRENCE = FixedInterval(12, FrequencyUnit.MONTHS)


@dataclass(frozen=True)
class Tolerance:
    value: int = 0
    unit: ToleranceUnit = ToleranceUnit.DAYS


@dataclass(frozen=True)
class CalibrationPolicy:
    """Ricorrenza + tolleranza: tutto quello che serve all'engine"""
    recurrence: Recurrence = DEFAULT_RECURRENCE
    tolerance: Tolerance = field(default_factory=Tolerance)

    @property
    def recurrence_type(self) -> RecurrenceType:
        return self.recurrence.recurrence_type

    def to_fields(self) -> dict:
        """Forma piatta per le colonne del database"""
        recurrence = self.recurrence
        fields = {
            "recurrence_type": recurrence.recurrence_type.value,
            "frequency_value": None,
            "frequency_unit": None,
            "days_of_week": [],
            "day_of_month": None,
            "month_of_year": None,
            "day_of_year": None,
            "tolerance_value": self.tolerance.value,
            "tolerance_unit": self.tolerance.unit.value,
        }
        if isinstance(recurrence, FixedInterval):
            fields["frequency_value"] = recurrence.value
            fields["frequency_unit"] = recurrence.unit.value
        elif isinstance(recurrence, WeeklyRecurrence):
            fields["days_of_week"] = [d.value for d in sorted(recurrence.days, key=lambda d: d.position)]
        elif isinstance(recurrence, MonthlyRecurrence):
            fields["day_of_month"] = recurrence.day_of_month
        elif isinstance(recurrence, YearlyRecurrence):
            fields["month_of_year"] = recurrence.month
            fields["day_of_year"] = recurrence.day
        return fields


# ==========================================
# BUILDER (persistence boundary)
# ==========================================

def _enum_or_none(enum_cls, value):
    if value is None:
        return None
    try:
        return enum_cls(getattr(value, "value", value))
    except ValueError:
        return None


def recurrence_from_fields(
    recurrence_type: Optional[str],
    frequency_value: Optional[int] = None,
    frequency_unit: Optional[str] = None,
    days_of_week: Optional[Iterable[str]] = None,
    day_of_month: Optional[int] = None,
    month_of_year: Optional[int] = None,
    day_of_year: Optional[int] = None,
) -> Recurrence:
    """
    Converte la forma piatta in una variante di ricorrenza.

    Non solleva mai eccezioni: dati legacy incompleti degradano verso
    DEFAULT_RECURRENCE (12 mesi) con un warning nel log.
    """
    kind = _enum_or_none(RecurrenceType, recurrence_type)

    if kind is None:
        logger.warning(
            "Unknown recurrence type %r, falling back to %s %s",
            recurrence_type, DEFAULT_RECURRENCE.value, DEFAULT_RECURRENCE.unit.value,
        )
        return DEFAULT_RECURRENCE

    if kind is RecurrenceType.FIXED_INTERVAL:
        unit = _enum_or_none(FrequencyUnit, frequency_unit)
        if not frequency_value or frequency_value <= 0 or unit is None:
            logger.warning(
                "Incomplete fixed interval (%r %r), falling back to default",
                frequency_value, frequency_unit,
            )
            return DEFAULT_RECURRENCE
        return FixedInterval(int(frequency_value), unit)

    if kind is RecurrenceType.CALENDAR_DAILY:
        return DailyRecurrence()

    if kind is RecurrenceType.CALENDAR_WEEKLY:
        days = (_enum_or_none(DayOfWeek, d) for d in (days_of_week or []))
        return WeeklyRecurrence(frozenset(d for d in days if d is not None))

    if kind is RecurrenceType.CALENDAR_MONTHLY:
        if not day_of_month:
            logger.warning("Monthly recurrence without day_of_month, falling back to default")
            return DEFAULT_RECURRENCE
        return MonthlyRecurrence(int(day_of_month))

    if not month_of_year or not day_of_year or not 1 <= int(month_of_year) <= 12:
        logger.warning("Yearly recurrence without a valid month/day, falling back to default")
        return DEFAULT_RECURRENCE
    return YearlyRecurrence(int(month_of_year), int(day_of_year))


def policy_from_fields(**fields: Any) -> CalibrationPolicy:
    """CalibrationPolicy da un dict di colonne (recurrence + tolerance)"""
    tolerance_unit = _enum_or_none(ToleranceUnit, fields.get("tolerance_unit")) or ToleranceUnit.DAYS
    tolerance_value = fields.get("tolerance_value") or 0

    recurrence = recurrence_from_fields(
        fields.get("recurrence_type"),
        frequency_value=fields.get("frequency_value"),
        frequency_unit=fields.get("frequency_unit"),
        days_of_week=fields.get("days_of_week"),
        day_of_month=fields.get("day_of_month"),
        month_of_year=fields.get("month_of_year"),
        day_of_year=fields.get("day_of_year"),
    )
    return CalibrationPolicy(recurrence, Tolerance(max(int(tolerance_value), 0), tolerance_unit))
