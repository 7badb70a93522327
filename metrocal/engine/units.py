# =====================================================
# metrocal/engine/units.py - Unità di tempo e giorni settimana
# =====================================================
from datetime import date
from dateutil.relativedelta import relativedelta
import enum


class FrequencyUnit(str, enum.Enum):
    """Unità per intervalli fissi di ricorrenza"""
    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"
    YEARS = "YEARS"


class ToleranceUnit(str, enum.Enum):
    """Unità per la finestra di tolleranza"""
    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"


class DayOfWeek(str, enum.Enum):
    """
    Giorni della settimana.

    L'indice segue la convenzione Sunday=0 ... Saturday=6,
    NON quella di date.weekday() (Monday=0).
    """
    SUNDAY = "SUNDAY"
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"

    @property
    def position(self) -> int:
        return _WEEKDAY_INDEX[self]

    @classmethod
    def of(cls, day: date) -> "DayOfWeek":
        """Giorno della settimana di una data"""
        return _INDEX_WEEKDAY[weekday_index(day)]


_WEEKDAY_INDEX = {day: position for position, day in enumerate(DayOfWeek)}
_INDEX_WEEKDAY = {position: day for day, position in _WEEKDAY_INDEX.items()}


def weekday_index(day: date) -> int:
    """Sunday=0 ... Saturday=6"""
    return day.isoweekday() % 7


def shift(day: date, value: int, unit: str) -> date:
    """
    Somma `value` unità a una data.

    MONTHS e YEARS usano relativedelta: il giorno viene limitato
    alla lunghezza del mese di arrivo (31 gen + 1 mese = 29 feb nel 2024).
    """
    unit = getattr(unit, "value", unit)

    if unit == "DAYS":
        return day + relativedelta(days=value)
    if unit == "WEEKS":
        return day + relativedelta(days=7 * value)
    if unit == "MONTHS":
        return day + relativedelta(months=value)
    if unit == "YEARS":
        return day + relativedelta(years=value)
    raise ValueError(f"Unsupported time unit: {unit}")


_UNIT_LABELS = {
    "DAYS": ("day", "days"),
    "WEEKS": ("week", "weeks"),
    "MONTHS": ("month", "months"),
    "YEARS": ("year", "years"),
}


def format_duration(value: int, unit: str) -> str:
    """Formatta una durata leggibile: format_duration(6, 'MONTHS') -> '6 months'"""
    unit = getattr(unit, "value", unit)
    labels = _UNIT_LABELS.get(unit)
    if labels is None:
        return f"{value} {unit}"
    singular, plural = labels
    return f"{value} {singular if value == 1 else plural}"
