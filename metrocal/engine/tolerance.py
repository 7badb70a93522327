# =====================================================
# metrocal/engine/tolerance.py - ToleranceCalculator
# =====================================================
from datetime import date
from typing import Union

from .policy import Tolerance
from .units import ToleranceUnit, shift


def compute_tolerance_expiry(next_date: date, tolerance_value: int, tolerance_unit: Union[ToleranceUnit, str]) -> date:
    """
    Data limite della finestra di tolleranza.

    Puramente additiva. Con tolerance_value == 0 restituisce esattamente
    next_date: la finestra ha lunghezza zero, non è "assente".
    """
    if tolerance_value < 0:
        raise ValueError("Tolerance value must be non-negative")
    unit = ToleranceUnit(getattr(tolerance_unit, "value", tolerance_unit))
    return shift(next_date, tolerance_value, unit)


def tolerance_expiry_for(next_date: date, tolerance: Tolerance) -> date:
    """Variante che accetta direttamente un Tolerance della policy"""
    return compute_tolerance_expiry(next_date, tolerance.value, tolerance.unit)
