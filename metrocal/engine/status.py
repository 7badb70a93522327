# =====================================================
# metrocal/engine/status.py - StatusClassifier
# =====================================================
from datetime import date, datetime
from typing import Optional
import enum


class ComplianceStatus(str, enum.Enum):
    """Stato di conformità di uno strumento, calcolato on demand"""
    ON_TIME = "ON_TIME"
    OVERDUE_TOLERATED = "OVERDUE_TOLERATED"
    OVERDUE_CRITICAL = "OVERDUE_CRITICAL"
    NOT_SET = "NOT_SET"


def _as_day(value: date) -> date:
    # datetime è sottoclasse di date: confronto sul giorno di calendario
    if isinstance(value, datetime):
        return value.date()
    return value


def classify(next_date: Optional[date], tolerance_expiry: Optional[date], now: date) -> ComplianceStatus:
    """
    Classifica lo stato di conformità in un dato istante.

    Tabella decisionale (bordi inclusivi):
        next_date assente           -> NOT_SET
        now <= next_date            -> ON_TIME
        now <= tolerance_expiry     -> OVERDUE_TOLERATED
        altrimenti                  -> OVERDUE_CRITICAL
    """
    if next_date is None:
        return ComplianceStatus.NOT_SET

    today = _as_day(now)

    if today <= _as_day(next_date):
        return ComplianceStatus.ON_TIME
    if tolerance_expiry is not None and today <= _as_day(tolerance_expiry):
        return ComplianceStatus.OVERDUE_TOLERATED
    return ComplianceStatus.OVERDUE_CRITICAL
