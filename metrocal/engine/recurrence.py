# =====================================================
# metrocal/engine/recurrence.py - RecurrenceResolver
# =====================================================
"""
Calcolo della prossima data di taratura.

Funzioni pure, senza stato: thread-safe e utilizzabili da qualsiasi
request handler senza sincronizzazione.
"""
from datetime import date, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from .policy import (
    DEFAULT_RECURRENCE,
    CalibrationPolicy,
    DailyRecurrence,
    FixedInterval,
    MonthlyRecurrence,
    Recurrence,
    WeeklyRecurrence,
    YearlyRecurrence,
)
from .units import shift, weekday_index


def compute_next_date(last_date: date, policy: Union[CalibrationPolicy, Recurrence]) -> date:
    """
    Prossima scadenza a partire dall'ultima taratura.

    Args:
        last_date: Data dell'ultima taratura completata
        policy: CalibrationPolicy oppure direttamente una variante di ricorrenza

    Returns:
        date: Sempre strettamente successiva a last_date
    """
    recurrence = policy.recurrence if isinstance(policy, CalibrationPolicy) else policy

    if isinstance(recurrence, FixedInterval):
        return _next_fixed_interval(last_date, recurrence)
    if isinstance(recurrence, DailyRecurrence):
        return last_date + timedelta(days=1)
    if isinstance(recurrence, WeeklyRecurrence):
        return _next_weekly(last_date, recurrence)
    if isinstance(recurrence, MonthlyRecurrence):
        return _next_monthly(last_date, recurrence)
    if isinstance(recurrence, YearlyRecurrence):
        return _next_yearly(last_date, recurrence)

    return _next_fixed_interval(last_date, DEFAULT_RECURRENCE)


def _next_fixed_interval(last_date: date, recurrence: FixedInterval) -> date:
    return shift(last_date, recurrence.value, recurrence.unit)


def _next_weekly(last_date: date, recurrence: WeeklyRecurrence) -> date:
    if not recurrence.days:
        return last_date + timedelta(days=7)

    targets = sorted(day.position for day in recurrence.days)
    current = weekday_index(last_date)

    later_this_week = [d for d in targets if d > current]
    if later_this_week:
        return last_date + timedelta(days=later_this_week[0] - current)

    # Primo giorno utile della settimana successiva
    return last_date + timedelta(days=7 - current + targets[0])


def _next_monthly(last_date: date, recurrence: MonthlyRecurrence) -> date:
    # relativedelta(day=N) limita N ai giorni del mese di arrivo
    return last_date + relativedelta(months=1, day=recurrence.day_of_month)


def _next_yearly(last_date: date, recurrence: YearlyRecurrence) -> date:
    return last_date + relativedelta(years=1, month=recurrence.month, day=recurrence.day)
