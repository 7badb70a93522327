# =====================================================
# metrocal/engine/aggregation.py - Viste aggregate (sola lettura)
# =====================================================
"""
Helper di aggregazione per dashboard, timeline e pianificazione.

Nessuna logica propria oltre a raggruppamento e ordinamento: lo stato
viene sempre calcolato da `classify()` con le date persistite.
Gli elementi sono qualsiasi oggetto con `next_calibration_date` e
`tolerance_expiry_date` (tipicamente il model Instrument).
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .status import ComplianceStatus, classify


class Schedulable(Protocol):
    next_calibration_date: Optional[date]
    tolerance_expiry_date: Optional[date]


@dataclass(frozen=True)
class ScheduleEntry:
    """Elemento + stato calcolato al momento della lettura"""
    item: Any
    status: ComplianceStatus
    days_until_due: Optional[int]


def _today(now: date) -> date:
    return now.date() if isinstance(now, datetime) else now


def days_until_due(next_date: Optional[date], now: date) -> Optional[int]:
    """Giorni mancanti alla scadenza (negativi se scaduta)"""
    if next_date is None:
        return None
    return (next_date - _today(now)).days


def status_of(item: Schedulable, now: date) -> ComplianceStatus:
    return classify(item.next_calibration_date, item.tolerance_expiry_date, now)


def entry_for(item: Schedulable, now: date) -> ScheduleEntry:
    return ScheduleEntry(
        item=item,
        status=status_of(item, now),
        days_until_due=days_until_due(item.next_calibration_date, now),
    )


# ==========================================
# STATUS BUCKETS
# ==========================================

def group_by_status(items: Iterable[Schedulable], now: date) -> Dict[ComplianceStatus, List[Any]]:
    """Report per fascia di tolleranza: tutti e quattro gli stati sempre presenti"""
    buckets: Dict[ComplianceStatus, List[Any]] = {status: [] for status in ComplianceStatus}
    for item in items:
        buckets[status_of(item, now)].append(item)
    return buckets


def count_by_status(items: Iterable[Schedulable], now: date) -> Dict[ComplianceStatus, int]:
    return {status: len(members) for status, members in group_by_status(items, now).items()}


# ==========================================
# TIMELINE
# ==========================================

def timeline_by_due_date(
    items: Iterable[Schedulable],
    now: date,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Dict[str, List[ScheduleEntry]]:
    """
    Raggruppa per giorno di scadenza (chiave ISO 'YYYY-MM-DD').

    La chiave è la data di scadenza, NON la fine della tolleranza.
    Elementi senza scadenza sono esclusi; start/end sono inclusivi.
    """
    dated = [item for item in items if item.next_calibration_date is not None]
    dated.sort(key=lambda item: item.next_calibration_date)

    timeline: Dict[str, List[ScheduleEntry]] = {}
    for item in dated:
        due = _today(item.next_calibration_date)
        if start is not None and due < start:
            continue
        if end is not None and due > end:
            continue
        timeline.setdefault(due.isoformat(), []).append(entry_for(item, now))
    return timeline


# ==========================================
# PLANNING
# ==========================================

def planning_entries(
    items: Iterable[Schedulable],
    now: date,
    status: Optional[ComplianceStatus] = None,
    due_within_days: Optional[int] = None,
    overdue_only: bool = False,
) -> List[ScheduleEntry]:
    """
    Lista di pianificazione ordinata per scadenza (senza scadenza in fondo).

    Args:
        status: Filtra su uno stato specifico
        due_within_days: Solo scadenze tra oggi e oggi + N giorni
        overdue_only: Solo scadenze già passate
    """
    entries = [entry_for(item, now) for item in items]

    if status is not None:
        entries = [e for e in entries if e.status == status]
    if overdue_only:
        entries = [e for e in entries if e.days_until_due is not None and e.days_until_due < 0]
    if due_within_days is not None:
        entries = [
            e for e in entries
            if e.days_until_due is not None and 0 <= e.days_until_due <= due_within_days
        ]

    entries.sort(key=lambda e: (e.days_until_due is None, e.days_until_due or 0))
    return entries
