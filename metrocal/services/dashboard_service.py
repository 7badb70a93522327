# =====================================================
# metrocal/services/dashboard_service.py - Read-only views
# =====================================================
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from metrocal.config import DUE_SOON_DAYS, TIMELINE_DAYS
from metrocal.engine import ComplianceStatus
from metrocal.engine.aggregation import (
    ScheduleEntry,
    group_by_status,
    planning_entries,
    timeline_by_due_date,
)
from metrocal.models.instrument import Instrument
from .repository_factory import RepositoryFactory

module_logger = logging.getLogger(__name__)


@dataclass
class ToleranceStats:
    """Conteggi per fascia + dettaglio degli strumenti"""
    now: date
    total: int
    counts: Dict[ComplianceStatus, int]
    details: Dict[ComplianceStatus, List[Instrument]]


class DashboardService:
    """
    Viste aggregate sugli strumenti attivi.

    Lo stato è sempre calcolato al momento della lettura con le date
    persistite e il "now" del chiamante.
    """

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self.repos = RepositoryFactory(db)
        self.logger = logger or module_logger

    def tolerance_stats(self, now: Optional[date] = None) -> ToleranceStats:
        now = now or date.today()
        instruments = self.repos.instruments.get_active()
        buckets = group_by_status(instruments, now)
        self.logger.debug("Tolerance stats on %s over %d instrument(s)", now, len(instruments))
        return ToleranceStats(
            now=now,
            total=len(instruments),
            counts={status: len(members) for status, members in buckets.items()},
            details=buckets,
        )

    def timeline(
        self,
        now: Optional[date] = None,
        days: int = TIMELINE_DAYS,
        start: Optional[date] = None,
    ) -> Dict[str, List[ScheduleEntry]]:
        """Scadenze raggruppate per giorno nella finestra [start, start + days]"""
        now = now or date.today()
        start = start or now
        end = start + timedelta(days=days)
        instruments = self.repos.instruments.get_due_between(start, end)
        return timeline_by_due_date(instruments, now, start=start, end=end)

    def planning(
        self,
        now: Optional[date] = None,
        status: Optional[ComplianceStatus] = None,
        due_soon: bool = False,
        overdue: bool = False,
        due_soon_days: int = DUE_SOON_DAYS,
    ) -> List[ScheduleEntry]:
        """Lista di pianificazione con filtri in scadenza / scaduti"""
        now = now or date.today()
        if overdue:
            instruments = self.repos.instruments.get_overdue(now)
        else:
            instruments = self.repos.instruments.get_active(include_calendar=True)
        return planning_entries(
            instruments,
            now,
            status=status,
            due_within_days=due_soon_days if due_soon else None,
            overdue_only=overdue,
        )
