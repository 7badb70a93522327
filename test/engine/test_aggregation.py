# =====================================================
# test/engine/test_aggregation.py
# =====================================================
from dataclasses import dataclass
from datetime import date
from typing import Optional

from metrocal.engine import ComplianceStatus
from metrocal.engine.aggregation import (
    count_by_status,
    days_until_due,
    group_by_status,
    planning_entries,
    timeline_by_due_date,
)

NOW = date(2024, 6, 15)


@dataclass
class Item:
    name: str
    next_calibration_date: Optional[date]
    tolerance_expiry_date: Optional[date]


def sample_items():
    return [
        Item("on-time", date(2024, 6, 20), date(2024, 6, 30)),
        Item("due-today", date(2024, 6, 15), date(2024, 6, 15)),
        Item("tolerated", date(2024, 6, 10), date(2024, 6, 20)),
        Item("critical", date(2024, 5, 1), date(2024, 5, 15)),
        Item("unscheduled", None, None),
        Item("same-day", date(2024, 6, 20), date(2024, 6, 20)),
    ]


class TestStatusBuckets:

    def test_all_four_keys_present(self):
        buckets = group_by_status([], NOW)
        assert set(buckets) == set(ComplianceStatus)
        assert all(members == [] for members in buckets.values())

    def test_counts(self):
        counts = count_by_status(sample_items(), NOW)
        assert counts == {
            ComplianceStatus.ON_TIME: 3,
            ComplianceStatus.OVERDUE_TOLERATED: 1,
            ComplianceStatus.OVERDUE_CRITICAL: 1,
            ComplianceStatus.NOT_SET: 1,
        }


class TestTimeline:
    """Chiave = giorno di scadenza, NON fine tolleranza"""

    def test_grouped_by_due_date(self):
        timeline = timeline_by_due_date(sample_items(), NOW)

        assert list(timeline) == ["2024-05-01", "2024-06-10", "2024-06-15", "2024-06-20"]
        assert [e.item.name for e in timeline["2024-06-20"]] == ["on-time", "same-day"]
        assert timeline["2024-06-10"][0].status == ComplianceStatus.OVERDUE_TOLERATED

    def test_window_is_inclusive(self):
        timeline = timeline_by_due_date(sample_items(), NOW, start=date(2024, 6, 15), end=date(2024, 6, 20))
        assert list(timeline) == ["2024-06-15", "2024-06-20"]


class TestPlanning:

    def test_sorted_with_unscheduled_last(self):
        entries = planning_entries(sample_items(), NOW)
        assert entries[0].item.name == "critical"
        assert entries[-1].item.name == "unscheduled"
        assert entries[-1].days_until_due is None

    def test_due_soon_window(self):
        entries = planning_entries(sample_items(), NOW, due_within_days=5)
        assert [e.item.name for e in entries] == ["due-today", "on-time", "same-day"]

    def test_overdue_only(self):
        entries = planning_entries(sample_items(), NOW, overdue_only=True)
        assert [e.item.name for e in entries] == ["critical", "tolerated"]

    def test_status_filter(self):
        entries = planning_entries(sample_items(), NOW, status=ComplianceStatus.OVERDUE_CRITICAL)
        assert [e.item.name for e in entries] == ["critical"]

    def test_days_until_due(self):
        assert days_until_due(date(2024, 6, 10), NOW) == -5
        assert days_until_due(None, NOW) is None
