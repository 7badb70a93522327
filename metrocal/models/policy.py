# =====================================================
# metrocal/models/policy.py - Colonne della politica di taratura
# =====================================================
from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from typing import List, Optional

from metrocal.engine.policy import CalibrationPolicy, policy_from_fields

POLICY_FIELDS = (
    "recurrence_type",
    "frequency_value",
    "frequency_unit",
    "days_of_week",
    "day_of_month",
    "month_of_year",
    "day_of_year",
    "tolerance_value",
    "tolerance_unit",
)


class CalibrationPolicyMixin:
    """
    Forma piatta della CalibrationPolicy, condivisa da Method e Calendar.

    recurrence_type è una String libera (non Enum) perché dati legacy
    possono contenere valori sconosciuti: l'engine li gestisce con fallback.
    """

    recurrence_type: Mapped[str] = mapped_column(String(30), default="FIXED_INTERVAL")

    # FIXED_INTERVAL
    frequency_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    frequency_unit: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # CALENDAR_WEEKLY
    days_of_week: Mapped[List[str]] = mapped_column(JSON, default=list)

    # CALENDAR_MONTHLY
    day_of_month: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # CALENDAR_YEARLY (day_of_year = giorno del mese in month_of_year)
    month_of_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    day_of_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Tolleranza
    tolerance_value: Mapped[int] = mapped_column(Integer, default=0)
    tolerance_unit: Mapped[str] = mapped_column(String(10), default="DAYS")

    @property
    def policy(self) -> CalibrationPolicy:
        """Tagged union costruita dalle colonne"""
        return policy_from_fields(**self.policy_fields())

    def policy_fields(self) -> dict:
        return {name: getattr(self, name) for name in POLICY_FIELDS}

    def apply_policy(self, policy: CalibrationPolicy) -> None:
        for name, value in policy.to_fields().items():
            setattr(self, name, value)
