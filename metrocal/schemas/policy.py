# =====================================================
# metrocal/schemas/policy.py - Calibration policy schemas
# =====================================================
from pydantic import BaseModel, Field, computed_field, model_validator
from typing import List, Optional
import calendar

from metrocal.engine import (
    CalibrationPolicy,
    DayOfWeek,
    FrequencyUnit,
    RecurrenceType,
    ToleranceUnit,
    format_duration,
    policy_from_fields,
)

# Anno bisestile di riferimento: 29 febbraio deve essere accettato
_LEAP_YEAR = 2024


class CalibrationPolicyIn(BaseModel):
    """
    Policy in ingresso (forma piatta dell'API).

    I campi obbligatori dipendono da recurrence_type: qui vengono
    rifiutati i dati incompleti, l'engine non solleva mai eccezioni.
    """
    recurrence_type: RecurrenceType = Field(default=RecurrenceType.FIXED_INTERVAL, description="Recurrence kind")
    frequency_value: Optional[int] = Field(None, gt=0, description="Interval length (FIXED_INTERVAL)")
    frequency_unit: Optional[FrequencyUnit] = Field(None, description="Interval unit (FIXED_INTERVAL)")
    days_of_week: List[DayOfWeek] = Field(default_factory=list, description="Weekdays (CALENDAR_WEEKLY)")
    day_of_month: Optional[int] = Field(None, ge=1, le=31, description="Day of month (CALENDAR_MONTHLY)")
    month_of_year: Optional[int] = Field(None, ge=1, le=12, description="Month (CALENDAR_YEARLY)")
    day_of_year: Optional[int] = Field(None, ge=1, le=31, description="Day of month_of_year (CALENDAR_YEARLY)")
    tolerance_value: int = Field(default=0, ge=0, description="Grace period length")
    tolerance_unit: ToleranceUnit = Field(default=ToleranceUnit.DAYS, description="Grace period unit")

    @model_validator(mode="after")
    def validate_recurrence_fields(self):
        kind = self.recurrence_type

        if kind == RecurrenceType.FIXED_INTERVAL:
            if self.frequency_value is None or self.frequency_unit is None:
                raise ValueError("FIXED_INTERVAL requires frequency_value and frequency_unit")

        elif kind == RecurrenceType.CALENDAR_WEEKLY:
            if not self.days_of_week:
                raise ValueError("CALENDAR_WEEKLY requires at least one day in days_of_week")

        elif kind == RecurrenceType.CALENDAR_MONTHLY:
            if self.day_of_month is None:
                raise ValueError("CALENDAR_MONTHLY requires day_of_month")

        elif kind == RecurrenceType.CALENDAR_YEARLY:
            if self.month_of_year is None or self.day_of_year is None:
                raise ValueError("CALENDAR_YEARLY requires month_of_year and day_of_year")
            days_in_month = calendar.monthrange(_LEAP_YEAR, self.month_of_year)[1]
            if self.day_of_year > days_in_month:
                raise ValueError(
                    f"day_of_year {self.day_of_year} is not valid for month {self.month_of_year}"
                )

        return self

    def to_policy(self) -> CalibrationPolicy:
        return policy_from_fields(**self.policy_fields())

    def policy_fields(self) -> dict:
        return self.model_dump(include=set(CalibrationPolicyIn.model_fields))


class CalibrationPolicyOut(BaseModel):
    """Policy come salvata, con etichetta leggibile"""
    recurrence_type: str
    frequency_value: Optional[int] = None
    frequency_unit: Optional[str] = None
    days_of_week: List[str] = Field(default_factory=list)
    day_of_month: Optional[int] = None
    month_of_year: Optional[int] = None
    day_of_year: Optional[int] = None
    tolerance_value: int = 0
    tolerance_unit: str = "DAYS"

    @computed_field
    @property
    def frequency_label(self) -> Optional[str]:
        if self.recurrence_type != RecurrenceType.FIXED_INTERVAL.value or not self.frequency_value or not self.frequency_unit:
            return None
        return format_duration(self.frequency_value, self.frequency_unit)

    @computed_field
    @property
    def tolerance_label(self) -> str:
        return format_duration(self.tolerance_value, self.tolerance_unit)
