# =====================================================
# test/engine/test_policy.py
# =====================================================
from metrocal.engine import (
    CalibrationPolicy,
    DayOfWeek,
    FixedInterval,
    FrequencyUnit,
    RecurrenceType,
    Tolerance,
    ToleranceUnit,
    WeeklyRecurrence,
    YearlyRecurrence,
    format_duration,
    policy_from_fields,
)


class TestPolicyFields:
    """Conversione forma piatta <-> tagged union"""

    def test_weekly_fields_sorted_sunday_first(self):
        policy = CalibrationPolicy(
            WeeklyRecurrence(frozenset({DayOfWeek.FRIDAY, DayOfWeek.SUNDAY, DayOfWeek.MONDAY})),
            Tolerance(2, ToleranceUnit.DAYS),
        )

        fields = policy.to_fields()

        assert fields["recurrence_type"] == "CALENDAR_WEEKLY"
        assert fields["days_of_week"] == ["SUNDAY", "MONDAY", "FRIDAY"]
        assert fields["frequency_value"] is None
        assert fields["tolerance_value"] == 2

    def test_yearly_from_fields(self):
        policy = policy_from_fields(
            recurrence_type="CALENDAR_YEARLY",
            month_of_year=2,
            day_of_year=29,
            tolerance_value=1,
            tolerance_unit="MONTHS",
        )

        assert policy.recurrence == YearlyRecurrence(2, 29)
        assert policy.recurrence_type == RecurrenceType.CALENDAR_YEARLY
        assert policy.tolerance == Tolerance(1, ToleranceUnit.MONTHS)

    def test_weekly_ignores_unknown_day_names(self):
        policy = policy_from_fields(recurrence_type="CALENDAR_WEEKLY", days_of_week=["MONDAY", "FUNDAY"])
        assert policy.recurrence == WeeklyRecurrence(frozenset({DayOfWeek.MONDAY}))

    def test_tolerance_defaults_to_zero_days(self):
        policy = policy_from_fields(recurrence_type="FIXED_INTERVAL", frequency_value=3, frequency_unit="WEEKS")

        assert policy.recurrence == FixedInterval(3, FrequencyUnit.WEEKS)
        assert policy.tolerance == Tolerance(0, ToleranceUnit.DAYS)

    def test_negative_tolerance_is_clamped(self):
        policy = policy_from_fields(recurrence_type="CALENDAR_DAILY", tolerance_value=-5)
        assert policy.tolerance.value == 0


class TestFormatDuration:

    def test_singular_and_plural(self):
        assert format_duration(1, "MONTHS") == "1 month"
        assert format_duration(6, FrequencyUnit.MONTHS) == "6 months"
        assert format_duration(0, ToleranceUnit.DAYS) == "0 days"
