"""Tests for period-key calendar arithmetic."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from habitsage.errors import InvalidConfigurationError
from habitsage.services.periods import (
    coerce_frequency,
    is_actionable,
    next_period_key,
    normalize_weekdays,
    period_key,
    previous_period_key,
    start_of_week,
    sunday_weekday,
    validate_habit_config,
)
from tests.conftest import make_habit

# 2024-01-14 is a Sunday
SUNDAY = date(2024, 1, 14)
MONDAY = date(2024, 1, 15)
WEDNESDAY = date(2024, 1, 17)


class TestPeriodKey:
    def test_daily_drops_time_of_day(self):
        when = datetime(2024, 1, 15, 18, 45, tzinfo=timezone.utc)
        assert period_key("daily", when) == MONDAY

    def test_aware_datetime_is_converted_to_utc_first(self):
        eastern = timezone(timedelta(hours=-5))
        when = datetime(2024, 1, 15, 21, 30, tzinfo=eastern)  # 02:30 UTC next day
        assert period_key("daily", when) == date(2024, 1, 16)

    def test_naive_datetime_is_taken_as_utc(self):
        assert period_key("daily", datetime(2024, 1, 15, 23, 59)) == MONDAY

    @pytest.mark.parametrize("offset", range(7))
    def test_weekly_keys_every_day_of_week_to_sunday(self, offset):
        day = SUNDAY + timedelta(days=offset)
        assert period_key("weekly", day) == SUNDAY

    def test_weekly_does_not_bleed_into_next_week(self):
        assert period_key("weekly", SUNDAY + timedelta(days=7)) == SUNDAY + timedelta(days=7)
        assert period_key("weekly", SUNDAY - timedelta(days=1)) == date(2024, 1, 7)

    @pytest.mark.parametrize("day", [date(2024, 2, 1), date(2024, 2, 15), date(2024, 2, 29)])
    def test_monthly_keys_to_first_of_month(self, day):
        assert period_key("monthly", day) == date(2024, 2, 1)

    def test_specific_weekdays_make_each_day_its_own_period(self):
        monday = period_key("weekly", MONDAY, [1, 3])
        wednesday = period_key("weekly", WEDNESDAY, [1, 3])
        assert monday == MONDAY
        assert wednesday == WEDNESDAY
        assert monday != wednesday
        # Generic weekly lumps them together
        assert period_key("weekly", MONDAY) == period_key("weekly", WEDNESDAY)

    def test_specific_weekdays_ignored_for_non_weekly(self):
        assert period_key("daily", WEDNESDAY, [1]) == WEDNESDAY
        assert period_key("monthly", WEDNESDAY, [1]) == date(2024, 1, 1)

    def test_out_of_range_weekdays_are_ignored(self):
        assert period_key("weekly", WEDNESDAY, [7, -1, 42]) == SUNDAY

    def test_accepts_enum_and_mixed_case(self):
        assert period_key(coerce_frequency("Weekly"), WEDNESDAY) == SUNDAY


class TestPeriodStepping:
    def test_daily_steps(self):
        assert previous_period_key("daily", MONDAY) == SUNDAY
        assert next_period_key("daily", SUNDAY) == MONDAY

    def test_weekly_steps(self):
        assert previous_period_key("weekly", SUNDAY) == date(2024, 1, 7)
        assert next_period_key("weekly", SUNDAY) == date(2024, 1, 21)

    @pytest.mark.parametrize(
        "key, expected",
        [
            (date(2024, 3, 1), date(2024, 2, 1)),
            (date(2024, 1, 1), date(2023, 12, 1)),
            (date(2024, 3, 31), date(2024, 2, 1)),
        ],
    )
    def test_previous_month_lands_on_first(self, key, expected):
        assert previous_period_key("monthly", key) == expected

    @pytest.mark.parametrize(
        "key, expected",
        [
            (date(2024, 1, 31), date(2024, 2, 1)),
            (date(2024, 2, 1), date(2024, 3, 1)),
            (date(2023, 12, 1), date(2024, 1, 1)),
        ],
    )
    def test_next_month_lands_on_first(self, key, expected):
        assert next_period_key("monthly", key) == expected


class TestWeekdayHelpers:
    def test_sunday_is_zero(self):
        assert sunday_weekday(SUNDAY) == 0
        assert sunday_weekday(MONDAY) == 1
        assert sunday_weekday(date(2024, 1, 20)) == 6

    def test_start_of_week_on_sunday_is_identity(self):
        assert start_of_week(SUNDAY) == SUNDAY

    def test_normalize_weekdays_drops_junk(self):
        assert normalize_weekdays([1, 3, 3, 9, -2, "x", None, True]) == frozenset({1, 3})
        assert normalize_weekdays(None) == frozenset()

    def test_is_actionable_for_specific_weekdays(self):
        habit = make_habit("weekly", [1, 3])
        assert is_actionable(habit, MONDAY)
        assert not is_actionable(habit, date(2024, 1, 16))

    def test_is_actionable_always_for_generic_habits(self):
        assert is_actionable(make_habit("daily"), date(2024, 1, 16))
        assert is_actionable(make_habit("weekly"), date(2024, 1, 16))


class TestValidation:
    def test_unknown_frequency(self):
        with pytest.raises(InvalidConfigurationError):
            coerce_frequency("hourly")

    def test_invalid_configuration_is_a_value_error(self):
        with pytest.raises(ValueError):
            period_key("fortnightly", MONDAY)

    def test_weekly_weekdays_sorted_and_deduplicated(self):
        assert validate_habit_config("weekly", [5, 1, 1]) == [1, 5]

    def test_no_weekdays_is_always_valid(self):
        assert validate_habit_config("monthly", []) == []

    def test_weekdays_rejected_on_daily(self):
        with pytest.raises(InvalidConfigurationError, match="weekly"):
            validate_habit_config("daily", [1])

    def test_out_of_range_weekday_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            validate_habit_config("weekly", [7])
