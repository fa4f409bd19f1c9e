"""Tests for weekly progress aggregation and the habit overview."""

from __future__ import annotations

from datetime import date

from habitsage.services.completion import INSUFFICIENT_DATA
from habitsage.services.habits import habit_overview
from habitsage.services.reports import WeeklyProgress, weekly_progress
from tests.conftest import OWNER_ID, make_habit, make_logs

WEDNESDAY = date(2024, 1, 17)


class TestWeeklyProgress:
    def test_daily_habit_buckets(self):
        habit = make_habit(created_on=date(2024, 1, 1))
        logs = make_logs(
            date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3),
            date(2024, 1, 14), date(2024, 1, 15),
        )

        rows = weekly_progress([habit], logs, weeks=3, today=WEDNESDAY)

        assert [r.week_start for r in rows] == [
            date(2023, 12, 31), date(2024, 1, 7), date(2024, 1, 14),
        ]
        # Week of Dec 31 only expects Jan 1-6; current week stops at today
        assert [(r.completed, r.total) for r in rows] == [(3, 6), (0, 7), (2, 4)]
        assert [r.percentage for r in rows] == [50, 0, 50]

    def test_weekly_habit_counts_once_per_week(self):
        habit = make_habit("weekly", created_on=date(2024, 1, 1))
        logs = make_logs(date(2024, 1, 9))

        rows = weekly_progress([habit], logs, weeks=2, today=WEDNESDAY)

        assert [(r.completed, r.total) for r in rows] == [(1, 1), (0, 1)]

    def test_specific_weekdays_count_target_days(self):
        habit = make_habit("weekly", [1, 3, 5], created_on=date(2024, 1, 1))
        logs = make_logs(date(2024, 1, 15))

        rows = weekly_progress([habit], logs, weeks=1, today=WEDNESDAY)

        assert (rows[0].completed, rows[0].total) == (1, 2)

    def test_logs_are_matched_to_their_habit(self):
        water = make_habit(created_on=date(2024, 1, 1))
        water.id = 1
        read = make_habit(created_on=date(2024, 1, 1))
        read.id = 2
        logs = make_logs(date(2024, 1, 14))  # habit_id=1

        rows = weekly_progress([water, read], logs, weeks=1, today=date(2024, 1, 14))

        assert (rows[0].completed, rows[0].total) == (1, 2)

    def test_monthly_and_future_habits_are_skipped(self):
        monthly = make_habit("monthly", created_on=date(2023, 1, 1))
        brand_new = make_habit(created_on=date(2024, 2, 1))

        rows = weekly_progress([monthly, brand_new], [], weeks=4, today=WEDNESDAY)

        assert all(r.total == 0 for r in rows)
        assert all(r.percentage == 0 for r in rows)

    def test_label_uses_sunday_week_number(self):
        assert WeeklyProgress(week_start=date(2024, 1, 14)).label == "Wk 02"


class TestHabitOverview:
    def test_overview_combines_metrics(self, repo, habit_factory, log_factory):
        water = habit_factory(name="Drink Water", created_on=date(2024, 1, 1))
        gym = habit_factory(
            name="Gym", frequency="weekly", specific_weekdays=[1, 3, 5],
            created_on=date(2024, 1, 16),
        )
        for day in (date(2024, 1, 15), date(2024, 1, 16), WEDNESDAY):
            log_factory(water, day)
        log_factory(gym, WEDNESDAY, completed=False)

        stats = habit_overview(repo, OWNER_ID, window_days=7, today=WEDNESDAY)

        assert [s.habit.name for s in stats] == ["Drink Water", "Gym"]
        water_stats, gym_stats = stats
        assert water_stats.current_streak == 3
        assert water_stats.longest_streak == 3
        assert water_stats.completion_rate == 3 / 7
        assert water_stats.completed_this_period is True
        assert water_stats.actionable_today is True

        assert gym_stats.current_streak == 0
        assert gym_stats.completion_rate == INSUFFICIENT_DATA
        assert gym_stats.completed_this_period is False
        assert gym_stats.actionable_today is True

    def test_overview_empty(self, repo):
        assert habit_overview(repo, OWNER_ID, today=WEDNESDAY) == []
