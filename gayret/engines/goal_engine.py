"""Goal Engine - Pure logic for effective habit targets.

This engine provides stateless functions for:
- Daily/weekly/monthly goal resolution with manual overrides
- Monthly pro-rating against the habit's creation date and recurrence
- Target snapshot resolution for historical log entries
- Zero-safe completion percentages

ARCHITECTURE: All methods are static and operate on passed-in data.
Weekly goals here are NOT pro-rated; the partial first week is handled by
StatisticsEngine.get_weekly_status using that week's actual scheduled days.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import (
    count_scheduled_days_in_month,
    resolve_reference_date,
    to_date,
)
from ..utils.math_utils import capped_percentage, round_percent

if TYPE_CHECKING:
    from ..type_defs import GoalSet, HabitData, HabitLogData


class GoalEngine:
    """Pure logic engine for goal resolution.

    Divide-by-zero policy: a goal that resolves to 0 (zero daily goal, empty
    recurrence) always yields 0% downstream, never an exception.
    """

    @staticmethod
    def daily_goal(habit: HabitData) -> float:
        """Return the habit's current daily goal (never pro-rated)."""
        return float(habit.get(const.DATA_HABIT_DAILY_GOAL) or 0)

    @staticmethod
    def recurrence(habit: HabitData) -> set[int]:
        """Return the distinct valid weekday indices a habit is scheduled on."""
        return {
            day
            for day in habit.get(const.DATA_HABIT_RECURRENCE) or []
            if 0 <= day <= 6
        }

    @staticmethod
    def created_date(habit: HabitData) -> date | None:
        """Return the calendar date a habit came into existence."""
        return to_date(habit.get(const.DATA_HABIT_CREATED_AT))

    @classmethod
    def get_goals(
        cls,
        habit: HabitData,
        reference_date: date | datetime | None = None,
    ) -> GoalSet:
        """Compute the effective goal triple at a reference date.

        Args:
            habit: Habit definition
            reference_date: Date whose month is used for the monthly goal.
                Defaults to today (local).

        Returns:
            GoalSet with daily, weekly and monthly targets

        Example:
            Mon-Fri habit, daily_goal=2, created 2024-01-20, reference Jan 2024:
            {"daily": 2.0, "weekly": 10.0, "monthly": 16.0}
        """
        ref = resolve_reference_date(reference_date)
        daily = cls.daily_goal(habit)
        recurrence = cls.recurrence(habit)

        weekly_override = habit.get(const.DATA_HABIT_WEEKLY_GOAL_OVERRIDE)
        weekly = (
            float(weekly_override)
            if weekly_override is not None
            else daily * len(recurrence)
        )

        monthly_override = habit.get(const.DATA_HABIT_MONTHLY_GOAL_OVERRIDE)
        if monthly_override is not None:
            monthly = float(monthly_override)
        else:
            effective_days = count_scheduled_days_in_month(
                ref.year, ref.month, recurrence, cls.created_date(habit)
            )
            monthly = daily * effective_days

        return {
            const.GOAL_DAILY: daily,
            const.GOAL_WEEKLY: weekly,
            const.GOAL_MONTHLY: monthly,
        }

    @classmethod
    def effective_target(cls, habit: HabitData, log: HabitLogData) -> float:
        """Return the target a log entry is judged against.

        The snapshot captured at first write wins over the habit's current
        daily goal, so later goal edits never rewrite history.
        """
        snapshot = log.get(const.DATA_LOG_TARGET_SNAPSHOT)
        if snapshot is not None:
            return float(snapshot)
        return cls.daily_goal(habit)

    @classmethod
    def get_completion_percentage(
        cls,
        habit: HabitData,
        value: float,
        snapshot_target: float | None = None,
    ) -> int:
        """Return how much of a day's target a value covers, capped at 100.

        Args:
            habit: Habit definition (for the fallback daily goal)
            value: Recorded quantity
            snapshot_target: Target snapshot of the log, if any

        Returns:
            Whole percentage 0..100, or 0 when the target is 0
        """
        target = (
            float(snapshot_target)
            if snapshot_target is not None
            else cls.daily_goal(habit)
        )
        return round_percent(capped_percentage(value, target))
