"""Statistics Engine - Weekly period aggregation for habits.

This engine centralizes all week-based progress figures:
- Weekly status (totals, pro-rated weekly goal, success and scheduled days)
- Cross-habit aggregate weekly progress
- Per-habit and per-category weekly percentages (analytics views)
- Day recovery (a shortfall forgiven by the week's aggregate)

Design Principles:
    - Stateless: operates only on the habit/log data passed in
    - Weeks run Monday..Sunday regardless of the Sunday=0 weekday indices
    - ``is_weekly_met`` is the sole authority for "recovered"
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import (
    date_key,
    is_scheduled_day,
    monday_of,
    resolve_reference_date,
    to_date,
    week_days,
)
from ..utils.math_utils import capped_percentage, mean, round_percent
from .goal_engine import GoalEngine
from .log_index import LogCollection, LogIndex, index_logs

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import HabitData, WeeklyStatus


def _is_tracked(habit: HabitData) -> bool:
    """Return True for active, non-archived habits."""
    return bool(habit.get(const.DATA_HABIT_ACTIVE, True)) and not habit.get(
        const.DATA_HABIT_ARCHIVED, False
    )


class StatisticsEngine:
    """Stateless engine for week-based habit statistics.

    Example:
        status = StatisticsEngine.get_weekly_status(habit, logs, date(2024, 1, 3))
        if status["is_weekly_met"]:
            ...
    """

    # ────────────────────────────────────────────────────────────────
    # Weekly status
    # ────────────────────────────────────────────────────────────────

    @classmethod
    def get_weekly_status(
        cls,
        habit: HabitData,
        logs: LogCollection,
        reference_date: date | datetime | None = None,
    ) -> WeeklyStatus:
        """Aggregate one habit over the week containing the reference date."""
        return cls.weekly_status_from_index(habit, index_logs(logs), reference_date)

    @staticmethod
    def weekly_status_from_index(
        habit: HabitData,
        index: LogIndex,
        reference_date: date | datetime | None = None,
    ) -> WeeklyStatus:
        """Aggregate one habit over a Monday..Sunday week using a log index.

        Rules:
        - A day counts toward ``active_days_count`` when it is scheduled
          (weekday in recurrence and on/after the creation date).
        - A logged value is added to ``total_value`` on ANY day; entries on
          unscheduled days are bonus contributions.
        - A scheduled day is a success when its value meets its effective
          target (snapshot, else current daily goal) or it was skipped.
        - The weekly goal is the override if set, else the daily goal times
          this week's scheduled days, which pro-rates a habit's first week.

        Returns:
            WeeklyStatus dict
        """
        monday = monday_of(resolve_reference_date(reference_date))
        habit_id = habit.get(const.DATA_HABIT_ID, "")
        recurrence = GoalEngine.recurrence(habit)
        created = GoalEngine.created_date(habit)

        total_value = 0.0
        active_days_count = 0
        success_days = 0

        for day in week_days(monday):
            scheduled = is_scheduled_day(day, recurrence, created)
            if scheduled:
                active_days_count += 1

            log = index.get((habit_id, date_key(day)))
            if log is None:
                continue

            value = float(log.get(const.DATA_LOG_VALUE) or 0)
            total_value += value

            if scheduled and (
                value >= GoalEngine.effective_target(habit, log)
                or log.get(const.DATA_LOG_STATUS) == const.LOG_STATUS_SKIP
            ):
                success_days += 1

        override = habit.get(const.DATA_HABIT_WEEKLY_GOAL_OVERRIDE)
        weekly_goal = (
            float(override)
            if override is not None
            else GoalEngine.daily_goal(habit) * active_days_count
        )

        return {
            const.WEEKLY_TOTAL_VALUE: total_value,
            const.WEEKLY_GOAL: weekly_goal,
            const.WEEKLY_IS_MET: weekly_goal > 0 and total_value >= weekly_goal,
            const.WEEKLY_SUCCESS_DAYS: success_days,
            const.WEEKLY_ACTIVE_DAYS_COUNT: active_days_count,
        }

    # ────────────────────────────────────────────────────────────────
    # Percentages
    # ────────────────────────────────────────────────────────────────

    @classmethod
    def get_habit_weekly_percentage(
        cls,
        habit: HabitData,
        logs: LogCollection,
        reference_date: date | datetime | None = None,
    ) -> float:
        """Return a habit's weekly progress capped at 100 (0 for a zero goal).

        The analytics views measure the week's total against the plain weekly
        goal from ``GoalEngine.get_goals``, which is not pro-rated for a
        habit's first week. The value is not rounded.
        """
        return cls._habit_weekly_percentage(habit, index_logs(logs), reference_date)

    @classmethod
    def _habit_weekly_percentage(
        cls,
        habit: HabitData,
        index: LogIndex,
        reference_date: date | datetime | None,
    ) -> float:
        status = cls.weekly_status_from_index(habit, index, reference_date)
        weekly_goal = GoalEngine.get_goals(habit, reference_date)[const.GOAL_WEEKLY]
        return capped_percentage(status[const.WEEKLY_TOTAL_VALUE], weekly_goal)

    @classmethod
    def get_weekly_progress(
        cls,
        habits: Iterable[HabitData],
        logs: LogCollection,
        reference_date: date | datetime | None = None,
    ) -> int:
        """Return the mean weekly percentage over active, non-archived habits.

        Each habit uses the pro-rated weekly goal from its weekly status.
        Habits whose weekly goal is 0 are left out of both the sum and the
        count rather than counted as 0%. The mean of the unrounded values is
        rounded once to a whole percent. No eligible habits yields 0.
        """
        index = index_logs(logs)
        percentages: list[float] = []
        for habit in habits:
            if not _is_tracked(habit):
                continue
            status = cls.weekly_status_from_index(habit, index, reference_date)
            weekly_goal = status[const.WEEKLY_GOAL]
            if weekly_goal > 0:
                percentages.append(
                    capped_percentage(status[const.WEEKLY_TOTAL_VALUE], weekly_goal)
                )
        return round_percent(mean(percentages))

    @classmethod
    def get_category_breakdown(
        cls,
        habits: Iterable[HabitData],
        logs: LogCollection,
        reference_date: date | datetime | None = None,
    ) -> dict[str, int]:
        """Return the mean weekly percentage per category, in whole percent.

        Only categories with at least one active, non-archived habit appear.
        Percentages use the same weekly goal as get_habit_weekly_percentage.
        Unlike get_weekly_progress, zero-goal habits count as 0% here.
        """
        index = index_logs(logs)
        by_category: dict[str, list[float]] = defaultdict(list)
        for habit in habits:
            if not _is_tracked(habit):
                continue
            category = habit.get(const.DATA_HABIT_CATEGORY) or const.CATEGORY_OTHER
            by_category[category].append(
                cls._habit_weekly_percentage(habit, index, reference_date)
            )
        return {
            category: round_percent(mean(values))
            for category, values in by_category.items()
        }

    # ────────────────────────────────────────────────────────────────
    # Recovery
    # ────────────────────────────────────────────────────────────────

    @classmethod
    def is_day_recovered(
        cls,
        habit: HabitData,
        logs: LogCollection,
        day: date | datetime | str,
    ) -> bool:
        """Check whether a scheduled day's shortfall is forgiven by its week.

        A day is recovered when it is scheduled, its log is missing or under
        target (and not a skip), and the containing week's total still meets
        the weekly goal.
        """
        target_day = to_date(day)
        if target_day is None:
            return False
        if not is_scheduled_day(
            target_day, GoalEngine.recurrence(habit), GoalEngine.created_date(habit)
        ):
            return False

        index = index_logs(logs)
        log = index.get((habit.get(const.DATA_HABIT_ID, ""), date_key(target_day)))
        if log is not None:
            if log.get(const.DATA_LOG_STATUS) == const.LOG_STATUS_SKIP:
                return False
            value = float(log.get(const.DATA_LOG_VALUE) or 0)
            if value >= GoalEngine.effective_target(habit, log):
                return False

        status = cls.weekly_status_from_index(habit, index, target_day)
        return status[const.WEEKLY_IS_MET]
