"""Streak Engine - Backward scan for unbroken habit compliance.

The streak is the number of scheduled days, counting back from today, that
met their target without an intervening breaking day:

- Unscheduled weekdays are ignored (no increment, no break).
- ``skip`` and ``recovered`` entries keep the streak alive without extending it.
- A value at or above the effective target (snapshot, else current daily
  goal) extends the streak by one.
- Today never breaks the streak: an unfinished or missing entry for today
  is treated as "not yet finished".
- Any earlier scheduled day that is missing or under target breaks it.
- The scan stops at the habit's creation date and after
  STREAK_MAX_LOOKBACK_DAYS days.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import date_key, resolve_reference_date, weekday_index
from .goal_engine import GoalEngine
from .log_index import LogCollection, LogIndex, index_logs

if TYPE_CHECKING:
    from ..type_defs import HabitData


class StreakEngine:
    """Stateless streak calculator."""

    @classmethod
    def calculate_streak(
        cls,
        habit: HabitData,
        logs: LogCollection,
        reference_date: date | datetime | None = None,
    ) -> int:
        """Return the current streak of a habit as of the reference date.

        Args:
            habit: Habit definition
            logs: All log entries (other habits' entries are ignored)
            reference_date: "Today" for the scan. Defaults to today (local).

        Returns:
            Number of streak-extending days
        """
        return cls.streak_from_index(habit, index_logs(logs), reference_date)

    @staticmethod
    def streak_from_index(
        habit: HabitData,
        index: LogIndex,
        reference_date: date | datetime | None = None,
        max_days: int = const.STREAK_MAX_LOOKBACK_DAYS,
    ) -> int:
        """Return the current streak using a prebuilt log index."""
        today = resolve_reference_date(reference_date)
        habit_id = habit.get(const.DATA_HABIT_ID, "")
        recurrence = GoalEngine.recurrence(habit)
        created = GoalEngine.created_date(habit)

        streak = 0
        for offset in range(max_days):
            day = today - timedelta(days=offset)

            # Habit did not exist yet
            if created is not None and created > day and offset > 0:
                break

            if weekday_index(day) not in recurrence:
                continue

            log = index.get((habit_id, date_key(day)))
            if log is not None:
                if log.get(const.DATA_LOG_STATUS) in const.STREAK_MAINTAINING_STATUSES:
                    continue
                value = float(log.get(const.DATA_LOG_VALUE) or 0)
                if value >= GoalEngine.effective_target(habit, log):
                    streak += 1
                    continue

            if offset == 0:
                # Today is not over yet
                continue

            break

        const.LOGGER.debug(
            "Streak for habit %s as of %s: %s", habit_id, today.isoformat(), streak
        )
        return streak
