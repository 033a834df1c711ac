"""Builders for habit and log fixtures.

Tests describe only the fields they care about; everything else gets a
stable default so engine inputs stay readable.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, cast

from gayret import const

if TYPE_CHECKING:
    from gayret.type_defs import HabitData, HabitLogData

MON_TO_FRI = (1, 2, 3, 4, 5)
EVERY_DAY = (0, 1, 2, 3, 4, 5, 6)


def make_habit(
    habit_id: str = "habit-h",
    *,
    name: str = "Read",
    daily_goal: float = 2.0,
    recurrence: Iterable[int] = MON_TO_FRI,
    created_at: str = "2024-01-01",
    category: str = const.CATEGORY_EDUCATION,
    unit: str = const.HABIT_UNIT_PAGES,
    weekly_goal_override: float | None = None,
    monthly_goal_override: float | None = None,
    active: bool = True,
    archived: bool = False,
) -> HabitData:
    """Build a stored habit dict."""
    return cast(
        "HabitData",
        {
            const.DATA_HABIT_ID: habit_id,
            const.DATA_HABIT_NAME: name,
            const.DATA_HABIT_DESCRIPTION: "",
            const.DATA_HABIT_DAILY_GOAL: daily_goal,
            const.DATA_HABIT_WEEKLY_GOAL_OVERRIDE: weekly_goal_override,
            const.DATA_HABIT_MONTHLY_GOAL_OVERRIDE: monthly_goal_override,
            const.DATA_HABIT_UNIT: unit,
            const.DATA_HABIT_CATEGORY: category,
            const.DATA_HABIT_RECURRENCE: list(recurrence),
            const.DATA_HABIT_COLOR: const.DEFAULT_HABIT_COLOR,
            const.DATA_HABIT_ICON: const.DEFAULT_HABIT_ICON,
            const.DATA_HABIT_CREATED_AT: created_at,
            const.DATA_HABIT_ACTIVE: active,
            const.DATA_HABIT_ARCHIVED: archived,
        },
    )


def make_log(
    habit_id: str,
    day: str,
    value: float,
    *,
    status: str = const.LOG_STATUS_DONE,
    target_snapshot: float | None = None,
    log_id: str | None = None,
) -> HabitLogData:
    """Build a stored log entry; the id defaults to one derived from the key."""
    return cast(
        "HabitLogData",
        {
            const.DATA_LOG_ID: log_id or f"log-{habit_id}-{day}",
            const.DATA_LOG_HABIT_ID: habit_id,
            const.DATA_LOG_DATE: day,
            const.DATA_LOG_VALUE: value,
            const.DATA_LOG_TARGET_SNAPSHOT: target_snapshot,
            const.DATA_LOG_STATUS: status,
        },
    )


def make_daily_logs(
    habit_id: str, last_day: date, days: int, value: float
) -> list[HabitLogData]:
    """Build one log per day for ``days`` consecutive days ending at ``last_day``."""
    return [
        make_log(habit_id, (last_day - timedelta(days=offset)).isoformat(), value)
        for offset in range(days)
    ]


def scenario_logs(habit_id: str = "habit-h") -> list[HabitLogData]:
    """Logs of the reference week: Jan 1 met, Jan 2 skipped, Jan 3 under target."""
    return [
        make_log(habit_id, "2024-01-01", 2),
        make_log(habit_id, "2024-01-02", 0, status=const.LOG_STATUS_SKIP),
        make_log(habit_id, "2024-01-03", 1, status=const.LOG_STATUS_FAIL),
    ]


def storage_data(
    habits: Iterable[HabitData], logs: Iterable[HabitLogData] = ()
) -> dict[str, Any]:
    """Build a stored-data dict in the list-shaped form."""
    return {
        const.DATA_HABITS: list(habits),
        const.DATA_LOGS: list(logs),
        const.DATA_NOTIFICATIONS: [],
    }
