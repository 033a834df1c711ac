"""Risk Engine - Two-day under-target detection.

Pure advisory detector: it never touches habit, log or notification state, it
only reports whether a risk notification should be raised. The caller owns
the notification feed and persists whatever it decides to emit.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import date_key, is_scheduled_day, resolve_reference_date
from .goal_engine import GoalEngine
from .log_index import LogCollection, index_logs

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import HabitData, NotificationData, RiskSignal


class RiskEngine:
    """Stateless risk detector."""

    @staticmethod
    def has_risk_notification(
        notifications: Iterable[NotificationData],
        habit_id: str,
        day_key: str,
    ) -> bool:
        """Check whether a risk notification for the habit exists on a day.

        Risk notifications without a habit reference block every habit for
        that day.
        """
        for notification in notifications:
            if notification.get(const.DATA_NOTIFICATION_TYPE) != (
                const.NOTIFICATION_TYPE_RISK
            ):
                continue
            if notification.get(const.DATA_NOTIFICATION_DATE) != day_key:
                continue
            owner = notification.get(const.DATA_NOTIFICATION_HABIT_ID)
            if owner is None or owner == habit_id:
                return True
        return False

    @classmethod
    def evaluate_risk(
        cls,
        habit: HabitData,
        logs: LogCollection,
        today_value: float,
        notifications: Iterable[NotificationData] = (),
        reference_date: date | datetime | None = None,
    ) -> RiskSignal:
        """Evaluate the two-consecutive-day under-target pattern.

        Triggered when yesterday was a scheduled day, today's value is below
        the current daily goal, and yesterday's value (0 if not logged) is
        below yesterday's effective target.

        Args:
            habit: Habit definition
            logs: All log entries
            today_value: Value just recorded for today
            notifications: Already raised notifications (for de-duplication)
            reference_date: "Today". Defaults to today (local).

        Returns:
            RiskSignal; ``should_notify`` is False when a risk notification
            for this habit already exists today.
        """
        today = resolve_reference_date(reference_date)
        yesterday = today - timedelta(days=1)
        habit_id = habit.get(const.DATA_HABIT_ID, "")
        today_key = date_key(today)

        at_risk = False
        if is_scheduled_day(
            yesterday, GoalEngine.recurrence(habit), GoalEngine.created_date(habit)
        ):
            yesterday_log = index_logs(logs).get((habit_id, date_key(yesterday)))
            if yesterday_log is not None:
                yesterday_value = float(yesterday_log.get(const.DATA_LOG_VALUE) or 0)
                yesterday_target = GoalEngine.effective_target(habit, yesterday_log)
            else:
                yesterday_value = 0.0
                yesterday_target = GoalEngine.daily_goal(habit)

            at_risk = (
                today_value < GoalEngine.daily_goal(habit)
                and yesterday_value < yesterday_target
            )

        should_notify = at_risk and not cls.has_risk_notification(
            notifications, habit_id, today_key
        )
        message = (
            const.NOTIFICATION_MESSAGE_RISK.format(
                name=habit.get(const.DATA_HABIT_NAME, habit_id)
            )
            if at_risk
            else ""
        )

        return {
            "habit_id": habit_id,
            "date": today_key,
            "at_risk": at_risk,
            "should_notify": should_notify,
            "message": message,
        }
