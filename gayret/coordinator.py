# File: coordinator.py
"""Coordinator for Gayret.

The single owner of habit, log and notification state. It exposes the
mutation operations (habit lifecycle, record progress, delete log,
notification housekeeping) and read-only queries that recompute every derived
value on demand from the source collections; nothing derived is cached.

Mutations are applied one at a time. After each one the coordinator
re-evaluates badges, runs risk detection for same-day progress, and hands a
snapshot of its data to the optional storage callback.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import copy
from datetime import date, datetime
from functools import partial
from typing import Any, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from . import const, data_builders as db
from .engines.gamification_engine import GamificationEngine
from .engines.goal_engine import GoalEngine
from .engines.risk_engine import RiskEngine
from .engines.statistics_engine import StatisticsEngine
from .engines.streak_engine import StreakEngine
from .managers.gamification_manager import GamificationManager
from .managers.habit_manager import HabitManager
from .managers.notification_manager import NotificationManager
from .type_defs import (
    BadgeResult,
    GoalSet,
    HabitData,
    HabitLogData,
    NotificationData,
    RiskSignal,
    StorageData,
    WeeklyStatus,
)
from .utils.dt_utils import date_key, dt_now_local, to_date

StorageCallback = Callable[[StorageData], None]


class HabitTrackerCoordinator:
    """Owner of all Gayret state.

    Example:
        coordinator = HabitTrackerCoordinator(options={"time_zone": "Europe/Istanbul"})
        habit = coordinator.create_habit({"name": "Read", "daily_goal": 20})
        coordinator.record_progress(habit["internal_id"], "2024-01-03", 25)
        coordinator.get_streak(habit["internal_id"])
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        *,
        now: Callable[[], datetime] | None = None,
        on_change: StorageCallback | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            data: Stored state from the storage collaborator (habits and logs
                as lists or id-keyed dicts, optional notifications)
            options: Coordinator options, validated by OPTIONS_SCHEMA
            now: Injectable clock; defaults to the current time in the
                configured time zone
            on_change: Called with a data snapshot after every mutation

        Raises:
            EntityValidationError: If options are invalid
        """
        self.options = db.validate(db.OPTIONS_SCHEMA, dict(options or {}))
        time_zone = self.options[const.CONF_TIME_ZONE]
        try:
            self.time_zone = ZoneInfo(time_zone)
        except (ZoneInfoNotFoundError, ValueError) as err:
            raise db.EntityValidationError(
                field=const.CONF_TIME_ZONE, reason=f"unknown time zone {time_zone!r}"
            ) from err

        self._now = now or partial(dt_now_local, self.time_zone)
        self._on_change = on_change
        self._data: StorageData = self._load(data or {}, self.time_zone)

        self.habit_manager = HabitManager(self)
        self.notification_manager = NotificationManager(
            self, max_notifications=self.options[const.CONF_MAX_NOTIFICATIONS]
        )
        self.gamification_manager = GamificationManager(
            self, notify_unlocks=self.options[const.CONF_BADGE_NOTIFICATIONS]
        )
        self.gamification_manager.prime()

        const.LOGGER.debug(
            "Coordinator ready: %s habits, %s logs, %s notifications",
            len(self._data[const.DATA_HABITS]),
            len(self._data[const.DATA_LOGS]),
            len(self._data[const.DATA_NOTIFICATIONS]),
        )

    # -------------------------------------------------------------------------------------
    # Data loading / snapshots
    # -------------------------------------------------------------------------------------

    @staticmethod
    def get_default_structure() -> StorageData:
        """Return the canonical empty data structure."""
        return {
            const.DATA_META: {const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION},
            const.DATA_HABITS: {},
            const.DATA_LOGS: {},
            const.DATA_NOTIFICATIONS: [],
        }

    @staticmethod
    def _by_id(entities: Any) -> dict[str, Any]:
        """Normalize a list- or dict-shaped collection to an id-keyed dict."""
        if isinstance(entities, Mapping):
            entities = entities.values()
        return {
            entity[const.DATA_HABIT_ID]: dict(entity)
            for entity in entities or ()
            if entity.get(const.DATA_HABIT_ID)
        }

    @classmethod
    def _load(cls, raw: Mapping[str, Any], time_zone: ZoneInfo) -> StorageData:
        """Build internal state from stored data.

        Creation timestamps become local day keys. Duplicate (habit_id, date)
        log keys keep the last entry. Logs that reference unknown habits or
        carry an unknown status are kept (they stay queryable) but flagged.
        """
        data = cls.get_default_structure()
        data[const.DATA_HABITS] = cls._by_id(copy.deepcopy(raw.get(const.DATA_HABITS)))
        for habit in data[const.DATA_HABITS].values():
            created = to_date(habit.get(const.DATA_HABIT_CREATED_AT), time_zone)
            if created is not None:
                habit[const.DATA_HABIT_CREATED_AT] = created.isoformat()

        logs: dict[str, HabitLogData] = {}
        seen: dict[tuple[str, str], str] = {}
        for log_id, log in cls._by_id(copy.deepcopy(raw.get(const.DATA_LOGS))).items():
            key = (log.get(const.DATA_LOG_HABIT_ID, ""), log.get(const.DATA_LOG_DATE, ""))
            if key in seen:
                const.LOGGER.warning(
                    "Duplicate log for habit %s on %s in stored data, keeping the last",
                    key[0],
                    key[1],
                )
                logs.pop(seen[key])
            if key[0] not in data[const.DATA_HABITS]:
                const.LOGGER.warning(
                    "Log %s references unknown habit %s", log_id, key[0]
                )
            status = log.get(const.DATA_LOG_STATUS)
            if status is not None and status not in const.LOG_STATUSES:
                const.LOGGER.warning("Log %s has unknown status %r", log_id, status)
            seen[key] = log_id
            logs[log_id] = cast("HabitLogData", log)
        data[const.DATA_LOGS] = logs

        data[const.DATA_NOTIFICATIONS] = [
            dict(n) for n in copy.deepcopy(raw.get(const.DATA_NOTIFICATIONS) or [])
        ]
        return data

    @classmethod
    def from_data(
        cls,
        data: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> HabitTrackerCoordinator:
        """Create a coordinator from a stored snapshot."""
        return cls(data, options, **kwargs)

    @property
    def data(self) -> StorageData:
        """Return a deep copy of the full state for the storage collaborator."""
        return copy.deepcopy(self._data)

    @property
    def data_buckets(self) -> StorageData:
        """Return the live data buckets (managers only)."""
        return self._data

    @property
    def habits(self) -> list[HabitData]:
        """Return all habits, archived included."""
        return list(self._data[const.DATA_HABITS].values())

    @property
    def active_habits(self) -> list[HabitData]:
        """Return active, non-archived habits."""
        return [
            h
            for h in self.habits
            if h.get(const.DATA_HABIT_ACTIVE, True)
            and not h.get(const.DATA_HABIT_ARCHIVED, False)
        ]

    @property
    def logs(self) -> list[HabitLogData]:
        """Return all log entries."""
        return list(self._data[const.DATA_LOGS].values())

    @property
    def notifications(self) -> list[NotificationData]:
        """Return the notification feed, newest first."""
        return list(self._data[const.DATA_NOTIFICATIONS])

    def today(self) -> date:
        """Return today's local date from the injected clock."""
        return cast("date", to_date(self._now(), self.time_zone))

    def _resolve(self, reference_date: date | datetime | str | None) -> date:
        if reference_date is None:
            return self.today()
        resolved = to_date(reference_date, self.time_zone)
        if resolved is None:
            raise db.EntityValidationError(
                field="reference_date", reason=f"invalid date {reference_date!r}"
            )
        return resolved

    def _persist(self) -> None:
        """Hand a snapshot of the current state to the storage callback."""
        if self._on_change is not None:
            self._on_change(self.data)

    # -------------------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------------------

    def get_habit(self, habit_id: str) -> HabitData:
        """Return a habit (raises EntityNotFoundError if unknown)."""
        return self.habit_manager.get_habit(habit_id)

    def get_log(self, habit_id: str, day: date | datetime | str) -> HabitLogData | None:
        """Return the log for (habit, day), if any."""
        return self.habit_manager.find_log(habit_id, date_key(self._resolve(day)))

    def get_goals(
        self, habit_id: str, reference_date: date | datetime | str | None = None
    ) -> GoalSet:
        """Return the daily/weekly/monthly goals of a habit."""
        return GoalEngine.get_goals(
            self.get_habit(habit_id), self._resolve(reference_date)
        )

    def get_weekly_status(
        self, habit_id: str, reference_date: date | datetime | str | None = None
    ) -> WeeklyStatus:
        """Return the weekly status of a habit."""
        return StatisticsEngine.get_weekly_status(
            self.get_habit(habit_id), self.logs, self._resolve(reference_date)
        )

    def get_completion_percentage(
        self, habit_id: str, day: date | datetime | str | None = None
    ) -> int:
        """Return the completion percentage of a habit's log on a day.

        Uses the log's target snapshot, so goal edits after the fact do not
        change historical percentages. A missing log counts as 0%.
        """
        habit = self.get_habit(habit_id)
        log = self.get_log(habit_id, self._resolve(day))
        if log is None:
            return 0
        return GoalEngine.get_completion_percentage(
            habit,
            float(log.get(const.DATA_LOG_VALUE) or 0),
            log.get(const.DATA_LOG_TARGET_SNAPSHOT),
        )

    def get_streak(
        self, habit_id: str, reference_date: date | datetime | str | None = None
    ) -> int:
        """Return the current streak of a habit."""
        return StreakEngine.calculate_streak(
            self.get_habit(habit_id), self.logs, self._resolve(reference_date)
        )

    def get_weekly_progress(
        self, reference_date: date | datetime | str | None = None
    ) -> int:
        """Return the aggregate weekly progress over active habits."""
        return StatisticsEngine.get_weekly_progress(
            self.active_habits, self.logs, self._resolve(reference_date)
        )

    def get_habit_weekly_percentage(
        self, habit_id: str, reference_date: date | datetime | str | None = None
    ) -> float:
        """Return one habit's weekly progress percentage."""
        return StatisticsEngine.get_habit_weekly_percentage(
            self.get_habit(habit_id), self.logs, self._resolve(reference_date)
        )

    def get_category_breakdown(
        self, reference_date: date | datetime | str | None = None
    ) -> dict[str, int]:
        """Return mean weekly progress per category."""
        return StatisticsEngine.get_category_breakdown(
            self.active_habits, self.logs, self._resolve(reference_date)
        )

    def is_day_recovered(self, habit_id: str, day: date | datetime | str) -> bool:
        """Return True when a missed scheduled day is saved by its week."""
        return StatisticsEngine.is_day_recovered(
            self.get_habit(habit_id), self.logs, self._resolve(day)
        )

    def get_badges(self) -> list[BadgeResult]:
        """Return the current badge set (freshly evaluated)."""
        return GamificationEngine.evaluate_badges(self.habits, self.logs, self.today())

    def check_risk(self, habit_id: str, today_value: float) -> RiskSignal:
        """Evaluate the risk pattern for a habit without notifying."""
        return RiskEngine.evaluate_risk(
            self.get_habit(habit_id),
            self.logs,
            today_value,
            self._data[const.DATA_NOTIFICATIONS],
            self.today(),
        )

    # -------------------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------------------

    def _after_mutation(self) -> None:
        self.gamification_manager.refresh()
        self._persist()

    def create_habit(self, user_input: dict[str, Any]) -> HabitData:
        """Create a habit."""
        habit = self.habit_manager.create_habit(user_input)
        self._after_mutation()
        return habit

    def update_habit(self, habit_id: str, user_input: dict[str, Any]) -> HabitData:
        """Edit a habit (id, creation date, unit and category are preserved)."""
        habit = self.habit_manager.update_habit(habit_id, user_input)
        self._after_mutation()
        return habit

    def archive_habit(self, habit_id: str) -> HabitData:
        """Soft-delete a habit."""
        habit = self.habit_manager.archive_habit(habit_id)
        self._after_mutation()
        return habit

    def restore_habit(self, habit_id: str) -> HabitData:
        """Restore an archived habit."""
        habit = self.habit_manager.restore_habit(habit_id)
        self._after_mutation()
        return habit

    def record_progress(
        self,
        habit_id: str,
        day: date | datetime | str,
        value: float,
        status: str = const.LOG_STATUS_DONE,
    ) -> HabitLogData:
        """Upsert progress for (habit, day).

        When the day is today, the risk detector runs against the new value
        and a risk notification is raised at most once per habit per day.
        """
        log = self.habit_manager.record_progress(habit_id, day, value, status)

        if (
            self.options[const.CONF_RISK_NOTIFICATIONS]
            and log[const.DATA_LOG_DATE] == date_key(self.today())
        ):
            signal = self.check_risk(habit_id, log[const.DATA_LOG_VALUE])
            if signal["should_notify"]:
                self.notification_manager.notify(
                    const.NOTIFICATION_TYPE_RISK,
                    const.NOTIFICATION_TITLE_RISK,
                    signal["message"],
                    habit_id=habit_id,
                )

        self._after_mutation()
        return log

    def delete_log(self, log_id: str) -> HabitLogData:
        """Delete one log entry."""
        log = self.habit_manager.delete_log(log_id)
        self._after_mutation()
        return log

    def mark_notification_read(self, notification_id: str) -> NotificationData:
        """Mark a notification as read."""
        notification = self.notification_manager.mark_read(notification_id)
        self._persist()
        return notification

    def mark_all_notifications_read(self) -> int:
        """Mark every notification as read."""
        changed = self.notification_manager.mark_all_read()
        if changed:
            self._persist()
        return changed

    def unread_notification_count(self) -> int:
        """Return the number of unread notifications."""
        return self.notification_manager.unread_count()

    def clear_notifications(self) -> int:
        """Remove all notifications."""
        removed = self.notification_manager.clear()
        self._persist()
        return removed

    def import_collections(
        self,
        habits: Iterable[HabitData],
        logs: Iterable[HabitLogData],
    ) -> None:
        """Replace habits and logs wholesale (e.g. restoring a backup).

        Notifications are kept; badges are re-primed without notifying.
        """
        loaded = self._load(
            {
                const.DATA_HABITS: list(habits),
                const.DATA_LOGS: list(logs),
                const.DATA_NOTIFICATIONS: self._data[const.DATA_NOTIFICATIONS],
            },
            self.time_zone,
        )
        self._data[const.DATA_HABITS] = loaded[const.DATA_HABITS]
        self._data[const.DATA_LOGS] = loaded[const.DATA_LOGS]
        self.gamification_manager.prime()
        const.LOGGER.info(
            "Imported %s habits and %s logs",
            len(self._data[const.DATA_HABITS]),
            len(self._data[const.DATA_LOGS]),
        )
        self._persist()
