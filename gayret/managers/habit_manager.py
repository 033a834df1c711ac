"""Habit Manager - Habit lifecycle and log mutations.

This manager owns every write to the habit and log buckets:
- Habit create / edit / archive (soft delete) / restore
- Record progress (upsert one log per habit per day)
- Delete a log entry

Uniqueness of (habit_id, date) is guaranteed by construction: the upsert
looks up the existing entry and replaces it in the same step, it never
appends a second one.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..utils.dt_utils import to_date
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import HabitData, HabitLogData

__all__ = ["EntityNotFoundError", "HabitManager"]


class EntityNotFoundError(LookupError):
    """Raised when a mutation references an unknown habit or log.

    Attributes:
        entity_type: "habit" or "log"
        entity_id: The id that could not be found
    """

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize EntityNotFoundError."""
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"Unknown {entity_type}: {entity_id}")


class HabitManager(BaseManager):
    """Manager for habit and log mutations.

    NOT responsible for:
    - Badge evaluation (GamificationManager)
    - Risk detection and notifications (Coordinator + NotificationManager)
    """

    @property
    def _habits(self) -> dict[str, HabitData]:
        return self.coordinator.data_buckets[const.DATA_HABITS]

    @property
    def _logs(self) -> dict[str, HabitLogData]:
        return self.coordinator.data_buckets[const.DATA_LOGS]

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _local_day(self, value: Any) -> Any:
        """Return the day key of a date-like value in the coordinator's time zone.

        Unparseable input is returned unchanged for the schema to reject.
        """
        if isinstance(value, (date, str)):
            parsed = to_date(value, self.coordinator.time_zone)
            if parsed is not None:
                return parsed.isoformat()
        return value

    def get_habit(self, habit_id: str) -> HabitData:
        """Return a habit or raise EntityNotFoundError."""
        habit = self._habits.get(habit_id)
        if habit is None:
            raise EntityNotFoundError("habit", habit_id)
        return habit

    def find_log(self, habit_id: str, day_key: str) -> HabitLogData | None:
        """Return the log for (habit, day) if one exists."""
        for log in self._logs.values():
            if (
                log.get(const.DATA_LOG_HABIT_ID) == habit_id
                and log.get(const.DATA_LOG_DATE) == day_key
            ):
                return log
        return None

    # -------------------------------------------------------------------------
    # Habit lifecycle
    # -------------------------------------------------------------------------

    def create_habit(self, user_input: dict[str, Any]) -> HabitData:
        """Create a habit; ``created_at`` defaults to today."""
        data = dict(user_input)
        if const.DATA_HABIT_CREATED_AT in data:
            data[const.DATA_HABIT_CREATED_AT] = self._local_day(
                data[const.DATA_HABIT_CREATED_AT]
            )
        else:
            data[const.DATA_HABIT_CREATED_AT] = self.today().isoformat()
        habit = db.build_habit(data)
        self._habits[habit[const.DATA_HABIT_ID]] = habit
        const.LOGGER.info(
            "Created habit '%s' (%s)",
            habit[const.DATA_HABIT_NAME],
            habit[const.DATA_HABIT_ID],
        )
        return habit

    def update_habit(self, habit_id: str, user_input: dict[str, Any]) -> HabitData:
        """Edit a habit.

        Existing log snapshots are untouched, so goal edits never rewrite
        history.
        """
        habit = db.build_habit(user_input, existing=self.get_habit(habit_id))
        self._habits[habit_id] = habit
        const.LOGGER.debug("Updated habit %s: %s", habit_id, sorted(user_input))
        return habit

    def archive_habit(self, habit_id: str) -> HabitData:
        """Soft-delete a habit. Its logs stay queryable."""
        habit = self.get_habit(habit_id)
        habit[const.DATA_HABIT_ARCHIVED] = True
        habit[const.DATA_HABIT_ACTIVE] = False
        const.LOGGER.info("Archived habit %s", habit_id)
        return habit

    def restore_habit(self, habit_id: str) -> HabitData:
        """Bring an archived habit back."""
        habit = self.get_habit(habit_id)
        habit[const.DATA_HABIT_ARCHIVED] = False
        habit[const.DATA_HABIT_ACTIVE] = True
        const.LOGGER.info("Restored habit %s", habit_id)
        return habit

    # -------------------------------------------------------------------------
    # Logs
    # -------------------------------------------------------------------------

    def record_progress(
        self,
        habit_id: str,
        day: date | datetime | str,
        value: float,
        status: str = const.LOG_STATUS_DONE,
    ) -> HabitLogData:
        """Upsert the log for (habit, day).

        Args:
            habit_id: Owning habit
            day: Calendar day (date, datetime or day string)
            value: Recorded quantity
            status: done, skip or fail

        Returns:
            The stored entry

        Raises:
            EntityValidationError: For malformed input
            EntityNotFoundError: If the habit does not exist
        """
        raw_day = self._local_day(day)
        data = db.validate(
            db.RECORD_PROGRESS_SCHEMA,
            {
                const.DATA_LOG_HABIT_ID: habit_id,
                const.DATA_LOG_DATE: raw_day,
                const.DATA_LOG_VALUE: value,
                const.DATA_LOG_STATUS: status,
            },
        )
        habit = self.get_habit(habit_id)
        day_key = data[const.DATA_LOG_DATE]

        existing = self.find_log(habit_id, day_key)
        log = db.build_log_entry(
            habit,
            day_key,
            data[const.DATA_LOG_VALUE],
            data[const.DATA_LOG_STATUS],
            existing=existing,
        )
        self._logs[log[const.DATA_LOG_ID]] = log

        const.LOGGER.debug(
            "%s log for habit %s on %s: value=%s status=%s snapshot=%s",
            "Updated" if existing else "Recorded",
            habit_id,
            day_key,
            log[const.DATA_LOG_VALUE],
            log[const.DATA_LOG_STATUS],
            log[const.DATA_LOG_TARGET_SNAPSHOT],
        )
        return log

    def delete_log(self, log_id: str) -> HabitLogData:
        """Remove exactly one log entry.

        Raises:
            EntityNotFoundError: If no entry has this id
        """
        log = self._logs.pop(log_id, None)
        if log is None:
            raise EntityNotFoundError("log", log_id)
        const.LOGGER.debug(
            "Deleted log %s (habit %s, %s)",
            log_id,
            log.get(const.DATA_LOG_HABIT_ID),
            log.get(const.DATA_LOG_DATE),
        )
        return log
