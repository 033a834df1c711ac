"""Tests for HabitTrackerCoordinator - state ownership, queries and mutations.

Test Categories:
- Options and time zone
- Loading and snapshots
- Queries over the reference week
- Mutations: snapshots, upserts, archive
- Risk notifications
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime
import logging
from typing import Any

from freezegun import freeze_time
import pytest

from gayret import const
from gayret.coordinator import HabitTrackerCoordinator
from gayret.data_builders import EntityValidationError
from gayret.managers import EntityNotFoundError
from tests.helpers import make_habit, make_log, scenario_logs, storage_data


def risk_notifications(coordinator: HabitTrackerCoordinator) -> list[dict[str, Any]]:
    """Return risk notifications in the feed."""
    return [
        n
        for n in coordinator.notifications
        if n[const.DATA_NOTIFICATION_TYPE] == const.NOTIFICATION_TYPE_RISK
    ]


# =============================================================================
# Options
# =============================================================================


class TestOptions:
    """Tests for coordinator configuration."""

    def test_defaults(self, coordinator: HabitTrackerCoordinator) -> None:
        """Unspecified options get their defaults."""
        assert coordinator.options[const.CONF_TIME_ZONE] == "UTC"
        assert coordinator.options[const.CONF_MAX_NOTIFICATIONS] == 50

    def test_unknown_time_zone(self) -> None:
        """Unknown zones are a validation error."""
        with pytest.raises(EntityValidationError) as exc_info:
            HabitTrackerCoordinator(options={const.CONF_TIME_ZONE: "Mars/Olympus"})
        assert exc_info.value.field == const.CONF_TIME_ZONE

    def test_invalid_max_notifications(self) -> None:
        """The feed size must be positive."""
        with pytest.raises(EntityValidationError) as exc_info:
            HabitTrackerCoordinator(options={const.CONF_MAX_NOTIFICATIONS: 0})
        assert exc_info.value.field == const.CONF_MAX_NOTIFICATIONS

    def test_time_zone_decides_today(self) -> None:
        """22:00 UTC is already the next day in Istanbul."""
        coordinator = HabitTrackerCoordinator(
            options={const.CONF_TIME_ZONE: "Europe/Istanbul"},
            now=lambda: datetime(2024, 1, 3, 22, 0, tzinfo=UTC),
        )
        assert coordinator.today() == date(2024, 1, 4)

    def test_time_zone_is_per_coordinator(
        self, fixed_now: Callable[[], datetime]
    ) -> None:
        """A second coordinator never moves the first one's calendar."""
        kiritimati = HabitTrackerCoordinator(
            options={const.CONF_TIME_ZONE: "Pacific/Kiritimati"}, now=fixed_now
        )
        assert kiritimati.today() == date(2024, 1, 4)

        utc = HabitTrackerCoordinator(now=fixed_now)

        assert utc.today() == date(2024, 1, 3)
        assert kiritimati.today() == date(2024, 1, 4)
        habit = kiritimati.create_habit({"name": "Read"})
        assert habit[const.DATA_HABIT_CREATED_AT] == "2024-01-04"

    @freeze_time("2024-01-03 12:00:00")
    def test_default_clock(self) -> None:
        """Without an injected clock the current time is used."""
        assert HabitTrackerCoordinator().today() == date(2024, 1, 3)


# =============================================================================
# Loading and snapshots
# =============================================================================


class TestLoading:
    """Tests for from_data and the data snapshot."""

    def test_round_trip(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """A snapshot loads back into an equivalent coordinator."""
        data = scenario_coordinator.data
        reloaded = HabitTrackerCoordinator.from_data(data)
        assert reloaded.data == data
        assert data[const.DATA_META][const.DATA_META_SCHEMA_VERSION] == (
            const.SCHEMA_VERSION
        )

    def test_snapshot_is_a_copy(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """Editing a snapshot does not touch live state."""
        data = scenario_coordinator.data
        data[const.DATA_HABITS]["habit-h"][const.DATA_HABIT_NAME] = "Changed"
        assert scenario_coordinator.get_habit("habit-h")[const.DATA_HABIT_NAME] == "Read"

    def test_id_keyed_input(self, fixed_now: Callable[[], datetime]) -> None:
        """Collections may be stored as id-keyed dicts."""
        logs = scenario_logs()
        coordinator = HabitTrackerCoordinator.from_data(
            {
                const.DATA_HABITS: {"habit-h": make_habit()},
                const.DATA_LOGS: {log[const.DATA_LOG_ID]: log for log in logs},
            },
            now=fixed_now,
        )
        assert len(coordinator.logs) == 3

    def test_duplicate_keys_keep_last(
        self, fixed_now: Callable[[], datetime], caplog: pytest.LogCaptureFixture
    ) -> None:
        """Duplicate (habit, day) entries collapse to the last one with a warning."""
        logs = [
            make_log("habit-h", "2024-01-02", 1, log_id="first"),
            make_log("habit-h", "2024-01-02", 2, log_id="second"),
        ]
        with caplog.at_level(logging.WARNING):
            coordinator = HabitTrackerCoordinator.from_data(
                storage_data([make_habit()], logs), now=fixed_now
            )
        assert [log[const.DATA_LOG_ID] for log in coordinator.logs] == ["second"]
        assert "Duplicate log" in caplog.text

    def test_dangling_logs_kept_and_ignored(
        self, fixed_now: Callable[[], datetime], caplog: pytest.LogCaptureFixture
    ) -> None:
        """Logs of unknown habits are flagged but never break queries."""
        logs = [make_log("ghost", "2024-01-02", 5)]
        with caplog.at_level(logging.WARNING):
            coordinator = HabitTrackerCoordinator.from_data(
                storage_data([make_habit()], logs), now=fixed_now
            )
        assert "unknown habit" in caplog.text
        assert coordinator.get_weekly_progress() == 0.0

    def test_unknown_status_flagged(
        self, fixed_now: Callable[[], datetime], caplog: pytest.LogCaptureFixture
    ) -> None:
        """Stored logs with an unknown status are kept but flagged."""
        logs = [make_log("habit-h", "2024-01-02", 5, status="maybe")]
        with caplog.at_level(logging.WARNING):
            coordinator = HabitTrackerCoordinator.from_data(
                storage_data([make_habit()], logs), now=fixed_now
            )
        assert "unknown status" in caplog.text
        assert len(coordinator.logs) == 1

    def test_creation_timestamp_uses_local_day(
        self, fixed_now: Callable[[], datetime]
    ) -> None:
        """Stored creation instants become days in the configured zone."""
        habit = make_habit(created_at="2024-01-03T12:00:00Z")
        coordinator = HabitTrackerCoordinator.from_data(
            storage_data([habit], []),
            {const.CONF_TIME_ZONE: "Pacific/Kiritimati"},
            now=fixed_now,
        )
        stored = coordinator.get_habit("habit-h")
        assert stored[const.DATA_HABIT_CREATED_AT] == "2024-01-04"

    def test_on_change_receives_snapshots(
        self, fixed_now: Callable[[], datetime]
    ) -> None:
        """Every mutation hands a snapshot to the storage callback."""
        saved: list[dict[str, Any]] = []
        coordinator = HabitTrackerCoordinator(now=fixed_now, on_change=saved.append)

        habit = coordinator.create_habit({"name": "Read"})
        coordinator.record_progress(habit[const.DATA_HABIT_ID], "2024-01-03", 1)

        assert len(saved) == 2
        assert len(saved[-1][const.DATA_LOGS]) == 1
        assert saved[0][const.DATA_LOGS] == {}

    def test_import_collections(self, coordinator: HabitTrackerCoordinator) -> None:
        """Importing replaces habits and logs without announcing old badges."""
        coordinator.import_collections([make_habit()], scenario_logs())
        assert coordinator.get_streak("habit-h") == 1
        assert coordinator.notifications == []


# =============================================================================
# Queries
# =============================================================================


class TestQueries:
    """Tests for derived values on the reference week."""

    def test_weekly_status(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """Weekly status defaults to the current week."""
        status = scenario_coordinator.get_weekly_status("habit-h")
        assert status[const.WEEKLY_ACTIVE_DAYS_COUNT] == 5
        assert status[const.WEEKLY_GOAL] == 10.0
        assert status[const.WEEKLY_TOTAL_VALUE] == 3.0
        assert status[const.WEEKLY_IS_MET] is False
        assert status[const.WEEKLY_SUCCESS_DAYS] == 2

    def test_streak(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """Today's shortfall does not break the streak."""
        assert scenario_coordinator.get_streak("habit-h") == 1

    def test_goals(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """Goals resolve against the current month."""
        assert scenario_coordinator.get_goals("habit-h") == {
            "daily": 2.0,
            "weekly": 10.0,
            "monthly": 46.0,
        }

    def test_completion_percentage(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """Daily completion uses the stored log; missing days are 0%."""
        assert scenario_coordinator.get_completion_percentage("habit-h") == 50.0
        assert (
            scenario_coordinator.get_completion_percentage("habit-h", "2024-01-01")
            == 100.0
        )
        assert (
            scenario_coordinator.get_completion_percentage("habit-h", "2024-01-04")
            == 0.0
        )

    def test_progress_and_breakdown(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """Aggregate views cover active habits."""
        assert scenario_coordinator.get_weekly_progress() == 30.0
        assert scenario_coordinator.get_habit_weekly_percentage("habit-h") == 30.0
        assert scenario_coordinator.get_category_breakdown() == {
            const.CATEGORY_EDUCATION: 30.0
        }

    def test_badges(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """Badges are evaluated from the stored history."""
        badges = {
            b[const.DATA_BADGE_ID]: b[const.DATA_BADGE_UNLOCKED]
            for b in scenario_coordinator.get_badges()
        }
        assert badges[const.BADGE_ID_FIRST_STEP] is True
        assert badges[const.BADGE_ID_COLLECTOR] is False

    def test_recovery(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """The reference week is not met, so nothing is recovered."""
        assert not scenario_coordinator.is_day_recovered("habit-h", "2024-01-03")

    def test_get_log(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """Logs are addressed by habit and day."""
        log = scenario_coordinator.get_log("habit-h", date(2024, 1, 2))
        assert log is not None
        assert log[const.DATA_LOG_STATUS] == const.LOG_STATUS_SKIP
        assert scenario_coordinator.get_log("habit-h", "2024-01-05") is None

    def test_invalid_reference_date(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """Unparseable reference dates are rejected."""
        with pytest.raises(EntityValidationError):
            scenario_coordinator.get_streak("habit-h", "soon")

    def test_unknown_habit(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """Per-habit queries need an existing habit."""
        with pytest.raises(EntityNotFoundError):
            scenario_coordinator.get_streak("nope")


# =============================================================================
# Mutations
# =============================================================================


class TestMutations:
    """Tests for state changes through the coordinator."""

    def test_snapshot_survives_goal_edit(
        self, coordinator: HabitTrackerCoordinator
    ) -> None:
        """Raising the goal does not rewrite an existing day's target."""
        habit_id = coordinator.create_habit(
            {"name": "Read", "daily_goal": 2, "created_at": "2024-01-01"}
        )[const.DATA_HABIT_ID]
        coordinator.record_progress(habit_id, "2024-01-02", 1)

        coordinator.update_habit(habit_id, {"daily_goal": 5})
        log = coordinator.record_progress(habit_id, "2024-01-02", 3)

        assert log[const.DATA_LOG_TARGET_SNAPSHOT] == 2.0
        assert coordinator.get_completion_percentage(habit_id, "2024-01-02") == 100.0
        assert coordinator.get_goals(habit_id)["daily"] == 5.0

    def test_zero_goal_is_safe(self, coordinator: HabitTrackerCoordinator) -> None:
        """A zero goal yields 0% instead of failing."""
        habit_id = coordinator.create_habit({"name": "Stretch", "daily_goal": 0})[
            const.DATA_HABIT_ID
        ]
        coordinator.record_progress(habit_id, "2024-01-03", 5)
        assert coordinator.get_completion_percentage(habit_id) == 0.0
        assert coordinator.get_weekly_progress() == 0.0

    def test_update_keeps_immutable_fields(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """Unit and category edits are ignored."""
        updated = scenario_coordinator.update_habit(
            "habit-h", {"unit": const.HABIT_UNIT_MINUTES, "name": "Read books"}
        )
        assert updated[const.DATA_HABIT_UNIT] == const.HABIT_UNIT_PAGES
        assert updated[const.DATA_HABIT_NAME] == "Read books"

    def test_archive_hides_habit_keeps_logs(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """Archived habits leave aggregates but keep their history."""
        scenario_coordinator.archive_habit("habit-h")
        assert scenario_coordinator.active_habits == []
        assert scenario_coordinator.get_weekly_progress() == 0.0
        assert len(scenario_coordinator.logs) == 3
        assert scenario_coordinator.get_streak("habit-h") == 1

        scenario_coordinator.restore_habit("habit-h")
        assert scenario_coordinator.get_weekly_progress() == 30.0

    def test_delete_log(self, scenario_coordinator: HabitTrackerCoordinator) -> None:
        """Deleting Monday's entry breaks the streak."""
        log = scenario_coordinator.get_log("habit-h", "2024-01-01")
        assert log is not None
        scenario_coordinator.delete_log(log[const.DATA_LOG_ID])
        assert len(scenario_coordinator.logs) == 2
        assert scenario_coordinator.get_streak("habit-h") == 0

    def test_notification_housekeeping(
        self, coordinator: HabitTrackerCoordinator
    ) -> None:
        """Notifications can be read and cleared through the coordinator."""
        habit = coordinator.create_habit({"name": "Read"})
        coordinator.record_progress(habit[const.DATA_HABIT_ID], "2024-01-03", 1)
        notification = coordinator.notifications[0]

        coordinator.mark_notification_read(notification[const.DATA_NOTIFICATION_ID])
        assert coordinator.notifications[0][const.DATA_NOTIFICATION_READ] is True
        assert coordinator.clear_notifications() == 1
        assert coordinator.notifications == []

    def test_mark_all_notifications_read(
        self, fixed_now: Callable[[], datetime]
    ) -> None:
        """Marking everything read persists once and reports the change."""
        saved: list[dict[str, Any]] = []
        coordinator = HabitTrackerCoordinator(now=fixed_now, on_change=saved.append)
        for title in ("One", "Two"):
            coordinator.notification_manager.notify(
                const.NOTIFICATION_TYPE_SYSTEM, title, title
            )
        assert coordinator.unread_notification_count() == 2

        assert coordinator.mark_all_notifications_read() == 2
        assert coordinator.unread_notification_count() == 0
        assert len(saved) == 1
        assert all(
            n[const.DATA_NOTIFICATION_READ]
            for n in saved[-1][const.DATA_NOTIFICATIONS]
        )

        assert coordinator.mark_all_notifications_read() == 0
        assert len(saved) == 1


# =============================================================================
# Risk notifications
# =============================================================================


class TestRiskNotifications:
    """Tests for the two-day under-target warning."""

    def test_raised_once_per_day(self, coordinator: HabitTrackerCoordinator) -> None:
        """A short yesterday and a short today raise one warning."""
        habit_id = coordinator.create_habit(
            {"name": "Read", "daily_goal": 2, "created_at": "2024-01-01"}
        )[const.DATA_HABIT_ID]
        coordinator.record_progress(habit_id, "2024-01-02", 1)
        assert risk_notifications(coordinator) == []

        coordinator.record_progress(habit_id, "2024-01-03", 1)
        coordinator.record_progress(habit_id, "2024-01-03", 1.5)

        risks = risk_notifications(coordinator)
        assert len(risks) == 1
        assert risks[0][const.DATA_NOTIFICATION_HABIT_ID] == habit_id
        assert risks[0][const.DATA_NOTIFICATION_TITLE] == const.NOTIFICATION_TITLE_RISK
        assert "Read" in risks[0][const.DATA_NOTIFICATION_MESSAGE]

    def test_past_days_do_not_trigger(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """Only progress recorded for today is checked."""
        scenario_coordinator.record_progress("habit-h", "2024-01-02", 0)
        assert risk_notifications(scenario_coordinator) == []

    def test_disabled(self, fixed_now: Callable[[], datetime]) -> None:
        """No warnings when risk notifications are off."""
        coordinator = HabitTrackerCoordinator.from_data(
            storage_data([make_habit()]),
            {const.CONF_RISK_NOTIFICATIONS: False},
            now=fixed_now,
        )
        coordinator.record_progress("habit-h", "2024-01-03", 0)
        assert risk_notifications(coordinator) == []

    def test_check_risk_is_advisory(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """check_risk reports without notifying."""
        signal = scenario_coordinator.check_risk("habit-h", 0)
        # Tuesday was a skip with value 0, below its target
        assert signal["at_risk"] is True
        assert risk_notifications(scenario_coordinator) == []

    def test_check_risk_reads_stored_logs(
        self, scenario_coordinator: HabitTrackerCoordinator
    ) -> None:
        """Fixing yesterday's entry clears the risk."""
        assert scenario_coordinator.check_risk("habit-h", 0)["at_risk"] is True

        scenario_coordinator.record_progress("habit-h", "2024-01-02", 2)

        assert scenario_coordinator.check_risk("habit-h", 0)["at_risk"] is False
