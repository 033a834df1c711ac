"""Shared fixtures for Gayret tests."""

from collections.abc import Callable
from datetime import UTC, date, datetime

import pytest

from gayret.coordinator import HabitTrackerCoordinator
from tests.helpers import make_habit, scenario_logs, storage_data

# Wednesday of the reference week (Mon 2024-01-01 .. Sun 2024-01-07)
REFERENCE_DAY = date(2024, 1, 3)
REFERENCE_NOW = datetime(2024, 1, 3, 12, 0, tzinfo=UTC)


@pytest.fixture
def fixed_now() -> Callable[[], datetime]:
    """Clock pinned to midday on the reference Wednesday."""
    return lambda: REFERENCE_NOW


@pytest.fixture
def coordinator(fixed_now: Callable[[], datetime]) -> HabitTrackerCoordinator:
    """Empty coordinator on the reference Wednesday."""
    return HabitTrackerCoordinator(now=fixed_now)


@pytest.fixture
def scenario_coordinator(
    fixed_now: Callable[[], datetime],
) -> HabitTrackerCoordinator:
    """Coordinator loaded with habit H and its reference-week logs."""
    return HabitTrackerCoordinator.from_data(
        storage_data([make_habit()], scenario_logs()), now=fixed_now
    )
