# File: __init__.py
"""Initialization file for Gayret, the habit progress engine.

Exposes the coordinator (the single state owner), the stateless engines and
the domain exceptions.

Key Features:
- Goal resolution, weekly aggregation and streaks over habit logs.
- Badge evaluation and two-day risk detection.
- Habit lifecycle and progress upserts through the coordinator.
"""

from __future__ import annotations

from . import const
from .coordinator import HabitTrackerCoordinator
from .data_builders import EntityValidationError
from .engines import (
    BadgeKind,
    GamificationEngine,
    GoalEngine,
    RiskEngine,
    StatisticsEngine,
    StreakEngine,
)
from .managers import EntityNotFoundError

__all__ = [
    "BadgeKind",
    "EntityNotFoundError",
    "EntityValidationError",
    "GamificationEngine",
    "GoalEngine",
    "HabitTrackerCoordinator",
    "RiskEngine",
    "StatisticsEngine",
    "StreakEngine",
    "const",
]
