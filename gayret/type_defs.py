"""Type definitions for Gayret data structures.

Entities are stored as plain dicts so the external storage collaborator can
serialize them without conversion. The TypedDicts below describe their fixed
shape for static analysis only; runtime code still uses ``.get()`` with
defaults where data may come from older or hand-edited stores.

IMPORTANT: This file must NOT import from coordinator.py or managers.
Only typing machinery lives here.
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

HabitId = str  # UUID string
LogId = str  # UUID string
NotificationId = str  # UUID string
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"

LogStatus = Literal["done", "skip", "fail", "recovered"]
NotificationType = Literal["daily", "system", "achievement", "risk"]


# =============================================================================
# Source entities
# =============================================================================


class HabitData(TypedDict):
    """A recurring target definition.

    ``recurrence`` holds weekday indices with 0=Sunday..6=Saturday.
    ``created_at`` may be a date or a datetime string; only its calendar date
    is used by the engines.
    """

    internal_id: HabitId
    name: str
    description: NotRequired[str]
    daily_goal: float
    weekly_goal_override: float | None
    monthly_goal_override: float | None
    unit: str
    category: str
    recurrence: list[int]
    color: NotRequired[str]
    icon: NotRequired[str]
    created_at: ISODate | ISODatetime
    active: bool
    archived: bool


class HabitLogData(TypedDict):
    """One recorded observation for one habit on one calendar day.

    ``target_snapshot`` is the daily goal in effect at first write and is
    never overwritten afterwards.
    """

    internal_id: LogId
    habit_id: HabitId
    date: ISODate
    value: float
    target_snapshot: float | None
    status: LogStatus


class NotificationData(TypedDict):
    """A notification raised by the coordinator."""

    internal_id: NotificationId
    type: NotificationType
    title: str
    message: str
    date: ISODate
    read: bool
    habit_id: NotRequired[HabitId | None]


class StorageData(TypedDict):
    """Full state handed to and received from the storage collaborator."""

    meta: dict[str, int]
    habits: dict[HabitId, HabitData]
    logs: dict[LogId, HabitLogData]
    notifications: list[NotificationData]


# =============================================================================
# Derived values
# =============================================================================


class GoalSet(TypedDict):
    """Effective daily/weekly/monthly targets at a reference date."""

    daily: float
    weekly: float
    monthly: float


class WeeklyStatus(TypedDict):
    """Aggregate of one habit over the Monday..Sunday week."""

    total_value: float
    weekly_goal: float
    is_weekly_met: bool
    success_days: int
    active_days_count: int


class BadgeContext(TypedDict):
    """Pre-computed inputs shared by all badge predicates in one evaluation.

    ``log_index`` maps ``(habit_id, date)`` to the entry for that day.
    """

    habits: list[HabitData]
    logs: list[HabitLogData]
    log_index: dict[tuple[str, str], HabitLogData]
    reference_date: ISODate


class BadgeResult(TypedDict):
    """Unlock state of a badge for one evaluation."""

    id: str
    title: str
    description: str
    icon: str
    unlocked: bool


class RiskSignal(TypedDict):
    """Advisory output of the risk detector.

    ``at_risk`` reports the two-day under-target pattern; ``should_notify``
    is additionally False when a risk notification was already raised today.
    """

    habit_id: HabitId
    date: ISODate
    at_risk: bool
    should_notify: bool
    message: str
