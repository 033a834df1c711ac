# File: const.py
"""Constants for the Gayret habit engine.

This file centralizes storage keys, statuses, badge identifiers, defaults and
user-facing notification texts for consistency across the package.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General Information
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# Storage
SCHEMA_VERSION: Final = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys (coordinator options)
# ------------------------------------------------------------------------------------------------
CONF_TIME_ZONE = "time_zone"
CONF_RISK_NOTIFICATIONS = "risk_notifications"
CONF_BADGE_NOTIFICATIONS = "badge_notifications"
CONF_MAX_NOTIFICATIONS = "max_notifications"

DEFAULT_TIME_ZONE_NAME = "UTC"
DEFAULT_RISK_NOTIFICATIONS = True
DEFAULT_BADGE_NOTIFICATIONS = True
DEFAULT_MAX_NOTIFICATIONS = 50

# ------------------------------------------------------------------------------------------------
# Engine Limits
# ------------------------------------------------------------------------------------------------
STREAK_MAX_LOOKBACK_DAYS: Final = 365

# ------------------------------------------------------------------------------------------------
# Top-level data buckets
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_HABITS = "habits"
DATA_LOGS = "logs"
DATA_NOTIFICATIONS = "notifications"

# ------------------------------------------------------------------------------------------------
# Habit fields
# ------------------------------------------------------------------------------------------------
DATA_HABIT_ID = "internal_id"
DATA_HABIT_NAME = "name"
DATA_HABIT_DESCRIPTION = "description"
DATA_HABIT_DAILY_GOAL = "daily_goal"
DATA_HABIT_WEEKLY_GOAL_OVERRIDE = "weekly_goal_override"
DATA_HABIT_MONTHLY_GOAL_OVERRIDE = "monthly_goal_override"
DATA_HABIT_UNIT = "unit"
DATA_HABIT_CATEGORY = "category"
DATA_HABIT_RECURRENCE = "recurrence"
DATA_HABIT_COLOR = "color"
DATA_HABIT_ICON = "icon"
DATA_HABIT_CREATED_AT = "created_at"
DATA_HABIT_ACTIVE = "active"
DATA_HABIT_ARCHIVED = "archived"

# Fields an edit is never allowed to change
HABIT_IMMUTABLE_FIELDS: Final = frozenset(
    {DATA_HABIT_ID, DATA_HABIT_CREATED_AT, DATA_HABIT_UNIT, DATA_HABIT_CATEGORY}
)

HABIT_UNIT_PAGES = "pages"
HABIT_UNIT_MINUTES = "minutes"
HABIT_UNIT_COUNT = "count"
HABIT_UNIT_TIMES = "times"
HABIT_UNITS: Final = (
    HABIT_UNIT_PAGES,
    HABIT_UNIT_MINUTES,
    HABIT_UNIT_COUNT,
    HABIT_UNIT_TIMES,
)

CATEGORY_HEALTH = "health"
CATEGORY_CAREER = "career"
CATEGORY_SPIRITUALITY = "spirituality"
CATEGORY_ART = "art"
CATEGORY_EDUCATION = "education"
CATEGORY_OTHER = "other"
HABIT_CATEGORIES: Final = (
    CATEGORY_HEALTH,
    CATEGORY_CAREER,
    CATEGORY_SPIRITUALITY,
    CATEGORY_ART,
    CATEGORY_EDUCATION,
    CATEGORY_OTHER,
)

DEFAULT_HABIT_DAILY_GOAL = 1.0
DEFAULT_HABIT_UNIT = HABIT_UNIT_PAGES
DEFAULT_HABIT_CATEGORY = CATEGORY_OTHER
DEFAULT_HABIT_RECURRENCE: Final = (1, 2, 3, 4, 5)  # Mon..Fri
DEFAULT_HABIT_COLOR = "#f97316"
DEFAULT_HABIT_ICON = "target"

# ------------------------------------------------------------------------------------------------
# Log entry fields
# ------------------------------------------------------------------------------------------------
DATA_LOG_ID = "internal_id"
DATA_LOG_HABIT_ID = "habit_id"
DATA_LOG_DATE = "date"
DATA_LOG_VALUE = "value"
DATA_LOG_TARGET_SNAPSHOT = "target_snapshot"
DATA_LOG_STATUS = "status"

LOG_STATUS_DONE = "done"
LOG_STATUS_SKIP = "skip"
LOG_STATUS_FAIL = "fail"
LOG_STATUS_RECOVERED = "recovered"

# Statuses the record-progress operation may write
RECORDABLE_LOG_STATUSES: Final = (LOG_STATUS_DONE, LOG_STATUS_SKIP, LOG_STATUS_FAIL)
# Statuses accepted on stored entries
LOG_STATUSES: Final = (*RECORDABLE_LOG_STATUSES, LOG_STATUS_RECOVERED)
# Statuses that keep a streak alive without extending it
STREAK_MAINTAINING_STATUSES: Final = frozenset(
    {LOG_STATUS_SKIP, LOG_STATUS_RECOVERED}
)

# ------------------------------------------------------------------------------------------------
# Notification fields
# ------------------------------------------------------------------------------------------------
DATA_NOTIFICATION_ID = "internal_id"
DATA_NOTIFICATION_TYPE = "type"
DATA_NOTIFICATION_TITLE = "title"
DATA_NOTIFICATION_MESSAGE = "message"
DATA_NOTIFICATION_DATE = "date"
DATA_NOTIFICATION_READ = "read"
DATA_NOTIFICATION_HABIT_ID = "habit_id"

NOTIFICATION_TYPE_DAILY = "daily"
NOTIFICATION_TYPE_SYSTEM = "system"
NOTIFICATION_TYPE_ACHIEVEMENT = "achievement"
NOTIFICATION_TYPE_RISK = "risk"
NOTIFICATION_TYPES: Final = (
    NOTIFICATION_TYPE_DAILY,
    NOTIFICATION_TYPE_SYSTEM,
    NOTIFICATION_TYPE_ACHIEVEMENT,
    NOTIFICATION_TYPE_RISK,
)

NOTIFICATION_TITLE_RISK = "Heads up!"
NOTIFICATION_MESSAGE_RISK = "You have been under your {name} target for 2 days."
NOTIFICATION_TITLE_BADGE = "Badge unlocked!"
NOTIFICATION_MESSAGE_BADGE = "You earned the {title} badge!"

# ------------------------------------------------------------------------------------------------
# Badges
# ------------------------------------------------------------------------------------------------
BADGE_ID_FIRST_STEP = "b_first_step"
BADGE_ID_WEEK_STREAK = "b_week_streak"
BADGE_ID_MONTH_STREAK = "b_month_streak"
BADGE_ID_EARLY_BIRD = "b_early_bird"
BADGE_ID_COLLECTOR = "b_collector"

BADGE_WEEK_STREAK_THRESHOLD: Final = 7
BADGE_MONTH_STREAK_THRESHOLD: Final = 30
BADGE_EARLY_BIRD_LOG_THRESHOLD: Final = 10
BADGE_COLLECTOR_HABIT_THRESHOLD: Final = 5

# Result keys
DATA_BADGE_ID = "id"
DATA_BADGE_TITLE = "title"
DATA_BADGE_DESCRIPTION = "description"
DATA_BADGE_ICON = "icon"
DATA_BADGE_UNLOCKED = "unlocked"

# ------------------------------------------------------------------------------------------------
# Goal / period result keys
# ------------------------------------------------------------------------------------------------
GOAL_DAILY = "daily"
GOAL_WEEKLY = "weekly"
GOAL_MONTHLY = "monthly"

WEEKLY_TOTAL_VALUE = "total_value"
WEEKLY_GOAL = "weekly_goal"
WEEKLY_IS_MET = "is_weekly_met"
WEEKLY_SUCCESS_DAYS = "success_days"
WEEKLY_ACTIVE_DAYS_COUNT = "active_days_count"

