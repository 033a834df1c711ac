"""Entity building and validation helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Entity field defaults
- Input validation (voluptuous schemas)
- Complete entity structure building

### Build Functions
Each entity type has a `build_<entity>()` function that:
- Takes user input (DATA_* keys) and, for updates, the existing entity
- Generates internal_id (UUID) for new entities
- Applies field defaults
- Returns a complete entity dict ready for storage

### Validation
Schemas reject malformed input before anything is built. Failures surface as
EntityValidationError carrying the offending field, so callers never see raw
voluptuous exceptions.

Consumers:
- managers/habit_manager.py (habit and log mutations)
- managers/notification_manager.py (notification entries)
- coordinator.py (options)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any
import uuid

import voluptuous as vol

from . import const
from .utils.dt_utils import dt_parse_date, dt_today_local

if TYPE_CHECKING:
    from .type_defs import HabitData, HabitLogData, NotificationData

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The DATA_* / CONF_* key that failed validation
        reason: Human-readable explanation

    Example:
        raise EntityValidationError(
            field=const.DATA_HABIT_DAILY_GOAL,
            reason="expected a non-negative number",
        )
    """

    def __init__(self, field: str, reason: str) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {reason}")


# ==============================================================================
# VALIDATORS
# ==============================================================================


def day_key_validator(value: Any) -> str:
    """Validate a calendar day and normalize it to ``YYYY-MM-DD``."""
    parsed = dt_parse_date(value) if isinstance(value, str) else None
    if parsed is None:
        raise vol.Invalid(f"expected a date string, got {value!r}")
    return parsed.isoformat()


def recurrence_validator(value: Any) -> list[int]:
    """Validate weekday indices (0=Sunday..6=Saturday), deduplicated and sorted."""
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        raise vol.Invalid("expected a list of weekday indices")
    days: set[int] = set()
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 6:
            raise vol.Invalid(f"weekday index out of range: {item!r}")
        days.add(item)
    return sorted(days)


def finite_validator(value: float) -> float:
    """Reject NaN and infinite quantities."""
    if not math.isfinite(value):
        raise vol.Invalid(f"expected a finite number, got {value!r}")
    return value


_NON_NEGATIVE = vol.All(vol.Coerce(float), finite_validator, vol.Range(min=0))
_OPTIONAL_NON_NEGATIVE = vol.Any(None, _NON_NEGATIVE)

HABIT_INPUT_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_HABIT_NAME): vol.All(str, vol.Length(min=1)),
        vol.Optional(const.DATA_HABIT_DESCRIPTION): str,
        vol.Optional(const.DATA_HABIT_DAILY_GOAL): _NON_NEGATIVE,
        vol.Optional(const.DATA_HABIT_WEEKLY_GOAL_OVERRIDE): _OPTIONAL_NON_NEGATIVE,
        vol.Optional(const.DATA_HABIT_MONTHLY_GOAL_OVERRIDE): _OPTIONAL_NON_NEGATIVE,
        vol.Optional(const.DATA_HABIT_UNIT): vol.In(const.HABIT_UNITS),
        vol.Optional(const.DATA_HABIT_CATEGORY): vol.In(const.HABIT_CATEGORIES),
        vol.Optional(const.DATA_HABIT_RECURRENCE): recurrence_validator,
        vol.Optional(const.DATA_HABIT_COLOR): str,
        vol.Optional(const.DATA_HABIT_ICON): str,
        vol.Optional(const.DATA_HABIT_CREATED_AT): day_key_validator,
    },
    extra=vol.PREVENT_EXTRA,
)

RECORD_PROGRESS_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_LOG_HABIT_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.DATA_LOG_DATE): day_key_validator,
        vol.Required(const.DATA_LOG_VALUE): _NON_NEGATIVE,
        vol.Optional(const.DATA_LOG_STATUS, default=const.LOG_STATUS_DONE): vol.In(
            const.RECORDABLE_LOG_STATUSES
        ),
    }
)

OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.CONF_TIME_ZONE, default=const.DEFAULT_TIME_ZONE_NAME
        ): vol.All(str, vol.Length(min=1)),
        vol.Optional(
            const.CONF_RISK_NOTIFICATIONS, default=const.DEFAULT_RISK_NOTIFICATIONS
        ): bool,
        vol.Optional(
            const.CONF_BADGE_NOTIFICATIONS, default=const.DEFAULT_BADGE_NOTIFICATIONS
        ): bool,
        vol.Optional(
            const.CONF_MAX_NOTIFICATIONS, default=const.DEFAULT_MAX_NOTIFICATIONS
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
    }
)


def validate(schema: vol.Schema, data: dict[str, Any]) -> dict[str, Any]:
    """Run a schema and translate voluptuous failures to EntityValidationError.

    Raises:
        EntityValidationError: For the first reported failure
    """
    try:
        return schema(data)
    except vol.MultipleInvalid as err:
        first = err.errors[0]
        field = str(first.path[0]) if first.path else "input"
        raise EntityValidationError(field=field, reason=first.msg) from err
    except vol.Invalid as err:
        field = str(err.path[0]) if err.path else "input"
        raise EntityValidationError(field=field, reason=err.msg) from err


# ==============================================================================
# HABITS
# ==============================================================================


def build_habit(
    user_input: dict[str, Any],
    existing: HabitData | None = None,
) -> HabitData:
    """Build habit data for create or update operations.

    One function handles both create (existing=None) and update.

    Args:
        user_input: Data with DATA_HABIT_* keys (may have missing fields)
        existing: None for create, existing HabitData for update

    Returns:
        Complete HabitData ready for storage

    Raises:
        EntityValidationError: If input fails validation or a new habit has
            no name

    Notes:
        Updates never change internal_id, created_at, unit or category;
        such keys in user_input are ignored.
    """
    data = validate(HABIT_INPUT_SCHEMA, dict(user_input))
    is_create = existing is None

    if not is_create:
        ignored = sorted(const.HABIT_IMMUTABLE_FIELDS.intersection(data))
        if ignored:
            const.LOGGER.debug("Ignoring immutable habit fields on update: %s", ignored)
        for key in ignored:
            data.pop(key)

    def get_field(data_key: str, default: Any) -> Any:
        """Get field value: user_input > existing > default."""
        if data_key in data:
            return data[data_key]
        if existing is not None:
            return existing.get(data_key, default)
        return default

    name = str(get_field(const.DATA_HABIT_NAME, "")).strip()
    if not name:
        raise EntityValidationError(
            field=const.DATA_HABIT_NAME, reason="a habit needs a name"
        )

    if existing is not None:
        internal_id = existing[const.DATA_HABIT_ID]
        created_at = existing[const.DATA_HABIT_CREATED_AT]
    else:
        internal_id = str(uuid.uuid4())
        created_at = data.get(const.DATA_HABIT_CREATED_AT) or (
            dt_today_local().isoformat()
        )

    return {
        const.DATA_HABIT_ID: internal_id,
        const.DATA_HABIT_NAME: name,
        const.DATA_HABIT_DESCRIPTION: get_field(const.DATA_HABIT_DESCRIPTION, ""),
        const.DATA_HABIT_DAILY_GOAL: float(
            get_field(const.DATA_HABIT_DAILY_GOAL, const.DEFAULT_HABIT_DAILY_GOAL)
        ),
        const.DATA_HABIT_WEEKLY_GOAL_OVERRIDE: get_field(
            const.DATA_HABIT_WEEKLY_GOAL_OVERRIDE, None
        ),
        const.DATA_HABIT_MONTHLY_GOAL_OVERRIDE: get_field(
            const.DATA_HABIT_MONTHLY_GOAL_OVERRIDE, None
        ),
        const.DATA_HABIT_UNIT: get_field(
            const.DATA_HABIT_UNIT, const.DEFAULT_HABIT_UNIT
        ),
        const.DATA_HABIT_CATEGORY: get_field(
            const.DATA_HABIT_CATEGORY, const.DEFAULT_HABIT_CATEGORY
        ),
        const.DATA_HABIT_RECURRENCE: list(
            get_field(const.DATA_HABIT_RECURRENCE, const.DEFAULT_HABIT_RECURRENCE)
        ),
        const.DATA_HABIT_COLOR: get_field(
            const.DATA_HABIT_COLOR, const.DEFAULT_HABIT_COLOR
        ),
        const.DATA_HABIT_ICON: get_field(const.DATA_HABIT_ICON, const.DEFAULT_HABIT_ICON),
        const.DATA_HABIT_CREATED_AT: created_at,
        const.DATA_HABIT_ACTIVE: get_field(const.DATA_HABIT_ACTIVE, True),
        const.DATA_HABIT_ARCHIVED: get_field(const.DATA_HABIT_ARCHIVED, False),
    }


# ==============================================================================
# LOG ENTRIES
# ==============================================================================


def build_log_entry(
    habit: HabitData,
    day_key: str,
    value: float,
    status: str,
    existing: HabitLogData | None = None,
) -> HabitLogData:
    """Build a log entry for the record-progress upsert.

    The target snapshot is taken from the existing entry when there is one
    (even if it is 0) and from the habit's current daily goal otherwise, so
    the goal in effect at first write is preserved forever.

    Args:
        habit: Owning habit
        day_key: Validated ``YYYY-MM-DD`` day
        value: Recorded quantity
        status: One of RECORDABLE_LOG_STATUSES
        existing: Entry already stored for (habit, day), if any

    Returns:
        Complete HabitLogData ready for storage
    """
    if existing is not None:
        internal_id = existing[const.DATA_LOG_ID]
        snapshot = existing.get(const.DATA_LOG_TARGET_SNAPSHOT)
    else:
        internal_id = str(uuid.uuid4())
        snapshot = None

    if snapshot is None:
        snapshot = float(habit.get(const.DATA_HABIT_DAILY_GOAL) or 0)

    return {
        const.DATA_LOG_ID: internal_id,
        const.DATA_LOG_HABIT_ID: habit[const.DATA_HABIT_ID],
        const.DATA_LOG_DATE: day_key,
        const.DATA_LOG_VALUE: float(value),
        const.DATA_LOG_TARGET_SNAPSHOT: snapshot,
        const.DATA_LOG_STATUS: status,
    }


# ==============================================================================
# NOTIFICATIONS
# ==============================================================================


def build_notification(
    notification_type: str,
    title: str,
    message: str,
    day_key: str,
    habit_id: str | None = None,
) -> NotificationData:
    """Build an unread notification entry.

    Raises:
        EntityValidationError: If the notification type is unknown
    """
    if notification_type not in const.NOTIFICATION_TYPES:
        raise EntityValidationError(
            field=const.DATA_NOTIFICATION_TYPE,
            reason=f"unknown notification type {notification_type!r}",
        )
    return {
        const.DATA_NOTIFICATION_ID: str(uuid.uuid4()),
        const.DATA_NOTIFICATION_TYPE: notification_type,
        const.DATA_NOTIFICATION_TITLE: title,
        const.DATA_NOTIFICATION_MESSAGE: message,
        const.DATA_NOTIFICATION_DATE: day_key,
        const.DATA_NOTIFICATION_READ: False,
        const.DATA_NOTIFICATION_HABIT_ID: habit_id,
    }
