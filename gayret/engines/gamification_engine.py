"""Gamification Engine - Pure logic for badge evaluation.

This engine provides stateless evaluation of a fixed set of badges. Each
badge kind is a member of ``BadgeKind`` mapped to one predicate over the full
habit/log history; the set is closed and cannot grow at runtime.

Badges:
- FIRST_STEP: any log with a positive value
- WEEK_STREAK: any non-archived habit with a streak of 7+
- MONTH_STREAK: any non-archived habit with a streak of 30+
- EARLY_BIRD: 10+ log entries in total
- COLLECTOR: 5+ non-archived habits

PURITY CONTRACT:
- All data comes via the habits/logs arguments
- No side effects; unlock state is recomputed on every evaluation
- The caller diffs consecutive evaluations (``newly_unlocked``) to decide
  which one-time notifications to raise
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

from .. import const
from ..utils.dt_utils import resolve_reference_date
from .log_index import LogCollection, index_logs, iter_logs
from .streak_engine import StreakEngine

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import BadgeContext, BadgeResult, HabitData


class BadgeKind(StrEnum):
    """The closed set of badges."""

    FIRST_STEP = const.BADGE_ID_FIRST_STEP
    WEEK_STREAK = const.BADGE_ID_WEEK_STREAK
    MONTH_STREAK = const.BADGE_ID_MONTH_STREAK
    EARLY_BIRD = const.BADGE_ID_EARLY_BIRD
    COLLECTOR = const.BADGE_ID_COLLECTOR


# Display metadata: (title, description, icon)
BADGE_DEFINITIONS: dict[BadgeKind, tuple[str, str, str]] = {
    BadgeKind.FIRST_STEP: ("First Step", "You completed your first habit.", "🌱"),
    BadgeKind.WEEK_STREAK: (
        "Weekly Streak",
        "You kept a 7-day streak on a habit.",
        "🔥",
    ),
    BadgeKind.MONTH_STREAK: (
        "Pillar of Consistency",
        "You kept a 30-day streak on a habit.",
        "👑",
    ),
    BadgeKind.EARLY_BIRD: ("Early Bird", "You recorded 10 entries in total.", "🌅"),
    BadgeKind.COLLECTOR: ("Collector", "You created 5 different habits.", "🎒"),
}

# Handler function signature: (context) -> unlocked
BadgeHandler = Callable[["BadgeContext"], bool]


def _non_archived(habits: Iterable[HabitData]) -> list[HabitData]:
    return [h for h in habits if not h.get(const.DATA_HABIT_ARCHIVED, False)]


class GamificationEngine:
    """Pure logic engine for badge evaluation.

    All methods are static or class methods - no instance state.

    Evaluation Flow:
        1. Context is built once (log index, non-archived habits)
        2. Every BadgeKind handler is evaluated against it
        3. Results are returned in BadgeKind order
    """

    # =========================================================================
    # BADGE HANDLER REGISTRY
    # =========================================================================

    _BADGE_HANDLERS: ClassVar[dict[BadgeKind, BadgeHandler]] = {}

    @classmethod
    def _register_handlers(cls) -> None:
        """Populate the badge kind → handler registry once."""
        if cls._BADGE_HANDLERS:
            return  # Already registered

        cls._BADGE_HANDLERS = {
            BadgeKind.FIRST_STEP: cls._evaluate_first_step,
            BadgeKind.WEEK_STREAK: cls._evaluate_week_streak,
            BadgeKind.MONTH_STREAK: cls._evaluate_month_streak,
            BadgeKind.EARLY_BIRD: cls._evaluate_early_bird,
            BadgeKind.COLLECTOR: cls._evaluate_collector,
        }

    @classmethod
    def handlers(cls) -> dict[BadgeKind, BadgeHandler]:
        """Return a copy of the registry (for inspection and tests)."""
        cls._register_handlers()
        return dict(cls._BADGE_HANDLERS)

    # =========================================================================
    # MAIN EVALUATION METHODS
    # =========================================================================

    @staticmethod
    def build_context(
        habits: Iterable[HabitData],
        logs: LogCollection,
        reference_date: date | datetime | None = None,
    ) -> BadgeContext:
        """Build the shared evaluation context."""
        log_list = iter_logs(logs)
        return {
            "habits": list(habits),
            "logs": log_list,
            "log_index": index_logs(log_list),
            "reference_date": resolve_reference_date(reference_date).isoformat(),
        }

    @classmethod
    def evaluate_badge(cls, kind: BadgeKind, context: BadgeContext) -> BadgeResult:
        """Evaluate a single badge against a prepared context."""
        cls._register_handlers()
        handler = cls._BADGE_HANDLERS[kind]
        title, description, icon = BADGE_DEFINITIONS[kind]
        return {
            const.DATA_BADGE_ID: kind.value,
            const.DATA_BADGE_TITLE: title,
            const.DATA_BADGE_DESCRIPTION: description,
            const.DATA_BADGE_ICON: icon,
            const.DATA_BADGE_UNLOCKED: handler(context),
        }

    @classmethod
    def evaluate_badges(
        cls,
        habits: Iterable[HabitData],
        logs: LogCollection,
        reference_date: date | datetime | None = None,
    ) -> list[BadgeResult]:
        """Evaluate every badge.

        Pure function - identical inputs always give identical results.

        Returns:
            One BadgeResult per BadgeKind, in declaration order
        """
        context = cls.build_context(habits, logs, reference_date)
        results = [cls.evaluate_badge(kind, context) for kind in BadgeKind]
        const.LOGGER.debug(
            "Evaluated %s badges, unlocked: %s",
            len(results),
            [r[const.DATA_BADGE_ID] for r in results if r[const.DATA_BADGE_UNLOCKED]],
        )
        return results

    @staticmethod
    def newly_unlocked(
        previous: Iterable[BadgeResult] | None,
        current: Iterable[BadgeResult],
    ) -> list[BadgeResult]:
        """Return badges unlocked in ``current`` but not in ``previous``.

        A missing previous evaluation counts as "nothing unlocked".
        """
        already = {
            badge[const.DATA_BADGE_ID]
            for badge in previous or ()
            if badge[const.DATA_BADGE_UNLOCKED]
        }
        return [
            badge
            for badge in current
            if badge[const.DATA_BADGE_UNLOCKED]
            and badge[const.DATA_BADGE_ID] not in already
        ]

    # =========================================================================
    # BADGE HANDLERS
    # =========================================================================

    @staticmethod
    def _evaluate_first_step(context: BadgeContext) -> bool:
        return any(
            float(log.get(const.DATA_LOG_VALUE) or 0) > 0 for log in context["logs"]
        )

    @staticmethod
    def _max_streak(context: BadgeContext) -> int:
        """Return the longest current streak over non-archived habits."""
        streaks = [
            StreakEngine.streak_from_index(
                habit, context["log_index"], context["reference_date"]
            )
            for habit in _non_archived(context["habits"])
        ]
        return max(streaks, default=0)

    @classmethod
    def _evaluate_week_streak(cls, context: BadgeContext) -> bool:
        return cls._max_streak(context) >= const.BADGE_WEEK_STREAK_THRESHOLD

    @classmethod
    def _evaluate_month_streak(cls, context: BadgeContext) -> bool:
        return cls._max_streak(context) >= const.BADGE_MONTH_STREAK_THRESHOLD

    @staticmethod
    def _evaluate_early_bird(context: BadgeContext) -> bool:
        return len(context["logs"]) >= const.BADGE_EARLY_BIRD_LOG_THRESHOLD

    @staticmethod
    def _evaluate_collector(context: BadgeContext) -> bool:
        return (
            len(_non_archived(context["habits"]))
            >= const.BADGE_COLLECTOR_HABIT_THRESHOLD
        )
