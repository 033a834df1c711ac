"""Gamification Manager - Badge re-evaluation and unlock notifications.

ARCHITECTURE:
- GamificationManager = STATEFUL orchestration (remembers the last evaluation)
- GamificationEngine = Pure evaluation logic (STATELESS)

Unlock history is never persisted: after every state change the full badge
set is recomputed and diffed against the previous evaluation in memory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..engines.gamification_engine import GamificationEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..coordinator import HabitTrackerCoordinator
    from ..type_defs import BadgeResult


class GamificationManager(BaseManager):
    """Manager for badge evaluation.

    Responsibilities:
    - Evaluate badges from the coordinator's current habits and logs
    - Detect newly unlocked badges between evaluations
    - Ask the NotificationManager for one achievement notification per unlock
    """

    def __init__(
        self,
        coordinator: HabitTrackerCoordinator,
        notify_unlocks: bool = const.DEFAULT_BADGE_NOTIFICATIONS,
    ) -> None:
        """Initialize the GamificationManager.

        Args:
            coordinator: The owning coordinator
            notify_unlocks: Raise achievement notifications for new unlocks
        """
        super().__init__(coordinator)
        self.notify_unlocks = notify_unlocks
        self._last_results: list[BadgeResult] | None = None

    @property
    def badges(self) -> list[BadgeResult]:
        """Return the latest evaluation, evaluating once if needed."""
        if self._last_results is None:
            self.prime()
        return list(self._last_results or [])

    def _evaluate(self) -> list[BadgeResult]:
        return GamificationEngine.evaluate_badges(
            self.coordinator.habits,
            self.coordinator.logs,
            self.today(),
        )

    def prime(self) -> list[BadgeResult]:
        """Record the current unlock state without notifying.

        Used when data is loaded so that badges unlocked in earlier sessions
        are not announced again.
        """
        self._last_results = self._evaluate()
        return self._last_results

    def refresh(self) -> list[BadgeResult]:
        """Re-evaluate badges and notify about the ones newly unlocked.

        Returns:
            The newly unlocked badges
        """
        current = self._evaluate()
        unlocked = GamificationEngine.newly_unlocked(self._last_results, current)
        self._last_results = current

        for badge in unlocked:
            const.LOGGER.info("Badge unlocked: %s", badge[const.DATA_BADGE_ID])
            if self.notify_unlocks:
                self.coordinator.notification_manager.notify(
                    const.NOTIFICATION_TYPE_ACHIEVEMENT,
                    const.NOTIFICATION_TITLE_BADGE,
                    const.NOTIFICATION_MESSAGE_BADGE.format(
                        title=badge[const.DATA_BADGE_TITLE]
                    ),
                )
        return unlocked
