"""Manager modules for Gayret.

Managers own the stateful side of each concern and delegate all computation
to the stateless engines:
- habit_manager: Habit lifecycle and log upsert/delete
- notification_manager: Notification feed
- gamification_manager: Badge re-evaluation and unlock notifications
"""

from .base_manager import BaseManager
from .gamification_manager import GamificationManager
from .habit_manager import EntityNotFoundError, HabitManager
from .notification_manager import NotificationManager

__all__ = [
    "BaseManager",
    "EntityNotFoundError",
    "GamificationManager",
    "HabitManager",
    "NotificationManager",
]
