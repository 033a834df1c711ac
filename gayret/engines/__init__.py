"""Engine modules for Gayret.

Contains the stateless computation engines:
- goal_engine: Daily/weekly/monthly goal resolution, completion percentage
- statistics_engine: Weekly status, aggregate/category progress, recovery
- streak_engine: Backward compliance streak scan
- risk_engine: Two-day under-target detection
- gamification_engine: Fixed badge set evaluation
"""

# Use relative imports within package to avoid mypy module resolution issues
from .gamification_engine import BADGE_DEFINITIONS, BadgeKind, GamificationEngine
from .goal_engine import GoalEngine
from .log_index import index_logs, iter_logs
from .risk_engine import RiskEngine
from .statistics_engine import StatisticsEngine
from .streak_engine import StreakEngine

__all__ = [
    "BADGE_DEFINITIONS",
    "BadgeKind",
    "GamificationEngine",
    "GoalEngine",
    "RiskEngine",
    "StatisticsEngine",
    "StreakEngine",
    "index_logs",
    "iter_logs",
]
