"""Pure Python utilities for Gayret.

This module contains pure Python functions with no dependency on the engines,
managers or coordinator, so they can be unit tested in isolation.

Submodules:
    - dt_utils: Day keys, weekday helpers, week and month calendar math
    - math_utils: Zero-safe percentages, rounding, clamping

Usage:
    from . import dt_utils
    from .math_utils import capped_percentage
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
