"""Log lookup helpers shared by the engines.

Engines receive log collections in whatever shape the caller holds them (a
list, or the id-keyed dict the coordinator stores) and look entries up by
``(habit_id, day_key)``. Building the index once per evaluation keeps the
backward streak scan linear.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from ..type_defs import HabitLogData

# (habit_id, day_key) -> log entry
LogIndex = dict[tuple[str, str], "HabitLogData"]

LogCollection = Iterable["HabitLogData"] | Mapping[str, "HabitLogData"]


def iter_logs(logs: LogCollection) -> list[HabitLogData]:
    """Return the log entries of a list- or dict-shaped collection."""
    if isinstance(logs, Mapping):
        return list(logs.values())
    return list(logs)


def index_logs(logs: LogCollection) -> LogIndex:
    """Index log entries by ``(habit_id, date)``.

    Duplicate keys violate the storage contract; the last entry wins and a
    warning is logged.
    """
    index: LogIndex = {}
    for log in iter_logs(logs):
        key = (
            log.get(const.DATA_LOG_HABIT_ID, ""),
            log.get(const.DATA_LOG_DATE, ""),
        )
        if key in index:
            const.LOGGER.warning(
                "Duplicate log entry for habit %s on %s, keeping the last one",
                key[0],
                key[1],
            )
        index[key] = log
    return index
