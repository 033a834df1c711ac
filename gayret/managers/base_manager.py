"""Base manager class for Gayret managers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from datetime import date

    from ..coordinator import HabitTrackerCoordinator


class BaseManager:
    """Base class for all Gayret managers.

    Managers hold the STATEFUL side of a concern and delegate computation to
    the stateless engines. They read and write the coordinator's data
    buckets; the coordinator decides when to notify its storage callback.
    """

    def __init__(self, coordinator: HabitTrackerCoordinator) -> None:
        """Initialize manager.

        Args:
            coordinator: Parent coordinator owning the data
        """
        self.coordinator = coordinator
        const.LOGGER.debug("Initialized %s", self.__class__.__name__)

    def today(self) -> date:
        """Return the coordinator's notion of today."""
        return self.coordinator.today()
