"""Per-domain state controllers (library, quests, friends, routines)."""

from fitsync.services.controllers.base import DomainState, DomainStateController
from fitsync.services.controllers.friends import FriendsController
from fitsync.services.controllers.library import LIBRARY_CACHE_KEY, LibraryController
from fitsync.services.controllers.quests import QuestsController, calculate_progress, describe_quest
from fitsync.services.controllers.routines import RoutinesController

__all__ = [
    "DomainState",
    "DomainStateController",
    "FriendsController",
    "LIBRARY_CACHE_KEY",
    "LibraryController",
    "QuestsController",
    "RoutinesController",
    "calculate_progress",
    "describe_quest",
]
