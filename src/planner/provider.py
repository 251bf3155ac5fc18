###########################################################################
##                            IMPORTS
###########################################################################

import logging
from abc import ABC, abstractmethod

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from mock_replay import FixtureDirectoryUnreadable
from models import PathDraft, PathPlannerContext


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)


###########################################################################
##                      PATH PLANNER PROVIDER
###########################################################################


class PathPlanner(ABC):
    """A backend that proposes candidate paths for one planning request.

    ``generate_paths`` never raises for bad planner output: any failure in a
    backend becomes an empty list, and the result is capped at
    ``context.max_paths``. Only an unreadable fixture directory propagates.
    """

    name = "planner"

    async def generate_paths(self, context: PathPlannerContext) -> list[PathDraft]:
        try:
            drafts = await self._generate_paths(context)
        except FixtureDirectoryUnreadable:
            raise
        except Exception:
            logger.exception("%s failed to generate paths", self.name)
            return []
        return list(drafts)[: max(context.max_paths, 0)]

    @abstractmethod
    async def _generate_paths(self, context: PathPlannerContext) -> list[PathDraft]:
        ...

    def reset(self) -> None:
        """Rewind any replay state. Live backends have none."""
