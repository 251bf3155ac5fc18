###########################################################################
##                            IMPORTS
###########################################################################

from typing_extensions import TypedDict

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from models import PathDraft, PathPlannerContext, PlannedPath
from planner.selection import Rejection


###########################################################################
##                         STATE SCHEMA
###########################################################################


class PlanningRoundState(TypedDict):
    context: PathPlannerContext
    drafts: list[PathDraft]
    accepted: list[PlannedPath]
    rejected: list[Rejection]
    attempt: int
    max_attempts: int


def initial_round_state(context: PathPlannerContext, max_attempts: int = 1) -> PlanningRoundState:
    return {
        "context": context,
        "drafts": [],
        "accepted": [],
        "rejected": [],
        "attempt": 0,
        "max_attempts": max(1, max_attempts),
    }
