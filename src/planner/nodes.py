###########################################################################
##                            IMPORTS
###########################################################################

import logging

from langchain_core.runnables import RunnableConfig

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from models import PlannerHistoryPath
from planner.selection import select_planned_paths
from planner.state import PlanningRoundState
from planner.validity import build_runtime_graph


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)


###########################################################################
##                          GRAPH NODES
###########################################################################


async def generate(state: PlanningRoundState, config: RunnableConfig) -> dict:
    """Ask the configured planner backend for drafts."""
    planner = config["configurable"]["planner"]
    context = state["context"]
    remaining = context.max_paths - len(state["accepted"])
    request = context.model_copy(update={
        "max_paths": remaining,
        "previously_planned_paths": context.previously_planned_paths + [
            PlannerHistoryPath(path_id=p.path_id, path_name=p.path_name, semantic_goal=p.semantic_goal, edge_ids=p.edge_ids)
            for p in state["accepted"]
        ],
    })

    drafts = await planner.generate_paths(request)
    return {"drafts": drafts, "attempt": state["attempt"] + 1}


def select(state: PlanningRoundState) -> dict:
    """Keep drafts that satisfy the validity contract, best coverage first."""
    context = state["context"]
    runtime = build_runtime_graph(context.graph)
    if runtime.entry_state_id is None:
        logger.warning("graph has no resolvable global entry state; every path will be rejected")

    history = list(context.previously_planned_paths) + list(state["accepted"])
    selection = select_planned_paths(
        state["drafts"], runtime, history, max_paths=context.max_paths - len(state["accepted"]),
    )

    return {
        "accepted": state["accepted"] + selection.paths,
        "rejected": state["rejected"] + selection.rejected,
    }


###########################################################################
##                       CONDITIONAL EDGES
###########################################################################


def route_after_select(state: PlanningRoundState) -> str:
    if state["accepted"] or state["attempt"] >= state["max_attempts"]:
        return "done"
    return "generate"
