###########################################################################
##                            IMPORTS
###########################################################################

from langgraph.graph import StateGraph, START, END

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from models import PathPlannerContext
from planner.nodes import generate, select, route_after_select
from planner.provider import PathPlanner
from planner.state import PlanningRoundState, initial_round_state


###########################################################################
##                        GRAPH DEFINITION
###########################################################################

workflow = StateGraph(PlanningRoundState)

# Nodes
workflow.add_node("generate", generate)
workflow.add_node("select", select)

# Edges
workflow.add_edge(START, "generate")
workflow.add_edge("generate", "select")
workflow.add_conditional_edges("select", route_after_select, {"generate": "generate", "done": END})

planning_round = workflow.compile()


###########################################################################
##                         ROUND RUNNER
###########################################################################


async def run_planning_round(planner: PathPlanner, context: PathPlannerContext, max_attempts: int = 1) -> PlanningRoundState:
    """Plan one batch: ask the planner, filter through the validity contract, retry while empty."""
    return await planning_round.ainvoke(
        initial_round_state(context, max_attempts),
        {"configurable": {"planner": planner}},
    )
