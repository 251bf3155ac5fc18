from planner.factory import create_path_planner, should_reset_cursor_on_start
from planner.graph import planning_round, run_planning_round, workflow
from planner.mock_planner import MockReplayPathPlanner
from planner.provider import PathPlanner
from planner.reasoning_planner import ReasoningPathPlanner, ReasoningSession
from planner.selection import select_planned_paths
from planner.validity import PathViolation, build_runtime_graph, check_path, coverage_delta

__all__ = [
    "MockReplayPathPlanner",
    "PathPlanner",
    "PathViolation",
    "ReasoningPathPlanner",
    "ReasoningSession",
    "build_runtime_graph",
    "check_path",
    "coverage_delta",
    "create_path_planner",
    "planning_round",
    "run_planning_round",
    "select_planned_paths",
    "should_reset_cursor_on_start",
    "workflow",
]
