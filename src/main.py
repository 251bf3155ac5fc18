###########################################################################
##                            IMPORTS
###########################################################################

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.panel import Panel
from rich.table import Table

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from mock_replay import FixtureDirectoryUnreadable
from models import GraphSnapshot, PathPlannerContext, PlannerHistoryPath
from planner import create_path_planner, run_planning_round, should_reset_cursor_on_start
from planner.validity import build_runtime_graph, coverage_delta
from settings import PlannerSettings, console, setup_logging


###########################################################################
##                         GRAPH LOADING
###########################################################################


def load_graph(path: Path) -> GraphSnapshot:
    """Read a diagram export: either ``{"diagrams": [...], "connectors": [...]}`` or a bare list."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, list):
        raw = {"diagrams": raw}
    return GraphSnapshot.model_validate(raw)


def count_elements(graph: GraphSnapshot) -> tuple[int, int]:
    """(walked, total) over states and traversable edges."""
    runtime = build_runtime_graph(graph)
    total_states = sum(len(d.states) for d in graph.diagrams)
    walked_states = sum(1 for d in graph.diagrams for s in d.states if s.walked)
    walked_edges = sum(1 for e in runtime.edges_by_id.values() if e.walked)
    return walked_states + walked_edges, total_states + len(runtime.edges_by_id)


###########################################################################
##                       RENDERING FUNCTIONS
###########################################################################


def render_round(round_no: int, result: dict) -> None:
    paths = result["accepted"]
    table = Table(show_header=True, header_style="bold cyan", expand=True, title=f"Round {round_no}")
    table.add_column("Path", style="cyan")
    table.add_column("Goal")
    table.add_column("Edges")
    table.add_column("New", justify="right")
    for path in paths:
        table.add_row(path.path_name, path.semantic_goal, " > ".join(path.edge_ids), str(path.coverage_score))

    if paths:
        console.print(table)
    if result["rejected"]:
        console.print(f"  [dim]rejected {len(result['rejected'])} draft(s):[/]")
        for rejection in result["rejected"]:
            label = rejection.draft.path_name or rejection.draft.path_id or "unnamed"
            console.print(f"  [dim]  - {label}: {rejection.reason}[/]")


###########################################################################
##                         PLANNING LOOP
###########################################################################


def plan_loop(planner, graph: GraphSnapshot, spec_raw, max_paths: int, rounds: int, max_attempts: int) -> list[PlannerHistoryPath]:
    """Plan rounds until nothing new comes back, treating each accepted batch as executed."""
    history: list[PlannerHistoryPath] = []

    for round_no in range(1, rounds + 1):
        context = PathPlannerContext(
            max_paths=max_paths, spec_raw=spec_raw, graph=graph, previously_planned_paths=list(history),
        )
        result = asyncio.run(run_planning_round(planner, context, max_attempts))
        render_round(round_no, result)

        paths = result["accepted"]
        if not paths:
            console.print(f"\n[yellow]No further coverage available after round {round_no - 1}.[/]")
            break

        delta = coverage_delta([p.edge_ids for p in paths], build_runtime_graph(graph))
        graph.mark_walked(delta.states, delta.edge_ids)
        history.extend(
            PlannerHistoryPath(
                path_id=p.path_id, path_name=p.path_name, semantic_goal=p.semantic_goal,
                edge_ids=p.edge_ids, planned_round=round_no,
            )
            for p in paths
        )

        walked, total = count_elements(graph)
        console.print(f"  [dim]coverage: {walked}/{total} elements walked[/]")

    return history


###########################################################################
##                              MAIN
###########################################################################


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan coverage-driven test paths over transition diagrams.")
    parser.add_argument("diagrams", type=Path, help="Diagram export JSON file")
    parser.add_argument("--spec", type=Path, default=None, help="Specification text sent to the planner")
    parser.add_argument("--max-paths", type=int, default=16)
    parser.add_argument("--rounds", type=int, default=5)
    parser.add_argument("--max-attempts", type=int, default=1, help="Planner calls per round while nothing is accepted")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv()
    args = parse_args(argv)
    settings = PlannerSettings.from_env()
    setup_logging(settings.log_level)

    try:
        graph = load_graph(args.diagrams)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[bold red]Error:[/] cannot load diagrams from {args.diagrams}: {e}")
        return 1
    try:
        spec_raw = args.spec.read_text(encoding="utf-8") if args.spec else None
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[bold red]Error:[/] cannot read spec text from {args.spec}: {e}")
        return 1

    planner = create_path_planner(settings)
    console.print(Panel(
        "[bold]Test-Path Planner[/]\n"
        f"Provider: [cyan]{settings.provider}[/]  Diagrams: [cyan]{len(graph.diagrams)}[/]  "
        f"Max paths: [cyan]{args.max_paths}[/]  Rounds: [cyan]{args.rounds}[/]",
        border_style="cyan",
    ))

    try:
        if should_reset_cursor_on_start(settings):
            planner.reset()
        history = plan_loop(planner, graph, spec_raw, args.max_paths, args.rounds, args.max_attempts)
    except FixtureDirectoryUnreadable as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1
    console.print(f"\n[bold cyan]Planned {len(history)} path(s).[/]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
