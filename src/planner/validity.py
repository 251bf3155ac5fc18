###########################################################################
##                            IMPORTS
###########################################################################

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from models import PAGE_ENTRY_DIAGRAM_ID, GraphSnapshot


###########################################################################
##                          RUNTIME GRAPH
###########################################################################


@dataclass(frozen=True)
class RuntimeEdge:
    """A traversable edge: a transition or an invokes connector."""

    id: str
    kind: str
    from_diagram_id: str
    from_state_id: str
    to_diagram_id: str
    to_state_id: str
    label: str
    walked: bool = False

    @property
    def source(self) -> tuple[str, str]:
        return (self.from_diagram_id, self.from_state_id)

    @property
    def target(self) -> tuple[str, str]:
        return (self.to_diagram_id, self.to_state_id)


@dataclass
class RuntimeGraph:
    edges_by_id: dict[str, RuntimeEdge]
    walked_states: set[tuple[str, str]]
    entry_state_id: Optional[str]


def resolve_global_entry_state_id(graph: GraphSnapshot) -> Optional[str]:
    """The ``page_entry`` entry state, else its ``init`` state, else any diagram entry."""
    page_entry = graph.diagram(PAGE_ENTRY_DIAGRAM_ID)
    if page_entry is not None:
        if page_entry.meta.entry_state_id:
            return page_entry.meta.entry_state_id
        for state in page_entry.states:
            state_id = state.id.lower()
            if state_id == "init" or state_id.endswith(".init"):
                return state.id

    return next((d.meta.entry_state_id for d in graph.diagrams if d.meta.entry_state_id), None)


def build_runtime_graph(graph: GraphSnapshot) -> RuntimeGraph:
    edges: dict[str, RuntimeEdge] = {}
    walked_states = set()

    for diagram in graph.diagrams:
        for state in diagram.states:
            if state.walked:
                walked_states.add((diagram.id, state.id))
        for transition in diagram.transitions:
            edges[transition.id] = RuntimeEdge(
                id=transition.id,
                kind="transition",
                from_diagram_id=diagram.id,
                from_state_id=transition.from_state,
                to_diagram_id=diagram.id,
                to_state_id=transition.to_state,
                label=transition.event or transition.id,
                walked=transition.walked,
            )

    for connector in graph.all_connectors():
        if not connector.traversable:
            continue
        edges[connector.id] = RuntimeEdge(
            id=connector.id,
            kind="connector",
            from_diagram_id=connector.from_endpoint.diagram_id,
            from_state_id=connector.from_endpoint.state_id,
            to_diagram_id=connector.to_endpoint.diagram_id,
            to_state_id=connector.to_endpoint.state_id,
            label=connector.meta.get("action") or connector.meta.get("reason") or connector.id,
            walked=connector.walked,
        )

    return RuntimeGraph(
        edges_by_id=edges,
        walked_states=walked_states,
        entry_state_id=resolve_global_entry_state_id(graph),
    )


###########################################################################
##                        VALIDITY CONTRACT
###########################################################################


class PathViolation(str, Enum):
    EMPTY_PATH = "EmptyPath"
    UNKNOWN_EDGE = "UnknownEdge"
    WRONG_ENTRY = "WrongEntry"
    DISCONNECTED = "Disconnected"
    DUPLICATE_OF_EXISTING = "DuplicateOfExisting"


@dataclass
class PathCheck:
    signature: tuple[str, ...]
    violation: Optional[PathViolation] = None
    edges: list[RuntimeEdge] = field(default_factory=list)
    new_edge_ids: set[str] = field(default_factory=set)
    new_states: set[tuple[str, str]] = field(default_factory=set)

    @property
    def valid(self) -> bool:
        return self.violation is None

    @property
    def coverage_score(self) -> int:
        return len(self.new_edge_ids) + len(self.new_states)

    @property
    def cost(self) -> int:
        return len(self.edges)


def path_signature(edge_ids) -> tuple[str, ...]:
    return tuple(edge_ids)


def check_path(edge_ids, runtime: RuntimeGraph, seen_signatures=()) -> PathCheck:
    """Apply the validity contract to one proposed edge-id sequence."""
    check = PathCheck(signature=path_signature(edge_ids))
    if not edge_ids:
        check.violation = PathViolation.EMPTY_PATH
        return check

    edges = [runtime.edges_by_id.get(edge_id) for edge_id in edge_ids]
    if any(edge is None for edge in edges):
        check.violation = PathViolation.UNKNOWN_EDGE
        return check
    check.edges = edges

    first = edges[0]
    if (
        runtime.entry_state_id is None
        or first.from_diagram_id != PAGE_ENTRY_DIAGRAM_ID
        or first.from_state_id != runtime.entry_state_id
    ):
        check.violation = PathViolation.WRONG_ENTRY
        return check

    if any(prev.target != nxt.source for prev, nxt in zip(edges, edges[1:])):
        check.violation = PathViolation.DISCONNECTED
        return check

    if check.signature in seen_signatures:
        check.violation = PathViolation.DUPLICATE_OF_EXISTING
        return check

    for edge in edges:
        if not edge.walked:
            check.new_edge_ids.add(edge.id)
        for state in (edge.source, edge.target):
            if state not in runtime.walked_states:
                check.new_states.add(state)
    return check


###########################################################################
##                          COVERAGE STATE
###########################################################################


@dataclass
class CoverageDelta:
    states: set[tuple[str, str]] = field(default_factory=set)
    edge_ids: set[str] = field(default_factory=set)

    @property
    def size(self) -> int:
        return len(self.states) + len(self.edge_ids)


def coverage_delta(paths, runtime: RuntimeGraph) -> CoverageDelta:
    """States and edges a batch of paths would newly flip to walked."""
    delta = CoverageDelta()
    for edge_ids in paths:
        for edge_id in edge_ids:
            edge = runtime.edges_by_id.get(edge_id)
            if edge is None:
                continue
            if not edge.walked:
                delta.edge_ids.add(edge.id)
            for state in (edge.source, edge.target):
                if state not in runtime.walked_states:
                    delta.states.add(state)
    return delta
