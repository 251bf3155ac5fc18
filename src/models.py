###########################################################################
##                            IMPORTS
###########################################################################

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


###########################################################################
##                           CONSTANTS
###########################################################################

PAGE_ENTRY_DIAGRAM_ID = "page_entry"


###########################################################################
##                          BASE MODEL
###########################################################################


class GraphModel(BaseModel):
    """camelCase on the wire, snake_case in Python, unknown keys kept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


###########################################################################
##                        DIAGRAM ELEMENTS
###########################################################################


class State(GraphModel):
    id: str
    walked: bool = Field(default=False, description="Traversed in a previous execution batch")


class Transition(GraphModel):
    id: str
    from_state: str = Field(alias="from")
    to_state: str = Field(alias="to")
    walked: bool = False
    event: Optional[str] = None
    validations: list[Any] = Field(default_factory=list)


class ConnectorEndpoint(GraphModel):
    diagram_id: str
    state_id: Optional[str] = None


class Connector(GraphModel):
    id: str
    type: Literal["contains", "invokes"]
    from_endpoint: ConnectorEndpoint = Field(alias="from")
    to_endpoint: ConnectorEndpoint = Field(alias="to")
    walked: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)
    validations: list[Any] = Field(default_factory=list)

    @property
    def traversable(self) -> bool:
        """Only invokes connectors anchored to a state on both ends can be walked."""
        return (
            self.type == "invokes"
            and bool(self.from_endpoint.state_id)
            and bool(self.to_endpoint.state_id)
        )


class DiagramVariant(GraphModel):
    kind: Literal["standalone", "base", "delta"] = "standalone"
    base_diagram_id: Optional[str] = None
    delta_diagram_ids_by_role: dict[str, str] = Field(default_factory=dict)
    applies_to_roles: list[str] = Field(default_factory=list)


class DiagramMeta(GraphModel):
    page_name: Optional[str] = None
    feature_name: Optional[str] = None
    entry_state_id: Optional[str] = None
    entry_validations: list[Any] = Field(default_factory=list)


class Diagram(GraphModel):
    id: str
    name: str = ""
    level: Literal["page", "feature"] = "page"
    parent_diagram_id: Optional[str] = None
    roles: list[str] = Field(default_factory=list)
    variant: DiagramVariant = Field(default_factory=DiagramVariant)
    states: list[State] = Field(default_factory=list)
    transitions: list[Transition] = Field(default_factory=list)
    connectors: list[Connector] = Field(default_factory=list)
    meta: DiagramMeta = Field(default_factory=DiagramMeta)

    @model_validator(mode="after")
    def _check_local_ids(self) -> "Diagram":
        state_ids = [state.id for state in self.states]
        if len(state_ids) != len(set(state_ids)):
            raise ValueError(f"diagram {self.id!r} has duplicate state ids")

        known = set(state_ids)
        for transition in self.transitions:
            for endpoint in (transition.from_state, transition.to_state):
                if endpoint not in known:
                    raise ValueError(
                        f"transition {transition.id!r} in diagram {self.id!r} references unknown state {endpoint!r}"
                    )
        return self


###########################################################################
##                          GRAPH SNAPSHOT
###########################################################################


class GraphSnapshot(GraphModel):
    """All diagrams of one system plus connectors declared outside any diagram."""

    diagrams: list[Diagram] = Field(default_factory=list)
    connectors: list[Connector] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_graph_contract(self) -> "GraphSnapshot":
        by_id = {}
        for diagram in self.diagrams:
            if diagram.id in by_id:
                raise ValueError(f"duplicate diagram id {diagram.id!r}")
            by_id[diagram.id] = diagram

        edge_ids = [t.id for d in self.diagrams for t in d.transitions]
        edge_ids += [c.id for c in self.all_connectors()]
        seen, dupes = set(), set()
        for edge_id in edge_ids:
            (dupes if edge_id in seen else seen).add(edge_id)
        if dupes:
            raise ValueError(f"edge ids must be unique across the graph: {sorted(dupes)}")

        for diagram in self.diagrams:
            if diagram.variant.kind == "delta":
                base = diagram.variant.base_diagram_id
                if not base or base not in by_id:
                    raise ValueError(f"delta diagram {diagram.id!r} must reference an existing base diagram")

            # parent links form a forest
            visited = {diagram.id}
            parent = diagram.parent_diagram_id
            while parent is not None:
                if parent in visited:
                    raise ValueError(f"parent cycle through diagram {diagram.id!r}")
                visited.add(parent)
                parent = by_id[parent].parent_diagram_id if parent in by_id else None

        return self

    def all_connectors(self) -> list[Connector]:
        """Snapshot-level connectors, falling back to the ones declared on diagrams."""
        if self.connectors:
            return list(self.connectors)
        return [connector for diagram in self.diagrams for connector in diagram.connectors]

    def diagram(self, diagram_id: str) -> Optional[Diagram]:
        return next((d for d in self.diagrams if d.id == diagram_id), None)

    def mark_walked(self, state_keys, edge_ids) -> None:
        """Flip coverage flags to True. Flags never revert.

        ``state_keys`` are ``(diagram_id, state_id)`` pairs.
        """
        state_keys, edge_ids = set(state_keys), set(edge_ids)
        for diagram in self.diagrams:
            for state in diagram.states:
                if (diagram.id, state.id) in state_keys:
                    state.walked = True
            for transition in diagram.transitions:
                if transition.id in edge_ids:
                    transition.walked = True
            for connector in diagram.connectors:
                if connector.id in edge_ids:
                    connector.walked = True
        for connector in self.connectors:
            if connector.id in edge_ids:
                connector.walked = True


###########################################################################
##                     PLANNER REQUEST / RESPONSE
###########################################################################


class PathDraft(GraphModel):
    """One path as proposed by a planner backend, before validation."""

    path_id: Optional[str] = None
    path_name: Optional[str] = None
    semantic_goal: Optional[str] = None
    edge_ids: list[str] = Field(default_factory=list)


class PlannedPath(GraphModel):
    """A path that passed the validity contract."""

    path_id: str
    path_name: str
    semantic_goal: str
    edge_ids: list[str]
    coverage_score: int = Field(default=0, description="Distinct unwalked states/edges newly visited")
    cost: int = Field(default=0, description="Edge count")


class PlannerHistoryPath(GraphModel):
    path_id: Optional[str] = None
    path_name: Optional[str] = None
    semantic_goal: Optional[str] = None
    edge_ids: list[str] = Field(default_factory=list)
    planned_round: Optional[int] = None


class PathPlannerContext(GraphModel):
    max_paths: int = Field(default=16, ge=0)
    spec_raw: Optional[str] = None
    graph: GraphSnapshot = Field(default_factory=GraphSnapshot)
    previously_planned_paths: list[PlannerHistoryPath] = Field(default_factory=list)
    run_id: Optional[str] = None
    target_url: Optional[str] = None
