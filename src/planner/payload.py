###########################################################################
##                            IMPORTS
###########################################################################

from models import GraphSnapshot, PathPlannerContext


###########################################################################
##                        PLANNER PAYLOAD
###########################################################################


def build_planner_diagrams(graph: GraphSnapshot) -> list[dict]:
    """Serialize diagrams for the planner, folding invokes connectors into transitions.

    Each traversable invokes connector is listed on its source diagram both as
    a connector and as a ``connector-invokes`` transition, so a planner can
    chain it like any other edge.
    """
    diagrams = {}
    for diagram in graph.diagrams:
        payload = diagram.to_payload()
        payload["meta"]["pageName"] = payload["meta"].get("pageName") or diagram.name
        for connector in payload["connectors"]:
            if connector["type"] != "invokes":
                connector["walked"] = False
        diagrams[diagram.id] = payload

    for connector in graph.all_connectors():
        if not connector.traversable:
            continue
        source = diagrams.get(connector.from_endpoint.diagram_id)
        if source is None:
            continue

        if not any(item.get("id") == connector.id for item in source["connectors"]):
            source["connectors"].append(connector.to_payload())

        source["transitions"].append({
            "id": connector.id,
            "from": connector.from_endpoint.state_id,
            "to": connector.to_endpoint.state_id,
            "event": connector.meta.get("reason") or connector.meta.get("action") or connector.id,
            "kind": "connector-invokes",
            "walked": connector.walked,
            "meta": connector.meta,
        })

    return list(diagrams.values())


def build_prompt_payload(context: PathPlannerContext) -> dict:
    return {
        "maxPaths": context.max_paths,
        "runId": context.run_id,
        "targetUrl": context.target_url,
        "specRaw": context.spec_raw or "",
        "diagrams": build_planner_diagrams(context.graph),
        "previouslyPlannedPaths": [path.to_payload() for path in context.previously_planned_paths],
    }
