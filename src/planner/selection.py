###########################################################################
##                            IMPORTS
###########################################################################

import logging
from dataclasses import dataclass, field
from typing import Optional

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from models import PathDraft, PlannedPath
from planner.validity import PathCheck, PathViolation, RuntimeGraph, check_path, path_signature


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)

SUPERSEDED = "Superseded"


###########################################################################
##                       CANDIDATE SELECTION
###########################################################################


@dataclass
class Rejection:
    draft: PathDraft
    reason: str


@dataclass
class Selection:
    paths: list[PlannedPath] = field(default_factory=list)
    rejected: list[Rejection] = field(default_factory=list)


def _prioritize(candidates: list[tuple[PathDraft, PathCheck]]) -> tuple[list, list]:
    """Prefer candidates with new coverage, most new edges then states, then fewest edges."""
    with_coverage = [item for item in candidates if item[1].coverage_score > 0]
    kept = with_coverage or candidates
    dropped = [item for item in candidates if item[1].coverage_score == 0] if with_coverage else []

    ordered = sorted(kept, key=lambda item: (-len(item[1].new_edge_ids), -len(item[1].new_states), item[1].cost))
    return ordered, dropped


def _to_planned_path(draft: PathDraft, check: PathCheck, ordinal: int) -> PlannedPath:
    return PlannedPath(
        path_id=draft.path_id or f"path.{ordinal}",
        path_name=draft.path_name or f"Path {ordinal}",
        semantic_goal=draft.semantic_goal or check.edges[-1].label,
        edge_ids=list(draft.edge_ids),
        coverage_score=check.coverage_score,
        cost=check.cost,
    )


def select_planned_paths(drafts, runtime: RuntimeGraph, history=(), max_paths: Optional[int] = None) -> Selection:
    """Filter untrusted drafts through the validity contract and rank the survivors.

    ``history`` holds earlier planned paths (anything with ``edge_ids``); a draft
    repeating one of them, or an earlier draft of this batch, is rejected.
    """
    selection = Selection()
    seen = {path_signature(item.edge_ids) for item in history if item.edge_ids}

    candidates = []
    for draft in drafts:
        check = check_path(draft.edge_ids, runtime, seen)
        if check.valid:
            candidates.append((draft, check))
        else:
            selection.rejected.append(Rejection(draft=draft, reason=check.violation.value))

    ordered, dropped = _prioritize(candidates)
    selection.rejected.extend(Rejection(draft=draft, reason=SUPERSEDED) for draft, _ in dropped)

    for draft, check in ordered:
        if max_paths is not None and len(selection.paths) >= max_paths:
            break
        if check.signature in seen:
            selection.rejected.append(Rejection(draft=draft, reason=PathViolation.DUPLICATE_OF_EXISTING.value))
            continue
        seen.add(check.signature)
        selection.paths.append(_to_planned_path(draft, check, len(selection.paths) + 1))

    if selection.rejected:
        logger.info(
            "accepted %d of %d planner paths; rejected: %s",
            len(selection.paths), len(drafts), ", ".join(sorted({r.reason for r in selection.rejected})),
        )
    return selection
