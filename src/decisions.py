###########################################################################
##                            IMPORTS
###########################################################################

import logging
from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from mock_replay import ReplayCursor, load_sorted_fixtures
from settings import DEFAULT_OPERATOR_MOCK_DIR


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)

FAILURE_CODES = (
    "narrative-planner-failed",
    "operator-timeout",
    "operator-no-progress",
    "operator-action-failed",
    "validation-failed",
    "unexpected-error",
)
TERMINATION_REASONS = ("completed", "max-iterations", "operator-error", "validation-failed", "criteria-unmet")

DEFAULT_FAILURE_CODE = "operator-no-progress"
DEFAULT_COMPLETE_TERMINATION = "completed"
DEFAULT_FAIL_TERMINATION = "criteria-unmet"


###########################################################################
##                        DECISION VARIANTS
###########################################################################


class ValidationUpdate(BaseModel):
    id: str
    status: Literal["pass", "fail"]
    reason: str
    actual: Optional[str] = None


class FunctionCall(BaseModel):
    name: str
    args: dict[str, Any]
    description: Optional[str] = None


class _DecisionBase(BaseModel):
    reason: str
    progress_summary: str
    validation_updates: list[ValidationUpdate] = Field(default_factory=list)


class ActDecision(_DecisionBase):
    kind: Literal["act"] = "act"
    function_calls: list[FunctionCall] = Field(min_length=1)


class CompleteDecision(_DecisionBase):
    kind: Literal["complete"] = "complete"
    termination_reason: str = DEFAULT_COMPLETE_TERMINATION


class FailDecision(_DecisionBase):
    kind: Literal["fail"] = "fail"
    failure_code: str = DEFAULT_FAILURE_CODE
    termination_reason: str = DEFAULT_FAIL_TERMINATION


LoopDecision = Union[ActDecision, CompleteDecision, FailDecision]


###########################################################################
##                        LOOSE FIELD READERS
###########################################################################


def _non_empty_str(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _optional_str(value) -> Optional[str]:
    return value if isinstance(value, str) else None


def _parse_validation_updates(items: list) -> list[ValidationUpdate]:
    updates = []
    for item in items:
        if not isinstance(item, dict):
            continue
        update_id = _non_empty_str(item.get("id"))
        reason = _non_empty_str(item.get("reason"))
        status = item.get("status")
        if not update_id or not reason or status not in ("pass", "fail"):
            continue
        updates.append(ValidationUpdate(id=update_id, status=status, reason=reason, actual=_optional_str(item.get("actual"))))
    return updates


def _parse_function_calls(items) -> list[FunctionCall]:
    if not isinstance(items, list):
        return []
    calls = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = _non_empty_str(item.get("name"))
        args = item.get("args")
        if not name or not isinstance(args, dict):
            continue
        calls.append(FunctionCall(name=name, args=args, description=_optional_str(item.get("description"))))
    return calls


def _pick(value, allowed: tuple, default: str) -> str:
    return value if value in allowed else default


###########################################################################
##                          DECISION PARSER
###########################################################################


def parse_decision(raw) -> Optional[LoopDecision]:
    """Turn a loosely shaped ``parsedResponse`` object into a strict decision.

    Returns None when a required field is missing or malformed. Never raises.
    """
    try:
        return _build_decision(raw)
    except ValidationError:
        return None


def _build_decision(raw) -> Optional[LoopDecision]:
    if not isinstance(raw, dict):
        return None

    decision = raw.get("decision")
    if not isinstance(decision, dict):
        return None

    kind = decision.get("kind")
    reason = _non_empty_str(decision.get("reason"))
    progress_summary = _non_empty_str(raw.get("progressSummary"))
    raw_updates = raw.get("validationUpdates")
    if kind not in ("act", "complete", "fail") or not reason or not progress_summary or not isinstance(raw_updates, list):
        return None

    common = {
        "reason": reason,
        "progress_summary": progress_summary,
        "validation_updates": _parse_validation_updates(raw_updates),
    }

    if kind == "act":
        function_calls = _parse_function_calls(raw.get("functionCalls"))
        if not function_calls:
            return None
        return ActDecision(function_calls=function_calls, **common)

    if kind == "complete":
        return CompleteDecision(
            termination_reason=_pick(decision.get("terminationReason"), TERMINATION_REASONS, DEFAULT_COMPLETE_TERMINATION),
            **common,
        )

    return FailDecision(
        failure_code=_pick(decision.get("failureCode"), FAILURE_CODES, DEFAULT_FAILURE_CODE),
        termination_reason=_pick(decision.get("terminationReason"), TERMINATION_REASONS, DEFAULT_FAIL_TERMINATION),
        **common,
    )


###########################################################################
##                     OPERATOR-LOOP MOCK REPLAY
###########################################################################


class OperatorLoopMockReplay:
    """Replays recorded operator-loop decisions in fixture order."""

    def __init__(self, mock_dir=None, loop: bool = True):
        self.mock_dir = Path(mock_dir or DEFAULT_OPERATOR_MOCK_DIR).resolve()
        self.cursor: ReplayCursor[tuple[str, Optional[LoopDecision]]] = ReplayCursor(loop=loop)
        self._loaded = False
        logger.info("operator-loop mock replay initialized: dir=%s loop=%s", self.mock_dir, loop)

    def reset(self) -> None:
        fixtures = load_sorted_fixtures(self.mock_dir)
        self.cursor.reset([(f.file_name, parse_decision(f.raw.get("parsedResponse"))) for f in fixtures])
        self._loaded = True
        logger.info("operator-loop cursor reset: %d mock files", len(fixtures))

    def decide(self) -> Optional[LoopDecision]:
        """Next recorded decision, or None when exhausted or the fixture is invalid."""
        if not self._loaded:
            self.reset()

        item = self.cursor.next()
        if item is None:
            logger.info("operator-loop mock files exhausted at %s", self.mock_dir)
            return None

        file_name, decision = item
        if decision is None:
            logger.warning("mock file %s holds no valid parsedResponse decision", file_name)
            return None

        logger.info(
            "replaying operator-loop decision %s from %s (%d/%d)",
            decision.kind, file_name, self.cursor.position, len(self.cursor.items),
        )
        return decision
