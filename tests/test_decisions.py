###########################################################################
##                            IMPORTS
###########################################################################

import pytest

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from decisions import ActDecision, CompleteDecision, FailDecision, OperatorLoopMockReplay, parse_decision


###########################################################################
##                            HELPERS
###########################################################################


def response(kind, **extra):
    base = {
        "decision": {"kind": kind, "reason": "next step"},
        "progressSummary": "on the login page",
        "validationUpdates": [],
    }
    base.update(extra)
    return base


###########################################################################
##                        DECISION PARSER TESTS
###########################################################################


def test_act_without_calls_is_invalid():
    assert parse_decision(response("act", functionCalls=[])) is None


def test_act_with_one_call_parses():
    decision = parse_decision(response("act", functionCalls=[{"name": "click", "args": {"target": "#submit"}}]))
    assert isinstance(decision, ActDecision)
    assert decision.function_calls[0].name == "click"
    assert decision.function_calls[0].args == {"target": "#submit"}


def test_act_drops_malformed_calls():
    decision = parse_decision(response("act", functionCalls=[
        {"name": "", "args": {}},
        {"name": "type", "args": "oops"},
        None,
        {"name": "type", "args": {"text": "x"}, "description": "fill"},
    ]))
    assert [c.name for c in decision.function_calls] == ["type"]
    assert decision.function_calls[0].description == "fill"


def test_complete_defaults_termination_reason():
    decision = parse_decision(response("complete"))
    assert isinstance(decision, CompleteDecision)
    assert decision.termination_reason == "completed"


def test_fail_defaults():
    decision = parse_decision(response("fail"))
    assert isinstance(decision, FailDecision)
    assert decision.failure_code == "operator-no-progress"
    assert decision.termination_reason == "criteria-unmet"


def test_fail_keeps_known_codes():
    raw = response("fail")
    raw["decision"].update(failureCode="operator-timeout", terminationReason="max-iterations")
    decision = parse_decision(raw)
    assert (decision.failure_code, decision.termination_reason) == ("operator-timeout", "max-iterations")


def test_validation_updates_filtered_individually():
    decision = parse_decision(response("complete", validationUpdates=[
        {"id": "v1", "status": "pass", "reason": "title shown"},
        {"id": "v2", "status": "maybe", "reason": "?"},
        {"id": "v3", "status": "fail"},
        "junk",
        {"id": "v4", "status": "fail", "reason": "missing banner", "actual": "none"},
    ]))
    assert [(u.id, u.status) for u in decision.validation_updates] == [("v1", "pass"), ("v4", "fail")]
    assert decision.validation_updates[1].actual == "none"


@pytest.mark.parametrize("raw", [
    None,
    "text",
    {},
    {"decision": {"kind": "complete"}, "progressSummary": "x", "validationUpdates": []},
    {"decision": {"kind": "complete", "reason": "r"}, "progressSummary": "  ", "validationUpdates": []},
    {"decision": {"kind": "complete", "reason": "r"}, "progressSummary": "x", "validationUpdates": {}},
    {"decision": {"kind": "pause", "reason": "r"}, "progressSummary": "x", "validationUpdates": []},
    {"decision": ["act"], "progressSummary": "x", "validationUpdates": []},
])
def test_malformed_input_is_a_parse_miss(raw):
    assert parse_decision(raw) is None


###########################################################################
##                   OPERATOR-LOOP REPLAY TESTS
###########################################################################


def test_operator_replay_in_order_then_exhausted(tmp_path, write_fixture):
    write_fixture("20240101_000001_b.json", {"parsedResponse": response("complete")})
    write_fixture("20240101_000000_a.json", {"parsedResponse": response("act", functionCalls=[{"name": "click", "args": {}}])})
    write_fixture("20240101_000002_c.json", {"parsedResponse": response("act")})

    replay = OperatorLoopMockReplay(mock_dir=tmp_path, loop=False)
    assert replay.decide().kind == "act"
    assert replay.decide().kind == "complete"
    assert replay.decide() is None
    assert replay.decide() is None


def test_operator_replay_loops_and_resets(tmp_path, write_fixture):
    write_fixture("20240101_000000_a.json", {"parsedResponse": response("fail")})
    write_fixture("20240101_000001_b.json", {"parsedResponse": response("complete")})

    replay = OperatorLoopMockReplay(mock_dir=tmp_path, loop=True)
    kinds = [replay.decide().kind for _ in range(3)]
    assert kinds == ["fail", "complete", "fail"]

    replay.reset()
    assert replay.decide().kind == "fail"


def test_operator_replay_skips_unparseable_file(tmp_path, write_fixture):
    write_fixture("20240101_000000_a.json", {"parsedResponse": response("complete")})
    write_fixture("20240101_000001_b.json", "[" * 200000)
    replay = OperatorLoopMockReplay(mock_dir=tmp_path, loop=False)
    assert replay.decide().kind == "complete"
    assert replay.decide() is None
