###########################################################################
##                            IMPORTS
###########################################################################

import json

import pytest

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from models import GraphSnapshot


###########################################################################
##                          GRAPH FIXTURES
###########################################################################


@pytest.fixture
def linear_graph() -> GraphSnapshot:
    """page_entry: s0 -e1-> s1 -e2-> s2, nothing walked."""
    return GraphSnapshot.model_validate({
        "diagrams": [{
            "id": "page_entry",
            "name": "Entry",
            "level": "page",
            "states": [{"id": "s0", "walked": False}, {"id": "s1", "walked": False}, {"id": "s2", "walked": False}],
            "transitions": [
                {"id": "e1", "from": "s0", "to": "s1", "walked": False},
                {"id": "e2", "from": "s1", "to": "s2", "walked": False},
            ],
            "meta": {"entryStateId": "s0"},
        }],
    })


@pytest.fixture
def system_graph() -> GraphSnapshot:
    """Entry page that invokes a login feature through a connector.

    A third diagram reuses the state id ``home`` to catch implicit jumps.
    """
    return GraphSnapshot.model_validate({
        "diagrams": [
            {
                "id": "page_entry",
                "name": "Entry",
                "level": "page",
                "states": [{"id": "init", "walked": True}, {"id": "home", "walked": False}, {"id": "about"}],
                "transitions": [
                    {"id": "t_home", "from": "init", "to": "home", "walked": True, "event": "open home"},
                    {"id": "t_about", "from": "init", "to": "about", "event": "open about"},
                ],
                "meta": {"entryStateId": "init"},
            },
            {
                "id": "login",
                "name": "Login",
                "level": "feature",
                "parentDiagramId": "page_entry",
                "states": [{"id": "form"}, {"id": "done"}],
                "transitions": [{"id": "t_submit", "from": "form", "to": "done", "event": "submit credentials"}],
                "meta": {"entryStateId": "form"},
            },
            {
                "id": "other",
                "name": "Other",
                "level": "page",
                "states": [{"id": "home"}, {"id": "away"}],
                "transitions": [{"id": "t_away", "from": "home", "to": "away"}],
            },
        ],
        "connectors": [
            {
                "id": "c_login",
                "type": "invokes",
                "from": {"diagramId": "page_entry", "stateId": "home"},
                "to": {"diagramId": "login", "stateId": "form"},
                "meta": {"action": "click login"},
            },
            {
                "id": "c_nest",
                "type": "contains",
                "from": {"diagramId": "page_entry", "stateId": None},
                "to": {"diagramId": "login", "stateId": None},
            },
        ],
    })


###########################################################################
##                         FILE HELPERS
###########################################################################


@pytest.fixture
def write_fixture(tmp_path):
    """Write a JSON mock file into ``tmp_path`` and return its path."""

    def _write(name: str, payload, directory=None):
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        text = payload if isinstance(payload, str) else json.dumps(payload)
        target.write_text(text, encoding="utf-8")
        return target

    return _write
