###########################################################################
##                            IMPORTS
###########################################################################

import json
import re
from datetime import datetime

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from mock_replay import load_sorted_fixtures, parse_file_timestamp
from response_log import AgentResponseLog, log_file_name


###########################################################################
##                       RESPONSE LOG TESTS
###########################################################################


def test_file_name_carries_sortable_stamp():
    name = log_file_name(datetime(2024, 3, 5, 7, 8, 9))
    assert re.fullmatch(r"20240305_070809_[a-z0-9]{6}\.json", name)
    assert parse_file_timestamp(name) == datetime(2024, 3, 5, 7, 8, 9).timestamp()


def test_write_record(tmp_path):
    log = AgentResponseLog(tmp_path, agent="path-planner")
    path = log.write(model="m", run_id="run-1", request={"maxPaths": 2}, raw_response="{}", parsed_response={})
    assert path.parent == tmp_path / "path-planner"

    record = json.loads(path.read_text(encoding="utf-8"))
    assert record["agent"] == "path-planner"
    assert record["runId"] == "run-1"
    assert record["request"] == {"maxPaths": 2}
    assert record["note"] is None


def test_written_records_replay_as_fixtures(tmp_path):
    log = AgentResponseLog(tmp_path)
    log.write(parsed_response={"paths": [{"edgeIds": ["e1"]}]})
    fixtures = load_sorted_fixtures(tmp_path / "path-planner")
    assert fixtures[0].raw["parsedResponse"] == {"paths": [{"edgeIds": ["e1"]}]}


def test_write_failure_returns_none(tmp_path):
    blocked = tmp_path / "blocked"
    blocked.write_text("not a directory")
    assert AgentResponseLog(blocked).write(note="x") is None
