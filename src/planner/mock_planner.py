###########################################################################
##                            IMPORTS
###########################################################################

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from mock_replay import MockFixture, ReplayCursor, load_sorted_fixtures
from models import PathDraft, PathPlannerContext
from planner.provider import PathPlanner
from planner.shared import extract_json_payload, parse_path_envelope
from settings import DEFAULT_PLANNER_MOCK_DIR


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)


###########################################################################
##                        FIXTURE ENVELOPES
###########################################################################


@dataclass
class MockReplayItem:
    file_name: str
    created_at: Optional[str] = None
    drafts: list[PathDraft] = field(default_factory=list)


def fixture_envelope(raw: dict):
    """Find the recorded ``{"paths": [...]}`` envelope in a planner fixture.

    Looks at ``assistantPayload``, ``parsedResponse``, the text of
    ``responseJson.content`` and ``rawResponse``, then a top-level ``paths``.
    """
    for key in ("assistantPayload", "parsedResponse"):
        if isinstance(raw.get(key), dict):
            return raw[key]

    response_json = raw.get("responseJson")
    if isinstance(response_json, dict) and isinstance(response_json.get("content"), str):
        parsed = extract_json_payload(response_json["content"])
        if parsed is not None:
            return parsed

    if isinstance(raw.get("rawResponse"), str):
        parsed = extract_json_payload(raw["rawResponse"])
        if parsed is not None:
            return parsed

    if isinstance(raw.get("paths"), list):
        return {"paths": raw["paths"]}
    return None


def to_replay_item(fixture: MockFixture) -> MockReplayItem:
    created_at = fixture.raw.get("createdAt")
    return MockReplayItem(
        file_name=fixture.file_name,
        created_at=created_at if isinstance(created_at, str) else None,
        drafts=parse_path_envelope(fixture_envelope(fixture.raw)),
    )


###########################################################################
##                      MOCK-REPLAY PLANNER
###########################################################################


class MockReplayPathPlanner(PathPlanner):
    """Returns recorded path batches in fixture order, ignoring the graph.

    The cursor belongs to this instance. Call ``reset`` to reload the mock
    directory and rewind; the first call loads lazily otherwise.
    """

    name = "mock-replay"

    def __init__(self, mock_dir=None, loop: bool = True):
        self.mock_dir = Path(mock_dir or DEFAULT_PLANNER_MOCK_DIR).resolve()
        self.cursor: ReplayCursor[MockReplayItem] = ReplayCursor(loop=loop)
        self._loaded = False
        logger.info("mock-replay planner initialized: dir=%s loop=%s", self.mock_dir, loop)

    @property
    def loop(self) -> bool:
        return self.cursor.loop

    def reset(self) -> None:
        items = [to_replay_item(fixture) for fixture in load_sorted_fixtures(self.mock_dir)]
        self.cursor.reset(items)
        self._loaded = True
        logger.info("round cursor reset: %d mock files in %s", len(items), self.mock_dir)

    async def _generate_paths(self, context: PathPlannerContext) -> list[PathDraft]:
        if not self._loaded:
            self.reset()

        item = self.cursor.next()
        if item is None:
            logger.info("no mock planner batch left in %s", self.mock_dir)
            return []

        if not item.drafts:
            logger.warning("mock planner file %s contains no valid paths", item.file_name)
            return []

        logger.info(
            "replaying planner response %s createdAt=%s (%d paths, cursor %d/%d, maxPaths %d)",
            item.file_name, item.created_at or "unknown", len(item.drafts),
            self.cursor.position, len(self.cursor.items), context.max_paths,
        )
        return list(item.drafts)
