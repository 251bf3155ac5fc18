###########################################################################
##                            IMPORTS
###########################################################################

import json
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Generic, Optional, TypeVar


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)

FILE_TIMESTAMP_PATTERN = re.compile(r"(\d{8})_(\d{6})")
MISSING_TIMESTAMP = math.inf

T = TypeVar("T")


class FixtureDirectoryUnreadable(OSError):
    """The mock directory could not be listed."""


###########################################################################
##                        FIXTURE DISCOVERY
###########################################################################


@dataclass
class MockFixture:
    file_name: str
    file_path: Path
    raw: dict = field(default_factory=dict)


def parse_file_timestamp(file_name: str) -> Optional[float]:
    """Timestamp of an embedded ``YYYYMMDD_HHMMSS`` stamp, if it is a real date."""
    match = FILE_TIMESTAMP_PATTERN.search(file_name)
    if not match:
        return None
    day, clock = match.group(1), match.group(2)
    try:
        stamp = datetime(
            int(day[0:4]), int(day[4:6]), int(day[6:8]),
            int(clock[0:2]), int(clock[2:4]), int(clock[4:6]),
        )
        return stamp.timestamp()
    except (ValueError, OverflowError, OSError):
        return None


def parse_created_at(value) -> Optional[float]:
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).timestamp()
    except (ValueError, OverflowError, OSError):
        return None


def fixture_sort_key(fixture: MockFixture) -> tuple:
    primary = parse_file_timestamp(fixture.file_name)
    if primary is None:
        primary = parse_created_at(fixture.raw.get("createdAt"))
    if primary is None:
        primary = MISSING_TIMESTAMP
    return (primary, fixture.file_name)


def _read_fixture(file_path: Path) -> Optional[MockFixture]:
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, ValueError, RecursionError) as error:
        logger.warning("skipping unreadable mock file %s: %s", file_path.name, error)
        return None

    if not isinstance(raw, dict):
        logger.warning("skipping mock file %s: top-level value is not an object", file_path.name)
        return None

    return MockFixture(file_name=file_path.name, file_path=file_path, raw=raw)


def load_sorted_fixtures(mock_dir) -> list[MockFixture]:
    """Load every ``*.json`` object in ``mock_dir`` in replay order.

    Order is filename timestamp, then ``createdAt``, then last; ties go by
    filename. Malformed files are skipped, an unlistable directory raises
    ``FixtureDirectoryUnreadable``.
    """
    directory = Path(mock_dir)
    try:
        entries = list(directory.iterdir())
    except OSError as error:
        raise FixtureDirectoryUnreadable(f"cannot list mock directory {directory}: {error}") from error

    files = [entry for entry in entries if entry.name.lower().endswith(".json") and entry.is_file()]

    fixtures = []
    for file_path in files:
        fixture = _read_fixture(file_path)
        if fixture is not None:
            fixtures.append(fixture)

    fixtures.sort(key=fixture_sort_key)
    logger.debug("loaded %d of %d mock files from %s", len(fixtures), len(files), directory)
    return fixtures


###########################################################################
##                          REPLAY CURSOR
###########################################################################


class ReplayCursor(Generic[T]):
    """Position over an ordered list of replay items.

    Past the end it wraps to the start when ``loop`` is set, otherwise it
    stays exhausted until ``reset``. Not synchronized.
    """

    def __init__(self, items=None, loop: bool = True):
        self.items: list[T] = list(items or [])
        self.loop = loop
        self.position = 0

    def reset(self, items=None) -> None:
        if items is not None:
            self.items = list(items)
        self.position = 0

    @property
    def exhausted(self) -> bool:
        return not self.items or (not self.loop and self.position >= len(self.items))

    def next(self) -> Optional[T]:
        if not self.items:
            return None
        if self.position >= len(self.items):
            if not self.loop:
                return None
            self.position = 0
        item = self.items[self.position]
        self.position += 1
        return item
