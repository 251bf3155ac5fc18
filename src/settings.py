###########################################################################
##                            IMPORTS
###########################################################################

import logging
import os
import re
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from rich.console import Console
from rich.logging import RichHandler


###########################################################################
##                           CONSTANTS
###########################################################################

console = Console()

DEFAULT_MODEL = "google_genai:gemini-2.5-flash"
DEFAULT_SESSION_TIMEOUT_SECONDS = 180.0
DEFAULT_PLANNER_MOCK_DIR = "mock-data/path-planner"
DEFAULT_OPERATOR_MOCK_DIR = "mock-data/operator-loop"
DEFAULT_RESPONSE_LOG_DIR = "logs/ai-agent-responses"

ProviderName = Literal["llm", "mock-replay"]

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


###########################################################################
##                         VALUE PARSING
###########################################################################


def parse_bool(value: Optional[str], fallback: bool) -> bool:
    """Lenient boolean parsing; anything unrecognized falls back."""
    if value is None:
        return fallback
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return fallback


def normalize_provider(value: Optional[str]) -> ProviderName:
    normalized = (value or "llm").strip().lower()
    return "mock-replay" if normalized == "mock-replay" else "llm"


def parse_timeout(value: Optional[str], fallback: float = DEFAULT_SESSION_TIMEOUT_SECONDS) -> float:
    try:
        parsed = float(value) if value is not None else fallback
    except ValueError:
        return fallback
    return parsed if parsed > 0 else fallback


def resolve_mock_dir(configured_dir: Optional[str], agent_name: str, cwd: Optional[Path] = None) -> Path:
    """Pick the first existing mock directory among the configured one, its legacy
    ``ai-server/mock-data`` spelling and ``mock-data/<agent_name>``."""
    base = Path(cwd) if cwd is not None else Path.cwd()
    candidates: list[Path] = []

    configured = (configured_dir or "").strip()
    if configured:
        candidates.append((base / configured).resolve())
        legacy = re.sub(r"(^|[\\/])ai-server([\\/])mock-data([\\/]|$)", r"\1mock-data\3", configured, flags=re.IGNORECASE)
        if legacy != configured:
            candidates.append((base / legacy).resolve())

    candidates.append((base / "mock-data" / agent_name).resolve())

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]


###########################################################################
##                           SETTINGS
###########################################################################


class PlannerSettings(BaseModel):
    provider: ProviderName = "llm"
    planner_mock_dir: str = DEFAULT_PLANNER_MOCK_DIR
    planner_mock_loop: bool = True
    planner_mock_reset_on_start: bool = True
    model: str = DEFAULT_MODEL
    api_key: Optional[str] = Field(default=None, repr=False)
    session_timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS
    operator_mock_dir: str = DEFAULT_OPERATOR_MOCK_DIR
    operator_mock_loop: bool = True
    response_log_dir: str = DEFAULT_RESPONSE_LOG_DIR
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env=None) -> "PlannerSettings":
        """Read settings from the environment. Bad values never raise."""
        env = os.environ if env is None else env
        return cls(
            provider=normalize_provider(env.get("PATH_PLANNER_PROVIDER")),
            planner_mock_dir=env.get("PATH_PLANNER_MOCK_DIR") or DEFAULT_PLANNER_MOCK_DIR,
            planner_mock_loop=parse_bool(env.get("PATH_PLANNER_MOCK_LOOP"), True),
            planner_mock_reset_on_start=parse_bool(env.get("PATH_PLANNER_MOCK_RESET_ON_START"), True),
            model=env.get("PLANNER_MODEL") or DEFAULT_MODEL,
            api_key=env.get("PLANNER_API_KEY") or env.get("GOOGLE_API_KEY") or None,
            session_timeout_seconds=parse_timeout(env.get("PLANNER_SESSION_TIMEOUT_SECONDS")),
            operator_mock_dir=env.get("OPERATOR_LOOP_MOCK_DIR") or DEFAULT_OPERATOR_MOCK_DIR,
            operator_mock_loop=parse_bool(env.get("OPERATOR_LOOP_MOCK_LOOP"), True),
            response_log_dir=env.get("AGENT_RESPONSE_LOG_DIR") or DEFAULT_RESPONSE_LOG_DIR,
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        )


###########################################################################
##                           LOGGING
###########################################################################


def setup_logging(level: str = "INFO") -> None:
    """Route all module loggers through a rich console handler."""
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = "INFO"
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
