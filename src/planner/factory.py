###########################################################################
##                            IMPORTS
###########################################################################

import logging
from typing import Optional

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from planner.mock_planner import MockReplayPathPlanner
from planner.provider import PathPlanner
from planner.reasoning_planner import ReasoningPathPlanner
from response_log import AgentResponseLog
from settings import PlannerSettings, resolve_mock_dir


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)


###########################################################################
##                        PROVIDER FACTORY
###########################################################################


def create_path_planner(settings: Optional[PlannerSettings] = None) -> PathPlanner:
    """Pick the planner backend named by the settings (environment by default)."""
    settings = settings or PlannerSettings.from_env()

    if settings.provider == "mock-replay":
        mock_dir = resolve_mock_dir(settings.planner_mock_dir, "path-planner")
        logger.info("using mock-replay planner provider: dir=%s loop=%s", mock_dir, settings.planner_mock_loop)
        return MockReplayPathPlanner(mock_dir=mock_dir, loop=settings.planner_mock_loop)

    logger.info("using llm planner provider: model=%s", settings.model)
    return ReasoningPathPlanner(
        model=settings.model,
        api_key=settings.api_key,
        timeout_seconds=settings.session_timeout_seconds,
        response_log=AgentResponseLog(settings.response_log_dir, agent="path-planner"),
    )


def should_reset_cursor_on_start(settings: Optional[PlannerSettings] = None) -> bool:
    settings = settings or PlannerSettings.from_env()
    return settings.planner_mock_reset_on_start
