###########################################################################
##                            IMPORTS
###########################################################################

import asyncio
import logging
from typing import Optional

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from models import PathDraft, PathPlannerContext
from planner.payload import build_prompt_payload
from planner.prompts import PATH_PLANNER_SYSTEM_PROMPT, build_planner_message
from planner.provider import PathPlanner
from planner.shared import _get_llm, extract_json_payload, message_text, parse_path_envelope
from response_log import AgentResponseLog
from settings import DEFAULT_MODEL, DEFAULT_SESSION_TIMEOUT_SECONDS


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)


###########################################################################
##                        REASONING SESSION
###########################################################################


class ReasoningSession:
    """One conversation with a chat model, opened with a system instruction.

    Use as an async context manager; the conversation is torn down on every
    exit path, including a timeout.
    """

    def __init__(self, llm, system_prompt: str):
        self.llm = llm
        self.messages = [SystemMessage(content=system_prompt)]
        self.closed = False

    async def __aenter__(self) -> "ReasoningSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def send_and_wait(self, prompt: str, timeout: float) -> str:
        if self.closed:
            raise RuntimeError("reasoning session is closed")
        self.messages.append(HumanMessage(content=prompt))
        response = await asyncio.wait_for(self.llm.ainvoke(self.messages), timeout=timeout)
        text = message_text(response)
        self.messages.append(AIMessage(content=text))
        return text

    async def close(self) -> None:
        self.messages.clear()
        self.closed = True


###########################################################################
##                    EXTERNAL-REASONING PLANNER
###########################################################################


class ReasoningPathPlanner(PathPlanner):
    """Asks a chat model for paths. Anything unusable degrades to no paths."""

    name = "llm"

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
        llm=None,
        response_log: Optional[AgentResponseLog] = None,
    ):
        self.model = model
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._llm = llm
        self.response_log = response_log or AgentResponseLog(agent="path-planner")
        logger.info(
            "reasoning planner initialized: model=%s hasKey=%s timeout=%ss",
            model, bool(api_key), timeout_seconds,
        )

    def _record(self, context: PathPlannerContext, payload: dict, **fields) -> None:
        self.response_log.write(mode="llm", model=self.model, run_id=context.run_id, request=payload, **fields)

    async def _generate_paths(self, context: PathPlannerContext) -> list[PathDraft]:
        payload = build_prompt_payload(context)
        logger.info(
            "generatePaths requested: model=%s maxPaths=%d diagrams=%d hasSpec=%s",
            self.model, context.max_paths, len(payload["diagrams"]), bool(context.spec_raw),
        )

        if not self.api_key:
            logger.warning("generatePaths skipped: no API key configured for %s", self.model)
            self._record(context, payload, note="skipped: missing API key")
            return []

        try:
            llm = self._llm if self._llm is not None else _get_llm(self.model, self.api_key)
            async with ReasoningSession(llm, PATH_PLANNER_SYSTEM_PROMPT) as session:
                content = await session.send_and_wait(build_planner_message(payload), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("planner session timed out after %ss", self.timeout_seconds)
            self._record(context, payload, note=f"timed out after {self.timeout_seconds}s")
            return []
        except Exception as error:
            logger.warning("planner session failed: %s", error)
            self._record(context, payload, note=f"session failed: {error}")
            return []

        envelope = extract_json_payload(content)
        if envelope is None:
            logger.warning("planner response is not valid JSON (%d chars)", len(content))
        drafts = parse_path_envelope(envelope)

        logger.info("paths parsed from planner response: %d (maxPaths %d)", len(drafts), context.max_paths)
        self._record(context, payload, raw_response=content, parsed_response=envelope)
        return drafts[: context.max_paths]
