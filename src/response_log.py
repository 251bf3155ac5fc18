###########################################################################
##                            IMPORTS
###########################################################################

import json
import logging
import secrets
import string
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from settings import DEFAULT_RESPONSE_LOG_DIR


###########################################################################
##                           CONSTANTS
###########################################################################

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


###########################################################################
##                       AGENT RESPONSE LOG
###########################################################################


def log_file_name(now: Optional[datetime] = None) -> str:
    """``YYYYMMDD_HHMMSS_<suffix>.json``, the same stamp the mock loader sorts by."""
    now = now or datetime.now()
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{now:%Y%m%d_%H%M%S}_{suffix}.json"


class AgentResponseLog:
    """Writes one JSON record per agent call. Failures are logged and dropped."""

    def __init__(self, base_dir=None, agent: str = "path-planner"):
        self.base_dir = Path(base_dir or DEFAULT_RESPONSE_LOG_DIR) / agent
        self.agent = agent

    def write(
        self,
        *,
        mode: str = "llm",
        model: Optional[str] = None,
        run_id: Optional[str] = None,
        request=None,
        raw_response: Optional[str] = None,
        parsed_response=None,
        note: Optional[str] = None,
    ) -> Optional[Path]:
        record = {
            "agent": self.agent,
            "mode": mode,
            "model": model,
            "runId": run_id,
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "request": request,
            "rawResponse": raw_response,
            "parsedResponse": parsed_response,
            "note": note,
        }

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            file_path = self.base_dir / log_file_name()
            file_path.write_text(json.dumps(record, indent=2, ensure_ascii=False, default=str) + "\n", encoding="utf-8")
        except (OSError, TypeError, ValueError) as error:
            logger.debug("agent response log write failed for %s: %s", self.agent, error)
            return None

        return file_path
