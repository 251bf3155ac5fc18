###########################################################################
##                            IMPORTS
###########################################################################

import json
import re
from typing import Optional

from langchain.chat_models import init_chat_model

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from models import PathDraft
from settings import DEFAULT_MODEL


###########################################################################
##                           CONSTANTS
###########################################################################

FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


###########################################################################
##                           LLM SETUP
###########################################################################


def _get_llm(model: str = DEFAULT_MODEL, api_key: Optional[str] = None):
    kwargs = {"temperature": 0.2}
    if api_key:
        kwargs["api_key"] = api_key
    return init_chat_model(model, **kwargs)


def message_text(message) -> str:
    """Flatten a chat message's content into plain text."""
    content = getattr(message, "content", message)
    if isinstance(content, list):
        content = " ".join(
            block.get("text", "") if isinstance(block, dict) else str(block) for block in content
        ).strip()
    return content if isinstance(content, str) else ""


###########################################################################
##                     UNTRUSTED RESPONSE PARSING
###########################################################################


def extract_json_payload(raw_content: str):
    """Parse JSON out of model text, unwrapping an optional fenced block. None if unparseable."""
    if not isinstance(raw_content, str):
        return None
    trimmed = raw_content.strip()
    fenced = FENCED_BLOCK.search(trimmed)
    candidate = (fenced.group(1).strip() if fenced else "") or trimmed
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        return None


def _clean(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_path_envelope(envelope) -> list[PathDraft]:
    """Normalize a ``{"paths": [...]}`` envelope into drafts, dropping unusable entries."""
    if not isinstance(envelope, dict) or not isinstance(envelope.get("paths"), list):
        return []

    drafts = []
    for item in envelope["paths"]:
        if not isinstance(item, dict):
            continue
        raw_edge_ids = item.get("edgeIds")
        if not isinstance(raw_edge_ids, list):
            continue
        edge_ids = [edge_id for edge_id in raw_edge_ids if isinstance(edge_id, str) and edge_id]
        if not edge_ids:
            continue
        drafts.append(PathDraft(
            path_id=_clean(item.get("pathId")),
            path_name=_clean(item.get("pathName")) or _clean(item.get("name")),
            semantic_goal=_clean(item.get("semanticGoal")),
            edge_ids=edge_ids,
        ))
    return drafts
