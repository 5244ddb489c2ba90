# milestone_notes_agent.py
from __future__ import annotations
import os
import json
import logging
from typing import Any, Dict, List
from pydantic.alias_generators import to_snake

#custom imports
from CatLife_Agents.chatAgents.prompts import MILESTONE_NOTES_SYSTEM_PROMPT
from CatLife_Agents.helperFunctions.agent_helper_function import _chat_json, has_openai_key

logger = logging.getLogger(__name__)

# --------------------
# Config
# --------------------
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
MILESTONE_NOTES_MODEL = os.getenv("MILESTONE_NOTES_MODEL", DEFAULT_MODEL)


def _section(payload: Dict[str, Any], camel: str, snake: str):
    value = payload.get(camel)
    return _snake_keys(value if value is not None else payload.get(snake))


def _snake_keys(obj: Any) -> Any:
    # the prompt describes fields in snake_case
    if isinstance(obj, dict):
        return {to_snake(str(k)): _snake_keys(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_snake_keys(v) for v in obj]
    return obj


def generate_milestone_notes(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    One personalized note per yearly simulation point.

    payload: {catProfile, careRoutine, simulationPoints, trajectory}, camelCase throughout
             (snake_case accepted too; the model sees snake_case)
    returns: {"success": bool, "notes": [...]}; the caller validates each note.
    """
    if not has_openai_key():
        logger.info("OPENAI_API_KEY not set; skipping milestone notes")
        return {"success": False, "notes": []}

    points = _section(payload, "simulationPoints", "simulation_points") or []
    if not points:
        return {"success": False, "notes": []}

    user_msg = json.dumps({
        "cat_profile": _section(payload, "catProfile", "cat_profile") or {},
        "care_routine": _section(payload, "careRoutine", "care_routine") or {},
        "simulation_points": points,
        "trajectory": _snake_keys(payload.get("trajectory")) or {},
    }, ensure_ascii=False, default=str)

    llm = _chat_json(MILESTONE_NOTES_MODEL, MILESTONE_NOTES_SYSTEM_PROMPT, user_msg)
    if "error" in llm:
        return {"success": False, "notes": [], "error": llm["error"]}

    notes = llm.get("notes")
    if not isinstance(notes, list):
        logger.warning("milestone notes response had no notes list: %s", list(llm.keys()))
        return {"success": False, "notes": []}

    kept: List[dict] = [n for n in notes if isinstance(n, dict)]
    return {"success": bool(kept), "notes": kept}
