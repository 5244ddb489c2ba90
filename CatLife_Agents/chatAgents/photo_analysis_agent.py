# photo_analysis_agent.py
from __future__ import annotations
import os
import re
import json
import logging
from typing import Any, Dict, Optional
from openai import OpenAI
from pydantic import ValidationError
from langchain_core.messages import AIMessage

#custom imports
from CatLife_Agents.states.sessionState import CatLifeSessionState
from CatLife_Agents.states.catLifeChatState import CatLifeChatState
from CatLife_Agents.states.catState import CatProfile, PhotoAnalysis
from CatLife_Agents.states.reducers import merge_intake_updates, resolve_profile
from CatLife_Agents.chatAgents.prompts import VISION_ANALYSIS_SYSTEM_PROMPT, generate_mismatch_clarification_prompt
from CatLife_Agents.chatAgents.intake_coach_agent import heuristic_updates
from CatLife_Agents.helperFunctions.agent_helper_function import JSON_ONLY_SUFFIX, has_openai_key

logger = logging.getLogger(__name__)

# --------------------
# Config
# --------------------
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
PHOTO_ANALYSIS_MODEL = os.getenv("PHOTO_ANALYSIS_MODEL", DEFAULT_MODEL)

_SKIP = re.compile(r"\b(skip|no photo|later|don'?t have|not now)\b", re.I)

UNAVAILABLE = PhotoAnalysis(
    photo_body_condition="unknown",
    photo_comment="I couldn't get a clear look at the photo this time.",
    photo_confidence=0.0,
)


# --------------------
# LLM helper
# --------------------
def _chat_vision_json(model: str, system_prompt: str, text: str, image_b64: str) -> dict:
    try:
        client = OpenAI()
        url = image_b64 if image_b64.startswith("data:") else f"data:image/jpeg;base64,{image_b64}"
        resp = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": f"{system_prompt}{JSON_ONLY_SUFFIX}"},
                {"role": "user", "content": [
                    {"type": "text", "text": "Please respond in json.\n" + text},
                    {"type": "image_url", "image_url": {"url": url}},
                ]},
            ],
            response_format={"type": "json_object"},
            temperature=0,
        )
        return json.loads(resp.choices[0].message.content or "{}")
    except Exception as e:
        logger.warning("photo analysis call failed: %s", e)
        return {"error": str(e)}


def analyze_photo(photo_base64: str, profile: CatProfile) -> PhotoAnalysis:
    """Vision read of body condition, color and pattern. Never raises."""
    if not has_openai_key() or not photo_base64:
        return UNAVAILABLE

    stated = json.dumps({
        "stated_weight_kg": profile.weight_kg,
        "stated_body_condition": profile.body_condition,
        "breed": profile.breed,
    })
    llm = _chat_vision_json(PHOTO_ANALYSIS_MODEL, VISION_ANALYSIS_SYSTEM_PROMPT, stated, photo_base64)
    if "error" in llm:
        return UNAVAILABLE
    try:
        return PhotoAnalysis.model_validate(llm)
    except ValidationError as e:
        logger.warning("photo analysis reply did not fit the schema: %s", e.errors()[:1])
        return UNAVAILABLE


def detect_mismatch(analysis: PhotoAnalysis, profile: CatProfile) -> bool:
    if analysis.mismatch_detected:
        return True
    if analysis.photo_body_condition == "unknown" or not profile.body_condition:
        return False
    return profile.body_condition not in ("unknown", analysis.photo_body_condition)


# --------------------
# MAIN NODE
# --------------------
def photo_analysis_agent(state: CatLifeSessionState) -> Dict[str, Any]:
    cls: CatLifeChatState = state.catlife_chat_state
    profile = state.cat_profile
    name = profile.display_name()
    draft = state.intake_draft
    debug: Dict[str, Any] = {}

    if cls.photo_base64:
        analysis = analyze_photo(cls.photo_base64, profile)
        if analysis.photo_body_condition != "unknown" and not profile.body_condition:
            draft = merge_intake_updates(draft, {"cat_profile": {"body_condition": {
                "value": analysis.photo_body_condition, "confidence": analysis.photo_confidence}}})

        if detect_mismatch(analysis, profile):
            message = analysis.mismatch_message or generate_mismatch_clarification_prompt(
                profile.weight_kg, profile.body_condition, analysis.photo_body_condition, analysis.photo_comment)
            analysis = analysis.model_copy(update={"mismatch_detected": True, "mismatch_message": message})
            step, next_action = "photo", "ask_clarification"
        else:
            message = f"Thanks for the photo of {name}! {analysis.photo_comment}".strip()
            step, next_action = "confirmed", "ready_for_simulation"
        debug["photo_confidence"] = analysis.photo_confidence

    else:
        analysis = state.photo_analysis
        user_msg = (cls.last_user_message or "").strip()
        awaiting_confirmation = analysis is not None and analysis.mismatch_detected
        if awaiting_confirmation or _SKIP.search(user_msg):
            # owner's reply to the mismatch question wins over the photo
            draft = merge_intake_updates(draft, heuristic_updates("weight", user_msg))
            cond = re.search(r"\b(underweight|ideal|overweight)\b", user_msg, re.I)
            if cond:
                draft = merge_intake_updates(draft, {"cat_profile": {"body_condition": {
                    "value": cond.group(1).lower(), "confidence": 1.0}}})
            if analysis is None:
                analysis = PhotoAnalysis(photo_comment="Photo skipped.")
            else:
                analysis = analysis.model_copy(update={"mismatch_detected": False})
            message = f"Got it, thanks! Let's run {name}'s life simulation 🐱"
            step, next_action = "confirmed", "ready_for_simulation"
        else:
            message = f"Whenever you're ready, upload a photo of {name}, or say 'skip' to continue without one."
            step, next_action = "photo", "request_photo"

    profile = resolve_profile(draft, base=profile, include_pending=True)
    return {
        "messages": [AIMessage(content=message)],
        "photo_analysis": analysis,
        "intake_draft": draft,
        "cat_profile": profile,
        "catlife_chat_state": {
            "agent_response": message,
            "photo_base64": None,
            "step": step,
            "next_action": next_action,
            "debug": debug,
        },
    }
