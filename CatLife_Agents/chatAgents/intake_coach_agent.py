# intake_coach_agent.py
from __future__ import annotations
import os
import re
import json
import logging
from typing import Any, Dict, Optional
from pydantic import ValidationError
from langchain_core.messages import AIMessage, messages_to_dict

#custom imports
from CatLife_Agents.states.sessionState import CatLifeSessionState
from CatLife_Agents.states.catLifeChatState import CatLifeChatState
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.states.intakeState import ChatResponse
from CatLife_Agents.states.reducers import merge_intake_updates, resolve_profile, resolve_routine
from CatLife_Agents.chatAgents.prompts import INTAKE_COACH_SYSTEM_PROMPT
from CatLife_Agents.helperFunctions.agent_helper_function import (
    _chat_json, cat_context_helper, has_openai_key, missing_key_fields,
)

logger = logging.getLogger(__name__)

# --------------------
# Config
# --------------------
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
INTAKE_COACH_MODEL = os.getenv("INTAKE_COACH_MODEL", DEFAULT_MODEL)

# a direct answer to a direct question is taken as confirmed
SCRIPTED_CONFIDENCE = 0.95
LB_TO_KG = 0.453592
OZ_PER_CUP = 4.5

_QUESTIONS = {
    "name": "Hi! I'm the CatLife Intake Coach 🐱 What's your cat's name?",
    "age": "What a great name! How old is {name}? A rough guess in years is fine.",
    "weight": "About how much does {name} weigh? Kilograms or pounds both work.",
    "food_amount": "How much food does {name} eat per day? Ounces are ideal, but cups work too (half a cup of dry food is about 2-2.5 oz).",
    "activity": "How many minutes a day does {name} spend actively playing?",
    "vet_visits": "How many times a year does {name} usually visit the vet?",
}

# --------------------
# Lightweight heuristic (no-API fallback)
# --------------------
_NUMBER = re.compile(r"(\d+(?:\.\d+)?)")
_WORD_NUMBERS = {"never": 0, "no": 0, "none": 0, "zero": 0, "once": 1, "one": 1, "twice": 2, "two": 2, "three": 3}
_NAME = re.compile(r"\b(?:named|name is|name's|called)\s+([A-Za-z][A-Za-z'\-]*)", re.I)
_CONDITION = re.compile(r"\b(underweight|ideal|overweight)\b", re.I)
_GREETINGS = {"hi", "hello", "hey", "hiya", "start", "yes", "ok", "okay"}


def _first_number(text: str) -> Optional[float]:
    m = _NUMBER.search(text)
    if m:
        return float(m.group(1))
    for word in re.findall(r"[a-z]+", text.lower()):
        if word in _WORD_NUMBERS:
            return float(_WORD_NUMBERS[word])
    return None


def _parse_name(text: str) -> Optional[str]:
    m = _NAME.search(text)
    if m:
        return m.group(1).capitalize()
    words = re.findall(r"[A-Za-z][A-Za-z'\-]*", text)
    if 1 <= len(words) <= 2 and not _NUMBER.search(text) and words[0].lower() not in _GREETINGS:
        return " ".join(w.capitalize() for w in words)
    return None


def _parse_age(text: str) -> Dict[str, int]:
    years = re.search(r"(\d+)\s*(?:years?|yrs?|y/?o)", text, re.I)
    months = re.search(r"(\d+)\s*(?:months?|mos?)\b", text, re.I)
    out: Dict[str, int] = {}
    if years:
        out["age_years"] = int(years.group(1))
    if months:
        total = int(months.group(1)) + out.get("age_years", 0) * 12
        out["age_years"], out["age_months"] = divmod(total, 12)
    if not out:
        n = _first_number(text)
        if n is not None:
            out["age_years"] = int(n)
    return out


def _parse_weight_kg(text: str) -> Optional[float]:
    n = _first_number(text)
    if n is None or n <= 0:
        return None
    if re.search(r"\b(lbs?|pounds?)\b", text, re.I):
        return round(n * LB_TO_KG, 1)
    return n


def _parse_food_oz(text: str) -> Optional[float]:
    if re.search(r"\bhalf\b", text, re.I) and re.search(r"\bcups?\b", text, re.I):
        return OZ_PER_CUP / 2
    n = _first_number(text)
    if n is None:
        return None
    if re.search(r"\bcups?\b", text, re.I):
        return round(n * OZ_PER_CUP, 1)
    return n


def heuristic_updates(field: str, text: str) -> Dict[str, Dict[str, Any]]:
    """Extract the answer to the question about `field` from free text."""
    text = (text or "").strip()
    if not text:
        return {}

    def upd(section: str, values: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        return {section: {k: {"value": v, "confidence": SCRIPTED_CONFIDENCE} for k, v in values.items()}}

    if field == "name":
        name = _parse_name(text)
        return upd("cat_profile", {"name": name}) if name else {}
    if field == "age":
        age = _parse_age(text)
        return upd("cat_profile", age) if age else {}
    if field == "weight":
        kg = _parse_weight_kg(text)
        if kg is None:
            return {}
        values: Dict[str, Any] = {"weight_kg": kg, "weight_source": "user_estimate"}
        cond = _CONDITION.search(text)
        if cond:
            values["body_condition"] = cond.group(1).lower()
        return upd("cat_profile", values)
    if field == "food_amount":
        oz = _parse_food_oz(text)
        return upd("care_routine", {"food_amount_oz_per_day": oz}) if oz is not None else {}
    if field == "activity":
        n = _first_number(text)
        return upd("care_routine", {"play_minutes_per_day": n}) if n is not None else {}
    if field == "vet_visits":
        n = _first_number(text)
        return upd("care_routine", {"vet_visits_per_year": n}) if n is not None else {}
    return {}


def scripted_response(profile: CatProfile, routine: CareRoutine, photo_done: bool) -> ChatResponse:
    """Deterministic next question: the first missing key field, else photo / simulation."""
    name = profile.display_name()
    missing = missing_key_fields(profile, routine)
    if missing:
        return ChatResponse(
            assistant_message=_QUESTIONS[missing[0]].format(name=name),
            next_action="ask_question",
        )
    if not photo_done:
        return ChatResponse(
            assistant_message=(
                f"So far, I know the basics about {name}. If you have a photo, share it so I can "
                f"double-check body condition, or just say 'skip' to go straight to the simulation."
            ),
            next_action="request_photo",
        )
    return ChatResponse(
        assistant_message=f"Thanks! I have everything I need for {name}. Let's see how their life might unfold 🐱",
        next_action="ready_for_simulation",
    )


def _coerce_llm(llm: Dict[str, Any]) -> Optional[ChatResponse]:
    # tolerate the camelCase spellings older prompts used
    data = {
        "assistant_message": llm.get("assistant_message", llm.get("assistantMessage")),
        "updates": llm.get("updates") or {},
        "next_action": llm.get("next_action", llm.get("nextAction", "ask_question")),
    }
    try:
        return ChatResponse.model_validate(data)
    except ValidationError as e:
        logger.warning("intake coach returned an unusable reply: %s", e.errors()[:1])
        return None


# --------------------
# MAIN NODE
# --------------------
def intake_coach_agent(state: CatLifeSessionState) -> Dict[str, Any]:
    """
    One intake turn: fold what the user just said into the draft and decide the next move.
    Advances the session step on request_photo / ready_for_simulation.
    """
    cls: CatLifeChatState = state.catlife_chat_state
    user_msg = (cls.last_user_message or "").strip()
    draft = state.intake_draft
    photo_done = state.photo_analysis is not None

    llm: Dict[str, Any] = {"error": "unavailable"}
    if has_openai_key():
        context = {
            "known_so_far": cat_context_helper(
                resolve_profile(draft, base=state.cat_profile, include_pending=True),
                resolve_routine(draft, base=state.care_routine, include_pending=True)),
            "pending_fields": draft.pending_fields(),
            "photo_analysis": state.photo_analysis.model_dump() if photo_done else None,
            "user_message": user_msg,
        }
        llm = _chat_json(INTAKE_COACH_MODEL, INTAKE_COACH_SYSTEM_PROMPT,
                         json.dumps(context, ensure_ascii=False, default=str), messages_to_dict(state.messages))

    response = _coerce_llm(llm) if "error" not in llm else None
    if response is not None:
        draft = merge_intake_updates(draft, response.updates)
        meta = {"intake_source": "llm"}
    else:
        # answer to the question we asked last turn
        asked = missing_key_fields(resolve_profile(draft, base=state.cat_profile),
                                   resolve_routine(draft, base=state.care_routine))
        if asked and user_msg:
            draft = merge_intake_updates(draft, heuristic_updates(asked[0], user_msg))
        response = scripted_response(resolve_profile(draft, base=state.cat_profile),
                                     resolve_routine(draft, base=state.care_routine), photo_done)
        meta = {"intake_source": "scripted", "llm_error": llm.get("error")}

    profile = resolve_profile(draft, base=state.cat_profile)
    routine = resolve_routine(draft, base=state.care_routine)

    step = cls.step
    if response.next_action == "request_photo":
        step = "photo"
    elif response.next_action == "ready_for_simulation":
        step = "confirmed"

    return {
        "messages": [AIMessage(content=response.assistant_message)],
        "intake_draft": draft,
        "cat_profile": profile,
        "care_routine": routine,
        "catlife_chat_state": {
            "agent_response": response.assistant_message,
            "next_action": response.next_action,
            "step": step,
            "debug": {**meta, "pending_fields": draft.pending_fields()},
        },
    }
