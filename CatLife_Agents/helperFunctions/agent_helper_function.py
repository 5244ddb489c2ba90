from typing import List, Optional
import json
import os
import logging
from openai import OpenAI

#custom imports
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.simulationEngine.weight_model import get_life_stage

logger = logging.getLogger(__name__)

JSON_ONLY_SUFFIX = "\n\nYou MUST reply with a single, valid JSON object. Output only JSON."


def has_openai_key() -> bool:
    return bool(os.getenv("OPENAI_API_KEY"))


# ----------------------------
# LLM helper
# ----------------------------
def _chat_json(model: str, system_prompt: str, user_msg: str, previous_messages: Optional[list] = None) -> dict:
    """
    Robust JSON-only call that satisfies OpenAI's 'json in messages' requirement.
    Returns {"error": ...} on any failure; caller should fall back gracefully.
    """
    try:
        client = OpenAI()
        messages = [
            {"role": "system", "content": f"{system_prompt}{JSON_ONLY_SUFFIX}"},
            # response_format json_object needs the word json in the messages
            {"role": "user", "content": "Please respond in json."},
        ]
        if previous_messages:
            messages.append({"role": "user", "content": json.dumps(previous_messages, ensure_ascii=False, default=str)})
        messages.append({"role": "user", "content": user_msg})

        resp = client.chat.completions.create(
            model=model,
            messages=messages,
            response_format={"type": "json_object"},
            temperature=0,
        )
        data = json.loads(resp.choices[0].message.content or "{}")
        if not isinstance(data, dict):
            return {"error": "model returned non-object JSON"}
        return data
    except Exception as e:
        logger.warning("chat completion failed (%s): %s", model, e)
        return {"error": str(e)}


# ----------------------------
# Minimal deterministic helpers (NOT business rules)
# ----------------------------
def cat_context_helper(p: CatProfile, r: Optional[CareRoutine] = None) -> dict:
    """Slim, explicit context to ground the LLM."""
    ctx = {
        "name": p.name,
        "breed": p.breed,
        "sex": p.sex,
        "neutered": p.neutered,
        "age_years": p.age_years,
        "age_months": p.age_months,
        "life_stage": get_life_stage(p.total_age_months()),
        "weight_kg": p.weight_kg,
        "body_condition": p.body_condition,
        "indoor_outdoor": p.indoor_outdoor,
        "known_conditions": list(p.known_conditions),
    }
    if r is not None:
        ctx["care_routine"] = r.model_dump(exclude_none=True)
    return ctx


def missing_key_fields(p: CatProfile, r: CareRoutine) -> List[str]:
    """Key intake fields still unknown, in the order the coach asks about them."""
    checks = [
        ("name", p.name),
        ("age", p.age_years),
        ("weight", p.weight_kg),
        ("food_amount", r.food_amount_oz_per_day),
        ("activity", r.play_minutes_per_day),
        ("vet_visits", r.vet_visits_per_year),
    ]
    return [name for name, value in checks if value is None]
