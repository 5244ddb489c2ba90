# reducers.py
from typing import Any, Dict, Optional, Type, TypeVar, Union
from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_snake

#custom imports
from CatLife_Agents.states.catLifeChatState import CatLifeChatState
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.states.intakeState import CONFIRM_THRESHOLD, Confirmed, IntakeDraft, Pending

M = TypeVar("M", bound=BaseModel)

_SECTION_MODELS: Dict[str, Type[BaseModel]] = {
    "cat_profile": CatProfile,
    "care_routine": CareRoutine,
}


def merge_catlife_chat_state(
    old: Optional[CatLifeChatState],
    new: Optional[Union[CatLifeChatState, Dict[str, Any]]]) -> CatLifeChatState:
    """
    Patch-merge reducer:
      - Fields present in `new` replace `old`.
      - Fields omitted in `new` are preserved from `old`.
      - Deep-merge for `debug` dict.
    """
    if old is None and new is None:
        return CatLifeChatState()

    if old is None:
        if isinstance(new, CatLifeChatState):
            return new
        return CatLifeChatState.model_validate(new or {})

    if new is None:
        return old

    patch = new.model_dump(exclude_unset=True) if isinstance(new, CatLifeChatState) else dict(new)
    merged = old.model_dump()

    for field in ["last_user_message", "step", "next_action", "agent_response", "photo_base64"]:
        if field in patch:
            merged[field] = patch[field]

    if "debug" in patch and isinstance(patch["debug"], dict):
        merged["debug"] = {**(merged.get("debug") or {}), **patch["debug"]}

    return CatLifeChatState.model_validate(merged)


def merge_intake_updates(draft: Optional[IntakeDraft], raw_updates: Optional[Dict[str, Any]]) -> IntakeDraft:
    """
    Fold the coach's {section: {field: {value, confidence}}} bag into the draft.
      - confidence >= 0.9 -> Confirmed, otherwise Pending
      - a Confirmed field is never downgraded to Pending
      - unknown sections/fields and null values are ignored
    camelCase keys are accepted alongside snake_case.
    """
    merged = (draft or IntakeDraft()).model_copy(deep=True)
    if not isinstance(raw_updates, dict):
        return merged

    for raw_section, fields in raw_updates.items():
        section = to_snake(str(raw_section))
        model = _SECTION_MODELS.get(section)
        if model is None or not isinstance(fields, dict):
            continue
        bucket = getattr(merged, section)

        for raw_field, upd in fields.items():
            field = to_snake(str(raw_field))
            if field not in model.model_fields or not isinstance(upd, dict):
                continue
            value = upd.get("value")
            if value is None:
                continue
            try:
                confidence = min(1.0, max(0.0, float(upd.get("confidence", 0.0))))
            except (TypeError, ValueError):
                confidence = 0.0

            if confidence >= CONFIRM_THRESHOLD:
                bucket[field] = Confirmed(value=value)
            elif not isinstance(bucket.get(field), Confirmed):
                bucket[field] = Pending(value=value, confidence=confidence)

    return merged


def _resolve(model: Type[M], updates: Dict[str, Any], base: Optional[M], include_pending: bool) -> M:
    current = (base or model()).model_dump()
    for field, upd in updates.items():
        if isinstance(upd, Confirmed) or (include_pending and isinstance(upd, Pending)):
            candidate = {**current, field: upd.value}
            try:
                model.model_validate(candidate)
            except ValidationError:
                continue  # keep the previous value for anything that does not fit the schema
            current = candidate
    return model.model_validate(current)


def resolve_profile(draft: IntakeDraft, base: Optional[CatProfile] = None, include_pending: bool = False) -> CatProfile:
    return _resolve(CatProfile, draft.cat_profile, base, include_pending)


def resolve_routine(draft: IntakeDraft, base: Optional[CareRoutine] = None, include_pending: bool = False) -> CareRoutine:
    return _resolve(CareRoutine, draft.care_routine, base, include_pending)
