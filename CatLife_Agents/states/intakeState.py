from __future__ import annotations
from typing import Any, Dict, Literal, Union
from typing import Annotated
from pydantic import BaseModel, Field

# confidence at or above this confirms a field outright
CONFIRM_THRESHOLD = 0.9

IntakeSection = Literal["cat_profile", "care_routine"]
NextAction = Literal[
    "ask_question",
    "ask_clarification",
    "request_photo",
    "photo_analysis_pending",
    "ready_for_simulation",
]


# ---------------------------
# Per-field update (tagged union)
# ---------------------------
class Unset(BaseModel):
    state: Literal["unset"] = "unset"


class Pending(BaseModel):
    state: Literal["pending"] = "pending"
    value: Any
    confidence: float = Field(ge=0, le=1)


class Confirmed(BaseModel):
    state: Literal["confirmed"] = "confirmed"
    value: Any


FieldUpdate = Annotated[Union[Unset, Pending, Confirmed], Field(discriminator="state")]


class IntakeDraft(BaseModel):
    """What the conversation has learned so far, field by field."""
    cat_profile: Dict[str, FieldUpdate] = Field(default_factory=dict)
    care_routine: Dict[str, FieldUpdate] = Field(default_factory=dict)

    def get(self, section: IntakeSection, field: str) -> Union[Unset, Pending, Confirmed]:
        return getattr(self, section).get(field) or Unset()

    def pending_fields(self) -> Dict[str, float]:
        out: Dict[str, float] = {}
        for section in ("cat_profile", "care_routine"):
            for name, upd in getattr(self, section).items():
                if isinstance(upd, Pending):
                    out[f"{section}.{name}"] = upd.confidence
        return out


# ---------------------------
# Chat turn I/O
# ---------------------------
class ChatResponse(BaseModel):
    assistant_message: str
    # raw {section: {field: {value, confidence}}} as produced by the coach
    updates: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    next_action: NextAction = "ask_question"

