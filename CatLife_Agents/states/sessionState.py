from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field

from pathlib import Path
import json
import re
import logging
from langchain_core.messages import messages_from_dict, messages_to_dict
from langgraph.graph.message import add_messages
from typing import Annotated

#custom imports
from CatLife_Agents.states.catState import CatProfile, CareRoutine, PhotoAnalysis
from CatLife_Agents.states.intakeState import IntakeDraft
from CatLife_Agents.states.simulationState import EnhancedSimulationResult
from CatLife_Agents.states.reminderState import ReminderSettings
from CatLife_Agents.states.catLifeChatState import CatLifeChatState
from CatLife_Agents.states.reducers import merge_catlife_chat_state

logger = logging.getLogger(__name__)


# ---------------------------
# Top-level Session State
# ---------------------------
class CatLifeSessionState(BaseModel):
    cat_profile: CatProfile = Field(default_factory=CatProfile)
    care_routine: CareRoutine = Field(default_factory=CareRoutine)
    intake_draft: IntakeDraft = Field(default_factory=IntakeDraft)
    photo_analysis: Optional[PhotoAnalysis] = None
    simulation: Optional[EnhancedSimulationResult] = None
    reminder_settings: Optional[ReminderSettings] = None
    catlife_chat_state: Annotated[CatLifeChatState, merge_catlife_chat_state] = Field(default_factory=CatLifeChatState)

    #reducers only work at the top most level of the state
    messages: Annotated[list, add_messages] = Field(default_factory=list)

    schema_version: int = 1


def save_state(state: CatLifeSessionState, path: str | Path) -> Path:
    #graph output arrives as a plain dict
    state = CatLifeSessionState.model_validate(state)

    base_path = Path(path)
    cat_name = state.cat_profile.name
    if cat_name:
        final_path = base_path.with_name(f"{base_path.stem}-{slugify_name(cat_name)}{base_path.suffix}")
    else:
        final_path = base_path

    data = state.model_dump(mode="json", exclude={"messages"})
    data["messages"] = messages_to_dict(state.messages)

    tmp = final_path.with_suffix(final_path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(final_path)  # atomic on most OSes

    logger.info("saved session state to %s", final_path)
    return final_path


def load_state(path: str | Path) -> CatLifeSessionState:
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    data["messages"] = messages_from_dict(data.get("messages") or [])
    return CatLifeSessionState.model_validate(data)


def slugify_name(name: str, max_len: int = 32) -> str:
    """Make a filesystem-safe slug from the cat name."""
    slug = re.sub(r"[^A-Za-z0-9]+", "-", name).strip("-").lower()
    return (slug or "cat")[:max_len]
