
from __future__ import annotations
from typing import Optional, Dict, Any, Literal

from pydantic import BaseModel, Field

#custom imports
from CatLife_Agents.states.intakeState import NextAction

SessionStep = Literal["intake", "photo", "confirmed", "simulation"]


# =========================
# Chat State
# =========================
class CatLifeChatState(BaseModel):
    """
    state for one CatLife conversation turn.
    holds the latest user input, which step of the flow we are in, and the agent's reply
    """

    last_user_message: str = Field("", description="Raw latest user utterance")
    step: SessionStep = Field("intake", description="intake|photo|confirmed|simulation")
    next_action: NextAction = Field("ask_question", description="Coach's requested next move")
    agent_response: Optional[str] = Field("", description="Agent response to the user's message")
    photo_base64: Optional[str] = Field(None, description="Photo awaiting analysis (base64, no data: prefix)")
    debug: Dict[str, Any] = Field(default_factory=dict)
