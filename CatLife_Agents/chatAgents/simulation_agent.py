# simulation_agent.py
from __future__ import annotations
import logging
from typing import Any, Dict
from langchain_core.messages import AIMessage

#custom imports
from CatLife_Agents.states.sessionState import CatLifeSessionState
from CatLife_Agents.states.reducers import resolve_profile, resolve_routine
from CatLife_Agents.simulationEngine.simulation import END_AGE_MONTHS, SimulationInputError, run_enhanced_simulation
from CatLife_Agents.chatAgents.avatar_agent import generate_avatar
from CatLife_Agents.breedRegistry.breed_repo import registry_fingerprint

logger = logging.getLogger(__name__)


def simulation_agent(state: CatLifeSessionState) -> Dict[str, Any]:
    """Run the base simulation + local enhancement for the confirmed profile."""
    profile = resolve_profile(state.intake_draft, base=state.cat_profile, include_pending=True)
    routine = resolve_routine(state.intake_draft, base=state.care_routine, include_pending=True)
    name = profile.display_name()

    if profile.total_age_months() > END_AGE_MONTHS:
        message = f"{name} is already past the 20 years our simulation covers. What a long, well-loved life! 🐱"
        return {
            "messages": [AIMessage(content=message)],
            "catlife_chat_state": {"agent_response": message, "step": "confirmed", "next_action": "ask_question"},
        }

    try:
        result = run_enhanced_simulation(profile, routine)
    except SimulationInputError as e:
        logger.warning("simulation rejected profile: %s", e)
        message = f"I couldn't simulate {name}'s life with those details. Could you double-check their age?"
        return {
            "messages": [AIMessage(content=message)],
            "catlife_chat_state": {"agent_response": message, "step": "intake", "next_action": "ask_clarification"},
        }

    if not profile.avatar_url:
        avatar_url = generate_avatar(profile, state.photo_analysis)
        if avatar_url:
            profile = profile.model_copy(update={"avatar_url": avatar_url})

    message = result.summary
    ref = registry_fingerprint()
    return {
        "messages": [AIMessage(content=message)],
        "cat_profile": profile,
        "care_routine": routine,
        "simulation": result,
        "catlife_chat_state": {
            "agent_response": message,
            "step": "simulation",
            "next_action": "ready_for_simulation",
            "debug": {
                "alerts": len(result.alerts),
                "trend": result.trajectory.trend,
                "registry": ref.model_dump(),
            },
        },
    }
