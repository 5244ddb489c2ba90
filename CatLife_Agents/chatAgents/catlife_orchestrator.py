# catlife_orchestrator.py
from __future__ import annotations
from typing import Any, Dict
from langgraph.graph import StateGraph, END
from langgraph.checkpoint.memory import MemorySaver
from langchain_core.messages import HumanMessage

#custom imports
from CatLife_Agents.states.sessionState import CatLifeSessionState
from CatLife_Agents.chatAgents.intake_coach_agent import intake_coach_agent
from CatLife_Agents.chatAgents.photo_analysis_agent import photo_analysis_agent
from CatLife_Agents.chatAgents.simulation_agent import simulation_agent


# -------- Router node --------
def catlife_router_agent(state: CatLifeSessionState) -> Dict[str, Any]:
    """Record the user's turn; routing itself happens on the session step."""
    cls = state.catlife_chat_state
    update: Dict[str, Any] = {"catlife_chat_state": {"debug": {"route": _route_selector(state)}}}
    if cls.last_user_message:
        update["messages"] = [HumanMessage(content=cls.last_user_message)]
    return update


# -------- Helpers --------
def _route_selector(state: CatLifeSessionState) -> str:
    step = state.catlife_chat_state.step
    if step == "photo":
        return "photo_analysis_agent"
    if step in ("confirmed", "simulation"):
        return "simulation_agent"
    return "intake_coach_agent"


def _after_intake(state: CatLifeSessionState) -> str:
    if state.catlife_chat_state.next_action == "ready_for_simulation":
        return "simulation_agent"
    return "end"


def _after_photo(state: CatLifeSessionState) -> str:
    if state.catlife_chat_state.step == "confirmed":
        return "simulation_agent"
    return "end"


# -------- Graph builder --------
def build_catlife_graph() -> StateGraph:
    """
    router -> intake | photo | simulation
    intake / photo fall through to simulation once the profile is confirmed.
    """
    g = StateGraph(CatLifeSessionState)

    # Nodes
    g.add_node("catlife_router_agent", catlife_router_agent)
    g.add_node("intake_coach_agent", intake_coach_agent)
    g.add_node("photo_analysis_agent", photo_analysis_agent)
    g.add_node("simulation_agent", simulation_agent)

    # Entry
    g.set_entry_point("catlife_router_agent")

    g.add_conditional_edges(
        "catlife_router_agent",
        _route_selector,
        {
            "intake_coach_agent": "intake_coach_agent",
            "photo_analysis_agent": "photo_analysis_agent",
            "simulation_agent": "simulation_agent",
        },
    )
    g.add_conditional_edges(
        "intake_coach_agent",
        _after_intake,
        {"simulation_agent": "simulation_agent", "end": END},
    )
    g.add_conditional_edges(
        "photo_analysis_agent",
        _after_photo,
        {"simulation_agent": "simulation_agent", "end": END},
    )
    g.add_edge("simulation_agent", END)
    return g


# -------- Minimal driver API --------
def compile_catlife_app():
    graph = build_catlife_graph()
    memory = MemorySaver()
    return graph.compile(checkpointer=memory)
