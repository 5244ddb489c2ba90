from langchain_core.messages import AIMessage, HumanMessage

from CatLife_Agents.chatAgents.catlife_orchestrator import build_catlife_graph, compile_catlife_app
from CatLife_Agents.states.sessionState import CatLifeSessionState

SCRIPT = [
    ("Luna", "How old is Luna?"),
    ("She's 3 years old", "how much does Luna weigh?"),
    ("about 10 lbs, a bit overweight", "How much food does Luna eat per day?"),
    ("half a cup of dry food", "How many minutes a day does Luna spend actively playing?"),
    ("15 minutes", "How many times a year does Luna usually visit the vet?"),
    ("once a year", "If you have a photo"),
]


def _turn(graph, state: CatLifeSessionState, text: str, config=None) -> CatLifeSessionState:
    chat = state.catlife_chat_state.model_copy(update={"last_user_message": text})
    state = state.model_copy(update={"catlife_chat_state": chat})
    return CatLifeSessionState.model_validate(graph.invoke(state, config=config))


def _last_ai(state: CatLifeSessionState) -> str:
    return next(m.content for m in reversed(state.messages) if isinstance(m, AIMessage))


def test_offline_intake_to_simulation():
    graph = build_catlife_graph().compile()
    state = CatLifeSessionState.model_validate(graph.invoke(CatLifeSessionState()))
    assert "What's your cat's name?" in _last_ai(state)

    for answer, expected in SCRIPT:
        state = _turn(graph, state, answer)
        assert expected in _last_ai(state), answer

    assert state.catlife_chat_state.step == "photo"
    assert state.cat_profile.weight_kg == 4.5
    assert state.cat_profile.body_condition == "overweight"
    assert state.care_routine.food_amount_oz_per_day == 2.25
    assert state.care_routine.vet_visits_per_year == 1

    state = _turn(graph, state, "skip")
    assert state.catlife_chat_state.step == "simulation"
    assert state.simulation is not None and state.simulation.is_enhanced
    assert len(state.simulation.points) == 240 - 36 + 1
    assert _last_ai(state) == state.simulation.summary
    assert state.catlife_chat_state.debug["registry"]["registry_id"] == "catlife_breed_health"

    humans = [m.content for m in state.messages if isinstance(m, HumanMessage)]
    assert humans == [a for a, _ in SCRIPT] + ["skip"]


def test_confirmed_session_routes_straight_to_simulation():
    graph = build_catlife_graph().compile()
    state = CatLifeSessionState.model_validate({
        "cat_profile": {"name": "Old Tom", "age_years": 21, "weight_kg": 4},
        "catlife_chat_state": {"step": "confirmed"},
    })
    out = CatLifeSessionState.model_validate(graph.invoke(state))
    assert out.simulation is None
    assert out.catlife_chat_state.step == "confirmed"
    assert "past the 20 years" in _last_ai(out)


def test_checkpointed_app_keeps_thread_history():
    app = compile_catlife_app()
    config = {"configurable": {"thread_id": "t-1"}}
    state = CatLifeSessionState.model_validate(app.invoke(CatLifeSessionState(), config=config))
    state = _turn(app, state, "Mochi", config=config)
    assert state.cat_profile.name == "Mochi"
    assert sum(isinstance(m, AIMessage) for m in state.messages) == 2
