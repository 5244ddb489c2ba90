import json

from CatLife_Agents.chatAgents import milestone_notes_agent as agent
from CatLife_Agents.chatAgents.avatar_agent import build_avatar_prompt, generate_avatar
from CatLife_Agents.states.catState import PhotoAnalysis
from factories import make_profile

PAYLOAD = {
    "catProfile": {"name": "Luna"},
    "careRoutine": {"play_minutes_per_day": 20},
    "simulationPoints": [{"age_months": 36, "weight_kg_estimate": 4.5, "health_status": "ok"}],
    "trajectory": {"trend": "stable"},
}


def test_without_key_returns_no_notes():
    assert agent.generate_milestone_notes(PAYLOAD) == {"success": False, "notes": []}


def test_notes_from_model(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    seen = {}

    def fake_chat_json(model, system_prompt, user_msg, previous_messages=None):
        seen["input"] = json.loads(user_msg)
        return {"notes": [{"age_years": 3, "personalized_note": "Hi Luna"}, "junk"]}

    monkeypatch.setattr(agent, "_chat_json", fake_chat_json)
    out = agent.generate_milestone_notes(PAYLOAD)
    assert out == {"success": True, "notes": [{"age_years": 3, "personalized_note": "Hi Luna"}]}
    assert seen["input"]["cat_profile"] == {"name": "Luna"}
    assert seen["input"]["simulation_points"][0]["age_months"] == 36


def test_snake_case_payload_and_empty_points(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(agent, "_chat_json", lambda *a, **k: {"notes": []})
    assert agent.generate_milestone_notes({"simulation_points": []})["success"] is False
    assert agent.generate_milestone_notes({"simulation_points": PAYLOAD["simulationPoints"]})["success"] is False


def test_model_error_is_reported(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(agent, "_chat_json", lambda *a, **k: {"error": "timeout"})
    assert agent.generate_milestone_notes(PAYLOAD) == {"success": False, "notes": [], "error": "timeout"}


def test_avatar_prompt_uses_photo_colors():
    prompt = build_avatar_prompt(make_profile(name="Mochi"), PhotoAnalysis(estimated_color="black", estimated_pattern="solid"))
    assert "- black fur color" in prompt
    assert "- solid pattern" in prompt
    assert 'named "Mochi"' in prompt
    assert "- orange fur color" in build_avatar_prompt(make_profile())


def test_avatar_without_key_is_none():
    assert generate_avatar(make_profile()) is None


def test_camel_case_payload_reaches_model_as_snake_case(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    seen = {}

    def fake_chat_json(model, system_prompt, user_msg, previous_messages=None):
        seen["input"] = json.loads(user_msg)
        return {"notes": [{"ageYears": 3, "personalizedNote": "Hi"}]}

    monkeypatch.setattr(agent, "_chat_json", fake_chat_json)
    agent.generate_milestone_notes({
        "catProfile": {"ageYears": 3, "knownConditions": ["asthma"]},
        "simulationPoints": [{"ageMonths": 36, "weightKgEstimate": 4.5, "healthStatus": "ok"}],
        "trajectory": {"averageHealthScore": 3.0},
    })
    assert seen["input"]["cat_profile"] == {"age_years": 3, "known_conditions": ["asthma"]}
    assert seen["input"]["simulation_points"][0] == {"age_months": 36, "weight_kg_estimate": 4.5, "health_status": "ok"}
    assert seen["input"]["trajectory"] == {"average_health_score": 3.0}
