import json
import random
import httpx
import pytest

from CatLife_Agents.chatAgents.catlife_orchestrator import build_catlife_graph
from CatLife_Agents.gradio_interface.catlife_views import (
    EMPTY_RENDER, chat_simulation_view, chat_turn, form_to_models, latest_ai_reply, render_result, save_reminders,
    suggest_reminders,
)
from CatLife_Agents.helperFunctions import notifications
from CatLife_Agents.simulationEngine.simulation import run_enhanced_simulation
from CatLife_Agents.states.sessionState import CatLifeSessionState
from factories import make_profile, make_routine

FORM = ["Luna", 3, 0, "female", "yes", "Maine Coon", "indoor", 4.5, "", " asthma , ", "dry", 4.0, "2", 1, 5, 1, "daily"]


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _never(request):
    raise AssertionError("nothing should be sent")


@pytest.fixture
def session():
    return CatLifeSessionState.model_validate({"cat_profile": {"name": "Luna"}})


# ---------------------------
# Form + rendering
# ---------------------------
def test_form_to_models_reads_blank_and_choice_fields():
    profile, routine = form_to_models(*FORM)
    assert profile.neutered is True
    assert profile.body_condition is None
    assert profile.known_conditions == ["asthma"]
    assert routine.feeding_frequency == 2


def test_render_result_has_every_panel():
    result = run_enhanced_simulation(make_profile(), make_routine(), rng=random.Random(5))
    summary, alerts, rows, timeline = render_result(result, "_ready_")
    assert summary.startswith("_ready_") and result.summary in summary
    assert [r[0] for r in rows] == list(range(3, 21))
    assert "class='grid'" in alerts or "No alerts" in alerts
    assert "Year " in timeline


# ---------------------------
# Chat
# ---------------------------
def test_chat_view_is_empty_before_simulation(session):
    assert chat_simulation_view(None) == EMPTY_RENDER
    assert chat_simulation_view(session) == EMPTY_RENDER


def test_chat_turn_renders_the_simulation():
    graph = build_catlife_graph().compile()
    state = CatLifeSessionState.model_validate({
        "cat_profile": {"name": "Luna", "age_years": 3, "weight_kg": 4.5},
        "catlife_chat_state": {"step": "confirmed"},
    })
    state = chat_turn(graph, state, "let's see it")
    assert state.simulation is not None
    assert latest_ai_reply(state) == state.simulation.summary

    summary, _, rows, timeline = chat_simulation_view(state)
    assert "Simulation for Luna" in summary
    assert state.simulation.summary in summary
    assert rows[0][0] == 3
    assert timeline


# ---------------------------
# Reminders
# ---------------------------
def test_suggestions_preselect_enabled_channels():
    selected, reasons = suggest_reminders(make_profile(), make_routine())
    assert selected == ["feed", "vet"]
    assert reasons.startswith("Suggested reminders for Luna")

    selected, reasons = suggest_reminders(make_profile(), make_routine(play_minutes_per_day=5))
    assert selected == ["feed", "play", "vet"]
    assert "under 15 minutes" in reasons


@pytest.mark.parametrize("contact_type,value,channels,message", [
    ("email", "  ", ["feed"], "Please enter your email address"),
    ("sms", "", ["feed"], "Please enter your phone number"),
    ("email", "luna-at-home", ["feed"], "Please enter a valid email address"),
    ("sms", "12", ["feed"], "Please enter a valid phone number"),
    ("email", "owner@catlife.test", [], "Please select at least one reminder type"),
])
def test_invalid_reminder_setup_is_rejected(session, contact_type, value, channels, message):
    state, msg = save_reminders(session, "Luna", contact_type, value, channels, client=_client(_never))
    assert msg == message
    assert state is session
    assert state.reminder_settings is None


def test_email_reminders_send_confirmation_and_are_stored(session, monkeypatch):
    monkeypatch.setattr(notifications, "RESEND_API_KEY", "re_test")
    seen = {}

    def handler(request: httpx.Request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_1"})

    state, msg = save_reminders(session, "", "email", " owner@catlife.test ", ["vet", "feed"], client=_client(handler))
    assert seen["body"]["to"] == ["owner@catlife.test"]
    assert seen["body"]["subject"] == "🐱 Time to feed Luna!"

    settings = state.reminder_settings
    assert settings.cat_name == "Luna"
    assert settings.channels.enabled() == ["feed", "vet"]
    assert settings.last_sent_at is not None
    assert msg.startswith("✅ Reminders set for Luna (Feeding, Vet checkups)")
    assert session.reminder_settings is None


def test_sms_numbers_are_normalized(session, monkeypatch):
    monkeypatch.setattr(notifications, "TWILIO_ENABLED", True)
    monkeypatch.setattr(notifications, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(notifications, "TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setattr(notifications, "TWILIO_PHONE_NUMBER", "+15550000000")

    def handler(request: httpx.Request):
        return httpx.Response(201, json={"sid": "SM1"})

    state, _ = save_reminders(session, "Luna", "sms", "(555) 123-4567", ["play"], client=_client(handler))
    assert state.reminder_settings.contact_value == "+15551234567"


def test_failed_confirmation_keeps_session_unchanged(session, monkeypatch):
    monkeypatch.setattr(notifications, "TWILIO_ENABLED", False)
    state, msg = save_reminders(session, "Luna", "sms", "+15551234567", ["feed"], client=_client(_never))
    assert state.reminder_settings is None
    assert "SMS notifications not yet available" in msg


def test_reminders_without_a_session_start_one(monkeypatch):
    monkeypatch.setattr(notifications, "RESEND_API_KEY", "re_test")
    client = _client(lambda request: httpx.Response(200, json={"id": "email_2"}))
    state, _ = save_reminders(None, "Milo", "email", "owner@catlife.test", ["litter"], client=client)
    assert isinstance(state, CatLifeSessionState)
    assert state.reminder_settings.cat_name == "Milo"
