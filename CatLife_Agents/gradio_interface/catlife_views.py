# catlife_views.py
# What the Gradio tabs show and do, without importing gradio:
# 1) Form values -> CatProfile / CareRoutine.
# 2) EnhancedSimulationResult -> summary markdown, alert cards, yearly rows, timeline cards.
# 3) One chat turn through the compiled CatLife graph.
# 4) Reminder suggestions and reminder setup with a confirmation message.

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
from uuid import uuid4
import html
import logging
import httpx
from langchain_core.messages import AIMessage

#custom imports
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.states.simulationState import EnhancedSimulationResult
from CatLife_Agents.states.sessionState import CatLifeSessionState
from CatLife_Agents.states.reminderState import ContactType, ReminderChannels, ReminderSettings
from CatLife_Agents.helperFunctions.notifications import (
    is_valid_email, is_valid_phone_number, normalize_phone_number, recommend_reminders, send_reminder,
)

logger = logging.getLogger(__name__)

CHANNEL_LABELS = {"feed": "Feeding", "play": "Playtime", "litter": "Litter box", "vet": "Vet checkups"}
REMINDER_CHOICES = [(label, channel) for channel, label in CHANNEL_LABELS.items()]

YEARLY_HEADERS = ["age_years", "weight_kg", "status", "note"]
EMPTY_RENDER: Tuple[str, str, List[List[Any]], str] = ("", "", [], "")

_INLINE_STYLE = """
<style>
  .grid{display:grid;grid-template-columns:repeat(auto-fit,minmax(260px,1fr));gap:12px}
  .card{border:1px solid #fde68a;border-radius:14px;padding:12px;background:#fff;box-shadow:0 1px 2px rgba(0,0,0,.04)}
  .sev-critical{border-left:6px solid #dc2626}
  .sev-warning{border-left:6px solid #f59e0b}
  .sev-info{border-left:6px solid #3b82f6}
  .age{color:#92400e;font-weight:700}
  .msg{margin:4px 0;color:#451a03}
  .rec{color:#6b7280;font-size:.95rem}
  .prio-high{color:#dc2626;font-weight:700}
</style>
"""


# ---------------------------
# Form -> models
# ---------------------------
def _none_if_blank(v: Any) -> Any:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    return v


def form_to_models(
    name, age_years, age_months, sex, neutered, breed, indoor_outdoor, weight_kg, body_condition, known_conditions,
    food_type, food_amount, feeding_frequency, treats, play, vet, litter,
) -> Tuple[CatProfile, CareRoutine]:
    conditions = [c.strip() for c in (known_conditions or "").split(",") if c.strip()]
    profile = CatProfile(
        name=_none_if_blank(name),
        age_years=None if age_years is None else int(age_years),
        age_months=None if age_months is None else int(age_months),
        sex=_none_if_blank(sex),
        neutered=None if neutered in (None, "") else neutered == "yes",
        breed=_none_if_blank(breed),
        indoor_outdoor=_none_if_blank(indoor_outdoor),
        weight_kg=_none_if_blank(weight_kg),
        body_condition=_none_if_blank(body_condition),
        known_conditions=conditions,
    )
    routine = CareRoutine(
        food_type=_none_if_blank(food_type),
        food_amount_oz_per_day=food_amount,
        feeding_frequency=None if feeding_frequency in (None, "") else int(feeding_frequency),
        treats_per_day=treats,
        play_minutes_per_day=play,
        vet_visits_per_year=vet,
        litter_cleaning_frequency=_none_if_blank(litter),
    )
    return profile, routine


# ---------------------------
# Result rendering
# ---------------------------
def _alerts_html(result: EnhancedSimulationResult) -> str:
    if not result.alerts:
        return "<div class='card'>No alerts. Keep doing what you're doing!</div>" + _INLINE_STYLE
    cards = []
    for a in result.alerts:
        cards.append(f"""
        <div class='card sev-{a.severity}'>
          <div class='age'>Age {a.age_months // 12}y {a.age_months % 12}m · {html.escape(a.severity)}</div>
          <div class='msg'>{html.escape(a.message)}</div>
          <div class='rec'>{html.escape(a.recommendation)}</div>
        </div>""")
    return "<div class='grid'>" + "\n".join(cards) + "</div>" + _INLINE_STYLE


def _timeline_html(result: EnhancedSimulationResult) -> str:
    if not result.progressive_timeline:
        return "<div>No timeline.</div>"
    cards = []
    for r in result.progressive_timeline:
        prio = "prio-high" if r.priority == "high" else ""
        cards.append(f"""
        <div class='card'>
          <div class='age'>Year {r.age_years} · {html.escape(r.category)} · <span class='{prio}'>{html.escape(r.priority)}</span></div>
          <div class='msg'>{html.escape(r.recommendation)}</div>
          <div class='rec'>{html.escape(r.reason)}</div>
        </div>""")
    return "<div class='grid'>" + "\n".join(cards) + "</div>" + _INLINE_STYLE


def _yearly_rows(result: EnhancedSimulationResult) -> List[List[Any]]:
    rows = []
    for p in result.enhanced_points:
        if p.age_months % 12:
            continue
        note = p.enhanced_note.personalized_note if p.enhanced_note else p.notes
        rows.append([p.age_months // 12, round(p.weight_kg_estimate, 2), p.health_status, note])
    return rows


def _summary_md(result: EnhancedSimulationResult, status: str) -> str:
    recs = "\n".join(f"- {r}" for r in result.recommendations)
    breed = f"**Breed profile:** {result.breed_profile.breed}\n\n" if result.breed_profile else ""
    return f"{status}\n\n{breed}{result.summary}\n\n{recs}"


def render_result(result: EnhancedSimulationResult, status: str) -> Tuple[str, str, List[List[Any]], str]:
    """(summary markdown, alerts html, yearly rows, timeline html)"""
    return _summary_md(result, status), _alerts_html(result), _yearly_rows(result), _timeline_html(result)


# ---------------------------
# Chat
# ---------------------------
def latest_ai_reply(state: CatLifeSessionState) -> str:
    return next((m.content for m in reversed(state.messages) if isinstance(m, AIMessage)), "")


def chat_turn(app, state: CatLifeSessionState, user_message: str, photo_base64: Optional[str] = None,
              config: Optional[Dict[str, Any]] = None) -> CatLifeSessionState:
    patch: Dict[str, Any] = {"last_user_message": user_message or ""}
    if photo_base64:
        patch["photo_base64"] = photo_base64
    state = state.model_copy(update={"catlife_chat_state": state.catlife_chat_state.model_copy(update=patch)})
    return CatLifeSessionState.model_validate(app.invoke(state, config=config))


def chat_simulation_view(state: Optional[CatLifeSessionState]) -> Tuple[str, str, List[List[Any]], str]:
    """Result panels for the chat tab; empty until the graph has run the simulation."""
    if state is None or state.simulation is None:
        return EMPTY_RENDER
    name = state.cat_profile.display_name()
    return render_result(state.simulation, f"_Simulation for {name} from the chat_")


# ---------------------------
# Reminders
# ---------------------------
def suggest_reminders(profile: CatProfile, routine: CareRoutine) -> Tuple[List[str], str]:
    """Pre-selected channels plus a short markdown list of why."""
    recs = recommend_reminders(profile, routine)
    selected = [r.channel for r in recs if r.enabled]
    lines = []
    for r in recs:
        mark = "✅" if r.enabled else "▫️"
        freq = f", {r.frequency}" if r.frequency else ""
        lines.append(f"- {mark} **{CHANNEL_LABELS[r.channel]}** ({r.priority}{freq}): {r.reason}")
    return selected, f"Suggested reminders for {profile.display_name()}:\n\n" + "\n".join(lines)


def save_reminders(
    state: Optional[CatLifeSessionState],
    cat_name: Optional[str],
    contact_type: ContactType,
    contact_value: Optional[str],
    channels: Optional[List[str]],
    *,
    client: Optional[httpx.Client] = None,
) -> Tuple[Optional[CatLifeSessionState], str]:
    """Validate, send one confirmation reminder, and keep the settings on the session if it went out."""
    value = (contact_value or "").strip()
    if not value:
        return state, "Please enter your email address" if contact_type == "email" else "Please enter your phone number"
    if contact_type == "email" and not is_valid_email(value):
        return state, "Please enter a valid email address"
    if contact_type == "sms":
        value = normalize_phone_number(value)
        if not is_valid_phone_number(value):
            return state, "Please enter a valid phone number"
    chosen = [c for c in (channels or []) if c in CHANNEL_LABELS]
    if not chosen:
        return state, "Please select at least one reminder type"

    state = state or CatLifeSessionState()
    name = (cat_name or "").strip() or state.cat_profile.display_name()
    now = datetime.now()
    settings = ReminderSettings(
        id=str(uuid4()),
        contact_type=contact_type,
        contact_value=value,
        cat_name=name,
        channels=ReminderChannels(**{c: True for c in chosen}),
        created_at=now,
        updated_at=now,
    )

    first = settings.channels.enabled()[0]
    sent = send_reminder(settings, first, client=client)
    if not sent.success:
        logger.warning("reminder confirmation for %s failed: %s", name, sent.error)
        return state, f"⚠️ Could not set up reminders: {sent.error}"

    settings = settings.model_copy(update={"last_sent_at": now})
    state = state.model_copy(update={"reminder_settings": settings})
    active = ", ".join(CHANNEL_LABELS[c] for c in settings.channels.enabled())
    return state, f"✅ Reminders set for {name} ({active}). A {CHANNEL_LABELS[first].lower()} reminder was just sent to {value}."
