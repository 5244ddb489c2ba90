# quick_setup_gradio.py
# Gradio UI to:
# 1) Fill in a cat profile + care routine and run the life-course simulation.
# 2) Show the local result right away, then swap in personalized notes when they arrive.
# 3) Chat with the intake coach instead of using the form.
# 4) Set up email or SMS care reminders.

from __future__ import annotations
from typing import Optional
from pathlib import Path
from uuid import uuid4
import os
import base64
import logging
import gradio as gr
from pydantic import ValidationError

#custom imports
from CatLife_Agents.states.sessionState import CatLifeSessionState, save_state
from CatLife_Agents.breedRegistry.breed_repo import list_breed_names
from CatLife_Agents.simulationEngine.simulation import END_AGE_MONTHS, SimulationInputError, run_simulation
from CatLife_Agents.simulationEngine.simulation_enhancer import enhance_simulation_locally, upgrade_with_milestone_notes
from CatLife_Agents.simulationEngine.simulation_session import SimulationRunGuard
from CatLife_Agents.chatAgents.catlife_orchestrator import compile_catlife_app
from CatLife_Agents.gradio_interface.catlife_views import (
    EMPTY_RENDER, REMINDER_CHOICES, YEARLY_HEADERS, chat_simulation_view, chat_turn, form_to_models, latest_ai_reply,
    render_result, save_reminders, suggest_reminders,
)

logger = logging.getLogger(__name__)

GUARD = SimulationRunGuard()
app = compile_catlife_app()

# ---------------------------
# Core actions used by events
# ---------------------------
async def run_quick_setup(session_key: str, *form):
    """Yield the local result first, then the personalized one if it is still current."""
    try:
        profile, routine = form_to_models(*form)
        token = GUARD.begin(session_key)
        base = run_simulation(profile, routine, profile.total_age_months(), END_AGE_MONTHS)
    except (ValidationError, SimulationInputError) as e:
        yield f"⚠️ Please check the form: {e}", "", [], ""
        return

    local = enhance_simulation_locally(base, profile, routine)
    GUARD.publish(session_key, token, local)
    yield render_result(local, "_Personalizing milestone notes…_")

    upgraded = await upgrade_with_milestone_notes(local, profile, routine)
    if not GUARD.publish(session_key, token, upgraded):
        return  # a newer run owns the panel now
    label = "✨ Personalized" if upgraded != local else "Simulation ready"
    yield render_result(upgraded, f"_{label}_")


def init_chat():
    session_key = str(uuid4())
    config = {"configurable": {"thread_id": session_key}}
    state = CatLifeSessionState.model_validate(app.invoke(CatLifeSessionState(), config=config))
    return [{"role": "assistant", "content": latest_ai_reply(state)}], state, session_key


def handle_chat(chat_history, user_message, photo_path, session_key, state: Optional[CatLifeSessionState]):
    if state is None:
        return (chat_history, "", None, state, *EMPTY_RENDER)
    photo_b64 = base64.b64encode(Path(photo_path).read_bytes()).decode("ascii") if photo_path else None

    config = {"configurable": {"thread_id": session_key}}
    state = chat_turn(app, state, user_message, photo_b64, config=config)
    chat_history = chat_history + [
        {"role": "user", "content": user_message or "📷"},
        {"role": "assistant", "content": latest_ai_reply(state)},
    ]
    return (chat_history, "", None, state, *chat_simulation_view(state))


def suggest_reminder_channels(*form):
    try:
        profile, routine = form_to_models(*form)
    except ValidationError as e:
        return gr.update(), f"⚠️ Please check the Quick setup form: {e}"
    selected, reasons = suggest_reminders(profile, routine)
    return gr.update(value=selected), reasons


def save_chat_state(state: Optional[CatLifeSessionState], base_filename: str) -> str:
    if state is None:
        return "Nothing to save yet."
    path = save_state(state, Path(base_filename or "catlife_session.json"))
    return f"Saved to {path.resolve()}"


# ---------------------------
# Gradio layout & wiring
# ---------------------------
with gr.Blocks(title="CatLife Simulator") as demo:
    gr.Markdown("# 🐱 CatLife: how might your cat's life unfold?")
    session_key = gr.State(lambda: str(uuid4()))

    with gr.Tabs():
        with gr.Tab("Quick setup"):
            with gr.Row():
                with gr.Column(scale=1):
                    name = gr.Textbox(label="Name")
                    with gr.Row():
                        age_years = gr.Number(label="Age (years)", value=3, precision=0, minimum=0)
                        age_months = gr.Number(label="+ months", value=0, precision=0, minimum=0, maximum=11)
                    sex = gr.Dropdown(["male", "female", "unknown"], label="Sex", value=None)
                    neutered = gr.Radio(["yes", "no"], label="Spayed / neutered", value=None)
                    breed = gr.Dropdown(list_breed_names(), label="Breed", allow_custom_value=True, value=None)
                    indoor_outdoor = gr.Radio(["indoor", "outdoor", "mixed"], label="Lifestyle", value="indoor")
                    weight_kg = gr.Number(label="Weight (kg)", value=None, minimum=0)
                    body_condition = gr.Dropdown(["underweight", "ideal", "overweight", "unknown"], label="Body condition", value=None)
                    known_conditions = gr.Textbox(label="Known conditions (comma separated)")
                with gr.Column(scale=1):
                    food_type = gr.Dropdown(["dry", "wet", "mixed", "raw", "other"], label="Food type", value=None)
                    food_amount = gr.Number(label="Food per day (oz)", value=None, minimum=0)
                    feeding_frequency = gr.Dropdown(["1", "2", "3", "4"], label="Meals per day", value=None)
                    treats = gr.Number(label="Treats per day", value=None, minimum=0)
                    play = gr.Number(label="Play minutes per day", value=None, minimum=0)
                    vet = gr.Number(label="Vet visits per year", value=None, minimum=0)
                    litter = gr.Dropdown(["daily", "every_2_days", "weekly", "unknown"], label="Litter cleaning", value=None)
                    run_btn = gr.Button("▶️ Simulate")

            summary_md = gr.Markdown()
            with gr.Tabs():
                with gr.Tab("Alerts"):
                    alerts_html = gr.HTML()
                with gr.Tab("Yearly milestones"):
                    yearly_table = gr.Dataframe(headers=YEARLY_HEADERS, datatype=["number", "number", "str", "str"],
                                                interactive=False, wrap=True)
                with gr.Tab("Care timeline"):
                    timeline_html = gr.HTML()

        with gr.Tab("Chat intake"):
            chat = gr.Chatbot(type="messages", height=420)
            with gr.Row():
                txt = gr.Textbox(placeholder="Tell me about your cat…", show_label=False, scale=4)
                photo = gr.Image(type="filepath", label="Photo", scale=1)
            chat_summary_md = gr.Markdown()
            with gr.Tabs():
                with gr.Tab("Alerts"):
                    chat_alerts_html = gr.HTML()
                with gr.Tab("Yearly milestones"):
                    chat_yearly_table = gr.Dataframe(headers=YEARLY_HEADERS, datatype=["number", "number", "str", "str"],
                                                     interactive=False, wrap=True)
                with gr.Tab("Care timeline"):
                    chat_timeline_html = gr.HTML()
            save_name = gr.Textbox(label="Save as (filename.json)", placeholder="catlife_session.json")
            save_btn = gr.Button("💾 Save session")
            save_status = gr.Markdown("")
            chat_key = gr.State("")
            chat_state = gr.State(None)

        with gr.Tab("Reminders"):
            gr.Markdown("Pick the care reminders you want. Suggestions use the Quick setup form.")
            suggest_btn = gr.Button("💡 Suggest reminders")
            reminder_reasons = gr.Markdown("")
            reminder_channels = gr.CheckboxGroup(REMINDER_CHOICES, label="Remind me about", value=["feed", "vet"])
            contact_type = gr.Radio([("Email", "email"), ("SMS", "sms")], label="Send reminders by", value="email")
            contact_value = gr.Textbox(label="Email address or phone number", placeholder="you@example.com")
            reminder_btn = gr.Button("🔔 Set up reminders")
            reminder_status = gr.Markdown("")

    form_inputs = [
        name, age_years, age_months, sex, neutered, breed, indoor_outdoor, weight_kg, body_condition,
        known_conditions, food_type, food_amount, feeding_frequency, treats, play, vet, litter,
    ]
    run_btn.click(
        fn=run_quick_setup,
        inputs=[session_key, *form_inputs],
        outputs=[summary_md, alerts_html, yearly_table, timeline_html],
    )

    demo.load(fn=init_chat, inputs=[], outputs=[chat, chat_state, chat_key])
    txt.submit(
        fn=handle_chat,
        inputs=[chat, txt, photo, chat_key, chat_state],
        outputs=[chat, txt, photo, chat_state, chat_summary_md, chat_alerts_html, chat_yearly_table, chat_timeline_html],
    )
    save_btn.click(fn=save_chat_state, inputs=[chat_state, save_name], outputs=[save_status])

    suggest_btn.click(fn=suggest_reminder_channels, inputs=form_inputs, outputs=[reminder_channels, reminder_reasons])
    reminder_btn.click(
        fn=save_reminders,
        inputs=[chat_state, name, contact_type, contact_value, reminder_channels],
        outputs=[chat_state, reminder_status],
    )


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("CATLIFE_LOG_LEVEL", "INFO").upper())
    demo.launch()
