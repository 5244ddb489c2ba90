# notifications.py
# Reminder delivery: email via the Resend REST API, SMS via Twilio (off unless enabled).
import os
import re
import html
import logging
from typing import Dict, List, Optional

import httpx

#custom imports
from CatLife_Agents.states.catState import CatProfile, CareRoutine
from CatLife_Agents.states.reminderState import (
    NotificationResult, ReminderChannel, ReminderRecommendation, ReminderSettings,
)

logger = logging.getLogger(__name__)

# --------------------
# Config
# --------------------
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
RESEND_API_URL = "https://api.resend.com/emails"
FROM_EMAIL = os.getenv("FROM_EMAIL", "reminders@catlife.local")
BASE_URL = os.getenv("CATLIFE_BASE_URL", "http://localhost:7860")

TWILIO_ENABLED = os.getenv("TWILIO_ENABLED", "false").lower() == "true"
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER", "")

HTTP_TIMEOUT_S = 10.0

_FOOTER = "\n\n---\nCatLife - Helping you care for {name}\nReply \"STOP\" to unsubscribe from reminders."

# --------------------
# Templates
# --------------------
EMAIL_TEMPLATES: Dict[str, Dict[str, str]] = {
    "feed": {
        "subject": "🐱 Time to feed {name}!",
        "body": "Hey there! This is your friendly reminder that {name} is waiting for their meal.\n\n"
                "A well-fed cat is a happy cat! 🍽️",
    },
    "play": {
        "subject": "🎾 Playtime for {name}!",
        "body": "Time to get {name} moving!\n\n"
                "10-15 minutes of active play helps keep cats healthy, mentally stimulated, and at a good "
                "weight. Grab that favorite toy and have some fun together! 🐱",
    },
    "litter": {
        "subject": "🧹 Litter box reminder for {name}",
        "body": "Quick reminder to check {name}'s litter box!\n\n"
                "A clean litter box helps prevent behavioral issues and keeps your home smelling fresh. "
                "{name} will thank you! 🐱",
    },
    "vet": {
        "subject": "🩺 Time for {name}'s vet checkup!",
        "body": "It's been a while since {name}'s last vet visit!\n\n"
                "Regular checkups help catch health issues early and keep your furry friend in top shape. "
                "Consider scheduling an appointment soon. 🐱",
    },
}

SMS_TEMPLATES: Dict[str, str] = {
    "feed": "🐱 CatLife: Time to feed {name}! Reply STOP to opt out.",
    "play": "🎾 CatLife: Playtime for {name}! 10-15 min of play keeps cats happy. Reply STOP to opt out.",
    "litter": "🧹 CatLife: Litter box reminder for {name}. A clean box = a happy cat! Reply STOP to opt out.",
    "vet": "🩺 CatLife: {name} is due for a vet checkup! Schedule soon. Reply STOP to opt out.",
}


def render_email(cat_name: str, channel: ReminderChannel) -> Dict[str, str]:
    t = EMAIL_TEMPLATES[channel]
    return {
        "subject": t["subject"].format(name=cat_name),
        "body": t["body"].format(name=cat_name) + _FOOTER.format(name=cat_name),
    }


def render_sms(cat_name: str, channel: ReminderChannel) -> str:
    return SMS_TEMPLATES[channel].format(name=cat_name)


def format_email_html(subject: str, body: str, cat_name: str) -> str:
    unsubscribe_url = f"{BASE_URL.rstrip('/')}/api/catlife/unsubscribe"
    subject, body, cat_name = html.escape(subject), html.escape(body), html.escape(cat_name)
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>
<body style="font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #fef7ed;">
  <div style="background: #f59e0b; padding: 24px; border-radius: 16px 16px 0 0; text-align: center;">
    <h1 style="color: white; margin: 0; font-size: 24px;">🐱 CatLife</h1>
    <p style="color: rgba(255,255,255,0.9); margin: 8px 0 0 0; font-size: 14px;">Caring for {cat_name}</p>
  </div>
  <div style="background: white; padding: 24px; border-radius: 0 0 16px 16px;">
    <h2 style="color: #92400e; margin-top: 0;">{subject}</h2>
    <div style="color: #451a03; line-height: 1.6; white-space: pre-wrap;">{body}</div>
    <div style="margin-top: 24px; padding-top: 16px; border-top: 1px solid #fde68a;">
      <p style="color: #92400e; font-size: 12px; margin: 0;">
        You're receiving this because you set up CatLife reminders for {cat_name}.<br><br>
        <a href="{unsubscribe_url}" style="color: #d97706;">Unsubscribe from all reminders</a>
      </p>
    </div>
  </div>
</body>
</html>"""


# --------------------
# Senders
# --------------------
def send_reminder_email(to: str, cat_name: str, channel: ReminderChannel,
                        client: Optional[httpx.Client] = None) -> NotificationResult:
    if not RESEND_API_KEY:
        return NotificationResult(success=False, channel="email", error="Email service not configured")

    t = render_email(cat_name, channel)
    payload = {
        "from": f"CatLife <{FROM_EMAIL}>",
        "to": [to],
        "subject": t["subject"],
        "html": format_email_html(t["subject"], t["body"], cat_name),
    }
    headers = {"Authorization": f"Bearer {RESEND_API_KEY}"}
    try:
        if client is not None:
            r = client.post(RESEND_API_URL, json=payload, headers=headers)
        else:
            with httpx.Client(timeout=HTTP_TIMEOUT_S) as c:
                r = c.post(RESEND_API_URL, json=payload, headers=headers)
        data = _json_or_empty(r)
        if r.status_code >= 400:
            logger.warning("resend rejected reminder email (%s): %s", r.status_code, data)
            return NotificationResult(success=False, channel="email",
                                      error=str(data.get("message") or f"HTTP {r.status_code}"))
        return NotificationResult(success=True, channel="email", message_id=data.get("id"))
    except Exception as e:
        logger.exception("reminder email send failed")
        return NotificationResult(success=False, channel="email", error=str(e) or "Unknown error")


def is_sms_available() -> bool:
    return bool(TWILIO_ENABLED and TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER)


def send_reminder_sms(to: str, cat_name: str, channel: ReminderChannel,
                      client: Optional[httpx.Client] = None) -> NotificationResult:
    if not TWILIO_ENABLED:
        logger.info("SMS reminders disabled (TWILIO_ENABLED is not true)")
        return NotificationResult(success=False, channel="sms",
                                  error="SMS notifications not yet available. Please use email.")
    if not is_sms_available():
        logger.error("Twilio credentials not configured")
        return NotificationResult(success=False, channel="sms", error="SMS service not configured")

    url = f"https://api.twilio.com/2010-04-01/Accounts/{TWILIO_ACCOUNT_SID}/Messages.json"
    form = {"To": to, "From": TWILIO_PHONE_NUMBER, "Body": render_sms(cat_name, channel)}
    auth = (TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN)
    try:
        if client is not None:
            r = client.post(url, data=form, auth=auth)
        else:
            with httpx.Client(timeout=HTTP_TIMEOUT_S) as c:
                r = c.post(url, data=form, auth=auth)
        data = _json_or_empty(r)
        if r.status_code >= 400:
            logger.warning("twilio rejected reminder sms (%s): %s", r.status_code, data)
            return NotificationResult(success=False, channel="sms",
                                      error=str(data.get("message") or "Failed to send SMS"))
        return NotificationResult(success=True, channel="sms", message_id=data.get("sid"))
    except Exception as e:
        logger.exception("reminder sms send failed")
        return NotificationResult(success=False, channel="sms", error=str(e) or "Unknown error")


def send_reminder(settings: ReminderSettings, channel: ReminderChannel,
                  client: Optional[httpx.Client] = None) -> NotificationResult:
    """Dispatch by contact type. Never raises."""
    if settings.contact_type == "email":
        return send_reminder_email(settings.contact_value, settings.cat_name, channel, client=client)
    if settings.contact_type == "sms":
        return send_reminder_sms(settings.contact_value, settings.cat_name, channel, client=client)
    return NotificationResult(success=False, channel=settings.contact_type, error="Unknown contact type")


def _json_or_empty(r: httpx.Response) -> dict:
    try:
        data = r.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


# --------------------
# Validation helpers
# --------------------
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_E164 = re.compile(r"^\+[1-9]\d{9,14}$")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL.match(email or ""))


def is_valid_phone_number(phone: str) -> bool:
    return bool(_E164.match(re.sub(r"\s", "", phone or "")))


def normalize_phone_number(phone: str) -> str:
    """Best-effort E.164; numbers without a country code are assumed US (+1)."""
    normalized = re.sub(r"[^\d+]", "", phone or "")
    if not normalized.startswith("+"):
        if normalized.startswith("1") and len(normalized) == 11:
            normalized = normalized[1:]
        normalized = "+1" + normalized
    return normalized


# --------------------
# Recommendations
# --------------------
def recommend_reminders(profile: CatProfile, routine: CareRoutine) -> List[ReminderRecommendation]:
    """Suggested reminder channels derived from the care routine."""
    name = profile.display_name()
    play = routine.play_minutes_per_day
    vet = routine.vet_visits_per_year
    feeds = routine.feeding_frequency or 2

    recs = [
        ReminderRecommendation(
            channel="feed", enabled=True,
            reason="Consistent feeding times help maintain healthy digestion.",
            priority="medium", frequency=f"{feeds}x daily",
        ),
        ReminderRecommendation(
            channel="play", enabled=False,
            reason="Daily play keeps cats mentally stimulated and physically fit.",
            priority="medium", frequency="Daily",
        ),
        ReminderRecommendation(
            channel="vet", enabled=True,
            reason="Regular checkups catch health issues early.",
            priority="medium", frequency="Yearly",
        ),
        ReminderRecommendation(
            channel="litter", enabled=False,
            reason="Clean litter promotes good bathroom habits.",
            priority="low", frequency="Daily",
        ),
    ]
    by_channel = {r.channel: r for r in recs}

    if play is not None and play < 15:
        by_channel["play"] = by_channel["play"].model_copy(update={
            "enabled": True, "priority": "high",
            "reason": f"{name} gets under 15 minutes of play a day; a nudge helps keep weight in check.",
        })
    if vet is None or vet < 1:
        by_channel["vet"] = by_channel["vet"].model_copy(update={
            "priority": "high",
            "reason": f"{name} has no regular vet visits yet; an annual checkup catches issues early.",
        })
    elif (profile.age_years or 0) >= 10 and vet < 2:
        by_channel["vet"] = by_channel["vet"].model_copy(update={
            "priority": "high", "frequency": "Every 6 months",
            "reason": f"Senior cats like {name} benefit from twice-yearly checkups.",
        })
    if routine.litter_cleaning_frequency in ("weekly", "unknown"):
        by_channel["litter"] = by_channel["litter"].model_copy(update={
            "enabled": True, "priority": "medium",
            "reason": "Scooping daily keeps the box inviting and makes changes in urine easy to spot.",
        })

    return [by_channel[c] for c in ("feed", "play", "vet", "litter")]
