import json
import httpx
import pytest

from CatLife_Agents.helperFunctions import notifications
from CatLife_Agents.helperFunctions.notifications import (
    format_email_html, is_valid_email, is_valid_phone_number, normalize_phone_number, recommend_reminders,
    render_email, render_sms, send_reminder, send_reminder_email, send_reminder_sms,
)
from CatLife_Agents.states.reminderState import ReminderChannels, ReminderSettings
from factories import make_profile, make_routine


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def resend(monkeypatch):
    monkeypatch.setattr(notifications, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(notifications, "FROM_EMAIL", "hello@catlife.test")
    monkeypatch.setattr(notifications, "BASE_URL", "https://catlife.test/")


@pytest.fixture
def twilio(monkeypatch):
    monkeypatch.setattr(notifications, "TWILIO_ENABLED", True)
    monkeypatch.setattr(notifications, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(notifications, "TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setattr(notifications, "TWILIO_PHONE_NUMBER", "+15550000000")


# ---------------------------
# Templates
# ---------------------------
def test_email_template_has_name_and_footer():
    t = render_email("Luna", "play")
    assert t["subject"] == "🎾 Playtime for Luna!"
    assert "Time to get Luna moving!" in t["body"]
    assert t["body"].endswith('Reply "STOP" to unsubscribe from reminders.')


def test_sms_template():
    assert render_sms("Luna", "vet") == "🩺 CatLife: Luna is due for a vet checkup! Schedule soon. Reply STOP to opt out."


def test_email_html_escapes_and_links_unsubscribe(resend):
    page = format_email_html("Hi <Luna>", "body & more", "<b>Luna</b>")
    assert "Hi &lt;Luna&gt;" in page
    assert "body &amp; more" in page
    assert "<b>Luna</b>" not in page
    assert 'href="https://catlife.test/api/catlife/unsubscribe"' in page


# ---------------------------
# Email
# ---------------------------
def test_email_without_key_is_not_configured(monkeypatch):
    monkeypatch.setattr(notifications, "RESEND_API_KEY", "")
    r = send_reminder_email("a@b.co", "Luna", "feed")
    assert not r.success
    assert r.error == "Email service not configured"


def test_email_success(resend):
    seen = {}

    def handler(request: httpx.Request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_1"})

    r = send_reminder_email("owner@example.com", "Luna", "feed", client=_client(handler))
    assert r.success and r.message_id == "email_1" and r.channel == "email"
    assert seen["auth"] == "Bearer re_test"
    assert seen["body"]["from"] == "CatLife <hello@catlife.test>"
    assert seen["body"]["to"] == ["owner@example.com"]
    assert seen["body"]["subject"] == "🐱 Time to feed Luna!"


def test_email_rejected_by_provider(resend):
    r = send_reminder_email("owner@example.com", "Luna", "feed",
                            client=_client(lambda req: httpx.Response(422, json={"message": "Invalid `to` field"})))
    assert not r.success
    assert r.error == "Invalid `to` field"


def test_email_transport_failure(resend):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    r = send_reminder_email("owner@example.com", "Luna", "feed", client=_client(handler))
    assert not r.success
    assert "down" in r.error


# ---------------------------
# SMS
# ---------------------------
def test_sms_disabled_by_default(monkeypatch):
    monkeypatch.setattr(notifications, "TWILIO_ENABLED", False)
    r = send_reminder_sms("+15551234567", "Luna", "feed")
    assert r.error == "SMS notifications not yet available. Please use email."


def test_sms_enabled_without_credentials(monkeypatch):
    monkeypatch.setattr(notifications, "TWILIO_ENABLED", True)
    monkeypatch.setattr(notifications, "TWILIO_ACCOUNT_SID", "")
    r = send_reminder_sms("+15551234567", "Luna", "feed")
    assert r.error == "SMS service not configured"


def test_sms_success(twilio):
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["form"] = request.content.decode()
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(201, json={"sid": "SM1"})

    r = send_reminder_sms("+15551234567", "Luna", "litter", client=_client(handler))
    assert r.success and r.message_id == "SM1"
    assert seen["url"].endswith("/Accounts/AC123/Messages.json")
    assert "From=%2B15550000000" in seen["form"]
    assert seen["auth"].startswith("Basic ")


def test_sms_provider_error(twilio):
    r = send_reminder_sms("+15551234567", "Luna", "feed",
                          client=_client(lambda req: httpx.Response(400, json={"message": "bad number"})))
    assert not r.success and r.error == "bad number"


def test_dispatch_by_contact_type(resend):
    settings = ReminderSettings(contact_type="email", contact_value="owner@example.com", cat_name="Luna",
                                channels=ReminderChannels(feed=True))
    r = send_reminder(settings, "feed", client=_client(lambda req: httpx.Response(200, json={"id": "x"})))
    assert r.success and r.channel == "email"
    assert settings.channels.enabled() == ["feed"]


# ---------------------------
# Validation
# ---------------------------
@pytest.mark.parametrize("email,ok", [("a@b.co", True), ("a b@c.de", False), ("nope", False), ("", False)])
def test_email_validation(email, ok):
    assert is_valid_email(email) is ok


@pytest.mark.parametrize("phone,ok", [("+1 555 123 4567", True), ("+15551234567", True), ("5551234567", False), ("+0123456789", False)])
def test_phone_validation(phone, ok):
    assert is_valid_phone_number(phone) is ok


@pytest.mark.parametrize("raw,expected", [
    ("(555) 123-4567", "+15551234567"),
    ("1-555-123-4567", "+15551234567"),
    ("+44 20 7946 0958", "+442079460958"),
])
def test_normalize_phone(raw, expected):
    assert normalize_phone_number(raw) == expected


# ---------------------------
# Recommendations
# ---------------------------
def test_reminder_recommendations_default_routine():
    recs = recommend_reminders(make_profile(), make_routine(feeding_frequency=3))
    assert [r.channel for r in recs] == ["feed", "play", "vet", "litter"]
    assert recs[0].frequency == "3x daily"
    assert not recs[1].enabled
    assert recs[2].priority == "medium"


def test_reminder_recommendations_for_neglected_senior():
    recs = {r.channel: r for r in recommend_reminders(
        make_profile(age_years=12),
        make_routine(play_minutes_per_day=5, vet_visits_per_year=1, litter_cleaning_frequency="weekly"),
    )}
    assert recs["play"].enabled and recs["play"].priority == "high"
    assert recs["vet"].frequency == "Every 6 months"
    assert recs["litter"].enabled and recs["litter"].priority == "medium"


def test_reminder_recommendations_without_vet():
    recs = recommend_reminders(make_profile(), make_routine(vet_visits_per_year=None))
    assert recs[2].priority == "high"
