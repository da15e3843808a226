import json

import httpx
import pytest

from justone.core import email_service
from justone.core.config import Settings
from justone.core.errors import ConfigurationError, MailDeliveryError


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite://",
        SECRET_KEY="k",
        MAILEROO_API_KEY="mail-key",
    )


@pytest.fixture
def provider(monkeypatch):
    """Routes the mail client through a MockTransport; returns the captured requests."""
    sent = []
    state = {"status": 200, "error": None}

    def handler(request: httpx.Request) -> httpx.Response:
        if state["error"]:
            raise state["error"]
        sent.append(request)
        return httpx.Response(state["status"], json={"success": state["status"] < 400})

    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(email_service.httpx, "AsyncClient", client_factory)
    return sent, state


async def test_otp_email_payload(settings, provider):
    sent, _ = provider

    await email_service.send_otp_email(settings, "maya@ashoka.edu.in", "042137", "Ashoka University")

    [request] = sent
    assert str(request.url) == settings.MAILEROO_API_URL
    assert request.headers["X-API-Key"] == "mail-key"
    payload = json.loads(request.content)
    assert payload["to"] == {"address": "maya@ashoka.edu.in"}
    assert payload["from"] == {"address": settings.MAIL_FROM, "display_name": "JustOne"}
    assert payload["subject"] == "Your JustOne verification code"
    assert "042137" in payload["html"]
    assert "Ashoka University" in payload["html"]
    assert "reply_to" not in payload
    assert "attachments" not in payload


async def test_career_email_escapes_and_attaches(settings, provider):
    sent, _ = provider
    fields = {
        "Name": "<script>alert(1)</script>",
        "University": "Ashoka",
        "Email": "asha@ashoka.edu.in",
        "LinkedIn / Resume URL": "",
    }
    attachment = {"file_name": "cv.pdf", "content_type": "application/pdf", "content": "JVBERg=="}

    await email_service.send_career_application_email(settings, fields, "asha@ashoka.edu.in", attachment)

    payload = json.loads(sent[0].content)
    assert payload["to"] == {"address": settings.CAREERS_INBOX}
    assert payload["from"]["address"] == settings.CAREERS_FROM
    assert payload["reply_to"] == {"address": "asha@ashoka.edu.in"}
    assert payload["attachments"] == [attachment]
    assert payload["subject"] == "Marketing Intern Application: <script>alert(1)</script> (Ashoka)"
    assert "<script>" not in payload["html"]
    assert "&lt;script&gt;" in payload["html"]
    assert "LinkedIn / Resume URL" not in payload["html"]


async def test_provider_error_raises(settings, provider):
    _, state = provider
    state["status"] = 500

    with pytest.raises(MailDeliveryError):
        await email_service.send_welcome_email(settings, "maya@ashoka.edu.in")


async def test_network_error_raises(settings, provider):
    _, state = provider
    state["error"] = httpx.ConnectError("connection refused")

    with pytest.raises(MailDeliveryError):
        await email_service.send_waitlist_confirmation_email(settings, "maya@ashoka.edu.in")


async def test_missing_api_key(settings, provider):
    sent, _ = provider
    settings.MAILEROO_API_KEY = None

    with pytest.raises(ConfigurationError) as exc:
        await email_service.send_welcome_email(settings, "maya@ashoka.edu.in")
    assert exc.value.error == "email_not_configured"
    assert sent == []
