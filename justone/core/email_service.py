import html
import logging

import httpx

from justone.core.config import Settings
from justone.core.errors import ConfigurationError, MailDeliveryError

logger = logging.getLogger(__name__)

_BASE_STYLE = """
  body { font-family: Georgia, 'Times New Roman', serif; background: #FAF4E8; padding: 40px 20px; margin: 0; color: #1a1a1a; }
  .container { max-width: 480px; margin: 0 auto; background: white; padding: 48px; border-radius: 4px; }
  h1 { font-size: 24px; font-weight: normal; color: #1a1a1a; margin: 0 0 24px 0; }
  p { color: #666; line-height: 1.6; margin: 0 0 16px 0; }
  .code { font-size: 36px; font-weight: bold; color: #7A2E3A; letter-spacing: 8px; text-align: center; padding: 24px; background: #FAF4E8; border-radius: 4px; margin: 24px 0; }
  .footer { color: #999; font-size: 14px; margin-top: 32px; }
  .signature { color: #7A2E3A; font-style: italic; }
"""


def _page(body: str, width: int = 480) -> str:
    style = _BASE_STYLE.replace("max-width: 480px", f"max-width: {width}px")
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>{style}</style>
</head>
<body>
  <div class="container">
    {body}
  </div>
</body>
</html>"""


def require_mail_configured(settings: Settings) -> str:
    if not settings.MAILEROO_API_KEY:
        logger.error("MAILEROO_API_KEY not configured")
        raise ConfigurationError("email_not_configured", "Email service not configured.")
    return settings.MAILEROO_API_KEY


async def send_email(
    settings: Settings,
    to_email: str,
    subject: str,
    html_content: str,
    from_email: str | None = None,
    from_name: str | None = None,
    reply_to: str | None = None,
    attachments: list[dict] | None = None,
) -> None:
    """
    POSTs one message to the Maileroo v2 API.
    attachments: [{"file_name", "content_type", "content" (base64)}]
    """
    api_key = require_mail_configured(settings)

    payload: dict = {
        "from": {
            "address": from_email or settings.MAIL_FROM,
            "display_name": from_name or settings.MAIL_FROM_NAME,
        },
        "to": {"address": to_email},
        "subject": subject,
        "html": html_content,
    }
    if reply_to:
        payload["reply_to"] = {"address": reply_to}
    if attachments:
        payload["attachments"] = attachments

    try:
        async with httpx.AsyncClient(timeout=20) as client:
            r = await client.post(
                settings.MAILEROO_API_URL,
                headers={"X-API-Key": api_key, "Content-Type": "application/json"},
                json=payload,
            )
    except httpx.HTTPError as e:
        logger.error("Maileroo request failed: %s", e)
        raise MailDeliveryError(str(e)) from e

    if r.status_code >= 400:
        logger.error("Maileroo error %s: %s", r.status_code, r.text)
        raise MailDeliveryError(f"Maileroo error {r.status_code}")

    logger.info("Email '%s' accepted by Maileroo", subject)


async def send_otp_email(settings: Settings, to_email: str, otp: str, campus_name: str | None = None) -> None:
    intro = (
        f"Enter this code to verify your {html.escape(campus_name)} email:"
        if campus_name
        else "Enter this code to verify your email:"
    )
    body = f"""
    <h1>Your verification code</h1>
    <p>{intro}</p>
    <div class="code">{otp}</div>
    <p>This code expires in {settings.OTP_TTL_MINUTES} minutes.</p>
    <div class="footer">
      <p>If you didn't request this code, you can safely ignore this email.</p>
      <p class="signature">— JustOne</p>
    </div>
    """
    await send_email(settings, to_email, "Your JustOne verification code", _page(body))


async def send_welcome_email(settings: Settings, to_email: str) -> None:
    body = """
    <h1>Welcome to JustOne</h1>
    <p>Your email has been verified. You're now ready to complete the questionnaire and find your meaningful connection.</p>
    <p>This isn't about swiping through endless options. It's about depth, intention, and finding someone who truly aligns with who you are.</p>
    <p class="footer">Take your time with the questionnaire. Your honest answers will help us find someone worth meeting.</p>
    <p class="signature">— JustOne</p>
    """
    await send_email(settings, to_email, "Welcome to JustOne", _page(body))


async def send_waitlist_confirmation_email(settings: Settings, to_email: str) -> None:
    body = """
    <h1>You're on the list.</h1>
    <p>Thank you for your interest in JustOne. We're building something thoughtful for meaningful connections on campus.</p>
    <p>We'll email you when the questionnaire opens for your campus. No spam, no noise. Just one message when it matters.</p>
    <p class="footer">In the meantime, take a breath. Good things take time.</p>
    <p class="signature">— JustOne</p>
    """
    await send_email(settings, to_email, "You're on the JustOne waitlist", _page(body))


async def send_career_application_email(
    settings: Settings,
    fields: dict[str, str],
    applicant_email: str,
    attachment: dict | None = None,
) -> None:
    """fields: ordered label → value pairs, escaped here."""
    rows = "\n".join(
        f'<p class="field"><strong>{html.escape(label)}:</strong> {html.escape(value)}</p>'
        for label, value in fields.items()
        if value
    )
    body = f"""
    <h1>New Marketing Intern Application</h1>
    {rows}
    <div class="footer">
      <p>Reply to this email to contact the applicant directly.</p>
    </div>
    """
    subject = (
        f"Marketing Intern Application: {fields.get('Name', '')} "
        f"({fields.get('University', '')})"
    )
    await send_email(
        settings,
        settings.CAREERS_INBOX,
        subject,
        _page(body, width=600),
        from_email=settings.CAREERS_FROM,
        from_name=settings.CAREERS_FROM_NAME,
        reply_to=applicant_email,
        attachments=[attachment] if attachment else None,
    )
