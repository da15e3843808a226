import base64
import binascii
import logging

from justone.core.config import Settings
from justone.core.email_service import require_mail_configured, send_career_application_email
from justone.core.errors import ApiError, MailDeliveryError
from justone.schemas.careers import CareerApplicationRequest, ResumeIn
from justone.schemas.common import SuccessResponse

logger = logging.getLogger(__name__)

MAX_RESUME_BYTES = 5 * 1024 * 1024


def _resume_attachment(resume: ResumeIn) -> dict:
    """Accepts raw base64 or a data: URL; returns a Maileroo attachment dict."""
    content = resume.content.strip()
    content_type = resume.type
    if content.startswith("data:") and "," in content:
        header, content = content.split(",", 1)
        content_type = header[5:].split(";", 1)[0] or content_type

    try:
        raw = base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError):
        raise ApiError(400, "invalid_resume", "Resume must be base64 encoded.")

    if not raw:
        raise ApiError(400, "invalid_resume", "Resume is empty.")
    if len(raw) > MAX_RESUME_BYTES:
        raise ApiError(400, "invalid_resume", "Resume must be 5 MB or smaller.")

    return {
        "file_name": resume.filename,
        "content_type": content_type,
        "content": base64.b64encode(raw).decode("ascii"),
    }


async def send_career_application(settings: Settings, payload: CareerApplicationRequest) -> SuccessResponse:
    require_mail_configured(settings)

    required = [
        payload.full_name,
        payload.university,
        payload.year,
        payload.major,
        payload.email,
        payload.why_just_one,
    ]
    if not all(v and str(v).strip() for v in required):
        raise ApiError(400, "missing_fields", "Missing required fields.")

    attachment = _resume_attachment(payload.resume) if payload.resume else None

    fields = {
        "Name": payload.full_name.strip(),
        "University": payload.university.strip(),
        "Year": payload.year.strip(),
        "Major": payload.major.strip(),
        "Email": str(payload.email),
        "Why JustOne": payload.why_just_one.strip(),
        "LinkedIn / Resume URL": (payload.linkedin_or_resume or "").strip(),
    }

    try:
        await send_career_application_email(settings, fields, str(payload.email), attachment)
    except MailDeliveryError:
        raise ApiError(500, "email_failed", "Failed to send application.")

    logger.info("Career application sent for %s (%s)", fields["Name"], fields["University"])
    return SuccessResponse()
