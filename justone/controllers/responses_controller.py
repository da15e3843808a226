import json
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from justone.controllers.account_controller import get_profile
from justone.core.config import Settings
from justone.core.crypto import DecryptionError, ResponseCipher, content_hash
from justone.core.errors import ApiError, ConfigurationError
from justone.core.timeutil import utcnow
from justone.models.response import Response
from justone.models.user import User
from justone.schemas.responses import (
    Pagination,
    ResponseListOut,
    ResponseOut,
    SubmitResponsesRequest,
)
from justone.schemas.common import SuccessResponse

logger = logging.getLogger(__name__)

MAX_VERSION_LENGTH = 64


def get_cipher(settings: Settings) -> ResponseCipher:
    if not settings.ENCRYPTION_KEY:
        logger.error("ENCRYPTION_KEY not configured")
        raise ConfigurationError("encryption_not_configured", "Encryption not configured.")
    return ResponseCipher(
        settings.ENCRYPTION_KEY,
        salt=settings.ENCRYPTION_SALT,
        iterations=settings.ENCRYPTION_ITERATIONS,
    )


def serialize_answers(answers: dict) -> str:
    """
    Compact JSON; the stored hash is computed over exactly this string.

    Raises ValueError for NaN/Infinity and UnicodeEncodeError for lone
    surrogates, neither of which survives a trip through JSON + UTF-8.
    """
    answers_json = json.dumps(answers, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    answers_json.encode("utf-8")
    return answers_json


async def submit_responses(
    db: AsyncSession,
    settings: Settings,
    user: User,
    payload: SubmitResponsesRequest,
) -> SuccessResponse:
    """
    Encrypts and stores one submission per (user, questionnaire_version).

    A resubmission overwrites answers + hash in place; the stored photo is
    only replaced when a new one is sent.
    """
    cipher = get_cipher(settings)

    profile = await get_profile(db, user.id)
    if profile is None:
        raise ApiError(404, "profile_not_found", "Profile not found.")
    if not profile.verified or not profile.campus_id:
        raise ApiError(403, "not_verified", "Account not verified or missing campus.")

    answers = payload.answers
    if not isinstance(answers, dict):
        raise ApiError(400, "invalid_answers", "Invalid answers format.")

    version = payload.questionnaire_version
    if not isinstance(version, str) or not version.strip():
        raise ApiError(400, "missing_version", "Questionnaire version is required.")
    if len(version) > MAX_VERSION_LENGTH:
        raise ApiError(
            400,
            "invalid_version",
            f"Questionnaire version must be at most {MAX_VERSION_LENGTH} characters.",
        )

    photo_encrypted = None
    if payload.photo:
        if not isinstance(payload.photo, str) or not payload.photo.startswith("data:image/"):
            raise ApiError(400, "invalid_photo", "Invalid photo format.")
        try:
            photo_encrypted = cipher.encrypt(payload.photo)
        except UnicodeEncodeError:
            raise ApiError(400, "invalid_photo", "Invalid photo format.")

    try:
        answers_json = serialize_answers(answers)
    except (ValueError, UnicodeEncodeError):
        raise ApiError(400, "invalid_answers", "Invalid answers format.")
    answers_encrypted = cipher.encrypt(answers_json)
    responses_hash = content_hash(answers_json)

    q = await db.execute(
        select(Response)
        .where(Response.user_id == user.id)
        .where(Response.questionnaire_version == version)
    )
    existing = q.scalar_one_or_none()

    if existing:
        existing.answers_encrypted = answers_encrypted
        existing.responses_hash = responses_hash
        existing.updated_at = utcnow()
        if photo_encrypted is not None:
            existing.photo_encrypted = photo_encrypted
        logger.info("Updated response user=%s version=%s", user.id, version)
    else:
        db.add(Response(
            user_id=user.id,
            campus_id=profile.campus_id,
            questionnaire_version=version,
            answers_encrypted=answers_encrypted,
            responses_hash=responses_hash,
            photo_encrypted=photo_encrypted,
        ))
        logger.info("Stored response user=%s version=%s", user.id, version)

    await db.flush()
    return SuccessResponse()


def _decrypt_row(cipher: ResponseCipher, row: Response, include_photo: bool) -> ResponseOut:
    out = ResponseOut(
        id=row.id,
        user_id=row.user_id,
        campus_id=row.campus_id,
        questionnaire_version=row.questionnaire_version,
        responses_hash=row.responses_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
    try:
        out.answers = json.loads(cipher.decrypt(row.answers_encrypted))
        if include_photo and row.photo_encrypted:
            out.photo = cipher.decrypt(row.photo_encrypted)
    except (DecryptionError, ValueError) as e:
        logger.error("Failed to decrypt response %s: %s", row.id, e)
        out.answers = None
        out.photo = None
        out.decryption_error = True
    return out


async def list_responses(
    db: AsyncSession,
    settings: Settings,
    campus_id: str | None = None,
    user_id: str | None = None,
    limit: int = 100,
    offset: int = 0,
    include_photo: bool = False,
) -> ResponseListOut:
    """Admin export: newest first, decrypted. A row that fails decryption is flagged, not dropped."""
    cipher = get_cipher(settings)

    filters = []
    if campus_id:
        filters.append(Response.campus_id == campus_id)
    if user_id:
        filters.append(Response.user_id == user_id)

    q = await db.execute(
        select(Response)
        .where(*filters)
        .order_by(Response.created_at.desc(), Response.id.desc())
        .offset(offset)
        .limit(limit)
    )
    rows = q.scalars().all()

    total = (await db.execute(select(func.count(Response.id)).where(*filters))).scalar_one()

    return ResponseListOut(
        data=[_decrypt_row(cipher, r, include_photo) for r in rows],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )
