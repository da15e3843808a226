import logging
import re

from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from justone.controllers import account_controller, otp_controller, rate_limit
from justone.core.config import Settings
from justone.core.domains import (
    email_domain,
    find_campus_for_domain,
    normalize_email,
    validate_email,
)
from justone.core.email_service import require_mail_configured, send_otp_email
from justone.core.errors import ApiError, MailDeliveryError
from justone.core.security import decode_token
from justone.models.campus import Campus
from justone.models.user import User
from justone.models.user_role import RoleName
from justone.schemas.auth import (
    AuthStateResponse,
    RefreshResponse,
    SendOtpResponse,
    VerifyOtpResponse,
)

logger = logging.getLogger(__name__)

CODE_RE = re.compile(r"^\d{6}$")


def _admin_only() -> ApiError:
    return ApiError(403, "admin_only", "Admin access only.")


async def resolve_campus(
    db: AsyncSession,
    settings: Settings,
    email: str,
    is_admin_mode: bool,
) -> Campus | None:
    """
    Admin mode: the email must be on the admin allowlist; campus is the
    configured admin campus (may be None if it was never seeded).
    Student mode: the email domain must be listed by some campus.
    """
    if is_admin_mode:
        if not settings.is_admin_email(email):
            raise _admin_only()
        return await db.get(Campus, settings.ADMIN_CAMPUS_ID)

    q = await db.execute(select(Campus).order_by(Campus.id))
    campus = find_campus_for_domain(q.scalars().all(), email_domain(email))
    if campus is None:
        raise ApiError(
            403,
            "domain_not_allowed",
            "JustOne is currently limited to select campuses. "
            "If you believe this is a mistake, join the waitlist.",
        )
    return campus


async def send_otp(db: AsyncSession, settings: Settings, email: str, is_admin_mode: bool) -> SendOtpResponse:
    """
    format → allowlist/domain → rate limit → invalidate old codes → store → email.

    If the email cannot be delivered the new code is invalidated and the rate
    limit slot is handed back, so the user can ask again straight away.
    """
    require_mail_configured(settings)

    email = validate_email(email)
    campus = await resolve_campus(db, settings, email, is_admin_mode)

    slot = await rate_limit.consume_slot(db, settings, email)
    otp = await otp_controller.issue_code(db, settings, email)
    await db.commit()

    try:
        await send_otp_email(settings, email, otp.code, campus.name if campus else None)
    except MailDeliveryError:
        otp.used = True
        await rate_limit.release_slot(db, slot)
        await db.commit()
        raise ApiError(500, "email_failed", "Failed to send verification email.")

    logger.info("OTP email sent to %s", email)
    return SendOtpResponse(
        campus_id=campus.id if campus else None,
        campus_name=campus.name if campus else None,
    )


async def verify_otp(
    db: AsyncSession,
    settings: Settings,
    email: str,
    code: str,
    is_admin_mode: bool,
) -> VerifyOtpResponse:
    email = normalize_email(email)
    code = (code or "").strip()

    if not email or not code:
        raise ApiError(400, "missing_fields", "Email and code are required.")

    if is_admin_mode and not settings.is_admin_email(email):
        raise _admin_only()

    if not CODE_RE.match(code):
        raise ApiError(400, "invalid_code_format", "Invalid code format.")

    await otp_controller.verify_code(db, settings, email, code)

    try:
        campus = await resolve_campus(db, settings, email, is_admin_mode)
    except ApiError as e:
        if e.error != "domain_not_allowed":
            raise
        raise ApiError(
            400,
            "domain_not_allowed",
            "Please use your institutional email from a partner campus.",
        )

    # role comes from the allowlist, never from the isAdminMode flag
    role = RoleName.ADMIN if settings.is_admin_email(email) else RoleName.STUDENT

    user, _ = await account_controller.get_or_create_user(db, email)
    await account_controller.upsert_profile(db, user, campus.id if campus else None)
    await account_controller.ensure_role(db, user.id, role)
    session = account_controller.mint_session(settings, user, role)
    await db.flush()

    state = await account_controller.build_auth_state(db, user, role)
    logger.info("User %s verified, role=%s", user.id, role.value)

    return VerifyOtpResponse(
        **state.model_dump(),
        campus_id=campus.id if campus else None,
        campus_name=campus.name if campus else None,
        session=session,
    )


async def user_from_token(db: AsyncSession, settings: Settings, token: str, expected_type: str) -> User:
    invalid = ApiError(401, "invalid_token", "Invalid or expired session.")
    try:
        payload = decode_token(settings, token)
    except JWTError:
        raise invalid

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise invalid

    user = await db.get(User, str(payload["sub"]))
    if user is None:
        raise invalid
    return user


async def refresh_session(db: AsyncSession, settings: Settings, refresh_token: str) -> RefreshResponse:
    user = await user_from_token(db, settings, refresh_token, "refresh")
    role = await account_controller.get_role(db, user.id)
    return RefreshResponse(session=account_controller.mint_session(settings, user, role))


async def get_me(db: AsyncSession, user: User) -> AuthStateResponse:
    """No polling needed client-side: the full state is resolved here."""
    return await account_controller.build_auth_state(db, user)
