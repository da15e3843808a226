import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from justone.controllers import account_controller, otp_controller, rate_limit
from justone.controllers.auth_controller import CODE_RE
from justone.core.config import Settings
from justone.core.domains import (
    domain_matches,
    email_domain,
    find_campus_for_domain,
    normalize_email,
    validate_email,
)
from justone.core.email_service import (
    require_mail_configured,
    send_otp_email,
    send_waitlist_confirmation_email,
    send_welcome_email,
)
from justone.core.errors import ApiError, MailDeliveryError
from justone.models.campus import Campus
from justone.models.user_role import RoleName
from justone.schemas.common import SuccessResponse
from justone.schemas.waitlist import WaitlistVerifyResponse

logger = logging.getLogger(__name__)


# Waitlist keys live in their own namespace so they never collide with sign-in
def otp_key(email: str) -> str:
    return f"waitlist:{email}"


def otp_rate_key(email: str) -> str:
    return f"waitlist-otp:{email}"


def signup_rate_key(email: str) -> str:
    return f"waitlist:{email}"


def _check_waitlist_domain(settings: Settings, email: str) -> None:
    domain = email_domain(email)
    if not domain_matches(domain, settings.waitlist_domains, include_subdomains=True):
        logger.info("Waitlist domain rejected: %s", domain)
        raise ApiError(
            400,
            "invalid_domain",
            "Please use your university email address from a partner campus.",
        )


async def send_waitlist_otp(db: AsyncSession, settings: Settings, email: str) -> SuccessResponse:
    require_mail_configured(settings)

    email = validate_email(email)
    _check_waitlist_domain(settings, email)

    slot = await rate_limit.consume_slot(
        db, settings, otp_rate_key(email), message="Too many requests. Please wait a few minutes."
    )
    otp = await otp_controller.issue_code(db, settings, otp_key(email))
    await db.commit()

    try:
        await send_otp_email(settings, email, otp.code)
    except MailDeliveryError:
        otp.used = True
        await rate_limit.release_slot(db, slot)
        await db.commit()
        raise ApiError(500, "email_failed", "Failed to send verification email.")

    logger.info("Waitlist OTP email sent to %s", email)
    return SuccessResponse()


async def verify_waitlist_otp(db: AsyncSession, settings: Settings, email: str, code: str) -> WaitlistVerifyResponse:
    """
    Same attempt rules as sign-in. On success the account is created if
    needed, the profile is created (or gets a campus if it had none), and new
    users get a best-effort welcome email.
    """
    email = normalize_email(email)
    code = (code or "").strip()

    if not email or not code:
        raise ApiError(400, "missing_fields", "Email and code are required.")

    if not CODE_RE.match(code):
        raise ApiError(400, "invalid_code_format", "Invalid code format.")

    await otp_controller.verify_code(db, settings, otp_key(email), code)

    q = await db.execute(select(Campus).order_by(Campus.id))
    campus = find_campus_for_domain(q.scalars().all(), email_domain(email), include_subdomains=True)
    if campus is None:
        # the account still gets created; submit-responses stays closed until a campus is seeded
        logger.warning("Waitlist domain %s has no campus", email_domain(email))

    role = RoleName.ADMIN if settings.is_admin_email(email) else RoleName.STUDENT

    user, is_new_user = await account_controller.get_or_create_user(db, email)
    await account_controller.upsert_profile(
        db, user, campus.id if campus else None, overwrite_campus=False
    )
    await account_controller.ensure_role(db, user.id, role)
    session = account_controller.mint_session(settings, user, role)
    await db.commit()

    if is_new_user and settings.MAILEROO_API_KEY:
        try:
            await send_welcome_email(settings, email)
        except MailDeliveryError as e:
            logger.warning("Welcome email not sent to %s: %s", email, e)

    state = await account_controller.build_auth_state(db, user, role)
    return WaitlistVerifyResponse(
        **state.model_dump(),
        campus_id=campus.id if campus else None,
        campus_name=campus.name if campus else None,
        session=session,
        is_new_user=is_new_user,
    )


async def join_waitlist(db: AsyncSession, settings: Settings, email: str) -> SuccessResponse:
    require_mail_configured(settings)

    email = validate_email(email)
    slot = await rate_limit.consume_slot(
        db, settings, signup_rate_key(email), message="You've already signed up. Check your inbox!"
    )
    await db.commit()

    try:
        await send_waitlist_confirmation_email(settings, email)
    except MailDeliveryError:
        await rate_limit.release_slot(db, slot)
        await db.commit()
        raise ApiError(500, "email_failed", "Failed to send confirmation email.")

    logger.info("Waitlist confirmation sent to %s", email)
    return SuccessResponse()
