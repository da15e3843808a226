import logging
from datetime import timedelta

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from justone.core.config import Settings
from justone.core.errors import ApiError
from justone.core.security import constant_time_equals, generate_otp
from justone.core.timeutil import utcnow
from justone.models.otp_code import OtpCode

logger = logging.getLogger(__name__)


def _max_attempts_error() -> ApiError:
    return ApiError(
        429,
        "max_attempts_exceeded",
        "Too many failed attempts. Please request a new verification code.",
    )


def _no_active_code() -> ApiError:
    return ApiError(
        400,
        "no_active_code",
        "No active verification code found. Please request a new code.",
    )


async def issue_code(db: AsyncSession, settings: Settings, key: str) -> OtpCode:
    """
    Invalidates every unused code for `key`, then stores a fresh one.
    At most one usable code per key exists after this returns.
    """
    await db.execute(
        update(OtpCode)
        .where(OtpCode.email == key)
        .where(OtpCode.used.is_(False))
        .values(used=True)
    )

    otp = OtpCode(
        email=key,
        code=generate_otp(),
        expires_at=utcnow() + timedelta(minutes=settings.OTP_TTL_MINUTES),
        used=False,
        attempts=0,
    )
    db.add(otp)
    await db.flush()
    return otp


async def verify_code(db: AsyncSession, settings: Settings, key: str, code: str) -> OtpCode:
    """
    Checks `code` against the newest unexpired code for `key` and consumes it.

    The newest unexpired row decides the outcome:
      - none, or already consumed         → 400 no_active_code
      - attempts exhausted                → 429 max_attempts_exceeded
      - mismatch                          → attempts += 1, 400 invalid_code
                                            (429 once the limit is reached)
    Failed attempts are committed before raising so the counter survives
    the request rollback.
    """
    max_attempts = settings.OTP_MAX_ATTEMPTS

    q = await db.execute(
        select(OtpCode)
        .where(OtpCode.email == key)
        .where(OtpCode.expires_at > utcnow())
        .order_by(OtpCode.created_at.desc(), OtpCode.id.desc())
        .limit(1)
    )
    otp = q.scalar_one_or_none()

    if otp is not None and otp.attempts >= max_attempts:
        if not otp.used:
            otp.used = True
            await db.commit()
        raise _max_attempts_error()

    if otp is None or otp.used:
        raise _no_active_code()

    if not constant_time_equals(otp.code, code):
        otp.attempts += 1
        remaining = max_attempts - otp.attempts

        if remaining <= 0:
            otp.used = True
            await db.commit()
            logger.info("OTP invalidated after %s failed attempts key=%s", otp.attempts, key)
            raise _max_attempts_error()

        await db.commit()
        raise ApiError(
            400,
            "invalid_code",
            f"Invalid code. {remaining} attempt{'' if remaining == 1 else 's'} remaining.",
            remaining_attempts=remaining,
        )

    # consume only if nobody else did since the row was read
    consumed = await db.execute(
        update(OtpCode)
        .where(OtpCode.id == otp.id)
        .where(OtpCode.used.is_(False))
        .values(used=True)
        .execution_options(synchronize_session=False)
    )
    if consumed.rowcount != 1:
        raise _no_active_code()

    otp.used = True
    return otp
