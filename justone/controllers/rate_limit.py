import logging
import math
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from justone.core.config import Settings
from justone.core.errors import ApiError
from justone.core.timeutil import as_utc, utcnow
from justone.models.otp_rate_limit import OtpRateLimit

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Too many verification code requests. Please try again later."


async def consume_slot(
    db: AsyncSession,
    settings: Settings,
    key: str,
    message: str = DEFAULT_MESSAGE,
) -> OtpRateLimit:
    """
    Counts one request against `key` in the current window.

    Raises 429 rate_limited (with retry_after, never below 60s) once the
    window already holds RATE_LIMIT_MAX_REQUESTS. Soft limit: two requests
    racing here can both pass before either increment commits.
    """
    window = timedelta(minutes=settings.RATE_LIMIT_WINDOW_MINUTES)
    now = utcnow()

    q = await db.execute(
        select(OtpRateLimit)
        .where(OtpRateLimit.email == key)
        .where(OtpRateLimit.window_start >= now - window)
        .order_by(OtpRateLimit.window_start.desc(), OtpRateLimit.id.desc())
        .limit(1)
    )
    row = q.scalar_one_or_none()

    if row and row.request_count >= settings.RATE_LIMIT_MAX_REQUESTS:
        seconds_left = math.ceil((as_utc(row.window_start) + window - now).total_seconds())
        retry_after = max(seconds_left, 60)
        logger.info("Rate limited key=%s retry_after=%s", key, retry_after)
        raise ApiError(
            429,
            "rate_limited",
            message,
            headers={"Retry-After": str(retry_after)},
            retry_after=retry_after,
        )

    if row:
        row.request_count += 1
    else:
        row = OtpRateLimit(email=key, request_count=1, window_start=now)
        db.add(row)

    await db.flush()
    return row


async def release_slot(db: AsyncSession, row: OtpRateLimit) -> None:
    """Gives back a slot taken by consume_slot (used when delivery fails)."""
    row.request_count = max(row.request_count - 1, 0)
    await db.flush()
