from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from justone.controllers.auth_controller import get_me, refresh_session, send_otp, verify_otp
from justone.core.config import Settings, get_settings
from justone.core.database import get_db
from justone.core.dependencies import get_current_user
from justone.models.user import User
from justone.schemas.auth import (
    AuthStateResponse,
    RefreshRequest,
    RefreshResponse,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)

router = APIRouter(tags=["Auth"])


@router.post(
    "/send-otp",
    response_model=SendOtpResponse,
    summary="Send sign-in code",
    description="""
Emails a 6-digit code valid for 10 minutes.
Students: the email domain must belong to a partner campus.
Admins (`isAdminMode: true`): the email must be on the admin allowlist.

Errors: `invalid_email`, `domain_not_allowed`, `admin_only`, `rate_limited` (429, `Retry-After`).
    """,
)
async def send_otp_route(
    payload: SendOtpRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SendOtpResponse:
    return await send_otp(db, settings, payload.email, payload.is_admin_mode)


@router.post(
    "/verify-otp",
    response_model=VerifyOtpResponse,
    summary="Verify sign-in code",
    description="""
Consumes the code and returns a session together with the resolved
profile, role and onboarding state.

Errors: `no_active_code`, `invalid_code`, `max_attempts_exceeded` (429), `admin_only`.
    """,
)
async def verify_otp_route(
    payload: VerifyOtpRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> VerifyOtpResponse:
    return await verify_otp(db, settings, payload.email, payload.code, payload.is_admin_mode)


@router.post("/auth/refresh", response_model=RefreshResponse, summary="Exchange a refresh token")
async def refresh_route(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> RefreshResponse:
    return await refresh_session(db, settings, payload.refresh_token)


@router.get("/auth/me", response_model=AuthStateResponse, summary="Current user, profile and role")
async def me_route(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AuthStateResponse:
    return await get_me(db, current_user)
