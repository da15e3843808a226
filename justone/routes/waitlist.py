from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from justone.controllers.waitlist_controller import join_waitlist, send_waitlist_otp, verify_waitlist_otp
from justone.core.config import Settings, get_settings
from justone.core.database import get_db
from justone.schemas.common import SuccessResponse
from justone.schemas.waitlist import WaitlistEmailRequest, WaitlistVerifyRequest, WaitlistVerifyResponse

router = APIRouter(tags=["Waitlist"])


@router.post("/send-waitlist-otp", response_model=SuccessResponse)
async def send_waitlist_otp_route(
    payload: WaitlistEmailRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SuccessResponse:
    return await send_waitlist_otp(db, settings, payload.email)


@router.post("/verify-waitlist-otp", response_model=WaitlistVerifyResponse)
async def verify_waitlist_otp_route(
    payload: WaitlistVerifyRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> WaitlistVerifyResponse:
    return await verify_waitlist_otp(db, settings, payload.email, payload.code)


@router.post("/send-waitlist-email", response_model=SuccessResponse)
async def send_waitlist_email_route(
    payload: WaitlistEmailRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SuccessResponse:
    return await join_waitlist(db, settings, payload.email)
