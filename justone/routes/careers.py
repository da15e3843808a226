from fastapi import APIRouter, Depends

from justone.controllers.careers_controller import send_career_application
from justone.core.config import Settings, get_settings
from justone.schemas.careers import CareerApplicationRequest
from justone.schemas.common import SuccessResponse

router = APIRouter(tags=["Careers"])


@router.post("/send-career-application", response_model=SuccessResponse)
async def send_career_application_route(
    payload: CareerApplicationRequest,
    settings: Settings = Depends(get_settings),
) -> SuccessResponse:
    return await send_career_application(settings, payload)
