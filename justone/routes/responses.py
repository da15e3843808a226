from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from justone.controllers.responses_controller import submit_responses
from justone.core.config import Settings, get_settings
from justone.core.database import get_db
from justone.core.dependencies import get_current_user
from justone.models.user import User
from justone.schemas.common import SuccessResponse
from justone.schemas.responses import SubmitResponsesRequest

router = APIRouter(tags=["Responses"])


@router.post(
    "/submit-responses",
    response_model=SuccessResponse,
    summary="Store questionnaire answers (encrypted)",
    description="""
Requires `Authorization: Bearer <access_token>`.
Submitting again for the same `questionnaire_version` replaces the stored answers;
the stored photo is kept unless a new `photo` data URL is sent.
    """,
)
async def submit_responses_route(
    payload: SubmitResponsesRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SuccessResponse:
    return await submit_responses(db, settings, current_user, payload)
