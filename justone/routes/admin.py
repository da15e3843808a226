from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from justone.controllers.responses_controller import list_responses
from justone.core.config import Settings, get_settings
from justone.core.database import get_db
from justone.core.dependencies import require_admin_key
from justone.schemas.responses import ResponseListOut

router = APIRouter(tags=["Admin"], dependencies=[Depends(require_admin_key)])


@router.get(
    "/admin-get-responses",
    response_model=ResponseListOut,
    summary="Decrypted response export",
    description="Requires the `x-admin-key` header. Newest first.",
)
async def admin_get_responses(
    campus_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    include_photo: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ResponseListOut:
    return await list_responses(
        db,
        settings,
        campus_id=campus_id,
        user_id=user_id,
        limit=limit,
        offset=offset,
        include_photo=include_photo,
    )
