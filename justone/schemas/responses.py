from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel


class SubmitResponsesRequest(BaseModel):
    # shape is checked in responses_controller (one error code per field)
    answers: Any = None
    questionnaire_version: Any = None
    photo: Any = None


class ResponseOut(BaseModel):
    id: int
    user_id: str
    campus_id: Optional[str] = None
    questionnaire_version: str
    answers: Optional[Any] = None
    photo: Optional[str] = None
    decryption_error: bool = False
    responses_hash: str
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class ResponseListOut(BaseModel):
    success: bool = True
    data: List[ResponseOut]
    pagination: Pagination
