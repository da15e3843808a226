from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Request Bodies ────────────────────────────────────────────────────
class SendOtpRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    is_admin_mode: bool = Field(False, alias="isAdminMode")


class VerifyOtpRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    code: str = ""
    is_admin_mode: bool = Field(False, alias="isAdminMode")


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


# ── Response Bodies ───────────────────────────────────────────────────
class SessionOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the access token expires


class ProfileOut(BaseModel):
    """Resolved profile state, returned with every session so the client never polls."""
    user_id: str
    email: str
    campus_id: Optional[str] = None
    campus_name: Optional[str] = None
    verified: bool


class SendOtpResponse(BaseModel):
    success: bool = True
    campus_id: Optional[str] = None
    campus_name: Optional[str] = None


class AuthStateResponse(BaseModel):
    user_id: str
    email: str
    role: str
    profile: Optional[ProfileOut] = None
    has_completed_onboarding: bool = False


class VerifyOtpResponse(AuthStateResponse):
    success: bool = True
    campus_id: Optional[str] = None
    campus_name: Optional[str] = None
    session: SessionOut


class RefreshResponse(BaseModel):
    success: bool = True
    session: SessionOut
