from pydantic import BaseModel

from justone.schemas.auth import VerifyOtpResponse


class WaitlistEmailRequest(BaseModel):
    email: str = ""


class WaitlistVerifyRequest(BaseModel):
    email: str = ""
    code: str = ""


class WaitlistVerifyResponse(VerifyOtpResponse):
    message: str = "Email verified successfully!"
    is_new_user: bool = False
