from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ResumeIn(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)  # base64, optionally a data: URL
    type: str = "application/pdf"


class CareerApplicationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(None, alias="fullName")
    university: Optional[str] = None
    year: Optional[str] = None
    major: Optional[str] = None
    email: Optional[EmailStr] = None
    why_just_one: Optional[str] = Field(None, alias="whyJustOne")
    linkedin_or_resume: Optional[str] = Field(None, alias="linkedinOrResume")
    resume: Optional[ResumeIn] = None
