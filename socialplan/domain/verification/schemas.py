from typing import Optional

from pydantic import BaseModel, Field


class VerifyCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=10)


class VerifyCodeResponse(BaseModel):
    success: bool
    message: str
    email_verified: bool


class SendCodeResponse(BaseModel):
    success: bool
    message: str
    email: Optional[str] = None
    expires_in_minutes: Optional[int] = None
    email_verified: bool = False


class VerificationStatusResponse(BaseModel):
    email: str
    email_verified: bool
    has_pending_code: bool
    code_expires_at: Optional[str] = None
    resend_available_in: int = 0
