"""
Email relay route - forwards caller-composed messages to the email provider
under a per-client-IP quota
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import EMAIL_RATE_LIMIT, EMAIL_RATE_WINDOW
from ..email_service import (
    PROVIDER_ERROR_MESSAGES,
    EmailProviderError,
    send_email,
)
from ..rate_limiter import limit_request
from ..shared.validators import EMAIL_PATTERN

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Email"])


class SendEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Optional[str] = None
    from_address: Optional[str] = Field(None, alias="from")
    subject: Optional[str] = None
    text: Optional[str] = None
    html: Optional[str] = None


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/send-email")
async def relay_email(request: Request):
    """Send `{to, from, subject, text|html}` through Resend"""
    is_allowed, _, ttl = limit_request(
        request, EMAIL_RATE_LIMIT, EMAIL_RATE_WINDOW, key_prefix="send_email"
    )
    if not is_allowed:
        response = error_response("Too many requests. Please try again later.", 429)
        response.headers["Retry-After"] = str(ttl)
        return response

    try:
        data = SendEmailRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return error_response("Missing required email fields", 400)

    if not data.to or not data.from_address or not data.subject or not (data.text or data.html):
        return error_response("Missing required email fields", 400)

    if not EMAIL_PATTERN.match(data.to):
        return error_response("Invalid email address", 400)

    try:
        send_email(
            to=data.to,
            subject=data.subject,
            text=data.text,
            html=data.html,
            from_address=data.from_address,
        )
    except EmailProviderError as e:
        message = PROVIDER_ERROR_MESSAGES.get(e.status_code)
        if message is None:
            return error_response("Failed to send email", 500)
        return error_response(message, e.status_code)
    except Exception as e:
        logger.error(f"❌ Error sending email: {str(e)}")
        return error_response("Internal server error", 500)

    return {"success": True}
