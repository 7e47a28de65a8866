import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from ..auth import init_firebase, verify_firebase_token
from ..config import COOKIE_SECURE, SESSION_COOKIE_NAME, SESSION_FLAG_COOKIE, SESSION_MAX_AGE
from ..database import get_db
from ..domain.profiles.service import ProfileService
from ..domain.verification.service import clear_code, issue_code
from ..email_service import send_verification_email
from ..models import utc_now
from ..rate_limiter import create_rate_limiter
from ..shared.errors import friendly_auth_error
from ..shared.validators import validate_email, validate_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

signup_rate_limit = create_rate_limiter(limit=10, window_seconds=3600, key_prefix="signup")


class SessionRequest(BaseModel):
    id_token: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    email: str
    password: str
    confirm_password: str
    display_name: Optional[str] = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Email is required")
        return validate_email(v)


class SignupResponse(BaseModel):
    uid: str
    email: str
    verification_sent: bool
    message: str


def set_session_cookies(response: Response, token: str) -> None:
    """The token cookie plus a plain flag cookie, both read by the page gate"""
    for key, value in ((SESSION_COOKIE_NAME, token), (SESSION_FLAG_COOKIE, "true")):
        response.set_cookie(
            key=key,
            value=value,
            max_age=SESSION_MAX_AGE,
            httponly=True,
            secure=COOKIE_SECURE,
            samesite="strict",
            path="/",
        )


@router.post("/session")
async def create_session(data: SessionRequest, response: Response):
    """Exchange a verified ID token for session cookies"""
    decoded = verify_firebase_token(data.id_token)
    set_session_cookies(response, data.id_token)
    logger.info(f"🍪 Session cookie set for {decoded.get('email')}")
    return {"success": True, "uid": decoded.get("sub") or decoded.get("uid")}


@router.delete("/session")
async def clear_session(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    response.delete_cookie(SESSION_FLAG_COOKIE, path="/")
    return {"success": True}


@router.post("/signup", response_model=SignupResponse, status_code=201)
def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    _: None = Depends(signup_rate_limit),
):
    """
    Create the auth account and its profile, then email a verification code.
    A failed email leaves the account in place; the client resends from step 1.
    """
    try:
        validate_password(data.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if data.password != data.confirm_password:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    init_firebase()
    try:
        user = firebase_auth.create_user(email=data.email, password=data.password)
    except firebase_auth.EmailAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=friendly_auth_error(e)) from e
    except firebase_exceptions.FirebaseError as e:
        logger.error(f"❌ Auth provider refused signup for {data.email}: {e}")
        raise HTTPException(
            status_code=400,
            detail=friendly_auth_error(e, "Failed to create account. Please try again."),
        ) from e

    service = ProfileService(db)
    profile = service.create_profile(
        uid=user.uid,
        display_name=data.display_name or "",
        email=data.email,
        email_verified=False,
    )

    code = issue_code(profile, utc_now())
    db.commit()

    try:
        send_verification_email(profile.email, code)
        sent = True
    except Exception as e:
        logger.error(f"❌ Verification email failed for {profile.email}: {e}")
        clear_code(profile)
        profile.last_code_sent = None
        db.commit()
        sent = False

    return SignupResponse(
        uid=profile.uid,
        email=profile.email,
        verification_sent=sent,
        message=(
            "We've sent a verification code to your email."
            if sent
            else "Account created, but the verification email could not be sent. Please resend."
        ),
    )
