"""
Email Verification Routes
Handles code generation, sending, resend cooldown and verification
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..cache import invalidate_profile_cache
from ..config import VERIFICATION_CODE_TTL_MINUTES
from ..database import get_db
from ..domain.verification.schemas import (
    SendCodeResponse,
    VerificationStatusResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from ..domain.verification.service import (
    check_code,
    clear_code,
    issue_code,
    resend_wait_seconds,
)
from ..email_service import send_verification_email
from ..models import UserProfile, utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/verification", tags=["verification"])


def deliver_code(current_user: UserProfile, db: Session) -> SendCodeResponse:
    """Issue a new code, persist it, and email it; the code is rolled back if sending fails"""
    now = utc_now()
    wait = resend_wait_seconds(current_user.last_code_sent, now)
    if wait > 0:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "message": f"Please wait {wait} seconds before requesting a new code.",
                "retry_after": wait,
            },
            headers={"Retry-After": str(wait)},
        )

    previous_sent = current_user.last_code_sent
    code = issue_code(current_user, now)
    db.commit()
    logger.info(f"💾 Verification code saved for user {current_user.uid}")

    try:
        send_verification_email(current_user.email, code)
    except Exception as email_error:
        logger.error(f"❌ Failed to send code to {current_user.email}: {str(email_error)}")
        clear_code(current_user)
        current_user.last_code_sent = previous_sent
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification code. Please try again.",
        ) from email_error

    return SendCodeResponse(
        success=True,
        message="Verification code sent to your email",
        email=current_user.email,
        expires_in_minutes=VERIFICATION_CODE_TTL_MINUTES,
    )


@router.post("/send-code", response_model=SendCodeResponse)
def send_verification_code(
    current_user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Generate and send a code to the user's email; also serves resends"""
    logger.info(f"📨 Code send request for user: {current_user.email} ({current_user.uid})")

    if current_user.email_verified:
        return SendCodeResponse(success=True, message="Email already verified", email_verified=True)

    return deliver_code(current_user, db)


@router.post("/verify", response_model=VerifyCodeResponse)
def verify_code(
    request: VerifyCodeRequest,
    current_user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Verify the submitted code and mark the email as verified"""
    try:
        db.refresh(current_user)

        # A code verifies once; later submissions are refused
        if current_user.email_verified:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail="Email already verified"
            )

        submitted = request.code.strip()
        if len(submitted) != 6 or not submitted.isdigit():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please enter the 6-digit verification code",
            )

        result = check_code(current_user, submitted, utc_now())
        if not result.success:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)

        db.commit()
        db.refresh(current_user)
        invalidate_profile_cache(current_user.uid)
        logger.info(f"🎉 Email verification complete for {current_user.email}")

        return VerifyCodeResponse(success=True, message=result.message, email_verified=True)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Unexpected error in verify_code: {str(e)}")
        logger.exception("Full error traceback:")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to verify code. Please try again.",
        ) from e


@router.get("/status", response_model=VerificationStatusResponse)
def get_verification_status(current_user: UserProfile = Depends(get_current_user)):
    """Current email verification status"""
    return VerificationStatusResponse(
        email=current_user.email,
        email_verified=current_user.email_verified,
        has_pending_code=current_user.verification_code is not None,
        code_expires_at=(
            current_user.verification_code_expires.isoformat()
            if current_user.verification_code_expires
            else None
        ),
        resend_available_in=resend_wait_seconds(current_user.last_code_sent, utc_now()),
    )
