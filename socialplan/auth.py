import logging
from typing import Optional

import firebase_admin
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from sqlalchemy.orm import Session

from .config import FIREBASE_CREDENTIALS_PATH, FIREBASE_PROJECT_ID, SESSION_COOKIE_NAME
from .database import get_db
from .models import UserProfile

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def init_firebase() -> firebase_admin.App:
    """Initialize the Firebase Admin SDK once per process"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if FIREBASE_CREDENTIALS_PATH:
        cred = credentials.Certificate(FIREBASE_CREDENTIALS_PATH)
        app = firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with service account")
        return app

    try:
        cred = credentials.ApplicationDefault()
        app = firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with default credentials")
    except Exception:
        # Token verification only needs the project ID
        app = firebase_admin.initialize_app(options={"projectId": FIREBASE_PROJECT_ID})
        logger.info("Firebase Admin initialized with project ID only")
    return app


def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token (signature, audience, issuer, expiry)
    and return its decoded claims.
    """
    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    init_firebase()
    try:
        decoded = firebase_auth.verify_id_token(token)
    except firebase_auth.ExpiredIdTokenError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except firebase_auth.RevokedIdTokenError as e:
        raise HTTPException(status_code=401, detail="Token has been revoked") from e
    except (firebase_auth.InvalidIdTokenError, ValueError) as e:
        logger.warning(f"❌ Token verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token") from e
    except Exception as e:
        logger.error(f"❌ Token verification error: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e

    logger.debug(f"✅ Token verified for user: {decoded.get('email')}")
    return decoded


def extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Bearer header first, then the session cookie set by POST /auth/session"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> UserProfile:
    """Get the current user's profile from a Firebase token, creating it on first sight"""
    token = extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    decoded_token = verify_firebase_token(token)

    # Firebase ID tokens use 'sub' as the user ID claim
    uid = decoded_token.get("sub") or decoded_token.get("user_id") or decoded_token.get("uid")
    if not uid:
        logger.error(f"❌ Token missing user ID claim. Claims: {list(decoded_token.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    profile = db.query(UserProfile).filter(UserProfile.uid == uid).first()
    if profile:
        return profile

    # Imported here: the profiles domain depends on this module for its routes
    from .domain.profiles.service import ProfileService

    logger.info(f"🆕 Creating profile on first sign-in: {decoded_token.get('email')}")
    return ProfileService(db).create_profile(
        uid=uid,
        display_name=decoded_token.get("name") or "",
        email=decoded_token.get("email") or "",
        email_verified=bool(decoded_token.get("email_verified")),
    )
