import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./socialplan.db")

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH")

# Frontend base URL for redirects and CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Social-Plan <noreply@social-plan.app>")

# Email relay quota (per client IP)
EMAIL_RATE_LIMIT = int(os.getenv("EMAIL_RATE_LIMIT", "5"))
EMAIL_RATE_WINDOW = int(os.getenv("EMAIL_RATE_WINDOW", "3600"))

# Session cookies read by the page gate
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "firebase-auth-token")
SESSION_FLAG_COOKIE = os.getenv("SESSION_FLAG_COOKIE", "userHasSession")
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", str(60 * 60 * 24)))
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "true" if IS_PRODUCTION else "false").lower() == "true"

# Email verification
VERIFICATION_CODE_TTL_MINUTES = int(os.getenv("VERIFICATION_CODE_TTL_MINUTES", "10"))
RESEND_COOLDOWN_SECONDS = int(os.getenv("RESEND_COOLDOWN_SECONDS", "60"))

# User search
SEARCH_PAGE_SIZE = int(os.getenv("SEARCH_PAGE_SIZE", "100"))
SEARCH_MAX_RESULTS = int(os.getenv("SEARCH_MAX_RESULTS", "20"))

# Profile read cache (Redis)
PROFILE_CACHE_TTL = int(os.getenv("PROFILE_CACHE_TTL", "300"))
