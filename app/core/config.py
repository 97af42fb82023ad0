"""
Core configuration settings for the tenant signup and admin session API.
"""

import os
from typing import Tuple

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _split_paths(value: str) -> Tuple[str, ...]:
    """Parse a comma-separated list of path prefixes, keeping their order."""
    return tuple(p.strip() for p in value.split(",") if p.strip())


# Firebase settings (Minimal Required Fields)
FIREBASE_PROJECT_ID = os.environ.get("FIREBASE_PROJECT_ID", "")
FIREBASE_PRIVATE_KEY = os.environ.get("FIREBASE_PRIVATE_KEY", "")
FIREBASE_CLIENT_EMAIL = os.environ.get("FIREBASE_CLIENT_EMAIL", "")
# Named logical database inside the Firebase project
FIRESTORE_DATABASE = os.environ.get("FIRESTORE_DATABASE", "(default)")

# Redis settings (session registry and rate limiting)
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")

# Application settings
DEBUG = os.environ.get("DEBUG", "false").lower() in ("true", "1", "t")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")  # nosec B104 - Intentional: Server needs to bind to all interfaces
API_PORT = int(os.environ.get("API_PORT", "8000"))
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")

# JWT / session settings
SECRET_KEY = os.environ.get("SECRET_KEY", "")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
SESSION_EXPIRE_MINUTES = int(os.environ.get("SESSION_EXPIRE_MINUTES", "120"))
SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "auth_token")
SESSION_COOKIE_SECURE = os.environ.get("SESSION_COOKIE_SECURE", "true").lower() in ("true", "1", "t")
# One of: best_effort, strict, local_only (see app.core.session.LogoutPolicy)
LOGOUT_POLICY = os.environ.get("LOGOUT_POLICY", "best_effort")
# Upper bound for a token validation round trip in the route guard
GUARD_TIMEOUT_SECONDS = float(os.environ.get("GUARD_TIMEOUT_SECONDS", "5"))

# Password hashing
BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

# Signup settings
SYSTEM_SUPER_ADMIN_ID = os.environ.get("SYSTEM_SUPER_ADMIN_ID", "super_admin")
DEFAULT_BILLING_RESPONSIBILITY = os.environ.get("DEFAULT_BILLING_RESPONSIBILITY", "self")
SIGNUP_RATE_LIMIT = int(os.environ.get("SIGNUP_RATE_LIMIT", "10"))
LOGIN_RATE_LIMIT = int(os.environ.get("LOGIN_RATE_LIMIT", "10"))
RATE_LIMIT_WINDOW_SECONDS = int(os.environ.get("RATE_LIMIT_WINDOW_SECONDS", "60"))

# Route configuration consumed by the route guard
AUTH_PUBLIC_PATHS = _split_paths(os.environ.get("AUTH_PUBLIC_PATHS", "/doc,/pricing,/blog,/changelog,/auth"))
AUTH_ADMIN_PATHS = _split_paths(os.environ.get("AUTH_ADMIN_PATHS", "/panel/admin"))
AUTH_ADMIN_LOGIN_PATH = os.environ.get("AUTH_ADMIN_LOGIN_PATH", "/auth/login/admin")
AUTH_USER_LOGIN_PATH = os.environ.get("AUTH_USER_LOGIN_PATH", "/auth/login")
AUTH_AFTER_LOGIN_PATH = os.environ.get("AUTH_AFTER_LOGIN_PATH", "/panel/admin")
AUTH_AFTER_LOGOUT_PATH = os.environ.get("AUTH_AFTER_LOGOUT_PATH", "/")
