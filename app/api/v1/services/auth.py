"""
Authentication service: credential hashing, session tokens and the session registry.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from passlib.context import CryptContext

from app.core.async_redis import async_redis_client
from app.core.config import BCRYPT_ROUNDS, JWT_ALGORITHM, SECRET_KEY, SESSION_EXPIRE_MINUTES
from app.core.exceptions import AuthenticationError
from app.core.retry import retry_redis
from app.core.utils import get_current_timestamp, strip_private_fields
from app.services.firebase import firebase_service

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

# Configure logging
logger = logging.getLogger(__name__)

TOKEN_TYPE = "session"


class AuthService:
    """Service class for authentication operations."""

    def __init__(self, store=None, redis=None):
        """Initialize auth service with its document store and session registry."""
        self.store = store or firebase_service
        self.redis = redis or async_redis_client

    @staticmethod
    def _truncate_password_for_bcrypt(password: str) -> str:
        """Truncate password to 72 bytes for bcrypt compatibility.

        Bcrypt has a 72-byte limit. This method safely truncates
        passwords exceeding this limit while preserving UTF-8 encoding.
        """
        password_bytes = password.encode("utf-8")
        if len(password_bytes) <= 72:
            return password

        # Truncate to 72 bytes, ensuring we don't split multi-byte characters
        password_bytes = password_bytes[:72]
        # Remove any incomplete trailing bytes (continuation bytes without a start byte)
        while password_bytes and password_bytes[-1] & 0x80 and not (password_bytes[-1] & 0x40):
            password_bytes = password_bytes[:-1]

        return password_bytes.decode("utf-8", errors="ignore")

    # Password utilities
    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        truncated_password = self._truncate_password_for_bcrypt(plain_password)
        return pwd_context.verify(truncated_password, hashed_password)

    async def verify_password_async(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password asynchronously to avoid blocking."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.verify_password, plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password."""
        truncated_password = self._truncate_password_for_bcrypt(password)
        return pwd_context.hash(truncated_password)

    async def get_password_hash_async(self, password: str) -> str:
        """Hash a password in the default executor."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.get_password_hash, password)

    # JWT token utilities
    def create_session_token(self, data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed session token."""
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=SESSION_EXPIRE_MINUTES))
        to_encode.update({"exp": expire, "type": TOKEN_TYPE})
        return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str, verify_exp: bool = True) -> Dict[str, Any]:
        """Decode a session token, raising AuthenticationError when it is unusable."""
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM], options={"verify_exp": verify_exp})
        except ExpiredSignatureError:
            raise AuthenticationError("Session expired")
        except JWTError:
            raise AuthenticationError("Invalid token")

        if payload.get("type") != TOKEN_TYPE or not payload.get("sid") or not payload.get("sub"):
            raise AuthenticationError("Invalid token")
        return payload

    # Session registry
    @retry_redis
    async def _store_session(self, session_id: str, session_data: Dict[str, Any]) -> None:
        await self.redis.set_json(f"session:{session_id}", session_data, SESSION_EXPIRE_MINUTES * 60)

    async def open_session(self, user: Dict[str, Any]) -> str:
        """
        Register a session for a user and issue its token.

        Session Storage:
        - Redis key: `session:{session_id}` - stores session data
        - TTL matches the token lifetime (SESSION_EXPIRE_MINUTES)
        """
        session_id = str(uuid.uuid4())
        session_data = {
            "id": session_id,
            "user_id": user["id"],
            "tenant_id": user.get("primary_tenant"),
            "created_at": get_current_timestamp(),
        }
        await self._store_session(session_id, session_data)

        return self.create_session_token({"sub": user["id"], "sid": session_id, "tid": user.get("primary_tenant")})

    async def authenticate(self, token: str) -> Dict[str, Any]:
        """
        Validate a session token.

        Returns the registered session; raises AuthenticationError when the
        token is malformed, expired or its session was invalidated.
        """
        payload = self.decode_token(token)
        session = await self.redis.get_json(f"session:{payload['sid']}")
        if not session or session.get("user_id") != payload["sub"]:
            raise AuthenticationError("Session expired or invalidated")
        return session

    async def invalidate(self, token: str) -> None:
        """Tear down the server-side session behind a token."""
        payload = self.decode_token(token, verify_exp=False)
        await self.redis.delete(f"session:{payload['sid']}")
        logger.info(f"Session invalidated for user {payload['sub']}")

    async def login(self, email: str, password: str) -> Tuple[Dict[str, Any], str]:
        """Verify credentials and open a session."""
        user = await self.store.get_user_by_email(email)
        if not user or not user.get("password_hash"):
            raise AuthenticationError("Invalid email or password")

        if not await self.verify_password_async(password, user["password_hash"]):
            raise AuthenticationError("Invalid email or password")

        if not user.get("is_active", False):
            raise AuthenticationError("Account is disabled")

        token = await self.open_session(user)
        return user, token

    async def is_valid_token(self, token: str) -> bool:
        """Check a token without raising."""
        try:
            await self.authenticate(token)
            return True
        except Exception:
            return False

    async def get_current_user_data(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the user behind a token, or None when it cannot be resolved."""
        if not token:
            return None
        try:
            session = await self.authenticate(token)
            user = await self.store.get_user(session["user_id"])
        except Exception as e:
            logger.info(f"Failed to get current user: {e}")
            return None
        return strip_private_fields(user) if user else None


# Global auth service instance
auth_service = AuthService()
