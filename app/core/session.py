"""
Cookie-backed session context holding the caller's session token.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from fastapi import Request, Response

from app.core.config import (
    LOGOUT_POLICY,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SECURE,
    SESSION_EXPIRE_MINUTES,
)

logger = logging.getLogger(__name__)

Invalidator = Callable[[str], Awaitable[Any]]


class LogoutPolicy(str, Enum):
    """
    How logout treats server-side invalidation.

    In every policy the local token is empty once logout() returns or raises.
    """

    BEST_EFFORT = "best_effort"  # invalidate, log failures, always clear
    STRICT = "strict"  # invalidate, clear, then re-raise failures
    LOCAL_ONLY = "local_only"  # clear without contacting the server


def get_default_logout_policy() -> LogoutPolicy:
    """Resolve the configured logout policy, falling back to best effort."""
    try:
        return LogoutPolicy(LOGOUT_POLICY)
    except ValueError:
        logger.warning(f"Unknown LOGOUT_POLICY '{LOGOUT_POLICY}', using best_effort")
        return LogoutPolicy.BEST_EFFORT


class SessionStore:
    """
    Holder of the current session token.

    Lifecycle: empty at start, set by login(), cleared by logout() or by the
    route guard through evict(). Nothing else writes the token.

    Instances are constructed explicitly (usually per request through
    from_request()) and passed to the route guard and API handlers.
    """

    def __init__(
        self,
        token: str = "",
        invalidator: Optional[Invalidator] = None,
        logout_policy: Optional[LogoutPolicy] = None,
    ):
        self._token = token or ""
        self._invalidator = invalidator
        self.logout_policy = logout_policy or get_default_logout_policy()
        self._changed = False
        self._navigation = 0

    @property
    def token(self) -> str:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    @property
    def changed(self) -> bool:
        """Whether the token differs from what was loaded."""
        return self._changed

    def login(self, token: str) -> None:
        """Store a freshly issued token, replacing any previous one."""
        self._token = token
        self._changed = True

    async def logout(self) -> None:
        """Clear the session, invalidating it server-side per the logout policy."""
        token = self._token
        if self.logout_policy is LogoutPolicy.LOCAL_ONLY or not token or self._invalidator is None:
            self._clear()
            return

        try:
            await self._invalidator(token)
        except Exception as e:
            self._clear()
            if self.logout_policy is LogoutPolicy.STRICT:
                raise
            logger.warning(f"Server-side session invalidation failed, cleared locally: {e}")
            return

        self._clear()

    def evict(self) -> None:
        """Drop a token that failed validation."""
        self._clear()

    def _clear(self) -> None:
        if self._token:
            self._changed = True
        self._token = ""

    # Navigation tracking for the route guard
    def begin_navigation(self) -> int:
        """Register a new navigation and return its ticket."""
        self._navigation += 1
        return self._navigation

    def is_current_navigation(self, ticket: int) -> bool:
        return ticket == self._navigation

    # Cookie persistence
    @classmethod
    def from_request(
        cls,
        request: Request,
        invalidator: Optional[Invalidator] = None,
        logout_policy: Optional[LogoutPolicy] = None,
    ) -> "SessionStore":
        """Load the session from the session cookie, falling back to a Bearer header."""
        token = request.cookies.get(SESSION_COOKIE_NAME, "")
        if not token:
            authorization = request.headers.get("Authorization", "")
            if authorization.startswith("Bearer "):
                token = authorization[7:].strip()
        return cls(token=token, invalidator=invalidator, logout_policy=logout_policy)

    def persist(self, response: Response) -> None:
        """Write the session cookie to a response when the token changed."""
        if not self._changed:
            return
        if self._token:
            response.set_cookie(
                key=SESSION_COOKIE_NAME,
                value=self._token,
                max_age=SESSION_EXPIRE_MINUTES * 60,
                path="/",
                secure=SESSION_COOKIE_SECURE,
                httponly=False,  # client code reads the token
                samesite="strict",
            )
        else:
            response.delete_cookie(
                key=SESSION_COOKIE_NAME,
                path="/",
                secure=SESSION_COOKIE_SECURE,
                httponly=False,
                samesite="strict",
            )
