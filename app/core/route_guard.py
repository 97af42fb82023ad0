"""
Per-navigation authorization gate for admin-restricted paths.

Every navigation is classified against the route tables. Only admin paths
need a token, and that token is re-validated on each navigation:

    root / public / other  -> allowed
    admin, no token        -> redirected to the admin login
    admin, token valid     -> allowed
    admin, token invalid   -> token evicted, redirected to the admin login

Validation is a blocking round trip bounded by a timeout; a timeout counts
as a failed validation. When a newer navigation starts on the same session
before a check resolves, the stale check reports SUPERSEDED and changes
nothing.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from app.core.config import GUARD_TIMEOUT_SECONDS
from app.core.routes import AuthRoutes, PathClass
from app.core.session import SessionStore

logger = logging.getLogger(__name__)


class GuardOutcome(str, Enum):
    ALLOWED = "allowed"
    REDIRECTED = "redirected"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class GuardDecision:
    """Result of one guard evaluation."""

    outcome: GuardOutcome
    path_class: PathClass
    redirect_to: Optional[str] = None
    reason: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GuardOutcome.ALLOWED


class RouteGuard:
    """Decides whether a navigation may proceed."""

    def __init__(
        self,
        routes: AuthRoutes,
        authenticate: Callable[[str], Awaitable[Any]],
        timeout: float = GUARD_TIMEOUT_SECONDS,
    ):
        self.routes = routes
        self._authenticate = authenticate
        self.timeout = timeout

    def classify(self, path: str) -> PathClass:
        return self.routes.classify(path)

    async def check(self, path: str, session: SessionStore) -> GuardDecision:
        """Evaluate a navigation to ``path`` for the given session."""
        ticket = session.begin_navigation()
        path_class = self.classify(path)

        if path_class is not PathClass.ADMIN:
            return GuardDecision(GuardOutcome.ALLOWED, path_class)

        login_path = self.routes.admin_login_path
        token = session.token
        if not token:
            return GuardDecision(GuardOutcome.REDIRECTED, path_class, redirect_to=login_path, reason="missing_token")

        try:
            await asyncio.wait_for(self._authenticate(token), timeout=self.timeout)
        except Exception as e:
            if not session.is_current_navigation(ticket):
                return GuardDecision(GuardOutcome.SUPERSEDED, path_class, reason="superseded")
            if isinstance(e, asyncio.TimeoutError):
                logger.warning(f"Token validation timed out after {self.timeout}s for {path}")
                reason = "validation_timeout"
            else:
                logger.info(f"Token validation failed for {path}: {e}")
                reason = "invalid_token"
            # A token replaced by a fresh login meanwhile is not ours to drop
            if session.token == token:
                session.evict()
            return GuardDecision(GuardOutcome.REDIRECTED, path_class, redirect_to=login_path, reason=reason)

        if not session.is_current_navigation(ticket):
            return GuardDecision(GuardOutcome.SUPERSEDED, path_class, reason="superseded")
        return GuardDecision(GuardOutcome.ALLOWED, path_class)
