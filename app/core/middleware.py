"""
Middleware for request processing.
Runs the route guard in front of every HTTP request.
"""

import logging

from starlette.requests import Request
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from app.core.route_guard import RouteGuard
from app.core.session import SessionStore

logger = logging.getLogger(__name__)


class RouteGuardMiddleware:
    """
    ASGI middleware that gates admin paths behind a valid session token.

    Strategy:
    - Build a request-scoped SessionStore from the session cookie
    - Let the RouteGuard classify the path and validate the token
    - On any non-allowed decision answer with a redirect to the login path,
      deleting the session cookie when the guard evicted the token
    - Otherwise pass the request through untouched
    """

    def __init__(self, app: ASGIApp, guard: RouteGuard):
        self.app = app
        self.guard = guard

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        session = SessionStore.from_request(request)
        decision = await self.guard.check(scope["path"], session)

        if decision.allowed:
            await self.app(scope, receive, send)
            return

        # Request-scoped sessions never see a superseded check; fall back to login anyway
        redirect_to = decision.redirect_to or self.guard.routes.admin_login_path
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Guard redirect: {scope.get('method', '')} {scope['path']} -> {redirect_to} ({decision.reason})")

        response = RedirectResponse(redirect_to, status_code=302)
        session.persist(response)
        await response(scope, receive, send)
