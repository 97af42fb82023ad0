"""
Signup and session API routes.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from app.api.v1.schemas.auth import (
    LoginData,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    SessionResponse,
    SignupResponse,
)
from app.api.v1.services.auth import auth_service
from app.api.v1.services.signup import signup_service
from app.core.config import LOGIN_RATE_LIMIT, RATE_LIMIT_WINDOW_SECONDS, SIGNUP_RATE_LIMIT
from app.core.exceptions import ValidationError
from app.core.response_mappers import to_user_summary
from app.core.routes import AUTH_ROUTES
from app.core.security import get_client_ip, rate_limiter
from app.core.session import SessionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["authentication"])

INVALID_JSON_MESSAGE = "Validation error: body: Request body must be valid JSON"


def get_session(request: Request) -> SessionStore:
    """Request-scoped session bound to the session registry."""
    return SessionStore.from_request(request, invalidator=auth_service.invalidate)


async def read_json_body(request: Request) -> Any:
    """Decode the JSON body; an empty or malformed body is a ValidationError."""
    try:
        return await request.json()
    except ValueError as e:
        raise ValidationError(INVALID_JSON_MESSAGE, field="body") from e


@router.post("/signup", response_model=SignupResponse)
async def signup(
    request: Request,
    response: Response,
    session: SessionStore = Depends(get_session),
):
    """
    Create a tenant together with its first administrator.

    The body is read here rather than declared as a parameter so that a
    missing, malformed or non-object body is reported like any other
    validation failure (400) instead of FastAPI's 422.
    """
    client_ip = get_client_ip(request)
    await rate_limiter.enforce_rate_limit(client_ip, limit=SIGNUP_RATE_LIMIT, window_seconds=RATE_LIMIT_WINDOW_SECONDS, operation="auth_signup")

    payload = await read_json_body(request)
    result = await signup_service.signup(payload)

    # Sign the new administrator in; the account exists either way
    try:
        user = await auth_service.store.get_user(result.data.user.id)
        if user:
            session.login(await auth_service.open_session(user))
            session.persist(response)
    except Exception as e:
        logger.error(f"Signup succeeded but opening a session failed for {result.data.user.id}: {e}", exc_info=True)

    return result


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    request: Request,
    response: Response,
    session: SessionStore = Depends(get_session),
):
    """Authenticate with email and password and set the session cookie."""
    client_ip = get_client_ip(request)
    await rate_limiter.enforce_rate_limit(client_ip, limit=LOGIN_RATE_LIMIT, window_seconds=RATE_LIMIT_WINDOW_SECONDS, operation="auth_login")

    logger.info(f"Login attempt for email: {login_data.email}")
    user, token = await auth_service.login(login_data.email, login_data.password)

    session.login(token)
    session.persist(response)

    return LoginResponse(
        message="Login successful",
        data=LoginData(user=to_user_summary(user), token=token, redirect_to=AUTH_ROUTES.after_login_path),
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response, session: SessionStore = Depends(get_session)):
    """
    Log out and clear the session cookie.

    The cookie is deleted in every case. Under the strict logout policy a
    failed server-side invalidation is reported with 503.
    """
    try:
        await session.logout()
    except Exception as e:
        logger.error(f"Session invalidation failed during logout: {e}", exc_info=True)
        failure = JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": "LOGOUT_INVALIDATION_FAILED",
                "message": "Signed out locally, but the session could not be revoked. Please try again.",
                "details": {"redirect_to": AUTH_ROUTES.after_logout_path},
            },
        )
        session.persist(failure)
        return failure

    session.persist(response)
    return LogoutResponse(message="Successfully logged out", redirect_to=AUTH_ROUTES.after_logout_path)


@router.get("/session", response_model=SessionResponse)
async def current_session(response: Response, session: SessionStore = Depends(get_session)):
    """Describe the caller's session; a dead session cookie is deleted."""
    if session.token and not await auth_service.is_valid_token(session.token):
        session.evict()
        session.persist(response)
        return SessionResponse(authenticated=False)

    user = await auth_service.get_current_user_data(session.token)
    if not user:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, user=user)
