"""
Tests for the authentication service and session registry.
"""

from datetime import timedelta

import pytest

from app.api.v1.services.auth import auth_service
from app.core.config import SESSION_EXPIRE_MINUTES
from app.core.exceptions import AuthenticationError


def test_password_hash_roundtrip():
    """Hashes verify only the original password."""
    hashed = auth_service.get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert auth_service.verify_password("s3cret-pass", hashed)
    assert not auth_service.verify_password("wrong-pass", hashed)


def test_truncate_password_keeps_utf8_boundaries():
    """Passwords over 72 bytes are cut without splitting a character."""
    truncated = auth_service._truncate_password_for_bcrypt("é" * 40)
    assert len(truncated.encode("utf-8")) <= 72
    assert truncated == "é" * 36


@pytest.mark.asyncio
async def test_open_session_then_authenticate(store, fake_redis, active_user):
    """An issued token authenticates against its registered session."""
    token = await auth_service.open_session(active_user)

    session = await auth_service.authenticate(token)

    assert session["user_id"] == active_user["id"]
    assert session["tenant_id"] == "tenant-existing"
    assert fake_redis.ttls[f"session:{session['id']}"] == SESSION_EXPIRE_MINUTES * 60


@pytest.mark.asyncio
async def test_invalidated_session_no_longer_authenticates(store, fake_redis, active_user):
    """invalidate() removes the server-side session."""
    token = await auth_service.open_session(active_user)

    await auth_service.invalidate(token)

    with pytest.raises(AuthenticationError):
        await auth_service.authenticate(token)


@pytest.mark.asyncio
async def test_authenticate_rejects_garbage_and_expired_tokens(fake_redis):
    """Malformed and expired tokens are rejected."""
    expired = auth_service.create_session_token({"sub": "u", "sid": "s"}, expires_delta=timedelta(seconds=-1))

    with pytest.raises(AuthenticationError):
        await auth_service.authenticate("not-a-jwt")
    with pytest.raises(AuthenticationError) as exc_info:
        await auth_service.authenticate(expired)
    assert exc_info.value.message == "Session expired"


@pytest.mark.asyncio
async def test_invalidate_accepts_expired_tokens(fake_redis):
    """Expired tokens can still be logged out."""
    fake_redis.data["session:s-1"] = {"id": "s-1", "user_id": "u"}
    expired = auth_service.create_session_token({"sub": "u", "sid": "s-1"}, expires_delta=timedelta(seconds=-1))

    await auth_service.invalidate(expired)

    assert "session:s-1" not in fake_redis.data


@pytest.mark.asyncio
async def test_login_success_and_failures(store, fake_redis, active_user):
    """Credentials are checked before a session is opened."""
    user, token = await auth_service.login("admin@acme.io", "s3cret-pass")
    assert user["id"] == active_user["id"]
    assert await auth_service.is_valid_token(token)

    with pytest.raises(AuthenticationError) as exc_info:
        await auth_service.login("admin@acme.io", "wrong-pass")
    assert exc_info.value.message == "Invalid email or password"

    with pytest.raises(AuthenticationError):
        await auth_service.login("nobody@acme.io", "s3cret-pass")


@pytest.mark.asyncio
async def test_login_rejects_disabled_account(store, fake_redis):
    """Inactive users cannot sign in."""
    store.add_user("off@acme.io", password_hash=auth_service.get_password_hash("s3cret-pass"), is_active=False)

    with pytest.raises(AuthenticationError) as exc_info:
        await auth_service.login("off@acme.io", "s3cret-pass")

    assert exc_info.value.message == "Account is disabled"


@pytest.mark.asyncio
async def test_current_user_data_strips_password_hash(store, fake_redis, active_user):
    """User data handed to clients never carries the hash."""
    token = await auth_service.open_session(active_user)

    user = await auth_service.get_current_user_data(token)

    assert user["id"] == active_user["id"]
    assert "password_hash" not in user
    assert await auth_service.get_current_user_data("") is None
    assert await auth_service.get_current_user_data("not-a-jwt") is None
