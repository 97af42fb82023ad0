"""
Pytest configuration and fixtures for testing.
"""

import asyncio
import os

# Configure the process before any app module reads its settings
os.environ["ENVIRONMENT"] = "test"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-session-tokens")

import uuid
from typing import Any, Dict, Optional, Set

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from app.api.v1.services.auth import auth_service
from app.api.v1.services.signup import signup_service
from app.core.exceptions import DatabaseError, StoreErrorKind
from app.core.security import rate_limiter
from app.core.utils import add_timestamps
from app.main import app
from app.services.firebase import email_key


class InMemoryStore:
    """
    Document store double with the same surface as FirebaseService.

    Reservations are enforced the same way Firestore's batch.create() does,
    so uniqueness conflicts surface as DatabaseError(kind=CONFLICT).

    Failure injection:
        fail_on: operation name -> exception raised by that operation
        return_none: operation names that complete without a record
    """

    def __init__(self):
        self.tenants: Dict[str, Dict[str, Any]] = {}
        self.users: Dict[str, Dict[str, Any]] = {}
        self.user_roles: Dict[str, Dict[str, Any]] = {}
        self.tenant_slugs: Dict[str, str] = {}
        self.user_emails: Dict[str, str] = {}
        self.fail_on: Dict[str, Exception] = {}
        self.return_none: Set[str] = set()
        self.calls = []

    async def _enter(self, operation: str) -> bool:
        # Yield so concurrent callers interleave like real I/O
        await asyncio.sleep(0)
        self.calls.append(operation)
        if operation in self.fail_on:
            raise self.fail_on[operation]
        return operation not in self.return_none

    async def health_check(self) -> bool:
        return True

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        await self._enter("get_user_by_email")
        for user in self.users.values():
            if user["email"] == email:
                return dict(user)
        return None

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        await self._enter("get_user")
        user = self.users.get(user_id)
        return dict(user) if user else None

    async def create_tenant(self, tenant_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not await self._enter("create_tenant"):
            return None
        if tenant_data["slug"] in self.tenant_slugs:
            raise DatabaseError("slug already exists", "create_tenant", kind=StoreErrorKind.CONFLICT, field="slug")
        add_timestamps(tenant_data)
        self.tenant_slugs[tenant_data["slug"]] = tenant_data["id"]
        self.tenants[tenant_data["id"]] = dict(tenant_data)
        return tenant_data

    async def delete_tenant(self, tenant: Dict[str, Any]) -> None:
        await self._enter("delete_tenant")
        self.tenants.pop(tenant["id"], None)
        self.tenant_slugs.pop(tenant["slug"], None)

    async def create_user(self, user_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not await self._enter("create_user"):
            return None
        key = email_key(user_data["email"])
        if key in self.user_emails:
            raise DatabaseError("email already exists", "create_user", kind=StoreErrorKind.CONFLICT, field="email")
        add_timestamps(user_data)
        self.user_emails[key] = user_data["id"]
        self.users[user_data["id"]] = dict(user_data)
        return user_data

    async def delete_user(self, user: Dict[str, Any]) -> None:
        await self._enter("delete_user")
        self.users.pop(user["id"], None)
        self.user_emails.pop(email_key(user["email"]), None)

    async def create_user_role(self, role_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not await self._enter("create_user_role"):
            return None
        add_timestamps(role_data)
        self.user_roles[role_data["id"]] = dict(role_data)
        return role_data

    async def delete_user_role(self, role: Dict[str, Any]) -> None:
        await self._enter("delete_user_role")
        self.user_roles.pop(role["id"], None)

    def add_user(self, email: str, password_hash: str = "", **fields) -> Dict[str, Any]:
        """Seed an existing user directly."""
        user = {
            "id": str(uuid.uuid4()),
            "email": email,
            "password_hash": password_hash,
            "first_name": "Existing",
            "last_name": "User",
            "primary_tenant": "tenant-existing",
            "accessible_tenants": ["tenant-existing"],
            "is_active": True,
        }
        user.update(fields)
        self.users[user["id"]] = user
        self.user_emails[email_key(email)] = user["id"]
        return dict(user)


class FakeRedis:
    """In-memory stand-in for AsyncRedisClient; TTLs are recorded, not enforced."""

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.ttls: Dict[str, int] = {}
        self.fail_on: Set[str] = set()

    def _check(self, operation: str):
        if operation in self.fail_on:
            raise RedisConnectionError(f"redis unavailable during {operation}")

    async def get(self, key: str):
        self._check("get")
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str):
        self._check("setex")
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, *keys: str) -> int:
        self._check("delete")
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    async def incr(self, key: str) -> int:
        self._check("incr")
        self.data[key] = int(self.data.get(key, 0)) + 1
        return self.data[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return key in self.data

    async def get_json(self, key: str):
        self._check("get")
        return self.data.get(key)

    async def set_json(self, key: str, value: Any, ttl: int):
        self._check("setex")
        self.data[key] = value
        self.ttls[key] = ttl

    async def ping(self) -> bool:
        return "ping" not in self.fail_on

    async def close(self):
        pass


@pytest.fixture
def store(monkeypatch):
    """In-memory document store wired into the service singletons."""
    memory_store = InMemoryStore()
    monkeypatch.setattr(signup_service, "store", memory_store)
    monkeypatch.setattr(auth_service, "store", memory_store)
    return memory_store


@pytest.fixture
def fake_redis(monkeypatch):
    """In-memory Redis wired into the session registry and rate limiter."""
    redis = FakeRedis()
    monkeypatch.setattr(auth_service, "redis", redis)
    monkeypatch.setattr(rate_limiter, "redis", redis)
    return redis


@pytest.fixture
def client(store, fake_redis):
    """Create a test client for the FastAPI application."""
    return TestClient(app)


@pytest.fixture
def signup_payload():
    """Return a valid signup payload."""
    return {
        "email": "owner@acme.io",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "password": "correct-horse-battery",
        "company_name": "Acme, Inc.",
        "isMsp": True,
    }


@pytest.fixture
def active_user(store):
    """Seed an active user with a known password."""
    return store.add_user("admin@acme.io", password_hash=auth_service.get_password_hash("s3cret-pass"))
