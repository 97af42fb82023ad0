"""
Signup orchestration: provisions a tenant and its first administrator.

The signup flow:
1. Validate the payload (no store access before this succeeds)
2. Pre-check that no user holds the email
3. Create the tenant under a freshly derived slug
4. Hash the password and create the user inside the new tenant
5. Grant the tenant-type administrator role
6. Assemble the success payload

Steps 3-5 are not one transaction. Each completed step registers an undo
action and a failure runs them in reverse, so no tenant is left without its
user and no role without both.
"""

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Tuple

from pydantic import ValidationError as PydanticValidationError

from app.api.v1.schemas.auth import SignupRequest, SignupResponse
from app.api.v1.services.auth import auth_service
from app.core.config import DEFAULT_BILLING_RESPONSIBILITY, SYSTEM_SUPER_ADMIN_ID
from app.core.exceptions import (
    AppException,
    ConflictError,
    DatabaseError,
    InternalError,
    PermissionDeniedError,
    StoreErrorKind,
    UnknownError,
    ValidationError,
)
from app.core.response_mappers import to_signup_response
from app.core.utils import get_current_timestamp
from app.models.auth import ROLE_BY_TENANT_TYPE, TenantStatus, TenantType
from app.services.firebase import firebase_service
from app.utils.slug import build_tenant_slug

logger = logging.getLogger(__name__)

EMAIL_EXISTS_MESSAGE = "An account with this email already exists"
SLUG_EXISTS_MESSAGE = "A company with this name already exists. Please try a different name."
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
WEAK_PASSWORD_MESSAGE = "Password must be at least 8 characters long"
REJECTED_INPUT_MESSAGE = "The submitted data was rejected. Please check your input."

Compensation = Tuple[str, Callable[[], Awaitable[Any]]]


def format_validation_error(error: PydanticValidationError) -> ValidationError:
    """Collapse every failing field into one ValidationError."""
    parts = []
    fields = []
    for issue in error.errors():
        field = ".".join(str(p) for p in issue.get("loc", ())) or "body"
        fields.append(field)
        parts.append(f"{field}: {issue.get('msg', 'invalid value')}")
    return ValidationError(
        f"Validation error: {', '.join(parts)}",
        field=fields[0] if len(fields) == 1 else None,
        details={"fields": fields},
    )


def map_signup_error(error: Exception) -> AppException:
    """
    Map any failure raised during signup to its public error.

    Store failures are classified by their StoreErrorKind; anything
    unrecognized becomes a generic UnknownError.
    """
    if isinstance(error, AppException) and not isinstance(error, DatabaseError):
        return error

    if isinstance(error, PydanticValidationError):
        return format_validation_error(error)

    if isinstance(error, DatabaseError):
        if error.kind is StoreErrorKind.CONFLICT:
            if error.field == "slug":
                return ConflictError(SLUG_EXISTS_MESSAGE, field="slug")
            return ConflictError(EMAIL_EXISTS_MESSAGE, field="email")
        if error.kind is StoreErrorKind.INVALID_ARGUMENT:
            if error.field == "email":
                return ValidationError(INVALID_EMAIL_MESSAGE, field="email")
            if error.field == "password":
                return ValidationError(WEAK_PASSWORD_MESSAGE, field="password")
            return ValidationError(REJECTED_INPUT_MESSAGE)
        if error.kind is StoreErrorKind.PERMISSION_DENIED:
            return PermissionDeniedError()

    return UnknownError()


class SignupService:
    """Creates a tenant, its first user and that user's admin role as one logical unit."""

    def __init__(self, store=None, auth=None):
        self.store = store or firebase_service
        self.auth = auth or auth_service

    async def signup(self, payload: Dict[str, Any]) -> SignupResponse:
        """
        Run the full signup flow.

        Raises:
            ValidationError: payload failed validation (400)
            ConflictError: email or slug already taken (409)
            PermissionDeniedError, InternalError, UnknownError: (500)
        """
        try:
            return await self._provision(payload)
        except Exception as e:
            mapped = map_signup_error(e)
            if mapped.status_code >= 500:
                logger.error(f"Signup failed: {e!r}", exc_info=True)
            else:
                logger.warning(f"Signup rejected ({mapped.error_code}): {mapped.message}")
            if mapped is e:
                raise
            raise mapped from e

    def validate(self, payload: Dict[str, Any]) -> SignupRequest:
        if not isinstance(payload, dict):
            raise ValidationError("Validation error: body: Request body must be a JSON object", field="body")
        return SignupRequest.model_validate(payload)

    async def _provision(self, payload: Dict[str, Any]) -> SignupResponse:
        request = self.validate(payload)
        tenant_type = TenantType.MSP if request.is_msp else TenantType.CUSTOMER
        role_id = ROLE_BY_TENANT_TYPE[tenant_type]

        # 1. Optimistic uniqueness pre-check; the email reservation in step 4 is authoritative
        existing_user = await self.store.get_user_by_email(request.email)
        if existing_user:
            raise ConflictError(EMAIL_EXISTS_MESSAGE, field="email")

        # 2. Slug
        slug = build_tenant_slug(request.company_name)

        compensations: List[Compensation] = []
        try:
            # 3. Tenant
            tenant = await self.store.create_tenant(
                {
                    "id": str(uuid.uuid4()),
                    "name": request.company_name,
                    "slug": slug,
                    "tenant_type": tenant_type.value,
                    "contact_email": request.email,
                    "billing_responsibility": DEFAULT_BILLING_RESPONSIBILITY,
                    "status": TenantStatus.ACTIVE.value,
                    "settings": {},
                }
            )
            if not tenant:
                raise InternalError("Failed to create tenant", operation="create_tenant")
            compensations.append((f"tenant {tenant['id']}", lambda: self.store.delete_tenant(tenant)))
            logger.info(f"Tenant created: {tenant['id']} ({slug})")

            # 4. User
            password_hash = await self.auth.get_password_hash_async(request.password)
            now = get_current_timestamp()
            user = await self.store.create_user(
                {
                    "id": str(uuid.uuid4()),
                    "email": request.email,
                    "password_hash": password_hash,
                    "password_must_change": False,
                    "first_name": request.first_name,
                    "last_name": request.last_name,
                    "primary_tenant": tenant["id"],
                    "accessible_tenants": [tenant["id"]],
                    "is_active": True,
                    "password_changed_at": now,
                    "created_at": now,
                }
            )
            if not user:
                raise InternalError("Failed to create user", operation="create_user")
            compensations.append((f"user {user['id']}", lambda: self.store.delete_user(user)))
            logger.info(f"User created: {user['id']} in tenant {tenant['id']}")

            # 5. Role assignment
            role = await self.store.create_user_role(
                {
                    "id": str(uuid.uuid4()),
                    "user": user["id"],
                    "role": role_id.value,
                    "tenant": tenant["id"],
                    "granted_by": SYSTEM_SUPER_ADMIN_ID,
                    "is_active": True,
                }
            )
            if not role:
                raise InternalError("Failed to assign role", operation="create_user_role")
            compensations.append((f"role {role['id']}", lambda: self.store.delete_user_role(role)))
            logger.info(f"Role {role_id.value} granted to {user['id']} in tenant {tenant['id']}")

            # 6. Response
            return to_signup_response(user, tenant, role_id, joined_at=role.get("created_at") or get_current_timestamp())
        except asyncio.CancelledError:
            # Not an Exception subclass; shielded so a second cancel cannot interrupt the undo
            logger.warning(f"Signup cancelled after {len(compensations)} completed step(s), rolling back")
            await asyncio.shield(self._compensate(compensations))
            raise
        except Exception:
            await self._compensate(compensations)
            raise

    async def _compensate(self, compensations: List[Compensation]) -> None:
        """Undo completed steps in reverse order; failures are logged, never raised."""
        for label, undo in reversed(compensations):
            try:
                await undo()
                logger.warning(f"Signup rolled back {label}")
            except Exception as e:
                logger.error(f"Signup rollback failed, {label} left behind and needs manual cleanup: {e}", exc_info=True)


# Global signup service instance
signup_service = SignupService()
