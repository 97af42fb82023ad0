"""
Firebase service for database operations using Firestore.
Uses thread pool executor for non-blocking async operations.
"""

import asyncio
import hashlib
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Tuple

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as gcp_exceptions

from app.core.config import FIREBASE_CLIENT_EMAIL, FIREBASE_PRIVATE_KEY, FIREBASE_PROJECT_ID, FIRESTORE_DATABASE
from app.core.exceptions import DatabaseError, StoreErrorKind
from app.core.retry import retry_firestore
from app.core.utils import add_timestamps

# Configure logging
logger = logging.getLogger(__name__)

# Create dedicated thread pool for Firebase operations
# This prevents blocking the main event loop
_firebase_executor = ThreadPoolExecutor(max_workers=50, thread_name_prefix="firebase-worker")

TENANTS = "tenants"
USERS = "users"
USER_ROLES = "user_roles"
# Reservation collections enforcing uniqueness at write time
TENANT_SLUGS = "tenant_slugs"
USER_EMAILS = "user_emails"


def email_key(email: str) -> str:
    """Document id of an email reservation (emails may contain '/')."""
    return hashlib.sha256(email.encode("utf-8")).hexdigest()


class FirebaseService:
    """
    Firebase service that wraps blocking Firestore operations in thread pool.

    Key Features:
    - All blocking I/O runs in thread pool (non-blocking)
    - Record and its uniqueness reservation are written in one atomic batch
    - Backing-store failures are raised as typed DatabaseError values
    - Automatic timestamp management
    """

    def __init__(self):
        """Initialize Firebase client."""
        # Skip initialization in test environment
        if os.environ.get("ENVIRONMENT") == "test" or os.environ.get("PYTEST_CURRENT_TEST"):
            self.db = None
            self.executor = _firebase_executor
            self._initialized = False
            return

        if not FIREBASE_PROJECT_ID:
            raise ValueError("FIREBASE_PROJECT_ID must be set")

        # Initialize Firebase Admin SDK if not already initialized
        if not firebase_admin._apps:
            try:
                # Process private key - replace literal \n with actual newlines
                private_key = FIREBASE_PRIVATE_KEY.replace("\\n", "\n") if FIREBASE_PRIVATE_KEY else ""

                cred_dict = {
                    "type": "service_account",
                    "project_id": FIREBASE_PROJECT_ID,
                    "private_key": private_key,
                    "client_email": FIREBASE_CLIENT_EMAIL,
                    "token_uri": "https://oauth2.googleapis.com/token",
                    "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                    "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
                    "client_x509_cert_url": f"https://www.googleapis.com/robot/v1/metadata/x509/{FIREBASE_CLIENT_EMAIL}",
                }

                cred = credentials.Certificate(cred_dict)
                firebase_admin.initialize_app(cred)
            except Exception as e:
                raise ValueError(f"Firebase initialization failed: {e}")

        self.db = firestore.client(database_id=FIRESTORE_DATABASE)
        self.executor = _firebase_executor
        self._initialized = True

    async def _run_in_executor(self, func):
        """Run blocking function in thread pool executor."""
        if not self._initialized or self.db is None:
            raise RuntimeError("Firebase service not initialized. Cannot use in test environment without proper setup.")
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(self.executor, func)

    async def _execute(
        self,
        func: Callable,
        operation: str,
        conflict_field: Optional[str] = None,
        invalid_fields: Tuple[str, ...] = (),
    ):
        """
        Run a Firestore call and translate its failures into DatabaseError.

        An InvalidArgument failure is attributed to the first of
        ``invalid_fields`` named in the store's message, if any.
        """
        try:
            return await self._run_in_executor(func)
        except gcp_exceptions.AlreadyExists as e:
            raise DatabaseError(
                f"{conflict_field or 'record'} already exists",
                operation,
                kind=StoreErrorKind.CONFLICT,
                field=conflict_field,
            ) from e
        except (gcp_exceptions.PermissionDenied, gcp_exceptions.Unauthenticated) as e:
            raise DatabaseError(str(e), operation, kind=StoreErrorKind.PERMISSION_DENIED) from e
        except gcp_exceptions.InvalidArgument as e:
            message = str(e)
            field = next((f for f in invalid_fields if f in message.lower()), None)
            raise DatabaseError(message, operation, kind=StoreErrorKind.INVALID_ARGUMENT, field=field) from e
        except (gcp_exceptions.ServiceUnavailable, gcp_exceptions.DeadlineExceeded) as e:
            raise DatabaseError(str(e), operation, kind=StoreErrorKind.UNAVAILABLE) from e
        except gcp_exceptions.GoogleAPICallError as e:
            raise DatabaseError(str(e), operation, kind=StoreErrorKind.UNKNOWN) from e

    async def health_check(self) -> bool:
        """
        Check if Firebase connection is healthy.
        Performs a simple query to verify connectivity and initialization.
        """
        try:
            if not self._initialized or self.db is None:
                return False

            def _health_check():
                # Simple ping query to verify connection
                test_query = self.db.collection("_health").limit(1)
                list(test_query.stream())  # Execute query
                return True

            return await self._run_in_executor(_health_check)
        except Exception as e:
            logger.error(f"Firebase health check failed: {e}")
            return False

    # User operations
    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get user by exact email match."""

        @retry_firestore
        def _query():
            users_ref = self.db.collection(USERS)
            query = users_ref.where("email", "==", email).limit(1)
            docs = list(query.stream())

            for doc in docs:
                return doc.to_dict()
            return None

        return await self._execute(_query, "get_user_by_email")

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get user by ID."""

        @retry_firestore
        def _get():
            doc_ref = self.db.collection(USERS).document(user_id)
            doc = doc_ref.get()
            return doc.to_dict() if doc.exists else None

        return await self._execute(_get, "get_user")

    async def create_user(self, user_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Create a user together with its email reservation.

        Raises DatabaseError(kind=CONFLICT, field="email") when another user
        already holds the email, even if the caller's pre-check missed it.
        """
        add_timestamps(user_data)

        def _create():
            batch = self.db.batch()
            batch.create(
                self.db.collection(USER_EMAILS).document(email_key(user_data["email"])),
                {"user_id": user_data["id"], "email": user_data["email"]},
            )
            batch.create(self.db.collection(USERS).document(user_data["id"]), user_data)
            batch.commit()
            return user_data

        return await self._execute(_create, "create_user", conflict_field="email", invalid_fields=("email", "password"))

    async def delete_user(self, user: Dict[str, Any]) -> None:
        """Delete a user and release its email reservation."""

        def _delete():
            batch = self.db.batch()
            batch.delete(self.db.collection(USERS).document(user["id"]))
            batch.delete(self.db.collection(USER_EMAILS).document(email_key(user["email"])))
            batch.commit()

        await self._execute(_delete, "delete_user")

    # Tenant operations
    async def create_tenant(self, tenant_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Create a tenant together with its slug reservation.

        Raises DatabaseError(kind=CONFLICT, field="slug") on a slug collision.
        """
        add_timestamps(tenant_data)

        def _create():
            batch = self.db.batch()
            batch.create(
                self.db.collection(TENANT_SLUGS).document(tenant_data["slug"]),
                {"tenant_id": tenant_data["id"]},
            )
            batch.create(self.db.collection(TENANTS).document(tenant_data["id"]), tenant_data)
            batch.commit()
            return tenant_data

        return await self._execute(_create, "create_tenant", conflict_field="slug")

    async def delete_tenant(self, tenant: Dict[str, Any]) -> None:
        """Delete a tenant and release its slug reservation."""

        def _delete():
            batch = self.db.batch()
            batch.delete(self.db.collection(TENANTS).document(tenant["id"]))
            batch.delete(self.db.collection(TENANT_SLUGS).document(tenant["slug"]))
            batch.commit()

        await self._execute(_delete, "delete_tenant")

    # Role assignment operations
    async def create_user_role(self, role_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Create a role assignment binding a user to a role within a tenant."""
        add_timestamps(role_data)

        def _create():
            doc_ref = self.db.collection(USER_ROLES).document(role_data["id"])
            doc_ref.create(role_data)
            return role_data

        return await self._execute(_create, "create_user_role")

    async def delete_user_role(self, role: Dict[str, Any]) -> None:
        """Delete a role assignment."""

        def _delete():
            self.db.collection(USER_ROLES).document(role["id"]).delete()

        await self._execute(_delete, "delete_user_role")


# Global Firebase service instance
firebase_service = FirebaseService()
