"""
Static route configuration used to classify navigation targets.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from app.core.config import (
    AUTH_ADMIN_LOGIN_PATH,
    AUTH_ADMIN_PATHS,
    AUTH_AFTER_LOGIN_PATH,
    AUTH_AFTER_LOGOUT_PATH,
    AUTH_PUBLIC_PATHS,
    AUTH_USER_LOGIN_PATH,
)


class PathClass(str, Enum):
    """Access class of a destination path."""

    ROOT = "root"
    PUBLIC = "public"
    ADMIN = "admin"
    OTHER = "other"


@dataclass(frozen=True)
class AuthRoutes:
    """
    Ordered path-prefix tables and named redirect targets.

    Matching is a literal ``str.startswith`` on the raw path. Public prefixes
    are checked before admin prefixes and the first matching table wins.
    """

    public_paths: Tuple[str, ...]
    admin_paths: Tuple[str, ...]
    admin_login_path: str
    user_login_path: str
    after_login_path: str
    after_logout_path: str
    root_path: str = "/"

    def is_public(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.public_paths)

    def is_admin(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.admin_paths)

    def classify(self, path: str) -> PathClass:
        """Classify a destination path."""
        if path == self.root_path:
            return PathClass.ROOT
        if self.is_public(path):
            return PathClass.PUBLIC
        if self.is_admin(path):
            return PathClass.ADMIN
        # Anything else is open by default
        return PathClass.OTHER


AUTH_ROUTES = AuthRoutes(
    public_paths=AUTH_PUBLIC_PATHS,
    admin_paths=AUTH_ADMIN_PATHS,
    admin_login_path=AUTH_ADMIN_LOGIN_PATH,
    user_login_path=AUTH_USER_LOGIN_PATH,
    after_login_path=AUTH_AFTER_LOGIN_PATH,
    after_logout_path=AUTH_AFTER_LOGOUT_PATH,
)
