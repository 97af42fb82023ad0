"""
Response mapping helpers for converting stored records to Pydantic response models.
"""

import logging
from typing import Any, Dict

from app.api.v1.schemas.auth import MembershipData, SignupData, SignupResponse, SignupTenant, SignupUser
from app.models.auth import ROLE_LABELS, MembershipStatus, RoleId

# Configure logging
logger = logging.getLogger(__name__)


def to_user_summary(user_dict: Dict[str, Any]) -> SignupUser:
    """Convert a user record to its public summary."""
    name = f"{user_dict.get('first_name', '')} {user_dict.get('last_name', '')}".strip()
    return SignupUser(id=user_dict["id"], email=user_dict.get("email", ""), name=name)


def to_tenant_summary(tenant_dict: Dict[str, Any]) -> SignupTenant:
    """Convert a tenant record to its public summary."""
    return SignupTenant(id=tenant_dict["id"], name=tenant_dict.get("name", ""), slug=tenant_dict.get("slug", ""))


def to_membership(user_dict: Dict[str, Any], tenant_dict: Dict[str, Any], role: RoleId, joined_at: str) -> MembershipData:
    """
    Build the membership view of a user inside a tenant.

    The membership id is derived from exactly the user and tenant ids.
    """
    return MembershipData(
        id=f"{user_dict['id']}-{tenant_dict['id']}",
        role=ROLE_LABELS[role],
        status=MembershipStatus.ACTIVE.value,
        joined_at=joined_at,
        user_settings={},
        tenant_metadata=tenant_dict.get("settings") or {},
    )


def to_signup_response(
    user_dict: Dict[str, Any],
    tenant_dict: Dict[str, Any],
    role: RoleId,
    joined_at: str,
    message: str = "Account created successfully",
) -> SignupResponse:
    """Assemble the signup success payload."""
    try:
        return SignupResponse(
            success=True,
            message=message,
            data=SignupData(
                user=to_user_summary(user_dict),
                tenant=to_tenant_summary(tenant_dict),
                membership=to_membership(user_dict, tenant_dict, role, joined_at),
            ),
        )
    except Exception as e:
        logger.error(f"Error building signup response: {e}", exc_info=True)
        raise
