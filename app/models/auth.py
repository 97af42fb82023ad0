"""
Tenant and role models and enums.
"""
from enum import Enum

class TenantType(str, Enum):
    """Kinds of tenant that can sign up."""
    MSP = "msp"
    CUSTOMER = "customer"

class TenantStatus(str, Enum):
    """Tenant status in the system."""
    ACTIVE = "active"

class MembershipStatus(str, Enum):
    """Status of a user's membership in a tenant."""
    ACTIVE = "active"

class RoleId(str, Enum):
    """Role identifiers assignable at signup."""
    MSP_ADMIN = "msp_admin"
    TENANT_ADMIN = "tenant_admin"

# Administrative role granted to the first user of each tenant type
ROLE_BY_TENANT_TYPE = {
    TenantType.MSP: RoleId.MSP_ADMIN,
    TenantType.CUSTOMER: RoleId.TENANT_ADMIN,
}

ROLE_LABELS = {
    RoleId.MSP_ADMIN: "MSP Admin",
    RoleId.TENANT_ADMIN: "Tenant Admin",
}
