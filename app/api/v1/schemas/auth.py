"""
Authentication and signup schemas for API requests and responses.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, EmailStr, validator

# Signup schemas
class SignupRequest(BaseModel):
    """Schema for the tenant + first administrator signup form."""
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    company_name: str = Field(..., min_length=2, max_length=100)
    is_msp: bool = Field(..., alias="isMsp", description="True for MSP tenants, False for customer tenants")

    @validator("first_name", "last_name", "company_name", pre=True)
    def strip_whitespace(cls, v):
        """Trim names before length checks."""
        if isinstance(v, str):
            return v.strip()
        return v

    class Config:
        populate_by_name = True

class SignupUser(BaseModel):
    """User summary returned after signup."""
    id: str
    email: str
    name: str

class SignupTenant(BaseModel):
    """Tenant summary returned after signup."""
    id: str
    name: str
    slug: str

class MembershipData(BaseModel):
    """Membership of the new user in the new tenant."""
    id: str
    role: str
    status: str
    joined_at: str
    user_settings: Dict[str, Any] = Field(default_factory=dict)
    tenant_metadata: Dict[str, Any] = Field(default_factory=dict)

class SignupData(BaseModel):
    user: SignupUser
    tenant: SignupTenant
    membership: MembershipData

class SignupResponse(BaseModel):
    """Schema for a successful signup."""
    success: bool = True
    message: str
    data: SignupData

# Session schemas
class LoginRequest(BaseModel):
    """Schema for login request."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

class LoginData(BaseModel):
    user: SignupUser
    token: str
    redirect_to: str

class LoginResponse(BaseModel):
    """Schema for a successful login."""
    success: bool = True
    message: str
    data: LoginData

class LogoutResponse(BaseModel):
    """Schema for logout response."""
    success: bool = True
    message: str
    redirect_to: str

class SessionResponse(BaseModel):
    """Schema describing the caller's current session."""
    authenticated: bool
    user: Optional[Dict[str, Any]] = None
