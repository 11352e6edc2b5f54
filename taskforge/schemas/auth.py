import uuid
from typing import Annotated, Optional
from pydantic import EmailStr, Field, StringConstraints
from taskforge.core.roles import Role
from taskforge.schemas.common import CamelModel, NonEmptyStr, Password
from taskforge.schemas.tenant import TenantSummary

Subdomain = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        min_length=1,
        max_length=63,
        pattern=r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$",
    ),
]


class RegisterTenantRequest(CamelModel):
    tenant_name: NonEmptyStr
    subdomain: Subdomain
    admin_email: EmailStr
    admin_password: Password
    admin_full_name: NonEmptyStr


class AdminUserResponse(CamelModel):
    id: uuid.UUID
    email: str
    full_name: str
    role: Role


class RegisterTenantResponse(CamelModel):
    tenant_id: uuid.UUID
    subdomain: str
    admin_user: AdminUserResponse


class LoginRequest(CamelModel):
    email: EmailStr
    password: Annotated[str, Field(min_length=1)]
    tenant_subdomain: Optional[NonEmptyStr] = None


class LoginUser(CamelModel):
    id: uuid.UUID
    email: str
    full_name: str
    role: Role
    tenant_id: Optional[uuid.UUID] = None


class LoginResponse(CamelModel):
    user: LoginUser
    token: str
    expires_in: int


class CurrentUserResponse(CamelModel):
    id: uuid.UUID
    email: str
    full_name: str
    role: Role
    is_active: bool
    tenant: Optional[TenantSummary] = None
