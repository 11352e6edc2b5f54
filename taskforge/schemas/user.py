import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import EmailStr, StrictBool, field_validator
from taskforge.core.roles import Role, ASSIGNABLE_ROLES
from taskforge.schemas.common import CamelModel, MaskedUpdateModel, NonEmptyStr, Password, Pagination


class UserCreate(CamelModel):
    email: EmailStr
    password: Password
    full_name: NonEmptyStr
    role: Role = Role.user

    @field_validator("role")
    @classmethod
    def role_is_assignable(cls, v: Role) -> Role:
        if v not in ASSIGNABLE_ROLES:
            raise ValueError(
                f"Invalid role. Must be one of: {', '.join(r.value for r in ASSIGNABLE_ROLES)}"
            )
        return v


class UserUpdate(MaskedUpdateModel):
    full_name: Optional[NonEmptyStr] = None
    role: Optional[Role] = None
    is_active: Optional[StrictBool] = None

    @field_validator("role")
    @classmethod
    def role_is_assignable(cls, v: Optional[Role]) -> Optional[Role]:
        # The super admin role is never granted through the API
        if v is not None and v not in ASSIGNABLE_ROLES:
            raise ValueError(
                f"Invalid role. Must be one of: {', '.join(r.value for r in ASSIGNABLE_ROLES)}"
            )
        return v


class UserResponse(CamelModel):
    id: uuid.UUID
    tenant_id: Optional[uuid.UUID] = None
    email: str
    full_name: str
    role: Role
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserList(CamelModel):
    users: List[UserResponse]
    total: int
    pagination: Pagination
