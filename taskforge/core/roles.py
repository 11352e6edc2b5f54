import enum
import uuid
from dataclasses import dataclass
from typing import Optional


class Role(str, enum.Enum):
    super_admin = "super_admin"
    tenant_admin = "tenant_admin"
    user = "user"


# Roles a tenant admin may hand out when adding users
ASSIGNABLE_ROLES = (Role.user, Role.tenant_admin)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried inside a session token."""

    user_id: uuid.UUID
    tenant_id: Optional[uuid.UUID]
    role: Role

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.super_admin

    @property
    def is_admin(self) -> bool:
        return self.role in (Role.super_admin, Role.tenant_admin)
