import uuid
from sqlalchemy import Column, String, Boolean, ForeignKey, Uuid, Enum, Index, UniqueConstraint, CheckConstraint, text
from sqlalchemy.orm import relationship
from taskforge.core.roles import Role
from taskforge.database import Base, TimestampMixin

class User(Base, TimestampMixin):
    __tablename__ = "user"
    __table_args__ = (
        # Email is unique per tenant, not globally
        UniqueConstraint("tenant_id", "email", name="uq_user_tenant_email"),
        # NULL tenant_ids never collide above, so platform users need their own index
        Index(
            "uq_user_platform_email",
            "email",
            unique=True,
            postgresql_where=text("tenant_id IS NULL"),
            sqlite_where=text("tenant_id IS NULL"),
        ),
        # Only the super admin lives outside a tenant
        CheckConstraint(
            "(role = 'super_admin' AND tenant_id IS NULL) OR "
            "(role <> 'super_admin' AND tenant_id IS NOT NULL)",
            name="ck_user_role_tenant",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=True, index=True)
    email = Column(String, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.user)
    is_active = Column(Boolean, nullable=False, default=True)

    tenant = relationship("Tenant", back_populates="users")
