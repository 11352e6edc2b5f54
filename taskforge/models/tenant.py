import enum
import uuid
from sqlalchemy import Column, Integer, String, Uuid, Enum
from sqlalchemy.orm import relationship
from taskforge.database import Base, TimestampMixin

class TenantStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"
    trial = "trial"

class SubscriptionPlan(str, enum.Enum):
    free = "free"
    pro = "pro"
    enterprise = "enterprise"

class Tenant(Base, TimestampMixin):
    __tablename__ = "tenant"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    subdomain = Column(String, unique=True, index=True, nullable=False)
    status = Column(Enum(TenantStatus, name="tenant_status"), nullable=False, default=TenantStatus.active)
    subscription_plan = Column(Enum(SubscriptionPlan, name="subscription_plan"), nullable=False, default=SubscriptionPlan.free)
    max_users = Column(Integer, nullable=False, default=5)
    max_projects = Column(Integer, nullable=False, default=3)

    users = relationship("User", back_populates="tenant", passive_deletes=True)
    projects = relationship("Project", back_populates="tenant", passive_deletes=True)
