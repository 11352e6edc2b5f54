import enum
import uuid
from sqlalchemy import Column, String, Text, ForeignKey, Uuid, Enum
from sqlalchemy.orm import relationship
from taskforge.database import Base, TimestampMixin

class ProjectStatus(str, enum.Enum):
    active = "active"
    archived = "archived"
    completed = "completed"

class Project(Base, TimestampMixin):
    __tablename__ = "project"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum(ProjectStatus, name="project_status"), nullable=False, default=ProjectStatus.active)
    created_by = Column(Uuid, ForeignKey("user.id"), nullable=False)

    tenant = relationship("Tenant", back_populates="projects")
    creator = relationship("User")
    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Task.created_at.desc()",
    )
