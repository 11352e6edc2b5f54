import enum
import uuid
from sqlalchemy import Column, String, Text, Date, ForeignKey, Uuid, Enum
from sqlalchemy.orm import relationship
from taskforge.database import Base, TimestampMixin

class TaskStatus(str, enum.Enum):
    todo = "todo"
    in_progress = "in_progress"
    completed = "completed"

class TaskPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"

class Task(Base, TimestampMixin):
    __tablename__ = "task"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True)
    # Copied from the parent project at creation so authorization needs no join
    tenant_id = Column(Uuid, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum(TaskStatus, name="task_status"), nullable=False, default=TaskStatus.todo)
    priority = Column(Enum(TaskPriority, name="task_priority"), nullable=False, default=TaskPriority.medium)
    assigned_to = Column(Uuid, ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True)
    due_date = Column(Date, nullable=True)

    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User")
