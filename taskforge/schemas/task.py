import uuid
from datetime import date, datetime
from typing import ClassVar, FrozenSet, List, Optional
from taskforge.models.task import TaskStatus, TaskPriority
from taskforge.schemas.common import CamelModel, UpdateModel, NonEmptyStr, Pagination, AssigneeSummary


class TaskCreate(CamelModel):
    title: NonEmptyStr
    description: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[date] = None


class TaskUpdate(UpdateModel):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"description", "assigned_to", "due_date"})

    title: Optional[NonEmptyStr] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[uuid.UUID] = None
    due_date: Optional[date] = None


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class TaskResponse(CamelModel):
    id: uuid.UUID
    project_id: uuid.UUID
    tenant_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    assigned_to: Optional[uuid.UUID] = None
    assignee: Optional[AssigneeSummary] = None
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskStatusResponse(CamelModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    status: TaskStatus
    updated_at: Optional[datetime] = None


class TaskList(CamelModel):
    tasks: List[TaskResponse]
    total: int
    pagination: Pagination
