import uuid
from datetime import datetime
from typing import ClassVar, FrozenSet, List, Optional
from taskforge.models.project import ProjectStatus
from taskforge.schemas.common import CamelModel, UpdateModel, NonEmptyStr, Pagination, UserSummary
from taskforge.schemas.task import TaskResponse


class ProjectCreate(CamelModel):
    name: NonEmptyStr
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.active


class ProjectUpdate(UpdateModel):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"description"})

    name: Optional[NonEmptyStr] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None


class ProjectResponse(CamelModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    created_by: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectListItem(CamelModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    created_by: UserSummary
    task_count: int = 0
    completed_task_count: int = 0
    created_at: Optional[datetime] = None


class ProjectList(CamelModel):
    projects: List[ProjectListItem]
    total: int
    pagination: Pagination


class ProjectDetail(ProjectResponse):
    creator: UserSummary
    task_count: int = 0
    completed_task_count: int = 0
    tasks: List[TaskResponse] = []
