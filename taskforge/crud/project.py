import uuid
from typing import Optional, Tuple, List, Dict
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func
from taskforge.crud.base import CRUDBase
from taskforge.models.project import Project, ProjectStatus
from taskforge.models.task import Task, TaskStatus


class CRUDProject(CRUDBase[Project]):
    """
    CRUD operations for Project model.

    Inherits all standard CRUD operations from CRUDBase.
    """

    def get_with_tasks(self, db: Session, project_id: uuid.UUID) -> Optional[Project]:
        """Load a project with its creator and tasks (and their assignees)."""
        stmt = (
            select(Project)
            .where(Project.id == project_id)
            .options(
                selectinload(Project.creator),
                selectinload(Project.tasks).selectinload(Task.assignee),
            )
        )
        return db.execute(stmt).scalar_one_or_none()

    def get_multi(
        self,
        db: Session,
        *,
        tenant_id: uuid.UUID,
        page: int = 1,
        limit: int = 20,
        status: Optional[ProjectStatus] = None,
        search: Optional[str] = None
    ) -> Tuple[List[Project], int]:
        """
        Get a page of the tenant's projects, newest first.
        """
        stmt = (
            select(Project)
            .where(Project.tenant_id == tenant_id)
            .options(selectinload(Project.creator))
        )
        if status:
            stmt = stmt.where(Project.status == status)
        if search:
            stmt = stmt.where(Project.name.ilike(f"%{search}%"))
        stmt = stmt.order_by(Project.created_at.desc(), Project.name)
        return self.paginate(db, stmt, page=page, limit=limit)

    def task_counts(self, db: Session, project_ids: List[uuid.UUID]) -> Dict[uuid.UUID, Dict[str, int]]:
        """Total and completed task counts per project."""
        counts = {project_id: {"total": 0, "completed": 0} for project_id in project_ids}
        if not project_ids:
            return counts

        stmt = (
            select(Task.project_id, func.count(), Task.status)
            .where(Task.project_id.in_(project_ids))
            .group_by(Task.project_id, Task.status)
        )
        for project_id, total, status in db.execute(stmt):
            counts[project_id]["total"] += total
            if status == TaskStatus.completed:
                counts[project_id]["completed"] += total
        return counts


# Create a singleton instance
project = CRUDProject(Project)
