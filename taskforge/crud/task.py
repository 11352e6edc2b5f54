import uuid
from typing import Optional, Tuple, List
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, case
from taskforge.crud.base import CRUDBase
from taskforge.models.task import Task, TaskStatus, TaskPriority

# Enum columns sort by their stored label; rank priorities explicitly
PRIORITY_RANK = case(
    (Task.priority == TaskPriority.high, 3),
    (Task.priority == TaskPriority.medium, 2),
    else_=1,
)


class CRUDTask(CRUDBase[Task]):
    """
    CRUD operations for Task model.

    Inherits all standard CRUD operations from CRUDBase.
    """

    def get_with_assignee(self, db: Session, task_id: uuid.UUID) -> Optional[Task]:
        stmt = select(Task).where(Task.id == task_id).options(selectinload(Task.assignee))
        return db.execute(stmt).scalar_one_or_none()

    def get_multi_by_project(
        self,
        db: Session,
        *,
        project_id: uuid.UUID,
        page: int = 1,
        limit: int = 50,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assigned_to: Optional[uuid.UUID] = None,
        search: Optional[str] = None
    ) -> Tuple[List[Task], int]:
        """
        Get a page of a project's tasks.

        Ordered by priority (high first), then due date (earliest first,
        undated last), then newest.
        """
        stmt = (
            select(Task)
            .where(Task.project_id == project_id)
            .options(selectinload(Task.assignee))
        )
        if status:
            stmt = stmt.where(Task.status == status)
        if priority:
            stmt = stmt.where(Task.priority == priority)
        if assigned_to:
            stmt = stmt.where(Task.assigned_to == assigned_to)
        if search:
            stmt = stmt.where(Task.title.ilike(f"%{search}%"))
        stmt = stmt.order_by(
            PRIORITY_RANK.desc(),
            Task.due_date.is_(None),
            Task.due_date.asc(),
            Task.created_at.desc(),
        )
        return self.paginate(db, stmt, page=page, limit=limit)


# Create a singleton instance
task = CRUDTask(Task)
