import uuid
from typing import Optional
from sqlalchemy.orm import Session
from taskforge.core.exceptions import NotFound, ValidationError
from taskforge.core.logging_config import logger
from taskforge.core.policy import Action, ResourceType, Target, authorize
from taskforge.core.roles import TokenClaims
from taskforge.crud import project as project_crud
from taskforge.crud import task as task_crud
from taskforge.crud import user as user_crud
from taskforge.crud.base import total_pages
from taskforge.models.task import Task, TaskStatus, TaskPriority
from taskforge.schemas.common import Pagination
from taskforge.schemas.task import TaskCreate, TaskUpdate, TaskList, TaskResponse


class TaskService:
    """
    Service layer for task business logic.

    A task inherits its tenant from its project at creation. Every check after
    that uses the task's own ``tenant_id``. Any tenant member may change a
    task; deleting one is reserved to admins and the project's creator.
    """

    def __init__(self):
        self.crud = task_crud

    def _get_task(self, db: Session, task_id: uuid.UUID) -> Task:
        task = self.crud.get_with_assignee(db, task_id)
        if not task:
            raise NotFound("Task not found")
        return task

    def _check_assignee(self, db: Session, assignee_id: uuid.UUID, tenant_id: uuid.UUID) -> None:
        assignee = user_crud.get(db, assignee_id)
        if not assignee or assignee.tenant_id != tenant_id:
            raise ValidationError("assignedTo user must belong to the same tenant")

    def create_task(
        self,
        db: Session,
        actor: TokenClaims,
        project_id: uuid.UUID,
        task_data: TaskCreate
    ) -> Task:
        """
        Create a task in a project. New tasks always start as ``todo``.

        Raises:
            NotFound: If the project is missing or belongs to another tenant
            Forbidden: If the actor has no tenant (super admin)
            ValidationError: If the assignee is not in the project's tenant
        """
        project = project_crud.get(db, project_id)
        if not project:
            raise NotFound("Project not found")

        authorize(
            actor,
            Action.create,
            Target(ResourceType.task, tenant_id=project.tenant_id, owner_id=project.created_by),
        )

        if task_data.assigned_to:
            self._check_assignee(db, task_data.assigned_to, project.tenant_id)

        task = self.crud.create(
            db=db,
            obj_in={
                "project_id": project.id,
                "tenant_id": project.tenant_id,
                "title": task_data.title,
                "description": task_data.description,
                "status": TaskStatus.todo,
                "priority": task_data.priority,
                "assigned_to": task_data.assigned_to,
                "due_date": task_data.due_date,
            },
        )
        logger.info(f"Task created: id={task.id} project_id={project.id} by={actor.user_id}")
        return task

    def list_project_tasks(
        self,
        db: Session,
        actor: TokenClaims,
        project_id: uuid.UUID,
        page: int = 1,
        limit: int = 50,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assigned_to: Optional[uuid.UUID] = None,
        search: Optional[str] = None
    ) -> TaskList:
        """List a project's tasks, highest priority and soonest due first."""
        project = project_crud.get(db, project_id)
        if not project:
            raise NotFound("Project not found")

        authorize(actor, Action.list, Target(ResourceType.task, tenant_id=project.tenant_id))

        tasks, total = self.crud.get_multi_by_project(
            db,
            project_id=project.id,
            page=page,
            limit=limit,
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            search=search,
        )
        return TaskList(
            tasks=[TaskResponse.model_validate(t) for t in tasks],
            total=total,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
        )

    def update_task_status(
        self,
        db: Session,
        actor: TokenClaims,
        task_id: uuid.UUID,
        status: TaskStatus
    ) -> Task:
        """
        Set a task's status.

        Any status may follow any other; reopening a completed task is allowed.
        """
        task = self._get_task(db, task_id)
        authorize(actor, Action.update_status, Target(ResourceType.task, tenant_id=task.tenant_id))

        previous = task.status
        task = self.crud.update(db=db, db_obj=task, obj_in={"status": status})
        logger.info(f"Task status changed: id={task.id} {previous.value} -> {status.value} by={actor.user_id}")
        return task

    def update_task(
        self,
        db: Session,
        actor: TokenClaims,
        task_id: uuid.UUID,
        task_data: TaskUpdate
    ) -> Task:
        """
        Partially update a task.

        A new assignee must belong to the task's tenant; ``null`` unassigns.
        """
        changes = task_data.changes()
        if not changes:
            raise ValidationError("No update fields provided")

        task = self._get_task(db, task_id)
        authorize(
            actor,
            Action.update,
            Target(ResourceType.task, tenant_id=task.tenant_id),
            fields=changes.keys(),
        )

        if changes.get("assigned_to") is not None:
            self._check_assignee(db, changes["assigned_to"], task.tenant_id)

        task = self.crud.update(db=db, db_obj=task, obj_in=changes)
        logger.info(f"Task updated: id={task.id} fields={sorted(changes)} by={actor.user_id}")
        return task

    def delete_task(self, db: Session, actor: TokenClaims, task_id: uuid.UUID) -> uuid.UUID:
        """
        Delete a task. Admins or the parent project's creator only.

        There is no separate task creator: the project creator stands in.

        Returns:
            The tenant the task belonged to
        """
        task = self._get_task(db, task_id)
        authorize(
            actor,
            Action.delete,
            Target(ResourceType.task, tenant_id=task.tenant_id, owner_id=task.project.created_by),
        )

        tenant_id = task.tenant_id
        self.crud.delete(db=db, db_obj=task)
        logger.info(f"Task deleted: id={task_id} tenant_id={tenant_id} by={actor.user_id}")
        return tenant_id


# Create a singleton instance
task_service = TaskService()
