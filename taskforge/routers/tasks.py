import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from taskforge.database import get_db
from taskforge.dependencies import get_audit, get_current_actor
from taskforge.core.roles import TokenClaims
from taskforge.models.task import TaskStatus, TaskPriority
from taskforge.schemas.common import ApiResponse, MAX_PAGE_SIZE, ok
from taskforge.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskStatusUpdate,
    TaskResponse,
    TaskStatusResponse,
    TaskList,
)
from taskforge.services.audit import AuditTrail
from taskforge.services.task import task_service

router = APIRouter()


@router.post(
    "/projects/{project_id}/tasks",
    response_model=ApiResponse[TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_task(
    project_id: uuid.UUID,
    task_data: TaskCreate,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """
    Create a task in a project. New tasks start as ``todo``.

    ``assignedTo`` must be a user of the project's tenant.
    """
    task = task_service.create_task(db, actor, project_id, task_data)
    audit.record("CREATE_TASK", actor=actor, entity_type="task", entity_id=task.id)
    return ok(TaskResponse.model_validate(task), "Task created successfully")


@router.get("/projects/{project_id}/tasks", response_model=ApiResponse[TaskList])
def list_project_tasks(
    project_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    assigned_to: Optional[uuid.UUID] = Query(None, alias="assignedTo"),
    search: Optional[str] = None,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return ok(task_service.list_project_tasks(
        db,
        actor,
        project_id,
        page=page,
        limit=limit,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
    ))


@router.patch("/tasks/{task_id}/status", response_model=ApiResponse[TaskStatusResponse])
def update_task_status(
    task_id: uuid.UUID,
    data: TaskStatusUpdate,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """Set a task's status. Any status may follow any other."""
    task = task_service.update_task_status(db, actor, task_id, data.status)
    audit.record("UPDATE_TASK_STATUS", actor=actor, entity_type="task", entity_id=task.id)
    return ok(TaskStatusResponse.model_validate(task), "Task status updated successfully")


@router.put("/tasks/{task_id}", response_model=ApiResponse[TaskResponse])
def update_task(
    task_id: uuid.UUID,
    task_data: TaskUpdate,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    task = task_service.update_task(db, actor, task_id, task_data)
    audit.record("UPDATE_TASK", actor=actor, entity_type="task", entity_id=task.id)
    return ok(TaskResponse.model_validate(task), "Task updated successfully")


@router.delete("/tasks/{task_id}", response_model=ApiResponse[None])
def delete_task(
    task_id: uuid.UUID,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """Delete a task. Tenant admins or the project's creator only."""
    tenant_id = task_service.delete_task(db, actor, task_id)
    audit.record("DELETE_TASK", actor=actor, tenant_id=tenant_id, entity_type="task", entity_id=task_id)
    return ok(message="Task deleted successfully")
