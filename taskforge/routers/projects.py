import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from taskforge.database import get_db
from taskforge.dependencies import get_audit, get_current_actor
from taskforge.core.roles import TokenClaims
from taskforge.models.project import ProjectStatus
from taskforge.schemas.common import ApiResponse, MAX_PAGE_SIZE, ok
from taskforge.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectList,
    ProjectDetail,
)
from taskforge.services.audit import AuditTrail
from taskforge.services.project import project_service

router = APIRouter()


@router.post("", response_model=ApiResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """
    Create a project in your tenant.

    The tenant comes from the token. Fails with 403 once the tenant has
    reached its ``maxProjects`` limit.
    """
    project = project_service.create_project(db, actor, project_data)
    audit.record("CREATE_PROJECT", actor=actor, entity_type="project", entity_id=project.id)
    return ok(ProjectResponse.model_validate(project), "Project created successfully")


@router.get("", response_model=ApiResponse[ProjectList])
def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[ProjectStatus] = None,
    search: Optional[str] = None,
    tenant_id: Optional[uuid.UUID] = Query(None, alias="tenantId"),
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """
    List projects of your tenant.

    The super admin has no tenant and must pass ``tenantId``.
    """
    return ok(project_service.list_projects(
        db,
        actor,
        page=page,
        limit=limit,
        status=status,
        search=search,
        tenant_id=tenant_id,
    ))


@router.get("/{project_id}", response_model=ApiResponse[ProjectDetail])
def get_project(
    project_id: uuid.UUID,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return ok(project_service.get_project(db, actor, project_id))


@router.put("/{project_id}", response_model=ApiResponse[ProjectResponse])
def update_project(
    project_id: uuid.UUID,
    project_data: ProjectUpdate,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    project = project_service.update_project(db, actor, project_id, project_data)
    audit.record("UPDATE_PROJECT", actor=actor, entity_type="project", entity_id=project.id)
    return ok(ProjectResponse.model_validate(project), "Project updated successfully")


@router.delete("/{project_id}", response_model=ApiResponse[None])
def delete_project(
    project_id: uuid.UUID,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """Delete a project together with all of its tasks."""
    tenant_id = project_service.delete_project(db, actor, project_id)
    audit.record("DELETE_PROJECT", actor=actor, tenant_id=tenant_id, entity_type="project", entity_id=project_id)
    return ok(message="Project deleted successfully")
