import uuid
from typing import Optional
from sqlalchemy.orm import Session
from taskforge.core.exceptions import Forbidden, NotFound, ValidationError
from taskforge.core.logging_config import logger
from taskforge.core.policy import Action, ResourceType, Target, authorize
from taskforge.core.roles import TokenClaims
from taskforge.crud import project as project_crud
from taskforge.crud import tenant as tenant_crud
from taskforge.crud.base import total_pages
from taskforge.models.project import Project, ProjectStatus
from taskforge.models.task import TaskStatus
from taskforge.schemas.common import Pagination, UserSummary
from taskforge.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectList,
    ProjectListItem,
    ProjectDetail,
)
from taskforge.schemas.task import TaskResponse


def project_target(project: Project) -> Target:
    return Target(ResourceType.project, tenant_id=project.tenant_id, owner_id=project.created_by)


class ProjectService:
    """
    Service layer for project business logic.

    Projects always live in the creating user's tenant. Admins and the
    project's creator may modify or delete it; any tenant member may read it.
    """

    def __init__(self):
        self.crud = project_crud

    def get_project_for(self, db: Session, actor: TokenClaims, project_id: uuid.UUID, action: Action) -> Project:
        """
        Load a project and authorize ``action`` on it.

        Raises:
            NotFound: If the project is missing or belongs to another tenant
            Forbidden: If the actor may not perform ``action``
        """
        project = self.crud.get(db, project_id)
        if not project:
            raise NotFound("Project not found")
        authorize(actor, action, project_target(project))
        return project

    def create_project(self, db: Session, actor: TokenClaims, project_data: ProjectCreate) -> Project:
        """
        Create a project in the actor's tenant, enforcing ``max_projects``.

        Raises:
            Forbidden: If the actor has no tenant or the cap is reached
            NotFound: If the actor's tenant no longer exists
        """
        authorize(actor, Action.create, Target(ResourceType.project, tenant_id=actor.tenant_id))
        tenant_id = actor.tenant_id

        try:
            tenant = tenant_crud.get_for_update(db, tenant_id)
            if not tenant:
                raise NotFound("Tenant not found")

            if self.crud.count(db, tenant_id=tenant_id) >= tenant.max_projects:
                logger.warning(f"Project limit reached: tenant_id={tenant_id} max_projects={tenant.max_projects}")
                raise Forbidden("Project limit reached. Cannot create more projects")

            project = self.crud.create(
                db=db,
                obj_in={
                    "tenant_id": tenant_id,
                    "name": project_data.name,
                    "description": project_data.description,
                    "status": project_data.status,
                    "created_by": actor.user_id,
                },
                commit=False,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(project)
        logger.info(f"Project created: id={project.id} tenant_id={tenant_id} by={actor.user_id}")
        return project

    def list_projects(
        self,
        db: Session,
        actor: TokenClaims,
        page: int = 1,
        limit: int = 20,
        status: Optional[ProjectStatus] = None,
        search: Optional[str] = None,
        tenant_id: Optional[uuid.UUID] = None
    ) -> ProjectList:
        """
        List projects of the actor's tenant.

        Tenant members always get their own tenant's projects. The super admin
        has no tenant of its own and must name one with ``tenant_id``.
        """
        if actor.tenant_id is not None:
            tenant_id = tenant_id or actor.tenant_id
        elif tenant_id is None:
            raise ValidationError("Super admin must specify a tenantId")

        authorize(actor, Action.list, Target(ResourceType.project, tenant_id=tenant_id))

        projects, total = self.crud.get_multi(
            db, tenant_id=tenant_id, page=page, limit=limit, status=status, search=search
        )
        counts = self.crud.task_counts(db, [p.id for p in projects])

        items = [
            ProjectListItem(
                id=p.id,
                name=p.name,
                description=p.description,
                status=p.status,
                created_by=UserSummary.model_validate(p.creator),
                task_count=counts[p.id]["total"],
                completed_task_count=counts[p.id]["completed"],
                created_at=p.created_at,
            )
            for p in projects
        ]
        return ProjectList(
            projects=items,
            total=total,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
        )

    def get_project(self, db: Session, actor: TokenClaims, project_id: uuid.UUID) -> ProjectDetail:
        """Project with its creator and all of its tasks."""
        project = self.crud.get_with_tasks(db, project_id)
        if not project:
            raise NotFound("Project not found")
        authorize(actor, Action.read, project_target(project))

        tasks = [TaskResponse.model_validate(t) for t in project.tasks]
        return ProjectDetail(
            id=project.id,
            tenant_id=project.tenant_id,
            name=project.name,
            description=project.description,
            status=project.status,
            created_by=project.created_by,
            created_at=project.created_at,
            updated_at=project.updated_at,
            creator=UserSummary.model_validate(project.creator),
            task_count=len(tasks),
            completed_task_count=sum(1 for t in tasks if t.status == TaskStatus.completed),
            tasks=tasks,
        )

    def update_project(
        self,
        db: Session,
        actor: TokenClaims,
        project_id: uuid.UUID,
        project_data: ProjectUpdate
    ) -> Project:
        """
        Partially update a project. Admins or the creator only.
        """
        changes = project_data.changes()
        if not changes:
            raise ValidationError("No update fields provided")

        project = self.get_project_for(db, actor, project_id, Action.update)
        project = self.crud.update(db=db, db_obj=project, obj_in=changes)
        logger.info(f"Project updated: id={project.id} fields={sorted(changes)} by={actor.user_id}")
        return project

    def delete_project(self, db: Session, actor: TokenClaims, project_id: uuid.UUID) -> uuid.UUID:
        """
        Delete a project and all of its tasks. Admins or the creator only.

        Returns:
            The tenant the project belonged to
        """
        project = self.get_project_for(db, actor, project_id, Action.delete)
        tenant_id = project.tenant_id
        self.crud.delete(db=db, db_obj=project)
        logger.info(f"Project deleted: id={project_id} tenant_id={tenant_id} by={actor.user_id}")
        return tenant_id


# Create a singleton instance
project_service = ProjectService()
