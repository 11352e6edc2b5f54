import uuid
from typing import Optional
from sqlalchemy.orm import Session
from taskforge.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from taskforge.core.logging_config import logger
from taskforge.core.policy import Action, ResourceType, Target, authorize
from taskforge.core.roles import Role, TokenClaims
from taskforge.core.security import get_password_hash
from taskforge.crud import tenant as tenant_crud
from taskforge.crud import user as user_crud
from taskforge.crud.base import total_pages
from taskforge.models.user import User
from taskforge.schemas.common import Pagination
from taskforge.schemas.user import UserCreate, UserUpdate, UserList, UserResponse


class UserService:
    """
    Service layer for managing a tenant's users.
    """

    def __init__(self):
        self.crud = user_crud

    def add_user(
        self,
        db: Session,
        actor: TokenClaims,
        tenant_id: uuid.UUID,
        user_data: UserCreate
    ) -> User:
        """
        Add a user to a tenant, enforcing the tenant's user cap.

        The tenant row is locked before counting, so concurrent additions to
        the same tenant are serialized and cannot overshoot ``max_users``.

        Raises:
            NotFound: If the tenant is missing or out of scope
            Forbidden: If the actor is not an admin, or the cap is reached
            Conflict: If the email already exists in this tenant
        """
        authorize(actor, Action.create, Target(ResourceType.user, tenant_id=tenant_id))

        password_hash = get_password_hash(user_data.password)

        try:
            tenant = tenant_crud.get_for_update(db, tenant_id)
            if not tenant:
                raise NotFound("Tenant not found")

            if self.crud.count(db, tenant_id=tenant_id) >= tenant.max_users:
                logger.warning(f"User limit reached: tenant_id={tenant_id} max_users={tenant.max_users}")
                raise Forbidden("Subscription limit reached. Cannot add more users")

            if self.crud.get_by_email(db, email=user_data.email, tenant_id=tenant_id):
                raise Conflict("Email already exists in this tenant")

            user = self.crud.create(
                db=db,
                email=user_data.email,
                password_hash=password_hash,
                full_name=user_data.full_name,
                tenant_id=tenant_id,
                role=user_data.role,
                commit=False,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(user)
        logger.info(f"User created: id={user.id} tenant_id={tenant_id} role={user.role.value}")
        return user

    def list_users(
        self,
        db: Session,
        actor: TokenClaims,
        tenant_id: uuid.UUID,
        page: int = 1,
        limit: int = 50,
        role: Optional[Role] = None,
        search: Optional[str] = None
    ) -> UserList:
        """List a tenant's users. Any member of the tenant may list them."""
        authorize(actor, Action.list, Target(ResourceType.user, tenant_id=tenant_id))

        if not tenant_crud.get(db, tenant_id):
            raise NotFound("Tenant not found")

        users, total = self.crud.get_multi(
            db, tenant_id=tenant_id, page=page, limit=limit, role=role, search=search
        )
        return UserList(
            users=[UserResponse.model_validate(u) for u in users],
            total=total,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
        )

    def update_user(
        self,
        db: Session,
        actor: TokenClaims,
        user_id: uuid.UUID,
        user_data: UserUpdate
    ) -> User:
        """
        Update a user.

        Users may only change their own full name. Admins may also change
        role and active flag of other users in their tenant.
        """
        requested = user_data.requested_fields()
        if not requested:
            raise ValidationError("No update fields provided")

        user = self.crud.get(db, user_id)
        if not user:
            raise NotFound("User not found")

        authorize(
            actor,
            Action.update,
            Target(ResourceType.user, tenant_id=user.tenant_id, subject_id=user.id),
            fields=requested,
        )

        changes = user_data.changes()

        user = self.crud.update(db=db, db_obj=user, obj_in=changes)
        logger.info(f"User updated: id={user.id} fields={sorted(changes)} by={actor.user_id}")
        return user

    def delete_user(self, db: Session, actor: TokenClaims, user_id: uuid.UUID) -> None:
        """
        Delete a user, unassigning (not deleting) their tasks.

        Raises:
            NotFound: If the user is missing or out of scope
            Forbidden: If the actor is not an admin, or targets themselves
            Conflict: If the user still owns projects
        """
        user = self.crud.get(db, user_id)
        if not user:
            raise NotFound("User not found")

        authorize(
            actor,
            Action.delete,
            Target(ResourceType.user, tenant_id=user.tenant_id, subject_id=user.id),
        )

        if self.crud.has_projects(db, user.id):
            raise Conflict("User has created projects. Delete or reassign them first")

        try:
            unassigned = self.crud.unassign_tasks(db, user.id)
            self.crud.delete(db=db, db_obj=user, commit=False)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"User deleted: id={user_id} tasks_unassigned={unassigned} by={actor.user_id}")


# Create a singleton instance
user_service = UserService()
