import uuid
from typing import Optional, Tuple, List
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, update, or_
from taskforge.core.exceptions import Conflict
from taskforge.core.roles import Role
from taskforge.crud.base import CRUDBase
from taskforge.models.user import User
from taskforge.models.task import Task
from taskforge.models.project import Project


class CRUDUser(CRUDBase[User]):
    """
    CRUD operations for User model.

    Adds the lookups login needs: by (email, tenant) and the tenant-less
    super admin lookup.
    """

    def get_by_email(self, db: Session, *, email: str, tenant_id: uuid.UUID) -> Optional[User]:
        """
        Retrieve a tenant's user by email address.

        Args:
            db: Database session
            email: User email
            tenant_id: Tenant the user belongs to

        Returns:
            User instance or None if not found
        """
        stmt = select(User).where(User.email == email, User.tenant_id == tenant_id)
        return db.execute(stmt).scalar_one_or_none()

    def get_super_admin_by_email(self, db: Session, *, email: str) -> Optional[User]:
        """Retrieve the tenant-less super admin with this email."""
        stmt = select(User).where(
            User.email == email,
            User.tenant_id.is_(None),
            User.role == Role.super_admin,
        )
        return db.execute(stmt).scalars().first()

    def create(
        self,
        db: Session,
        *,
        email: str,
        password_hash: str,
        full_name: str,
        tenant_id: Optional[uuid.UUID],
        role: Role = Role.user,
        is_active: bool = True,
        commit: bool = True
    ) -> User:
        """
        Create a new user.

        Hash the password before opening the transaction: bcrypt is slow and
        the caller may be holding the tenant row lock.

        Args:
            db: Database session
            email: User email
            password_hash: bcrypt hash from get_password_hash()
            full_name: Display name
            tenant_id: Tenant ID the user belongs to (None only for super admin)
            role: User role
            is_active: Whether user is active
            commit: Whether to commit immediately

        Returns:
            Created User instance

        Raises:
            Conflict: If the email is already used in this tenant
        """
        db_user = User(
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            tenant_id=tenant_id,
            role=role,
            is_active=is_active
        )
        db.add(db_user)

        try:
            if commit:
                db.commit()
                db.refresh(db_user)
            else:
                db.flush()  # Get ID without committing
        except IntegrityError:
            db.rollback()
            raise Conflict("Email already exists in this tenant")

        return db_user

    def get_multi(
        self,
        db: Session,
        *,
        tenant_id: uuid.UUID,
        page: int = 1,
        limit: int = 50,
        role: Optional[Role] = None,
        search: Optional[str] = None
    ) -> Tuple[List[User], int]:
        """List a tenant's users, newest first."""
        stmt = select(User).where(User.tenant_id == tenant_id)
        if role:
            stmt = stmt.where(User.role == role)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(User.full_name.ilike(pattern), User.email.ilike(pattern)))
        stmt = stmt.order_by(User.created_at.desc(), User.email)
        return self.paginate(db, stmt, page=page, limit=limit)

    def has_projects(self, db: Session, user_id: uuid.UUID) -> bool:
        stmt = select(Project.id).where(Project.created_by == user_id).limit(1)
        return db.execute(stmt).first() is not None

    def unassign_tasks(self, db: Session, user_id: uuid.UUID) -> int:
        """
        Clear ``assigned_to`` on every task assigned to the user.

        Does not commit. Returns the number of tasks touched.
        """
        stmt = (
            update(Task)
            .where(Task.assigned_to == user_id)
            .values(assigned_to=None)
            .execution_options(synchronize_session="fetch")
        )
        return db.execute(stmt).rowcount


# Create singleton instance
user = CRUDUser(User)
