import uuid
from typing import Optional, Tuple, List, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func, or_
from taskforge.core.exceptions import Conflict
from taskforge.core.logging_config import logger
from taskforge.core.roles import Role
from taskforge.models.tenant import Tenant, TenantStatus, SubscriptionPlan
from taskforge.models.user import User
from taskforge.models.project import Project
from taskforge.crud.base import CRUDBase
from taskforge.database import lock_for_write
from taskforge.crud.user import user as user_crud


class CRUDTenant:
    """
    CRUD operations for Tenant model.

    Note: Tenant model doesn't have tenant_id (it IS the tenant),
    so we don't inherit from CRUDBase.
    """

    def __init__(self):
        self.model = Tenant
        self._pager = CRUDBase(Tenant)

    def get(self, db: Session, tenant_id: uuid.UUID) -> Optional[Tenant]:
        stmt = select(Tenant).where(Tenant.id == tenant_id)
        return db.execute(stmt).scalar_one_or_none()

    def get_by_subdomain(self, db: Session, subdomain: str) -> Optional[Tenant]:
        stmt = select(Tenant).where(Tenant.subdomain == subdomain)
        return db.execute(stmt).scalar_one_or_none()

    def get_for_update(self, db: Session, tenant_id: uuid.UUID) -> Optional[Tenant]:
        """
        Fetch a tenant and lock its row until the transaction ends.

        Capacity checks call this first so that concurrent creators in the
        same tenant queue up behind each other instead of all reading the
        same count. Call it before anything else in the transaction.
        """
        lock_for_write(db)
        stmt = select(Tenant).where(Tenant.id == tenant_id).with_for_update()
        return db.execute(stmt).scalar_one_or_none()

    def create_with_admin(
        self,
        db: Session,
        *,
        name: str,
        subdomain: str,
        max_users: int,
        max_projects: int,
        admin_email: str,
        admin_password_hash: str,
        admin_full_name: str
    ) -> Tuple[Tenant, User]:
        """
        Create a tenant and its initial admin user atomically.

        Both rows are flushed inside one transaction and committed together;
        any failure rolls back the tenant as well.

        Args:
            db: Database session
            name: Tenant display name
            subdomain: Unique tenant slug
            max_users: Initial user cap
            max_projects: Initial project cap
            admin_email: Admin user email
            admin_password_hash: Admin password hash
            admin_full_name: Admin display name

        Returns:
            Tuple of (created Tenant, created User)

        Raises:
            Conflict: If the subdomain was taken concurrently
        """
        try:
            tenant = Tenant(
                name=name,
                subdomain=subdomain,
                status=TenantStatus.active,
                subscription_plan=SubscriptionPlan.free,
                max_users=max_users,
                max_projects=max_projects,
            )
            db.add(tenant)
            db.flush()  # Get tenant.id without committing

            user = user_crud.create(
                db=db,
                email=admin_email,
                password_hash=admin_password_hash,
                full_name=admin_full_name,
                tenant_id=tenant.id,
                role=Role.tenant_admin,
                commit=False  # Don't commit yet - we'll commit both together
            )

            # Commit both tenant and user atomically
            db.commit()
            db.refresh(tenant)
            db.refresh(user)

            return tenant, user

        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Tenant registration conflict for subdomain={subdomain}: {e.orig}")
            raise Conflict("Subdomain already exists")
        except Exception:
            db.rollback()
            raise

    def get_multi(
        self,
        db: Session,
        *,
        page: int = 1,
        limit: int = 10,
        status: Optional[TenantStatus] = None,
        subscription_plan: Optional[SubscriptionPlan] = None,
        search: Optional[str] = None
    ) -> Tuple[List[Tenant], int]:
        """List tenants, newest first, with optional filters."""
        stmt = select(Tenant)
        if status:
            stmt = stmt.where(Tenant.status == status)
        if subscription_plan:
            stmt = stmt.where(Tenant.subscription_plan == subscription_plan)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Tenant.name.ilike(pattern), Tenant.subdomain.ilike(pattern)))
        stmt = stmt.order_by(Tenant.created_at.desc(), Tenant.name)
        return self._pager.paginate(db, stmt, page=page, limit=limit)

    def usage_counts(self, db: Session, tenant_ids: List[uuid.UUID]) -> Dict[uuid.UUID, Dict[str, int]]:
        """Current user and project counts per tenant."""
        counts: Dict[uuid.UUID, Dict[str, int]] = {
            tenant_id: {"users": 0, "projects": 0} for tenant_id in tenant_ids
        }
        if not tenant_ids:
            return counts

        for model, key in ((User, "users"), (Project, "projects")):
            stmt = (
                select(model.tenant_id, func.count())
                .where(model.tenant_id.in_(tenant_ids))
                .group_by(model.tenant_id)
            )
            for tenant_id, total in db.execute(stmt):
                counts[tenant_id][key] = total
        return counts

    def update(
        self,
        db: Session,
        *,
        db_obj: Tenant,
        obj_in: Dict[str, Any]
    ) -> Tenant:
        return self._pager.update(db=db, db_obj=db_obj, obj_in=obj_in)


# Create singleton instance
tenant = CRUDTenant()
