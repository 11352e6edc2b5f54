import uuid
from typing import Optional
from sqlalchemy.orm import Session
from taskforge.core.exceptions import NotFound, ValidationError
from taskforge.core.logging_config import logger
from taskforge.core.policy import Action, ResourceType, Target, authorize
from taskforge.core.roles import TokenClaims
from taskforge.crud import tenant as tenant_crud
from taskforge.crud.base import total_pages
from taskforge.models.tenant import Tenant, TenantStatus, SubscriptionPlan
from taskforge.schemas.common import Pagination
from taskforge.schemas.tenant import TenantList, TenantListItem, TenantUpdate


class TenantService:
    """
    Service layer for tenant business logic.

    Tenant admins see and rename their own tenant; the super admin sees,
    lists and reconfigures every tenant.
    """

    def __init__(self):
        self.crud = tenant_crud

    def get_tenant(self, db: Session, actor: TokenClaims, tenant_id: uuid.UUID) -> Tenant:
        """
        Get a tenant the actor is allowed to see.

        Raises:
            NotFound: If the tenant does not exist or belongs to someone else
        """
        tenant = self.crud.get(db, tenant_id)
        if not tenant:
            raise NotFound("Tenant not found")
        authorize(actor, Action.read, Target(ResourceType.tenant, tenant_id=tenant.id))
        return tenant

    def update_tenant(
        self,
        db: Session,
        actor: TokenClaims,
        tenant_id: uuid.UUID,
        tenant_data: TenantUpdate
    ) -> Tenant:
        """
        Apply a partial update, subject to the actor's field mask.

        The whole request is rejected if any field is outside the mask.

        Raises:
            ValidationError: If no fields were sent
            NotFound: If the tenant is missing or out of scope
            Forbidden: If the actor may not write one of the fields
        """
        requested = tenant_data.requested_fields()
        if not requested:
            raise ValidationError("No update fields provided")

        tenant = self.crud.get(db, tenant_id)
        if not tenant:
            raise NotFound("Tenant not found")

        authorize(
            actor,
            Action.update,
            Target(ResourceType.tenant, tenant_id=tenant.id),
            fields=requested,
        )

        changes = tenant_data.changes()

        tenant = self.crud.update(db=db, db_obj=tenant, obj_in=changes)
        logger.info(f"Tenant updated: id={tenant.id} fields={sorted(changes)} by={actor.user_id}")
        return tenant

    def list_tenants(
        self,
        db: Session,
        actor: TokenClaims,
        page: int = 1,
        limit: int = 10,
        status: Optional[TenantStatus] = None,
        subscription_plan: Optional[SubscriptionPlan] = None,
        search: Optional[str] = None
    ) -> TenantList:
        """
        List every tenant with its current usage. Super admin only.
        """
        authorize(actor, Action.list, Target(ResourceType.tenant, tenant_id=None))

        tenants, total = self.crud.get_multi(
            db,
            page=page,
            limit=limit,
            status=status,
            subscription_plan=subscription_plan,
            search=search,
        )
        usage = self.crud.usage_counts(db, [t.id for t in tenants])

        items = []
        for tenant in tenants:
            item = TenantListItem.model_validate(tenant)
            item.current_users = usage[tenant.id]["users"]
            item.current_projects = usage[tenant.id]["projects"]
            items.append(item)

        return TenantList(
            tenants=items,
            total=total,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
        )


# Create a singleton instance
tenant_service = TenantService()
