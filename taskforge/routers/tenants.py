import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from taskforge.database import get_db
from taskforge.dependencies import get_audit, get_current_actor
from taskforge.core.roles import TokenClaims
from taskforge.models.tenant import TenantStatus, SubscriptionPlan
from taskforge.schemas.common import ApiResponse, MAX_PAGE_SIZE, ok
from taskforge.schemas.tenant import TenantResponse, TenantUpdate, TenantList
from taskforge.services.audit import AuditTrail
from taskforge.services.tenant import tenant_service

router = APIRouter()


@router.get("", response_model=ApiResponse[TenantList])
def list_tenants(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[TenantStatus] = None,
    subscription_plan: Optional[SubscriptionPlan] = Query(None, alias="subscriptionPlan"),
    search: Optional[str] = None,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    """
    List all tenants with their current user and project counts.

    Super admin only.
    """
    return ok(tenant_service.list_tenants(
        db,
        actor,
        page=page,
        limit=limit,
        status=status,
        subscription_plan=subscription_plan,
        search=search,
    ))


@router.get("/{tenant_id}", response_model=ApiResponse[TenantResponse])
def get_tenant(
    tenant_id: uuid.UUID,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    tenant = tenant_service.get_tenant(db, actor, tenant_id)
    return ok(TenantResponse.model_validate(tenant))


@router.put("/{tenant_id}", response_model=ApiResponse[TenantResponse])
def update_tenant(
    tenant_id: uuid.UUID,
    tenant_data: TenantUpdate,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """
    Update a tenant.

    Tenant admins may rename their own tenant. Only the super admin may
    change status, plan or limits.
    """
    tenant = tenant_service.update_tenant(db, actor, tenant_id, tenant_data)
    audit.record("UPDATE_TENANT", actor=actor, tenant_id=tenant.id, entity_type="tenant", entity_id=tenant.id)
    return ok(TenantResponse.model_validate(tenant), "Tenant updated successfully")
