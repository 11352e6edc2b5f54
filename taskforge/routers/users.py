import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from taskforge.database import get_db
from taskforge.dependencies import get_audit, get_current_actor
from taskforge.core.roles import Role, TokenClaims
from taskforge.schemas.common import ApiResponse, MAX_PAGE_SIZE, ok
from taskforge.schemas.user import UserCreate, UserUpdate, UserResponse, UserList
from taskforge.services.audit import AuditTrail
from taskforge.services.user import user_service

router = APIRouter()


@router.post(
    "/tenants/{tenant_id}/users",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_user(
    tenant_id: uuid.UUID,
    user_data: UserCreate,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """
    Add a user to a tenant. Tenant admins only.

    Fails with 403 once the tenant has reached its ``maxUsers`` limit.
    """
    user = user_service.add_user(db, actor, tenant_id, user_data)
    audit.record("CREATE_USER", actor=actor, tenant_id=tenant_id, entity_type="user", entity_id=user.id)
    return ok(UserResponse.model_validate(user), "User created successfully")


@router.get("/tenants/{tenant_id}/users", response_model=ApiResponse[UserList])
def list_users(
    tenant_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    role: Optional[Role] = None,
    search: Optional[str] = None,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return ok(user_service.list_users(
        db, actor, tenant_id, page=page, limit=limit, role=role, search=search
    ))


@router.put("/users/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: uuid.UUID,
    user_data: UserUpdate,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    user = user_service.update_user(db, actor, user_id, user_data)
    audit.record("UPDATE_USER", actor=actor, tenant_id=user.tenant_id, entity_type="user", entity_id=user.id)
    return ok(UserResponse.model_validate(user), "User updated successfully")


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: uuid.UUID,
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """
    Delete a user. Tasks assigned to them are kept and become unassigned.
    """
    user_service.delete_user(db, actor, user_id)
    audit.record("DELETE_USER", actor=actor, entity_type="user", entity_id=user_id)
    return ok(message="User deleted successfully")
