from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from taskforge.database import get_db
from taskforge.dependencies import get_audit, get_current_actor
from taskforge.core.roles import TokenClaims
from taskforge.schemas.auth import (
    RegisterTenantRequest,
    RegisterTenantResponse,
    LoginRequest,
    LoginResponse,
    CurrentUserResponse,
)
from taskforge.schemas.common import ApiResponse, ok
from taskforge.services.audit import AuditTrail
from taskforge.services.auth import auth_service

router = APIRouter()


@router.post(
    "/register-tenant",
    response_model=ApiResponse[RegisterTenantResponse],
    status_code=status.HTTP_201_CREATED,
)
def register_tenant(
    data: RegisterTenantRequest,
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """
    Register a new tenant and its first tenant admin.

    Both rows are created in one transaction; if the admin cannot be
    created no tenant is left behind.
    """
    result = auth_service.register_tenant(db, data)
    audit.record(
        "REGISTER_TENANT",
        tenant_id=result.tenant_id,
        user_id=result.admin_user.id,
        entity_type="tenant",
        entity_id=result.tenant_id,
    )
    return ok(result, "Tenant registered successfully")


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit)
):
    """
    Log in and receive a bearer token.

    Omit ``tenantSubdomain`` to log in as the super admin.
    """
    result = auth_service.login(db, data)
    audit.record(
        "LOGIN",
        tenant_id=result.user.tenant_id,
        user_id=result.user.id,
        entity_type="user",
        entity_id=result.user.id,
    )
    return ok(result)


@router.get("/me", response_model=ApiResponse[CurrentUserResponse])
def me(
    actor: TokenClaims = Depends(get_current_actor),
    db: Session = Depends(get_db)
):
    return ok(auth_service.get_current_user(db, actor.user_id))


@router.post("/logout", response_model=ApiResponse[None])
def logout(
    actor: TokenClaims = Depends(get_current_actor),
    audit: AuditTrail = Depends(get_audit)
):
    """Tokens are stateless; the client discards its token. Only audited."""
    audit.record("LOGOUT", actor=actor, entity_type="user", entity_id=actor.user_id)
    return ok(message="Logged out successfully")
