import uuid
from sqlalchemy.orm import Session
from taskforge.core.config import settings
from taskforge.core.exceptions import Conflict, Forbidden, NotFound, Unauthorized
from taskforge.core.logging_config import logger
from taskforge.core.roles import TokenClaims
from taskforge.core.security import create_access_token, get_password_hash, verify_password
from taskforge.crud import tenant as tenant_crud
from taskforge.crud import user as user_crud
from taskforge.models.tenant import TenantStatus
from taskforge.models.user import User
from taskforge.schemas.auth import (
    RegisterTenantRequest,
    RegisterTenantResponse,
    AdminUserResponse,
    LoginRequest,
    LoginResponse,
    LoginUser,
    CurrentUserResponse,
)
from taskforge.schemas.tenant import TenantSummary

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """
    Registration, login and session identity.

    Login never reveals whether the email or the password was wrong.
    """

    def register_tenant(self, db: Session, data: RegisterTenantRequest) -> RegisterTenantResponse:
        """
        Create a tenant together with its first tenant admin.

        Raises:
            Conflict: If the subdomain is already taken
        """
        if tenant_crud.get_by_subdomain(db, data.subdomain):
            raise Conflict("Subdomain already exists")
        # Release the read transaction before the slow hash
        db.rollback()

        password_hash = get_password_hash(data.admin_password)
        tenant, admin = tenant_crud.create_with_admin(
            db=db,
            name=data.tenant_name,
            subdomain=data.subdomain,
            max_users=settings.DEFAULT_MAX_USERS,
            max_projects=settings.DEFAULT_MAX_PROJECTS,
            admin_email=data.admin_email,
            admin_password_hash=password_hash,
            admin_full_name=data.admin_full_name,
        )
        logger.info(f"Tenant registered: id={tenant.id} subdomain={tenant.subdomain}")

        return RegisterTenantResponse(
            tenant_id=tenant.id,
            subdomain=tenant.subdomain,
            admin_user=AdminUserResponse.model_validate(admin),
        )

    def login(self, db: Session, data: LoginRequest) -> LoginResponse:
        """
        Verify credentials and issue a session token.

        With a tenant subdomain the user is looked up inside that tenant;
        without one only the tenant-less super admin can log in.

        Raises:
            NotFound: Unknown tenant subdomain
            Forbidden: Tenant not active, or user deactivated
            Unauthorized: Unknown email or wrong password
        """
        if data.tenant_subdomain is not None:
            tenant = tenant_crud.get_by_subdomain(db, data.tenant_subdomain)
            if not tenant:
                raise NotFound("Tenant not found")
            if tenant.status != TenantStatus.active:
                raise Forbidden("Tenant account is suspended or inactive")
            user = user_crud.get_by_email(db, email=data.email, tenant_id=tenant.id)
        else:
            user = user_crud.get_super_admin_by_email(db, email=data.email)

        if not user or not verify_password(data.password, user.password_hash):
            logger.warning(f"Failed login for email={data.email} tenant={data.tenant_subdomain}")
            raise Unauthorized(INVALID_CREDENTIALS)

        if not user.is_active:
            raise Forbidden("Account is inactive")

        token = create_access_token(
            TokenClaims(user_id=user.id, tenant_id=user.tenant_id, role=user.role)
        )
        logger.info(f"User logged in: id={user.id} tenant_id={user.tenant_id}")

        return LoginResponse(
            user=LoginUser.model_validate(user),
            token=token,
            expires_in=settings.access_token_expire_seconds,
        )

    def get_current_user(self, db: Session, user_id: uuid.UUID) -> CurrentUserResponse:
        """
        Profile of the token's subject, with its tenant if it has one.

        Raises:
            NotFound: If the user was deleted after the token was issued
        """
        user = user_crud.get(db, user_id)
        if not user:
            raise NotFound("User not found")
        return self._profile(user)

    @staticmethod
    def _profile(user: User) -> CurrentUserResponse:
        return CurrentUserResponse(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            is_active=user.is_active,
            tenant=TenantSummary.model_validate(user.tenant) if user.tenant else None,
        )


# Create a singleton instance
auth_service = AuthService()
