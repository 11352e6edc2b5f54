import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from conftest import PASSWORD, SUPER_ADMIN_EMAIL, register
from taskforge.core.exceptions import Conflict, Forbidden, NotFound, Unauthorized
from taskforge.core.roles import Role
from taskforge.core.security import verify_token
from taskforge.crud import user as user_crud
from taskforge.models import Tenant, User
from taskforge.models.tenant import TenantStatus
from taskforge.schemas.auth import LoginRequest, RegisterTenantRequest
from taskforge.services.auth import auth_service


def registration(subdomain="acme", **overrides):
    data = {
        "tenant_name": "Acme",
        "subdomain": subdomain,
        "admin_email": f"admin@{subdomain}.com",
        "admin_password": PASSWORD,
        "admin_full_name": "Acme Admin",
    }
    data.update(overrides)
    return RegisterTenantRequest(**data)


def count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


class TestRegisterTenant:
    def test_creates_tenant_with_defaults_and_admin(self, db):
        result = auth_service.register_tenant(db, registration())

        tenant = db.get(Tenant, result.tenant_id)
        assert tenant.subdomain == "acme"
        assert tenant.status == TenantStatus.active
        assert tenant.subscription_plan.value == "free"
        assert (tenant.max_users, tenant.max_projects) == (5, 3)

        admin = db.get(User, result.admin_user.id)
        assert admin.tenant_id == tenant.id
        assert admin.role == Role.tenant_admin
        assert admin.password_hash != PASSWORD

    def test_duplicate_subdomain_conflicts(self, db):
        auth_service.register_tenant(db, registration())
        with pytest.raises(Conflict):
            auth_service.register_tenant(db, registration(admin_email="other@acme.com"))
        assert count(db, Tenant) == 1

    def test_failed_admin_creation_leaves_no_tenant(self, db, monkeypatch):
        def fail(*args, **kwargs):
            raise RuntimeError("simulated failure")

        monkeypatch.setattr(user_crud, "create", fail)
        with pytest.raises(RuntimeError):
            auth_service.register_tenant(db, registration())

        db.rollback()
        assert count(db, Tenant) == 0
        assert count(db, User) == 0

    def test_same_email_allowed_in_different_tenants(self, db):
        auth_service.register_tenant(db, registration("acme", admin_email="boss@example.com"))
        auth_service.register_tenant(db, registration("globex", admin_email="boss@example.com"))
        assert count(db, User) == 2


class TestLogin:
    def test_tenant_login_issues_scoped_token(self, db, acme):
        tenant_id, admin = acme
        result = auth_service.login(db, LoginRequest(
            email="admin@acme.com", password=PASSWORD, tenant_subdomain="acme"
        ))

        claims = verify_token(result.token)
        assert claims.role == Role.tenant_admin
        assert claims.tenant_id == tenant_id
        assert claims.user_id == admin.user_id
        assert result.expires_in == 24 * 60 * 60
        assert result.user.tenant_id == tenant_id

    def test_wrong_password(self, db, acme):
        with pytest.raises(Unauthorized) as exc_info:
            auth_service.login(db, LoginRequest(
                email="admin@acme.com", password="wrong-password", tenant_subdomain="acme"
            ))
        assert exc_info.value.message == "Invalid credentials"

    def test_unknown_email_same_message(self, db, acme):
        with pytest.raises(Unauthorized) as exc_info:
            auth_service.login(db, LoginRequest(
                email="nobody@acme.com", password=PASSWORD, tenant_subdomain="acme"
            ))
        assert exc_info.value.message == "Invalid credentials"

    def test_user_of_other_tenant_cannot_log_in(self, db, acme, globex):
        with pytest.raises(Unauthorized):
            auth_service.login(db, LoginRequest(
                email="admin@acme.com", password=PASSWORD, tenant_subdomain="globex"
            ))

    def test_unknown_subdomain(self, db):
        with pytest.raises(NotFound):
            auth_service.login(db, LoginRequest(
                email="admin@acme.com", password=PASSWORD, tenant_subdomain="nope"
            ))

    def test_suspended_tenant(self, db, acme):
        tenant = db.get(Tenant, acme[0])
        tenant.status = TenantStatus.suspended
        db.commit()

        with pytest.raises(Forbidden):
            auth_service.login(db, LoginRequest(
                email="admin@acme.com", password=PASSWORD, tenant_subdomain="acme"
            ))

    def test_inactive_user(self, db, acme):
        admin = db.get(User, acme[1].user_id)
        admin.is_active = False
        db.commit()

        with pytest.raises(Forbidden):
            auth_service.login(db, LoginRequest(
                email="admin@acme.com", password=PASSWORD, tenant_subdomain="acme"
            ))

    def test_super_admin_logs_in_without_subdomain(self, db, super_admin):
        result = auth_service.login(db, LoginRequest(email=SUPER_ADMIN_EMAIL, password=PASSWORD))
        claims = verify_token(result.token)
        assert claims.role == Role.super_admin
        assert claims.tenant_id is None

    def test_tenant_user_cannot_use_super_admin_path(self, db, acme):
        with pytest.raises(Unauthorized):
            auth_service.login(db, LoginRequest(email="admin@acme.com", password=PASSWORD))

    @pytest.mark.parametrize("subdomain", ["", "   "])
    def test_blank_subdomain_is_invalid(self, subdomain):
        with pytest.raises(SchemaValidationError):
            LoginRequest(email=SUPER_ADMIN_EMAIL, password=PASSWORD, tenant_subdomain=subdomain)

    def test_super_admin_email_is_unique(self, db, super_admin):
        db.add(User(
            tenant_id=None,
            email=SUPER_ADMIN_EMAIL,
            password_hash="x",
            full_name="Impostor",
            role=Role.super_admin,
        ))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestCurrentUser:
    def test_profile_includes_tenant(self, db, acme):
        tenant_id, admin = acme
        profile = auth_service.get_current_user(db, admin.user_id)
        assert profile.email == "admin@acme.com"
        assert profile.tenant.id == tenant_id
        assert profile.tenant.subdomain == "acme"

    def test_super_admin_has_no_tenant(self, db, super_admin):
        assert auth_service.get_current_user(db, super_admin.user_id).tenant is None

    def test_deleted_user(self, db, acme):
        db.delete(db.get(User, acme[1].user_id))
        db.commit()
        with pytest.raises(NotFound):
            auth_service.get_current_user(db, acme[1].user_id)


def test_register_helper_returns_admin_claims(db):
    tenant_id, admin = register(db, "Initech", "initech")
    assert admin.tenant_id == tenant_id
    assert admin.role == Role.tenant_admin
