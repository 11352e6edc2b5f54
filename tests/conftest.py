"""
Pytest configuration and fixtures for TaskForge tests.

Every test gets its own file-backed SQLite database under ``tmp_path``.
Settings are read from the environment at import time, so the overrides
below must be in place before anything from ``taskforge`` is imported.
"""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"  # bcrypt's minimum; keeps the suite fast

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402
from taskforge.core.roles import Role, TokenClaims  # noqa: E402
from taskforge.core.security import get_password_hash  # noqa: E402
from taskforge.database import Database  # noqa: E402
from taskforge.models import User  # noqa: E402
from taskforge.schemas.auth import RegisterTenantRequest  # noqa: E402
from taskforge.services.auth import auth_service  # noqa: E402

PASSWORD = "Secret123!"
SUPER_ADMIN_EMAIL = "root@system.com"


@pytest.fixture
def database(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'taskforge.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(database):
    app.state.database = database
    yield TestClient(app)
    app.state.database = None


def claims_for(user: User) -> TokenClaims:
    return TokenClaims(user_id=user.id, tenant_id=user.tenant_id, role=user.role)


def register(db, name: str, subdomain: str, email: str = None):
    """Register a tenant through the service. Returns (tenant_id, admin claims)."""
    result = auth_service.register_tenant(db, RegisterTenantRequest(
        tenant_name=name,
        subdomain=subdomain,
        admin_email=email or f"admin@{subdomain}.com",
        admin_password=PASSWORD,
        admin_full_name=f"{name} Admin",
    ))
    admin = TokenClaims(user_id=result.admin_user.id, tenant_id=result.tenant_id, role=Role.tenant_admin)
    return result.tenant_id, admin


@pytest.fixture
def acme(db):
    return register(db, "Acme", "acme")


@pytest.fixture
def globex(db):
    return register(db, "Globex", "globex")


@pytest.fixture
def super_admin(db) -> TokenClaims:
    user = User(
        tenant_id=None,
        email=SUPER_ADMIN_EMAIL,
        password_hash=get_password_hash(PASSWORD),
        full_name="Super Admin",
        role=Role.super_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return claims_for(user)


# HTTP helpers

def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def api_register(client, name: str, subdomain: str, email: str = None, password: str = PASSWORD) -> dict:
    response = client.post("/api/auth/register-tenant", json={
        "tenantName": name,
        "subdomain": subdomain,
        "adminEmail": email or f"admin@{subdomain}.com",
        "adminPassword": password,
        "adminFullName": f"{name} Admin",
    })
    assert response.status_code == 201, response.text
    return response.json()["data"]


def api_login(client, email: str, password: str = PASSWORD, subdomain: str = None) -> str:
    body = {"email": email, "password": password}
    if subdomain:
        body["tenantSubdomain"] = subdomain
    response = client.post("/api/auth/login", json=body)
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]
