import logging
import uuid

from sqlalchemy import select

from conftest import PASSWORD, api_login, api_register, auth_header
from taskforge.models import AuditLog
from taskforge.services import audit
from taskforge.services.audit import record_audit


class BrokenDatabase:
    def session(self):
        raise RuntimeError("database unavailable")


def actions(database):
    with database.session() as session:
        return [row.action for row in session.execute(select(AuditLog).order_by(AuditLog.created_at)).scalars()]


def test_record_audit_writes_row(database):
    entity_id = uuid.uuid4()
    record_audit(database, action="CREATE_PROJECT", entity_type="project", entity_id=entity_id, ip_address="10.0.0.1")

    with database.session() as session:
        row = session.execute(select(AuditLog)).scalar_one()
    assert row.action == "CREATE_PROJECT"
    assert row.entity_id == str(entity_id)
    assert row.ip_address == "10.0.0.1"


def test_record_audit_swallows_failures(caplog):
    with caplog.at_level(logging.ERROR, logger="taskforge"):
        record_audit(BrokenDatabase(), action="LOGIN")
    assert "Audit log failure" in caplog.text


def test_requests_are_audited(client, database):
    data = api_register(client, "Acme", "acme")
    headers = auth_header(api_login(client, "admin@acme.com", subdomain="acme"))
    client.post("/api/projects", headers=headers, json={"name": "Launch"})
    client.post("/api/auth/logout", headers=headers)

    assert set(actions(database)) == {"REGISTER_TENANT", "LOGIN", "CREATE_PROJECT", "LOGOUT"}
    with database.session() as session:
        rows = session.execute(select(AuditLog)).scalars().all()
    assert {row.tenant_id for row in rows} == {uuid.UUID(data["tenantId"])}


def test_denied_requests_are_not_audited(client, database):
    api_register(client, "Acme", "acme")
    client.post("/api/auth/login", json={"email": "admin@acme.com", "password": "wrong-password", "tenantSubdomain": "acme"})
    assert actions(database) == ["REGISTER_TENANT"]


def test_audit_failure_does_not_fail_request(client, database, monkeypatch):
    def broken(**kwargs):
        raise RuntimeError("audit table missing")

    monkeypatch.setattr(audit, "AuditLog", broken)
    response = client.post("/api/auth/register-tenant", json={
        "tenantName": "Acme", "subdomain": "acme", "adminEmail": "admin@acme.com",
        "adminPassword": PASSWORD, "adminFullName": "Acme Admin",
    })
    assert response.status_code == 201
    assert actions(database) == []
