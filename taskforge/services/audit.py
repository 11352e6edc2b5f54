"""
Best-effort audit trail.

Audit rows are written after the response is produced, in their own session.
A failure here is logged and dropped; it never reaches the client and never
rolls back the request that triggered it.
"""
import uuid
from typing import Optional
from fastapi import BackgroundTasks, Request
from taskforge.core.logging_config import logger
from taskforge.core.roles import TokenClaims
from taskforge.database import Database
from taskforge.models.audit_log import AuditLog


def record_audit(
    database: Database,
    *,
    action: str,
    tenant_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[uuid.UUID] = None,
    ip_address: Optional[str] = None
) -> None:
    """Insert one audit row. Never raises."""
    try:
        with database.session() as db:
            db.add(AuditLog(
                tenant_id=tenant_id,
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id else None,
                ip_address=ip_address,
            ))
            db.commit()
    except Exception:
        logger.exception(f"Audit log failure: action={action} entity={entity_type}:{entity_id}")


class AuditTrail:
    """
    Request-scoped handle routers use to queue audit entries.

    Entries are dispatched as background tasks, so they run only after the
    primary transaction has committed and the response is on its way.
    """

    def __init__(self, request: Request, background_tasks: BackgroundTasks):
        self.database = request.app.state.database
        self.background_tasks = background_tasks
        self.ip_address = request.client.host if request.client else None

    def record(
        self,
        action: str,
        *,
        actor: Optional[TokenClaims] = None,
        tenant_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[uuid.UUID] = None
    ) -> None:
        if actor is not None:
            tenant_id = tenant_id or actor.tenant_id
            user_id = user_id or actor.user_id
        self.background_tasks.add_task(
            record_audit,
            self.database,
            action=action,
            tenant_id=tenant_id,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            ip_address=self.ip_address,
        )
