import uuid
from sqlalchemy import Column, String, Uuid, DateTime, func
from taskforge.database import Base

class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # No foreign keys: audit rows outlive the entities they describe
    tenant_id = Column(Uuid, nullable=True, index=True)
    user_id = Column(Uuid, nullable=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=True)
    entity_id = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
