from taskforge.services.auth import auth_service
from taskforge.services.tenant import tenant_service
from .user import user_service
from .project import project_service
from .task import task_service

__all__ = ["auth_service", "tenant_service", "user_service", "project_service", "task_service"]
