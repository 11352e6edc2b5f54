from .audit_log import AuditLog
from .project import Project
from .task import Task
from .tenant import Tenant
from .user import User
