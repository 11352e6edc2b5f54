from taskforge.crud.base import CRUDBase
from taskforge.crud.user import user
from .tenant import tenant
from .project import project
from .task import task

__all__ = ["CRUDBase", "user", "tenant", "project", "task"]
