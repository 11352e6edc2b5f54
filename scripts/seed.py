"""
python -m scripts.seed

Creates the super admin and a "demo" tenant with sample users, projects
and tasks. Safe to re-run: existing rows are left alone.
"""

import sys

sys.path.insert(0, ".")

from dotenv import load_dotenv
load_dotenv()

from taskforge.core.config import settings
from taskforge.core.roles import Role
from taskforge.core.security import get_password_hash
from taskforge.database import Database
from taskforge.models import Project, Task, Tenant, User
from taskforge.models.project import ProjectStatus
from taskforge.models.task import TaskStatus, TaskPriority
from taskforge.models.tenant import TenantStatus, SubscriptionPlan

SUPER_ADMIN_EMAIL = "superadmin@system.com"
SUPER_ADMIN_PASSWORD = "Admin@123"
DEMO_ADMIN_PASSWORD = "Demo@123"
DEMO_USER_PASSWORD = "User@123"


def seed():
    """Seed the database."""
    database = Database(settings.DATABASE_URL)
    db = database.session()

    try:
        super_admin = db.query(User).filter(
            User.email == SUPER_ADMIN_EMAIL, User.tenant_id.is_(None)
        ).one_or_none()
        if super_admin is None:
            db.add(User(
                tenant_id=None,
                email=SUPER_ADMIN_EMAIL,
                password_hash=get_password_hash(SUPER_ADMIN_PASSWORD),
                full_name="Super Admin",
                role=Role.super_admin,
            ))
            print(f"Super admin created: {SUPER_ADMIN_EMAIL}")

        if db.query(Tenant).filter(Tenant.subdomain == "demo").one_or_none():
            db.commit()
            print("Demo tenant already exists, skipping")
            return

        tenant = Tenant(
            name="Demo Company",
            subdomain="demo",
            status=TenantStatus.active,
            subscription_plan=SubscriptionPlan.pro,
            max_users=25,
            max_projects=15,
        )
        db.add(tenant)
        db.flush()
        print(f"Tenant created: {tenant.name} ({tenant.subdomain})")

        admin = User(
            tenant_id=tenant.id,
            email="admin@demo.com",
            password_hash=get_password_hash(DEMO_ADMIN_PASSWORD),
            full_name="Demo Admin",
            role=Role.tenant_admin,
        )
        user_hash = get_password_hash(DEMO_USER_PASSWORD)
        user1 = User(tenant_id=tenant.id, email="user1@demo.com", password_hash=user_hash,
                     full_name="John Doe", role=Role.user)
        user2 = User(tenant_id=tenant.id, email="user2@demo.com", password_hash=user_hash,
                     full_name="Jane Smith", role=Role.user)
        db.add_all([admin, user1, user2])
        db.flush()

        website = Project(
            tenant_id=tenant.id,
            name="Website Redesign",
            description="Complete redesign of company website",
            status=ProjectStatus.active,
            created_by=admin.id,
        )
        mobile = Project(
            tenant_id=tenant.id,
            name="Mobile App Development",
            description="Build iOS and Android apps",
            status=ProjectStatus.active,
            created_by=admin.id,
        )
        db.add_all([website, mobile])
        db.flush()

        tasks_data = [
            (website, "Design homepage mockup", TaskStatus.in_progress, TaskPriority.high, user1),
            (website, "Implement responsive navigation", TaskStatus.todo, TaskPriority.medium, user2),
            (website, "SEO optimization", TaskStatus.todo, TaskPriority.low, None),
            (mobile, "Setup React Native project", TaskStatus.completed, TaskPriority.high, user1),
            (mobile, "Implement user authentication", TaskStatus.in_progress, TaskPriority.high, user2),
        ]
        for project, title, status, priority, assignee in tasks_data:
            db.add(Task(
                project_id=project.id,
                tenant_id=tenant.id,
                title=title,
                status=status,
                priority=priority,
                assigned_to=assignee.id if assignee else None,
            ))
            print(f"Task created: {title}")

        db.commit()
        print("\nLogin credentials:")
        print(f"  Super admin: {SUPER_ADMIN_EMAIL} / {SUPER_ADMIN_PASSWORD}")
        print(f"  Demo admin (subdomain: demo): admin@demo.com / {DEMO_ADMIN_PASSWORD}")
        print(f"  Demo users: user1@demo.com, user2@demo.com / {DEMO_USER_PASSWORD}")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    seed()
