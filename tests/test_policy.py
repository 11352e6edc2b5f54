"""The authorization policy is pure; these tests need no database."""
import uuid

import pytest

from taskforge.core.exceptions import ErrorKind, Forbidden, NotFound
from taskforge.core.policy import Action, ResourceType, Target, authorize, decide
from taskforge.core.roles import Role, TokenClaims

TENANT_A = uuid.uuid4()
TENANT_B = uuid.uuid4()

SUPER = TokenClaims(user_id=uuid.uuid4(), tenant_id=None, role=Role.super_admin)
ADMIN_A = TokenClaims(user_id=uuid.uuid4(), tenant_id=TENANT_A, role=Role.tenant_admin)
USER_A = TokenClaims(user_id=uuid.uuid4(), tenant_id=TENANT_A, role=Role.user)
OTHER_USER_A = TokenClaims(user_id=uuid.uuid4(), tenant_id=TENANT_A, role=Role.user)
ADMIN_B = TokenClaims(user_id=uuid.uuid4(), tenant_id=TENANT_B, role=Role.tenant_admin)


def tenant(tenant_id=TENANT_A):
    return Target(ResourceType.tenant, tenant_id=tenant_id)


def project(owner=USER_A, tenant_id=TENANT_A):
    return Target(ResourceType.project, tenant_id=tenant_id, owner_id=owner.user_id)


def task(owner=USER_A, tenant_id=TENANT_A):
    return Target(ResourceType.task, tenant_id=tenant_id, owner_id=owner.user_id)


def user(subject=USER_A):
    return Target(ResourceType.user, tenant_id=subject.tenant_id, subject_id=subject.user_id)


class TestTenantScoping:
    @pytest.mark.parametrize("action,target", [
        (Action.read, tenant(TENANT_B)),
        (Action.update, tenant(TENANT_B)),
        (Action.read, project(ADMIN_B, TENANT_B)),
        (Action.update, project(ADMIN_B, TENANT_B)),
        (Action.delete, project(ADMIN_B, TENANT_B)),
        (Action.list, Target(ResourceType.project, tenant_id=TENANT_B)),
        (Action.update, task(ADMIN_B, TENANT_B)),
        (Action.update_status, task(ADMIN_B, TENANT_B)),
        (Action.delete, task(ADMIN_B, TENANT_B)),
        (Action.create, Target(ResourceType.task, tenant_id=TENANT_B, owner_id=ADMIN_B.user_id)),
        (Action.list, Target(ResourceType.user, tenant_id=TENANT_B)),
        (Action.create, Target(ResourceType.user, tenant_id=TENANT_B)),
        (Action.update, user(ADMIN_B)),
        (Action.delete, user(ADMIN_B)),
    ])
    def test_cross_tenant_is_not_found(self, action, target):
        decision = decide(ADMIN_A, action, target, fields={"name"})
        assert not decision.allowed
        assert decision.kind == ErrorKind.not_found

    @pytest.mark.parametrize("action", [Action.update, Action.delete])
    def test_plain_user_cannot_tell_foreign_users_exist(self, action):
        decision = decide(USER_A, action, user(ADMIN_B), fields={"full_name"})
        assert decision.kind == ErrorKind.not_found

    def test_super_admin_reaches_every_tenant(self):
        assert decide(SUPER, Action.read, tenant(TENANT_B)).allowed
        assert decide(SUPER, Action.update, project(ADMIN_B, TENANT_B)).allowed
        assert decide(SUPER, Action.delete, task(ADMIN_B, TENANT_B)).allowed
        assert decide(SUPER, Action.create, Target(ResourceType.user, tenant_id=TENANT_B)).allowed

    def test_members_read_own_tenant(self):
        assert decide(USER_A, Action.read, tenant()).allowed
        assert decide(USER_A, Action.list, Target(ResourceType.user, tenant_id=TENANT_A)).allowed
        assert decide(USER_A, Action.read, project(ADMIN_A)).allowed


class TestTenantRules:
    def test_only_super_admin_lists_tenants(self):
        assert decide(SUPER, Action.list, tenant(None)).allowed
        decision = decide(ADMIN_A, Action.list, tenant(None))
        assert decision.kind == ErrorKind.forbidden

    def test_tenant_admin_may_rename(self):
        assert decide(ADMIN_A, Action.update, tenant(), fields={"name"}).allowed

    def test_tenant_admin_mask_rejects_whole_request(self):
        decision = decide(ADMIN_A, Action.update, tenant(), fields={"name", "status"})
        assert not decision.allowed
        assert decision.kind == ErrorKind.forbidden
        assert "status" in decision.reason

    @pytest.mark.parametrize("field", ["subscription_plan", "max_users", "max_projects"])
    def test_tenant_admin_cannot_touch_plan_or_limits(self, field):
        decision = decide(ADMIN_A, Action.update, tenant(), fields={field})
        assert decision.kind == ErrorKind.forbidden

    def test_super_admin_full_mask(self):
        fields = {"name", "status", "subscription_plan", "max_users", "max_projects"}
        assert decide(SUPER, Action.update, tenant(TENANT_B), fields=fields).allowed

    def test_plain_user_cannot_update_tenant(self):
        assert decide(USER_A, Action.update, tenant(), fields={"name"}).kind == ErrorKind.forbidden


class TestUserRules:
    def test_self_may_change_full_name(self):
        assert decide(USER_A, Action.update, user(USER_A), fields={"full_name"}).allowed

    def test_self_cannot_escalate_role(self):
        decision = decide(USER_A, Action.update, user(USER_A), fields={"full_name", "role"})
        assert decision.kind == ErrorKind.forbidden
        assert "role" in decision.reason

    def test_admin_updating_self_gets_self_mask(self):
        decision = decide(ADMIN_A, Action.update, user(ADMIN_A), fields={"is_active"})
        assert decision.kind == ErrorKind.forbidden

    def test_admin_mask(self):
        fields = {"full_name", "role", "is_active"}
        assert decide(ADMIN_A, Action.update, user(USER_A), fields=fields).allowed
        assert decide(SUPER, Action.update, user(ADMIN_B), fields=fields).allowed

    def test_user_cannot_update_peer(self):
        decision = decide(USER_A, Action.update, user(OTHER_USER_A), fields={"full_name"})
        assert decision.kind == ErrorKind.forbidden

    def test_only_admins_add_users(self):
        target = Target(ResourceType.user, tenant_id=TENANT_A)
        assert decide(ADMIN_A, Action.create, target).allowed
        assert decide(USER_A, Action.create, target).kind == ErrorKind.forbidden

    def test_nobody_deletes_themselves(self):
        assert decide(ADMIN_A, Action.delete, user(ADMIN_A)).kind == ErrorKind.forbidden
        assert decide(SUPER, Action.delete, user(SUPER)).kind == ErrorKind.forbidden

    def test_delete_requires_admin(self):
        assert decide(ADMIN_A, Action.delete, user(USER_A)).allowed
        assert decide(USER_A, Action.delete, user(OTHER_USER_A)).kind == ErrorKind.forbidden


class TestProjectAndTaskRules:
    def test_super_admin_cannot_create_without_tenant(self):
        for resource in (ResourceType.project, ResourceType.task):
            decision = decide(SUPER, Action.create, Target(resource, tenant_id=TENANT_A))
            assert decision.kind == ErrorKind.forbidden

    def test_member_creates_in_own_tenant(self):
        assert decide(USER_A, Action.create, Target(ResourceType.project, tenant_id=TENANT_A)).allowed

    def test_creator_or_admin_modifies_project(self):
        assert decide(USER_A, Action.update, project(USER_A)).allowed
        assert decide(ADMIN_A, Action.delete, project(USER_A)).allowed
        assert decide(OTHER_USER_A, Action.update, project(USER_A)).kind == ErrorKind.forbidden
        assert decide(OTHER_USER_A, Action.delete, project(USER_A)).kind == ErrorKind.forbidden

    def test_any_member_updates_tasks(self):
        assert decide(OTHER_USER_A, Action.update, task(USER_A)).allowed
        assert decide(OTHER_USER_A, Action.update_status, task(USER_A)).allowed

    def test_task_delete_uses_project_creator(self):
        assert decide(USER_A, Action.delete, task(USER_A)).allowed
        assert decide(ADMIN_A, Action.delete, task(USER_A)).allowed
        assert decide(OTHER_USER_A, Action.delete, task(USER_A)).kind == ErrorKind.forbidden


class TestAuthorize:
    def test_raises_mapped_errors(self):
        with pytest.raises(NotFound):
            authorize(ADMIN_A, Action.read, tenant(TENANT_B))
        with pytest.raises(Forbidden):
            authorize(USER_A, Action.list, tenant(None))

    def test_unknown_action_denied(self):
        decision = decide(SUPER, Action.delete, tenant())
        assert not decision.allowed
        assert decision.kind == ErrorKind.forbidden
