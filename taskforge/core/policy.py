"""
Authorization policy.

Every resource service asks this module whether an actor may perform an
action on a target before touching the store. The rules are pure functions of
the token claims and the target's tenant/ownership, so they can be evaluated
(and tested) without a database.

Cross-tenant access is always reported as ``not_found`` so that callers cannot
probe for the existence of rows owned by other tenants. Denials for actors
inside the right tenant but lacking the role or ownership are ``forbidden``.
"""
import enum
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Tuple

from pydantic.alias_generators import to_camel

from taskforge.core.exceptions import ErrorKind, error_for
from taskforge.core.roles import Role, TokenClaims


class Action(str, enum.Enum):
    read = "read"
    list = "list"
    create = "create"
    update = "update"
    update_status = "update_status"
    delete = "delete"


class ResourceType(str, enum.Enum):
    tenant = "tenant"
    user = "user"
    project = "project"
    task = "task"


# Field masks: which attributes each kind of actor may write
TENANT_SUPER_ADMIN_FIELDS = frozenset(
    {"name", "status", "subscription_plan", "max_users", "max_projects"}
)
TENANT_ADMIN_TENANT_FIELDS = frozenset({"name"})
USER_SELF_FIELDS = frozenset({"full_name"})
USER_ADMIN_FIELDS = frozenset({"full_name", "role", "is_active"})


@dataclass(frozen=True)
class Target:
    """
    What an action is aimed at.

    ``tenant_id`` is the tenant owning the row (for a tenant it is the tenant's
    own id). ``owner_id`` is the creator that ownership rules compare against:
    the project's ``created_by`` for both projects and their tasks.
    ``subject_id`` identifies the user row for user actions.
    """

    resource: ResourceType
    tenant_id: Optional[uuid.UUID]
    owner_id: Optional[uuid.UUID] = None
    subject_id: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    kind: Optional[ErrorKind] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, kind: ErrorKind, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason, kind=kind)


ALLOW = Decision.allow()

Rule = Callable[[TokenClaims, Target, FrozenSet[str]], Decision]


def _in_scope(actor: TokenClaims, target: Target) -> bool:
    return actor.is_super_admin or (
        actor.tenant_id is not None and actor.tenant_id == target.tenant_id
    )


def _not_found(target: Target) -> Decision:
    return Decision.deny(ErrorKind.not_found, f"{target.resource.value.capitalize()} not found")


def _is_owner_or_admin(actor: TokenClaims, target: Target) -> bool:
    return actor.is_admin or (target.owner_id is not None and actor.user_id == target.owner_id)


def _check_mask(fields: FrozenSet[str], allowed: FrozenSet[str], who: str) -> Decision:
    restricted = sorted(fields - allowed)
    if restricted:
        allowed_names = ", ".join(to_camel(name) for name in sorted(allowed))
        return Decision.deny(
            ErrorKind.forbidden,
            f"{who} can only update: {allowed_names}. "
            f"Cannot update: {', '.join(to_camel(name) for name in restricted)}",
        )
    return ALLOW


def _scoped(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if not _in_scope(actor, target):
        return _not_found(target)
    return ALLOW


# Tenants

def _list_tenants(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if not actor.is_super_admin:
        return Decision.deny(ErrorKind.forbidden, "Only super admins can list all tenants")
    return ALLOW


def _update_tenant(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if not _in_scope(actor, target):
        return _not_found(target)
    if actor.role == Role.super_admin:
        return _check_mask(fields, TENANT_SUPER_ADMIN_FIELDS, "Super admins")
    if actor.role == Role.tenant_admin:
        return _check_mask(fields, TENANT_ADMIN_TENANT_FIELDS, "Tenant admins")
    return Decision.deny(
        ErrorKind.forbidden, "Only tenant admins and super admins can update tenants"
    )


# Users

def _create_user(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if not _in_scope(actor, target):
        return _not_found(_as_tenant(target))
    if not actor.is_admin:
        return Decision.deny(ErrorKind.forbidden, "Only tenant admins can add users")
    return ALLOW


def _list_users(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if not _in_scope(actor, target):
        return _not_found(_as_tenant(target))
    return ALLOW


def _update_user(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if not _in_scope(actor, target):
        return _not_found(target)
    if actor.user_id == target.subject_id:
        return _check_mask(fields, USER_SELF_FIELDS, "Users updating themselves")
    if actor.is_admin:
        return _check_mask(fields, USER_ADMIN_FIELDS, "Admins")
    return Decision.deny(ErrorKind.forbidden, "You cannot update other users")


def _delete_user(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if not _in_scope(actor, target):
        return _not_found(target)
    if not actor.is_admin:
        return Decision.deny(ErrorKind.forbidden, "Only tenant admins can delete users")
    if actor.user_id == target.subject_id:
        return Decision.deny(ErrorKind.forbidden, "Cannot delete yourself")
    return ALLOW


# Projects and tasks

def _create_in_tenant(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if actor.tenant_id is None:
        return Decision.deny(
            ErrorKind.forbidden,
            f"Super admin cannot create a {target.resource.value} without a tenant",
        )
    if actor.tenant_id != target.tenant_id:
        # For tasks the target tenant is the parent project's tenant
        return Decision.deny(ErrorKind.not_found, "Project not found")
    return ALLOW


def _owner_or_admin(actor: TokenClaims, target: Target, fields: FrozenSet[str]) -> Decision:
    if not _in_scope(actor, target):
        return _not_found(target)
    if not _is_owner_or_admin(actor, target):
        return Decision.deny(
            ErrorKind.forbidden,
            f"Only tenant admins or the project creator can modify this {target.resource.value}",
        )
    return ALLOW


def _as_tenant(target: Target) -> Target:
    return Target(resource=ResourceType.tenant, tenant_id=target.tenant_id)


_RULES: Dict[Tuple[ResourceType, Action], Rule] = {
    (ResourceType.tenant, Action.read): _scoped,
    (ResourceType.tenant, Action.list): _list_tenants,
    (ResourceType.tenant, Action.update): _update_tenant,
    (ResourceType.user, Action.create): _create_user,
    (ResourceType.user, Action.list): _list_users,
    (ResourceType.user, Action.read): _scoped,
    (ResourceType.user, Action.update): _update_user,
    (ResourceType.user, Action.delete): _delete_user,
    (ResourceType.project, Action.create): _create_in_tenant,
    (ResourceType.project, Action.list): _scoped,
    (ResourceType.project, Action.read): _scoped,
    (ResourceType.project, Action.update): _owner_or_admin,
    (ResourceType.project, Action.delete): _owner_or_admin,
    (ResourceType.task, Action.create): _create_in_tenant,
    (ResourceType.task, Action.list): _scoped,
    (ResourceType.task, Action.read): _scoped,
    (ResourceType.task, Action.update): _scoped,
    (ResourceType.task, Action.update_status): _scoped,
    (ResourceType.task, Action.delete): _owner_or_admin,
}


def decide(
    actor: TokenClaims,
    action: Action,
    target: Target,
    fields: Optional[Iterable[str]] = None,
) -> Decision:
    """
    Decide whether ``actor`` may perform ``action`` on ``target``.

    ``fields`` lists the attributes an update intends to write; it is checked
    against the actor's field mask where one applies. Unknown
    (resource, action) pairs are denied.
    """
    rule = _RULES.get((target.resource, action))
    if rule is None:
        return Decision.deny(ErrorKind.forbidden, "Action not permitted")
    return rule(actor, target, frozenset(fields or ()))


def authorize(
    actor: TokenClaims,
    action: Action,
    target: Target,
    fields: Optional[Iterable[str]] = None,
) -> None:
    """Like :func:`decide` but raises the matching ``AppError`` on denial."""
    decision = decide(actor, action, target, fields)
    if not decision.allowed:
        raise error_for(decision.kind, decision.reason)
