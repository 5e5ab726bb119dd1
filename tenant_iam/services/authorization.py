"""
Authorization decision engine.

Pure functions deciding whether a requester (identified by its session
claims) may view or manage another user, and whether it may hand out a set
of roles. The engine never touches storage: callers load the target's
tenant and role names and pass them in.

Decision order for ``can_manage_user`` (first match wins):

    1. target missing                         -> denied
    2. requester is the target                -> allowed
    3. requester is SUPER_ADMIN               -> allowed
    4. target holds SUPER_ADMIN               -> denied
    5. target lives in another tenant         -> denied
    6. target is COMPANY_ADMIN and requester
       may not manage company admins          -> denied
    7. otherwise                              -> allowed
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, NamedTuple, TypeVar

from tenant_iam.claims import Claims
from tenant_iam.constants.roles import (
    ADMIN_MANAGEMENT_PERMISSION,
    DEFAULT_ROLE_HIERARCHY,
    RoleHierarchy,
    RoleName,
)

T = TypeVar("T")

SUPER_ADMIN = RoleName.SUPER_ADMIN.value
COMPANY_ADMIN = RoleName.COMPANY_ADMIN.value


class AuthorizationResult(NamedTuple):
    allowed: bool
    reason: str


@dataclass(frozen=True)
class TargetPrincipal:
    """The user an operation is aimed at, reduced to what the engine needs."""

    id: str
    tenant_id: str | None = None
    roles: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, obj: Any) -> "TargetPrincipal":
        """Adapt a ``User`` row (or anything with id/tenant_id/role_names)."""
        if isinstance(obj, cls):
            return obj
        return cls(id=str(obj.id), tenant_id=obj.tenant_id, roles=tuple(obj.role_names))


class AuthorizationEngine:
    def __init__(self, hierarchy: RoleHierarchy = DEFAULT_ROLE_HIERARCHY):
        self.hierarchy = hierarchy

    @staticmethod
    def is_super_admin(roles: Iterable[str]) -> bool:
        return SUPER_ADMIN in roles

    def can_access_tenant(self, requester: Claims, tenant_id: str | None) -> bool:
        # Two global principals (both None) share the same scope.
        return self.is_super_admin(requester.roles) or requester.tenant_id == tenant_id

    def can_manage_company_admins(self, requester: Claims) -> bool:
        return self.is_super_admin(requester.roles) or ADMIN_MANAGEMENT_PERMISSION in requester.permissions

    def can_manage_user(self, requester: Claims, target: Any | None) -> AuthorizationResult:
        if target is None:
            return AuthorizationResult(False, "Target user not found")

        target = TargetPrincipal.of(target)

        if requester.sub == target.id:
            return AuthorizationResult(True, "User managing own profile")

        if self.is_super_admin(requester.roles):
            return AuthorizationResult(True, "SUPER_ADMIN can manage all users")

        return self._check_non_super_admin(requester, target)

    def can_view_user(self, requester: Claims, target: Any | None) -> AuthorizationResult:
        # Viewing and managing share one policy.
        return self.can_manage_user(requester, target)

    def filter_accessible_users(self, requester: Claims, users: Iterable[T]) -> list[T]:
        if self.is_super_admin(requester.roles):
            return list(users)

        accessible = []
        for user in users:
            target = TargetPrincipal.of(user)
            if target.id == requester.sub or self._check_non_super_admin(requester, target).allowed:
                accessible.append(user)
        return accessible

    def validate_privilege_escalation(
        self, requester: Claims, target_role_names: Iterable[str]
    ) -> AuthorizationResult:
        if self.is_super_admin(requester.roles):
            return AuthorizationResult(True, "SUPER_ADMIN can assign any role")

        for role in target_role_names:
            if role == SUPER_ADMIN:
                return AuthorizationResult(False, "Privilege escalation detected")
            if role == COMPANY_ADMIN and not self.hierarchy.has_higher_or_equal_privilege(
                requester.roles, COMPANY_ADMIN
            ):
                return AuthorizationResult(False, "Privilege escalation detected")

        return AuthorizationResult(True, "Role assignment valid")

    def _check_non_super_admin(self, requester: Claims, target: TargetPrincipal) -> AuthorizationResult:
        if self.is_super_admin(target.roles):
            return AuthorizationResult(False, "Cannot manage SUPER_ADMIN accounts")

        if not self.can_access_tenant(requester, target.tenant_id):
            return AuthorizationResult(False, "Cross-tenant access not allowed")

        if COMPANY_ADMIN in target.roles and not self.can_manage_company_admins(requester):
            return AuthorizationResult(False, "MANAGE_COMPANY_ADMINS permission required")

        return AuthorizationResult(True, "User management allowed")


authorization_engine = AuthorizationEngine()
