"""
Tests for the authorization decision engine

The engine is pure: requesters are Claims, targets are TargetPrincipal values.
"""

import pytest

from tenant_iam.claims import Claims
from tenant_iam.constants.roles import RoleHierarchy
from tenant_iam.services.authorization import AuthorizationEngine, TargetPrincipal

ACME = "tenant-acme"
GLOBEX = "tenant-globex"


def claims(sub, tenant_id=ACME, roles=(), permissions=()):
    return Claims.build(sub=sub, tenant_id=tenant_id, roles=roles, permissions=permissions)


def target(id, tenant_id=ACME, roles=()):
    return TargetPrincipal(id=id, tenant_id=tenant_id, roles=tuple(roles))


SUPER = claims("super", tenant_id=None, roles=["SUPER_ADMIN"])
ACME_ADMIN = claims("acme-admin", roles=["COMPANY_ADMIN"], permissions=["MANAGE_USERS"])
ACME_ADMIN_MANAGER = claims("acme-boss", roles=["COMPANY_ADMIN"], permissions=["MANAGE_COMPANY_ADMINS"])
ACME_CLIENT = claims("acme-client", roles=["CLIENT"])


@pytest.fixture
def engine():
    return AuthorizationEngine()


class TestCanManageUser:
    def test_missing_target(self, engine):
        result = engine.can_manage_user(SUPER, None)
        assert not result.allowed
        assert result.reason == "Target user not found"

    def test_self_management_always_allowed(self, engine):
        me = target("acme-client", roles=["CLIENT"])
        result = engine.can_manage_user(ACME_CLIENT, me)
        assert result.allowed
        assert result.reason == "User managing own profile"

    def test_self_wins_over_super_admin_rule(self, engine):
        result = engine.can_manage_user(SUPER, target("super", tenant_id=None, roles=["SUPER_ADMIN"]))
        assert result.reason == "User managing own profile"

    def test_super_admin_manages_other_super_admin(self, engine):
        result = engine.can_manage_user(SUPER, target("super-2", tenant_id=None, roles=["SUPER_ADMIN"]))
        assert result.allowed
        assert result.reason == "SUPER_ADMIN can manage all users"

    def test_super_admin_manages_any_tenant(self, engine):
        assert engine.can_manage_user(SUPER, target("g", tenant_id=GLOBEX, roles=["COMPANY_ADMIN"])).allowed

    def test_super_admin_target_protected(self, engine):
        result = engine.can_manage_user(ACME_ADMIN_MANAGER, target("s", tenant_id=ACME, roles=["SUPER_ADMIN"]))
        assert not result.allowed
        assert result.reason == "Cannot manage SUPER_ADMIN accounts"

    def test_super_admin_check_precedes_tenant_check(self, engine):
        result = engine.can_manage_user(ACME_ADMIN, target("s", tenant_id=GLOBEX, roles=["SUPER_ADMIN"]))
        assert result.reason == "Cannot manage SUPER_ADMIN accounts"

    def test_cross_tenant_denied(self, engine):
        result = engine.can_manage_user(ACME_ADMIN, target("g", tenant_id=GLOBEX, roles=["CLIENT"]))
        assert not result.allowed
        assert result.reason == "Cross-tenant access not allowed"

    def test_cross_tenant_check_precedes_admin_check(self, engine):
        result = engine.can_manage_user(ACME_ADMIN, target("g", tenant_id=GLOBEX, roles=["COMPANY_ADMIN"]))
        assert result.reason == "Cross-tenant access not allowed"

    def test_company_admin_target_needs_permission(self, engine):
        result = engine.can_manage_user(ACME_ADMIN, target("a2", roles=["COMPANY_ADMIN"]))
        assert not result.allowed
        assert result.reason == "MANAGE_COMPANY_ADMINS permission required"

    def test_company_admin_target_with_permission(self, engine):
        result = engine.can_manage_user(ACME_ADMIN_MANAGER, target("a2", roles=["COMPANY_ADMIN"]))
        assert result.allowed
        assert result.reason == "User management allowed"

    def test_same_tenant_client_allowed(self, engine):
        result = engine.can_manage_user(ACME_ADMIN, target("c", roles=["CLIENT"]))
        assert result.allowed
        assert result.reason == "User management allowed"

    def test_client_may_manage_peer_without_protected_roles(self, engine):
        # Route guards restrict who reaches the engine; the engine itself only
        # looks at tenant and protected roles.
        assert engine.can_manage_user(ACME_CLIENT, target("c2", roles=["CLIENT"])).allowed

    def test_global_principals_share_scope(self, engine):
        requester = claims("g1", tenant_id=None, roles=["COMPANY_ADMIN"])
        assert engine.can_manage_user(requester, target("g2", tenant_id=None, roles=["CLIENT"])).allowed

    def test_accepts_user_like_objects(self, engine):
        class Row:
            id = "row-1"
            tenant_id = GLOBEX
            role_names = ["CLIENT"]

        assert engine.can_manage_user(ACME_ADMIN, Row()).reason == "Cross-tenant access not allowed"

    def test_view_matches_manage(self, engine):
        t = target("a2", roles=["COMPANY_ADMIN"])
        assert engine.can_view_user(ACME_ADMIN, t) == engine.can_manage_user(ACME_ADMIN, t)


class TestTenantAccess:
    def test_same_tenant(self, engine):
        assert engine.can_access_tenant(ACME_CLIENT, ACME)

    def test_other_tenant(self, engine):
        assert not engine.can_access_tenant(ACME_ADMIN, GLOBEX)

    def test_super_admin_any_tenant(self, engine):
        assert engine.can_access_tenant(SUPER, GLOBEX)
        assert engine.can_access_tenant(SUPER, None)

    def test_can_manage_company_admins(self, engine):
        assert engine.can_manage_company_admins(SUPER)
        assert engine.can_manage_company_admins(ACME_ADMIN_MANAGER)
        assert not engine.can_manage_company_admins(ACME_ADMIN)


class TestFilterAccessibleUsers:
    def test_super_admin_sees_everything(self, engine):
        users = [target("a", roles=["SUPER_ADMIN"]), target("b", tenant_id=GLOBEX)]
        assert engine.filter_accessible_users(SUPER, users) == users

    def test_company_admin_filtering(self, engine):
        me = target("acme-admin", roles=["COMPANY_ADMIN"])
        peer_admin = target("acme-admin-2", roles=["COMPANY_ADMIN"])
        client = target("acme-client", roles=["CLIENT"])
        foreign = target("globex-client", tenant_id=GLOBEX, roles=["CLIENT"])
        root = target("root", roles=["SUPER_ADMIN"])

        visible = engine.filter_accessible_users(ACME_ADMIN, [me, peer_admin, client, foreign, root])
        assert visible == [me, client]

    def test_result_agrees_with_can_manage_user(self, engine):
        users = [
            target("acme-boss", roles=["COMPANY_ADMIN"]),
            target("x", roles=["COMPANY_ADMIN"]),
            target("y", roles=["CLIENT"]),
            target("z", tenant_id=GLOBEX),
        ]
        visible = engine.filter_accessible_users(ACME_ADMIN_MANAGER, users)
        assert visible == [u for u in users if engine.can_manage_user(ACME_ADMIN_MANAGER, u).allowed]

    def test_preserves_input_order(self, engine):
        users = [target(str(i), roles=["CLIENT"]) for i in range(5)]
        assert engine.filter_accessible_users(ACME_ADMIN, list(reversed(users))) == list(reversed(users))


class TestPrivilegeEscalation:
    def test_super_admin_assigns_anything(self, engine):
        result = engine.validate_privilege_escalation(SUPER, ["SUPER_ADMIN", "COMPANY_ADMIN"])
        assert result.allowed
        assert result.reason == "SUPER_ADMIN can assign any role"

    def test_company_admin_cannot_assign_super_admin(self, engine):
        result = engine.validate_privilege_escalation(ACME_ADMIN_MANAGER, ["CLIENT", "SUPER_ADMIN"])
        assert not result.allowed
        assert result.reason == "Privilege escalation detected"

    def test_company_admin_assigns_company_admin(self, engine):
        assert engine.validate_privilege_escalation(ACME_ADMIN, ["COMPANY_ADMIN"]).allowed

    def test_client_cannot_assign_company_admin(self, engine):
        result = engine.validate_privilege_escalation(ACME_CLIENT, ["COMPANY_ADMIN"])
        assert not result.allowed
        assert result.reason == "Privilege escalation detected"

    def test_unprotected_roles_always_valid(self, engine):
        result = engine.validate_privilege_escalation(ACME_CLIENT, ["CLIENT", "AUDITOR"])
        assert result.allowed
        assert result.reason == "Role assignment valid"

    def test_empty_assignment_valid(self, engine):
        assert engine.validate_privilege_escalation(ACME_CLIENT, []).allowed

    def test_injected_hierarchy(self):
        hierarchy = RoleHierarchy({"SUPER_ADMIN": 3, "COMPANY_ADMIN": 2, "CLIENT": 2})
        engine = AuthorizationEngine(hierarchy)
        assert engine.validate_privilege_escalation(ACME_CLIENT, ["COMPANY_ADMIN"]).allowed
