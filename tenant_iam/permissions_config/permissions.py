"""
Permission catalogue and the default grants of the built-in roles.

The database is the runtime source of truth; these tables seed it and
document the stock configuration.
"""

from tenant_iam.constants.roles import ADMIN_MANAGEMENT_PERMISSION, RoleName

MANAGE_COMPANIES = "MANAGE_COMPANIES"
VIEW_COMPANIES = "VIEW_COMPANIES"
MANAGE_USERS = "MANAGE_USERS"
VIEW_USERS = "VIEW_USERS"
MANAGE_COMPANY_ADMINS = ADMIN_MANAGEMENT_PERMISSION
VIEW_COMPANY_ADMINS = "VIEW_COMPANY_ADMINS"
MANAGE_ROLES = "MANAGE_ROLES"
VIEW_ROLES = "VIEW_ROLES"
MANAGE_PERMISSIONS = "MANAGE_PERMISSIONS"
VIEW_PERMISSIONS = "VIEW_PERMISSIONS"

PERMISSION_DESCRIPTIONS: dict[str, str] = {
    MANAGE_COMPANIES: "Can manage companies/tenants",
    VIEW_COMPANIES: "Can view companies/tenants",
    MANAGE_USERS: "Can manage users",
    VIEW_USERS: "Can view users",
    MANAGE_COMPANY_ADMINS: "Can manage company admins",
    VIEW_COMPANY_ADMINS: "Can view company admins",
    MANAGE_ROLES: "Can manage roles",
    VIEW_ROLES: "Can view roles",
    MANAGE_PERMISSIONS: "Can manage permissions",
    VIEW_PERMISSIONS: "Can view permissions",
}

ALL_PERMISSIONS: tuple[str, ...] = tuple(PERMISSION_DESCRIPTIONS)

ROLE_PERMISSIONS: dict[str, tuple[str, ...]] = {
    RoleName.SUPER_ADMIN.value: ALL_PERMISSIONS,
    RoleName.COMPANY_ADMIN.value: (MANAGE_USERS, VIEW_USERS, VIEW_ROLES, VIEW_PERMISSIONS),
    RoleName.CLIENT.value: (VIEW_USERS,),
}


def get_role_permissions(role: str) -> list[str]:
    """Default permission keys for a built-in role; empty for custom roles."""
    return list(ROLE_PERMISSIONS.get(role, ()))
