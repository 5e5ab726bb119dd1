"""Constants package for Tenant IAM."""

from .auth import ALGORITHM, LOCKOUT_MINUTES, MAX_LOGIN_ATTEMPTS
from .roles import (
    ADMIN_MANAGEMENT_PERMISSION,
    DEFAULT_ROLE_HIERARCHY,
    PROTECTED_ROLES,
    ROLE_HIERARCHY,
    RoleHierarchy,
    RoleName,
)

__all__ = [
    # Role constants
    "RoleName",
    "ROLE_HIERARCHY",
    "DEFAULT_ROLE_HIERARCHY",
    "PROTECTED_ROLES",
    "ADMIN_MANAGEMENT_PERMISSION",
    "RoleHierarchy",
    # Auth constants
    "ALGORITHM",
    "MAX_LOGIN_ATTEMPTS",
    "LOCKOUT_MINUTES",
]
