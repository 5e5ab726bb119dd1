from .role import Permission, Role, RolePermission
from .tenant import Tenant
from .user import User, UserRole

__all__ = [
    "Permission",
    "Role",
    "RolePermission",
    "Tenant",
    "User",
    "UserRole",
]
