"""
Role Constants

Defines the built-in role names, the static privilege hierarchy and the
permission key that unlocks management of company administrators.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType


class RoleName(str, Enum):
    """Enumeration of the built-in role names."""

    SUPER_ADMIN = "SUPER_ADMIN"
    COMPANY_ADMIN = "COMPANY_ADMIN"
    CLIENT = "CLIENT"


# Role hierarchy (higher number = more privileges)
ROLE_HIERARCHY: Mapping[str, int] = MappingProxyType(
    {
        RoleName.SUPER_ADMIN.value: 3,
        RoleName.COMPANY_ADMIN.value: 2,
        RoleName.CLIENT.value: 1,
    }
)

PROTECTED_ROLES = (RoleName.SUPER_ADMIN.value, RoleName.COMPANY_ADMIN.value)

ADMIN_MANAGEMENT_PERMISSION = "MANAGE_COMPANY_ADMINS"


class RoleHierarchy:
    """
    Read-only ranking of role names to privilege levels.

    Unknown role names resolve to level 0.
    """

    __slots__ = ("_levels",)

    def __init__(self, levels: Mapping[str, int]):
        self._levels = MappingProxyType(dict(levels))

    def level_of(self, role_name: str) -> int:
        return self._levels.get(role_name, 0)

    def max_level(self, role_names: Iterable[str]) -> int:
        return max((self.level_of(role) for role in role_names), default=0)

    def has_higher_or_equal_privilege(self, role_names: Iterable[str], target_role: str) -> bool:
        return self.max_level(role_names) >= self.level_of(target_role)

    def is_protected(self, role_names: Iterable[str]) -> bool:
        """True if any held role ranks at or above COMPANY_ADMIN."""
        threshold = self.level_of(RoleName.COMPANY_ADMIN.value)
        return any(self.level_of(role) >= threshold for role in role_names)

    def __contains__(self, role_name: object) -> bool:
        return role_name in self._levels

    def __repr__(self) -> str:
        return f"RoleHierarchy({dict(self._levels)!r})"


DEFAULT_ROLE_HIERARCHY = RoleHierarchy(ROLE_HIERARCHY)
