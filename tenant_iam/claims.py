"""
Session claims carried by a signed access token.

Claims are built once per request from a verified token and passed by value
to the authorization engine; they are never persisted.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Claims:
    sub: str
    tenant_id: str | None = None
    roles: tuple[str, ...] = field(default_factory=tuple)
    permissions: tuple[str, ...] = field(default_factory=tuple)
    username: str | None = None

    @classmethod
    def build(
        cls,
        sub: str,
        tenant_id: str | None = None,
        roles: Iterable[str] = (),
        permissions: Iterable[str] = (),
        username: str | None = None,
    ) -> "Claims":
        return cls(
            sub=str(sub),
            tenant_id=tenant_id,
            roles=tuple(roles),
            permissions=tuple(permissions),
            username=username,
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Claims":
        """Build claims from a decoded token payload. Raises KeyError without ``sub``."""
        return cls.build(
            sub=payload["sub"],
            tenant_id=payload.get("tenant_id"),
            roles=payload.get("roles") or (),
            permissions=payload.get("permissions") or (),
            username=payload.get("username"),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "sub": self.sub,
            "username": self.username,
            "tenant_id": self.tenant_id,
            "roles": list(self.roles),
            "permissions": list(self.permissions),
        }

    def has_role(self, role_name: str) -> bool:
        return role_name in self.roles

    def has_permission(self, permission_key: str) -> bool:
        return permission_key in self.permissions
