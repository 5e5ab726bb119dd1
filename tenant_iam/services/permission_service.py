"""
PermissionService

Permission catalogue lookups and role-permission assignment. Effective
permissions of a user are the union of the permission keys attached to
every role the user holds.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_iam.exceptions import PermissionNotFoundError
from tenant_iam.models.role import Permission, Role, RolePermission

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Catalogue ─────────────────────────────────────────────────────────────

    async def list_permissions(self) -> list[Permission]:
        result = await self.db.execute(
            select(Permission).where(Permission.deleted_at.is_(None)).order_by(Permission.key)
        )
        return list(result.scalars().all())

    async def get_permissions_by_ids(self, permission_ids: list[int]) -> list[Permission]:
        """Resolve permission ids, failing on the first id that does not exist."""
        if not permission_ids:
            return []
        wanted = list(dict.fromkeys(permission_ids))
        result = await self.db.execute(
            select(Permission).where(Permission.id.in_(wanted), Permission.deleted_at.is_(None))
        )
        found = {p.id: p for p in result.scalars().all()}
        for permission_id in wanted:
            if permission_id not in found:
                raise PermissionNotFoundError(permission_id)
        return [found[pid] for pid in wanted]

    # ── Role permissions ──────────────────────────────────────────────────────

    async def set_role_permissions(self, role: Role, permission_ids: list[int]) -> None:
        """
        Replace the permission set attached to *role*.

        Does not commit; the caller owns the transaction.
        """
        permissions = await self.get_permissions_by_ids(permission_ids)
        role.role_permissions.clear()
        await self.db.flush()
        for permission in permissions:
            role.role_permissions.append(RolePermission(permission=permission))
        logger.info("Role %s permissions set to %s", role.id, [p.key for p in permissions])
