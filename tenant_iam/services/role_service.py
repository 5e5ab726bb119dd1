"""
RoleService

CRUD for role definitions. A role is either global (``tenant_id`` NULL) or
scoped to one tenant; ``(name, tenant_id)`` is unique. Deleting a role is a
soft delete: the row keeps its id but stops granting anything.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_iam.claims import Claims
from tenant_iam.exceptions import AuthorizationError, DuplicateResourceError, RoleNotFoundError
from tenant_iam.models.role import Role, RolePermission
from tenant_iam.services.authorization import AuthorizationEngine, authorization_engine
from tenant_iam.services.permission_service import PermissionService
from tenant_iam.services.tenant_service import require_tenant
from tenant_iam.utils.clock import utcnow
from tenant_iam.utils.pagination import PageParams, paginate

logger = logging.getLogger(__name__)


def _tenant_clause(tenant_id: str | None):
    return Role.tenant_id.is_(None) if tenant_id is None else Role.tenant_id == tenant_id


class RoleService:
    def __init__(self, db: AsyncSession, engine: AuthorizationEngine = authorization_engine) -> None:
        self.db = db
        self.engine = engine
        self.permissions = PermissionService(db)

    async def create_role(
        self,
        requester: Claims,
        name: str,
        tenant_id: str | None = None,
        permission_ids: list[int] | None = None,
    ) -> Role:
        if tenant_id is not None:
            await require_tenant(tenant_id, self.db)
        await self._ensure_unique(name, tenant_id)

        permissions = await self.permissions.get_permissions_by_ids(permission_ids or [])
        role = Role(
            name=name,
            tenant_id=tenant_id,
            created_by=requester.sub,
            updated_by=requester.sub,
            role_permissions=[RolePermission(permission=permission) for permission in permissions],
        )
        self.db.add(role)
        await self.db.commit()

        logger.info("Role created: id=%s name=%s tenant=%s by=%s", role.id, role.name, role.tenant_id, requester.sub)
        return await self._load(role.id)

    async def list_roles(self, requester: Claims, params: PageParams) -> tuple[list[Role], int]:
        statement = select(Role).where(Role.deleted_at.is_(None)).order_by(Role.created_at.desc(), Role.id.desc())
        if not self.engine.is_super_admin(requester.roles):
            statement = statement.where(_tenant_clause(requester.tenant_id))
        if params.search:
            statement = statement.where(Role.name.contains(params.search))
        return await paginate(self.db, statement, params)

    async def get_role(self, role_id: int, requester: Claims) -> Role:
        role = await self._load(role_id)
        # Global role definitions are readable by every tenant.
        if role.tenant_id is not None and not self.engine.can_access_tenant(requester, role.tenant_id):
            logger.warning("Role %s hidden from %s: cross-tenant", role_id, requester.sub)
            raise AuthorizationError(reason="Cross-tenant access not allowed")
        return role

    async def get_roles_by_ids(self, role_ids: list[int]) -> list[Role]:
        """Resolve live roles by id, failing on the first id that does not exist."""
        if not role_ids:
            return []
        wanted = list(dict.fromkeys(role_ids))
        result = await self.db.execute(select(Role).where(Role.id.in_(wanted), Role.deleted_at.is_(None)))
        found = {role.id: role for role in result.scalars().unique().all()}
        for role_id in wanted:
            if role_id not in found:
                raise RoleNotFoundError(role_id)
        return [found[rid] for rid in wanted]

    async def update_role(self, role_id: int, changes: dict, requester: Claims) -> Role:
        role = await self._load(role_id)

        new_name = changes.get("name")
        new_tenant_id = changes.get("tenant_id", role.tenant_id)
        if "tenant_id" in changes and new_tenant_id is not None:
            await require_tenant(new_tenant_id, self.db)
        if (new_name and new_name != role.name) or new_tenant_id != role.tenant_id:
            await self._ensure_unique(new_name or role.name, new_tenant_id)

        if new_name:
            role.name = new_name
        role.tenant_id = new_tenant_id
        if changes.get("permission_ids") is not None:
            await self.permissions.set_role_permissions(role, changes["permission_ids"])
        role.updated_by = requester.sub

        await self.db.commit()
        logger.info("Role updated: id=%s by=%s", role.id, requester.sub)
        return await self._load(role_id)

    async def delete_role(self, role_id: int, requester: Claims) -> None:
        role = await self._load(role_id)
        role.deleted_at = utcnow()
        role.updated_by = requester.sub
        await self.db.commit()
        logger.info("Role soft-deleted: id=%s name=%s by=%s", role.id, role.name, requester.sub)

    # ── Private helpers ──────────────────────────────────────────────────────

    async def _load(self, role_id: int) -> Role:
        result = await self.db.execute(
            select(Role)
            .where(Role.id == role_id, Role.deleted_at.is_(None))
            .execution_options(populate_existing=True)
        )
        role = result.scalars().first()
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    async def _ensure_unique(self, name: str, tenant_id: str | None) -> None:
        result = await self.db.execute(select(Role.id).where(Role.name == name, _tenant_clause(tenant_id)))
        if result.scalars().first() is not None:
            raise DuplicateResourceError("Role", "name", name)
