"""
UserService

User administration on behalf of an authenticated requester. Every read or
mutation of a single user goes through the authorization engine's
``can_manage_user`` gate; role assignments go through
``validate_privilege_escalation``. Deletion is a soft delete
(``is_active = False``).
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_iam.auth import hash_password
from tenant_iam.claims import Claims
from tenant_iam.exceptions import AuthorizationError, DuplicateResourceError, UserNotFoundError
from tenant_iam.models.role import Role
from tenant_iam.models.user import User, UserRole
from tenant_iam.services.authorization import (
    AuthorizationEngine,
    AuthorizationResult,
    authorization_engine,
)
from tenant_iam.services.role_service import RoleService
from tenant_iam.services.tenant_service import require_tenant
from tenant_iam.utils.pagination import PageParams, paginate

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "email", "phone", "avatar_url")


class UserService:
    def __init__(self, db: AsyncSession, engine: AuthorizationEngine = authorization_engine) -> None:
        self.db = db
        self.engine = engine
        self.roles = RoleService(db, engine)

    # ── Authorization ────────────────────────────────────────────────────────

    async def can_manage_user(self, requester: Claims, target_user_id: str) -> AuthorizationResult:
        """Load the target and evaluate the management gate for it."""
        target = await self.get_user(target_user_id)
        return self.engine.can_manage_user(requester, target)

    async def can_view_user(self, requester: Claims, target_user_id: str) -> AuthorizationResult:
        target = await self.get_user(target_user_id)
        return self.engine.can_view_user(requester, target)

    async def require_manageable(self, requester: Claims, target_user_id: str) -> User:
        """Return the target user or raise NotFound / Forbidden."""
        target = await self.get_user(target_user_id)
        if target is None:
            raise UserNotFoundError(target_user_id)

        decision = self.engine.can_manage_user(requester, target)
        if not decision.allowed:
            logger.warning(
                "User %s denied access to user %s: %s",
                requester.sub,
                target_user_id,
                decision.reason,
            )
            raise AuthorizationError(reason=decision.reason)
        return target

    # ── CRUD ─────────────────────────────────────────────────────────────────

    async def create_user(self, requester: Claims, data: dict[str, Any]) -> User:
        username = data["username"]
        if await self._username_taken(username):
            raise DuplicateResourceError("User", "username", username)

        tenant_id = data.get("tenant_id") or requester.tenant_id
        if not self.engine.can_access_tenant(requester, tenant_id):
            logger.warning("User %s denied creating a user in tenant %s", requester.sub, tenant_id)
            raise AuthorizationError(reason="Cross-tenant access not allowed")
        if tenant_id is not None:
            await require_tenant(tenant_id, self.db)

        roles = await self._resolve_assignable_roles(requester, data.get("role_ids") or [])

        user = User(
            username=username,
            password_hash=hash_password(data["password"]),
            tenant_id=tenant_id,
            is_active=data.get("is_active", True),
            created_by=requester.sub,
            updated_by=requester.sub,
        )
        for field_name in PROFILE_FIELDS:
            if data.get(field_name) is not None:
                setattr(user, field_name, data[field_name])
        user.user_roles = [UserRole(role=role) for role in roles]

        self.db.add(user)
        await self.db.commit()
        logger.info(
            "User created: id=%s username=%s tenant=%s roles=%s by=%s",
            user.id,
            user.username,
            user.tenant_id,
            [role.name for role in roles],
            requester.sub,
        )
        return await self._load(user.id)

    async def list_users(self, requester: Claims, params: PageParams) -> tuple[list[User], int]:
        """
        One page of users visible to *requester*.

        Non SUPER_ADMIN requesters are scoped to their tenant in the query, and
        the page is then filtered by the authorization engine, so ``total``
        counts tenant rows while ``items`` may be shorter than ``limit``.
        """
        statement = select(User).order_by(User.created_at.desc(), User.id)
        if not self.engine.is_super_admin(requester.roles):
            if requester.tenant_id is None:
                statement = statement.where(User.tenant_id.is_(None))
            else:
                statement = statement.where(User.tenant_id == requester.tenant_id)
        if params.search:
            statement = statement.where(User.username.contains(params.search))

        users, total = await paginate(self.db, statement, params)
        return self.engine.filter_accessible_users(requester, users), total

    async def get_user(self, user_id: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def update_user(self, requester: Claims, user_id: str, changes: dict[str, Any]) -> User:
        user = await self.require_manageable(requester, user_id)

        new_username = changes.get("username")
        if new_username and new_username != user.username:
            if await self._username_taken(new_username):
                raise DuplicateResourceError("User", "username", new_username)
            user.username = new_username

        if "tenant_id" in changes and changes["tenant_id"] != user.tenant_id:
            new_tenant_id = changes["tenant_id"]
            if not self.engine.can_access_tenant(requester, new_tenant_id):
                raise AuthorizationError(reason="Cross-tenant access not allowed")
            if new_tenant_id is not None:
                await require_tenant(new_tenant_id, self.db)
            user.tenant_id = new_tenant_id

        if changes.get("password"):
            user.password_hash = hash_password(changes["password"])

        if changes.get("is_active") is not None:
            user.is_active = changes["is_active"]

        for field_name in PROFILE_FIELDS:
            if field_name in changes:
                setattr(user, field_name, changes[field_name])

        if changes.get("role_ids") is not None:
            roles = await self._resolve_assignable_roles(requester, changes["role_ids"])
            user.user_roles.clear()
            await self.db.flush()
            user.user_roles.extend(UserRole(role=role) for role in roles)

        user.updated_by = requester.sub
        await self.db.commit()
        logger.info("User updated: id=%s fields=%s by=%s", user.id, sorted(changes), requester.sub)
        return await self._load(user.id)

    async def deactivate_user(self, requester: Claims, user_id: str) -> User:
        user = await self.require_manageable(requester, user_id)
        user.is_active = False
        user.updated_by = requester.sub
        await self.db.commit()
        logger.info("User deactivated: id=%s by=%s", user.id, requester.sub)
        return await self._load(user.id)

    # ── Private helpers ──────────────────────────────────────────────────────

    async def _load(self, user_id: str) -> User:
        user = await self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _username_taken(self, username: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.username == username))
        return result.scalars().first() is not None

    async def _resolve_assignable_roles(self, requester: Claims, role_ids: list[int]) -> list[Role]:
        roles = await self.roles.get_roles_by_ids(role_ids)

        decision = self.engine.validate_privilege_escalation(requester, [role.name for role in roles])
        if not decision.allowed:
            logger.warning(
                "User %s denied assigning roles %s: %s",
                requester.sub,
                [role.name for role in roles],
                decision.reason,
            )
            raise AuthorizationError(reason=decision.reason)

        for role in roles:
            if role.tenant_id is not None and not self.engine.can_access_tenant(requester, role.tenant_id):
                raise AuthorizationError(reason="Cross-tenant access not allowed")
        return roles
