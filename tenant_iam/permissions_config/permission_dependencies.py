"""
Access-control guards as FastAPI dependencies.

A route declares which roles, minimum role level or permissions it accepts;
the guard passes if any one of them matches the caller's claims. Routes that
act on a user named in the path additionally depend on
``require_manageable_user``, which runs the authorization engine against the
target account.
"""

import logging
from collections.abc import Iterable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_iam.auth import get_current_claims
from tenant_iam.claims import Claims
from tenant_iam.constants.roles import DEFAULT_ROLE_HIERARCHY, RoleHierarchy
from tenant_iam.database import get_db
from tenant_iam.exceptions import AuthorizationError
from tenant_iam.models.user import User
from tenant_iam.services.user_service import UserService

logger = logging.getLogger(__name__)


def is_access_granted(
    claims: Claims,
    roles: Iterable[str] = (),
    role_at_least: str | None = None,
    permissions: Iterable[str] = (),
    hierarchy: RoleHierarchy = DEFAULT_ROLE_HIERARCHY,
) -> bool:
    """True if any configured predicate matches; no predicates means any caller."""
    roles = tuple(roles)
    permissions = tuple(permissions)

    if not roles and role_at_least is None and not permissions:
        return True

    if roles and any(claims.has_role(role) for role in roles):
        return True

    if role_at_least is not None and hierarchy.max_level(claims.roles) >= hierarchy.level_of(role_at_least):
        return True

    if permissions and any(claims.has_permission(permission) for permission in permissions):
        return True

    return False


def require_access(
    roles: Iterable[str] = (),
    role_at_least: str | None = None,
    permissions: Iterable[str] = (),
    hierarchy: RoleHierarchy = DEFAULT_ROLE_HIERARCHY,
):
    roles = tuple(roles)
    permissions = tuple(permissions)

    async def checker(claims: Claims = Depends(get_current_claims)) -> Claims:
        if is_access_granted(claims, roles, role_at_least, permissions, hierarchy):
            return claims

        logger.warning(
            "Access denied for %s: roles=%s required roles=%s at_least=%s permissions=%s",
            claims.sub,
            list(claims.roles),
            list(roles),
            role_at_least,
            list(permissions),
        )
        raise AuthorizationError("Insufficient permissions")

    return checker


def require_roles(*roles: str):
    return require_access(roles=roles)


def require_role_at_least(role: str):
    return require_access(role_at_least=role)


def permission_required(*permissions: str):
    return require_access(permissions=permissions)


async def require_manageable_user(
    user_id: str,
    claims: Claims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the path's ``user_id`` to a user the caller may view and manage."""
    return await UserService(db).require_manageable(claims, user_id)
