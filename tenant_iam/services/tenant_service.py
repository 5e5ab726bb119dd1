"""
Tenant Service

Async CRUD operations for Tenant entities.
All functions accept an injected AsyncSession.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_iam.exceptions import DuplicateResourceError, TenantNotFoundError
from tenant_iam.models.tenant import Tenant
from tenant_iam.utils.pagination import PageParams, paginate

logger = logging.getLogger(__name__)


async def create_tenant(name: str, created_by: str | None, db: AsyncSession) -> Tenant:
    """Create a new tenant organisation. Tenant names are unique."""
    if await get_tenant_by_name(name, db) is not None:
        raise DuplicateResourceError("Tenant", "name", name)

    tenant = Tenant(name=name, is_active=True, created_by=created_by, updated_by=created_by)
    db.add(tenant)
    await db.commit()
    await db.refresh(tenant)
    logger.info("Tenant created: id=%s name=%s", tenant.id, tenant.name)
    return tenant


async def get_tenant_by_id(tenant_id: str, db: AsyncSession) -> Tenant | None:
    """Return a Tenant by primary key, or None if not found."""
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id))
    return result.scalars().first()


async def get_tenant_by_name(name: str, db: AsyncSession) -> Tenant | None:
    """Return a Tenant by name, or None if not found."""
    result = await db.execute(select(Tenant).where(Tenant.name == name))
    return result.scalars().first()


async def require_tenant(tenant_id: str, db: AsyncSession) -> Tenant:
    tenant = await get_tenant_by_id(tenant_id, db)
    if tenant is None:
        raise TenantNotFoundError(tenant_id)
    return tenant


async def list_tenants(db: AsyncSession, params: PageParams) -> tuple[list[Tenant], int]:
    """Return one page of tenants (any status), newest first, and the total count."""
    statement = select(Tenant).order_by(Tenant.created_at.desc(), Tenant.id)
    if params.search:
        statement = statement.where(Tenant.name.contains(params.search))
    return await paginate(db, statement, params)


async def update_tenant(
    tenant_id: str,
    updates: dict,
    updated_by: str | None,
    db: AsyncSession,
) -> Tenant:
    """
    Apply a partial update to a Tenant.

    Only keys present in `updates` are changed.
    """
    tenant = await require_tenant(tenant_id, db)

    new_name = updates.get("name")
    if new_name and new_name != tenant.name and await get_tenant_by_name(new_name, db) is not None:
        raise DuplicateResourceError("Tenant", "name", new_name)

    allowed_fields = {"name", "is_active"}
    for field, value in updates.items():
        if field in allowed_fields and value is not None:
            setattr(tenant, field, value)
    tenant.updated_by = updated_by

    await db.commit()
    await db.refresh(tenant)
    logger.info("Tenant updated: id=%s fields=%s", tenant.id, sorted(updates))
    return tenant


async def deactivate_tenant(tenant_id: str, updated_by: str | None, db: AsyncSession) -> Tenant:
    """
    Deactivate a tenant. Users of a deactivated tenant can no longer log in.
    """
    tenant = await require_tenant(tenant_id, db)
    tenant.is_active = False
    tenant.updated_by = updated_by
    await db.commit()
    await db.refresh(tenant)
    logger.info("Tenant deactivated: id=%s name=%s", tenant.id, tenant.name)
    return tenant
