"""
Idempotent database seeder.

Creates the permission catalogue, the three global built-in roles with their
default grants, a demo tenant and one demo account per role. Rows that
already exist are left alone, so the seeder can be run repeatedly.

    python -m tenant_iam.seed
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_iam.auth import hash_password
from tenant_iam.constants.roles import RoleName
from tenant_iam.database import AsyncSessionLocal, Base, engine
from tenant_iam.models import Permission, Role, RolePermission, Tenant, User, UserRole
from tenant_iam.permissions_config.permissions import PERMISSION_DESCRIPTIONS, get_role_permissions

logger = logging.getLogger(__name__)

DEMO_TENANT_NAME = "Acme Corp"

# (username, password, role, belongs to the demo tenant)
DEMO_USERS = (
    ("superadmin", "admin123", RoleName.SUPER_ADMIN.value, False),
    ("companyadmin", "admin123", RoleName.COMPANY_ADMIN.value, True),
    ("clientuser", "client123", RoleName.CLIENT.value, True),
)


async def seed_permissions(db: AsyncSession) -> dict[str, Permission]:
    result = await db.execute(select(Permission))
    permissions = {permission.key: permission for permission in result.scalars().all()}
    for key, description in PERMISSION_DESCRIPTIONS.items():
        if key not in permissions:
            permissions[key] = Permission(key=key, description=description)
            db.add(permissions[key])
    await db.flush()
    return permissions


async def seed_roles(db: AsyncSession, permissions: dict[str, Permission]) -> dict[str, Role]:
    result = await db.execute(select(Role).where(Role.tenant_id.is_(None)))
    roles = {role.name: role for role in result.scalars().unique().all()}

    for role_name in RoleName:
        role = roles.get(role_name.value)
        if role is None:
            role = Role(name=role_name.value, tenant_id=None)
            db.add(role)
            roles[role.name] = role
        granted = {rp.permission_id for rp in role.role_permissions}
        for key in get_role_permissions(role.name):
            permission = permissions[key]
            if permission.id not in granted:
                role.role_permissions.append(RolePermission(permission=permission))
    await db.flush()
    return roles


async def seed_tenant(db: AsyncSession) -> Tenant:
    result = await db.execute(select(Tenant).where(Tenant.name == DEMO_TENANT_NAME))
    tenant = result.scalars().first()
    if tenant is None:
        tenant = Tenant(name=DEMO_TENANT_NAME)
        db.add(tenant)
        await db.flush()
    return tenant


async def seed_users(db: AsyncSession, roles: dict[str, Role], tenant: Tenant) -> None:
    for username, password, role_name, in_tenant in DEMO_USERS:
        result = await db.execute(select(User.id).where(User.username == username))
        if result.scalars().first() is not None:
            continue
        user = User(
            username=username,
            password_hash=hash_password(password),
            tenant_id=tenant.id if in_tenant else None,
        )
        user.user_roles = [UserRole(role=roles[role_name])]
        db.add(user)
        logger.info("Seeded user %s (%s)", username, role_name)
    await db.flush()


async def seed_database(db: AsyncSession) -> None:
    permissions = await seed_permissions(db)
    roles = await seed_roles(db, permissions)
    tenant = await seed_tenant(db)
    await seed_users(db, roles, tenant)
    await db.commit()
    logger.info("Seed completed: %d permissions, %d roles, tenant %s", len(permissions), len(roles), tenant.name)


async def main() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as db:
        await seed_database(db)
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    asyncio.run(main())
