"""
Tenant Administration Routes

All routes are restricted to SUPER_ADMIN.

POST   /api/v1/tenants              → create tenant
GET    /api/v1/tenants              → list tenants
GET    /api/v1/tenants/{tenant_id}  → get tenant
PATCH  /api/v1/tenants/{tenant_id}  → update name / is_active
DELETE /api/v1/tenants/{tenant_id}  → deactivate tenant
"""

import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..claims import Claims
from ..constants.roles import RoleName
from ..database import get_db
from ..permissions_config.permission_dependencies import require_roles
from ..schemas import PageMeta, TenantCreate, TenantResponse, TenantUpdate
from ..services.tenant_service import (
    create_tenant,
    deactivate_tenant,
    list_tenants,
    require_tenant,
    update_tenant,
)
from ..utils.pagination import PageParams, page_meta, page_params

router = APIRouter(tags=["Tenants"])
logger = logging.getLogger(__name__)

super_admin_only = require_roles(RoleName.SUPER_ADMIN.value)


class TenantListResponse(BaseModel):
    data: list[TenantResponse]
    meta: PageMeta


@router.post("/", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant_route(
    payload: TenantCreate,
    claims: Claims = Depends(super_admin_only),
    db: AsyncSession = Depends(get_db),
) -> TenantResponse:
    tenant = await create_tenant(name=payload.name, created_by=claims.sub, db=db)
    return TenantResponse.model_validate(tenant)


@router.get("/", response_model=TenantListResponse)
async def list_tenants_route(
    params: PageParams = Depends(page_params),
    claims: Claims = Depends(super_admin_only),
    db: AsyncSession = Depends(get_db),
) -> TenantListResponse:
    tenants, total = await list_tenants(db, params)
    return TenantListResponse(
        data=[TenantResponse.model_validate(tenant) for tenant in tenants],
        meta=page_meta(total, params),
    )


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant_route(
    tenant_id: str,
    claims: Claims = Depends(super_admin_only),
    db: AsyncSession = Depends(get_db),
) -> TenantResponse:
    tenant = await require_tenant(tenant_id, db)
    return TenantResponse.model_validate(tenant)


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant_route(
    tenant_id: str,
    payload: TenantUpdate,
    claims: Claims = Depends(super_admin_only),
    db: AsyncSession = Depends(get_db),
) -> TenantResponse:
    tenant = await update_tenant(tenant_id, payload.model_dump(exclude_unset=True), claims.sub, db)
    return TenantResponse.model_validate(tenant)


@router.delete("/{tenant_id}", response_model=TenantResponse)
async def deactivate_tenant_route(
    tenant_id: str,
    claims: Claims = Depends(super_admin_only),
    db: AsyncSession = Depends(get_db),
) -> TenantResponse:
    tenant = await deactivate_tenant(tenant_id, claims.sub, db)
    return TenantResponse.model_validate(tenant)
