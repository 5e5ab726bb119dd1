"""
Role Routes

Role definitions are created, changed and deleted by SUPER_ADMIN only;
COMPANY_ADMIN may read the roles visible to their tenant.
"""

import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..claims import Claims
from ..constants.roles import RoleName
from ..database import get_db
from ..permissions_config.permission_dependencies import require_roles
from ..schemas import PageMeta, RoleCreate, RoleResponse, RoleUpdate
from ..services.role_service import RoleService
from ..utils.pagination import PageParams, page_meta, page_params

logger = logging.getLogger(__name__)

router = APIRouter()

super_admin_only = require_roles(RoleName.SUPER_ADMIN.value)
role_readers = require_roles(RoleName.SUPER_ADMIN.value, RoleName.COMPANY_ADMIN.value)


class RoleListResponse(BaseModel):
    data: list[RoleResponse]
    meta: PageMeta


@router.post("/", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleCreate,
    claims: Claims = Depends(super_admin_only),
    db: AsyncSession = Depends(get_db),
):
    role = await RoleService(db).create_role(
        claims,
        name=payload.name,
        tenant_id=payload.tenant_id,
        permission_ids=payload.permission_ids,
    )
    return RoleResponse.from_role(role)


@router.get("/", response_model=RoleListResponse)
async def list_roles(
    params: PageParams = Depends(page_params),
    claims: Claims = Depends(role_readers),
    db: AsyncSession = Depends(get_db),
):
    roles, total = await RoleService(db).list_roles(claims, params)
    return RoleListResponse(data=[RoleResponse.from_role(role) for role in roles], meta=page_meta(total, params))


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: int,
    claims: Claims = Depends(role_readers),
    db: AsyncSession = Depends(get_db),
):
    role = await RoleService(db).get_role(role_id, claims)
    return RoleResponse.from_role(role)


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    payload: RoleUpdate,
    claims: Claims = Depends(super_admin_only),
    db: AsyncSession = Depends(get_db),
):
    role = await RoleService(db).update_role(role_id, payload.model_dump(exclude_unset=True), claims)
    return RoleResponse.from_role(role)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: int,
    claims: Claims = Depends(super_admin_only),
    db: AsyncSession = Depends(get_db),
):
    await RoleService(db).delete_role(role_id, claims)
