"""
User Administration Routes

Restricted to SUPER_ADMIN and COMPANY_ADMIN. Routes addressing a single user
also pass through the management gate, so a COMPANY_ADMIN only ever sees
accounts of their own tenant that they are allowed to manage.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..claims import Claims
from ..constants.roles import RoleName
from ..database import get_db
from ..models.user import User
from ..permissions_config.permission_dependencies import require_manageable_user, require_roles
from ..schemas import UserCreate, UserListResponse, UserResponse, UserUpdate
from ..services.user_service import UserService
from ..utils.pagination import PageParams, page_meta, page_params

logger = logging.getLogger(__name__)

router = APIRouter()

user_admin = require_roles(RoleName.SUPER_ADMIN.value, RoleName.COMPANY_ADMIN.value)


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    claims: Claims = Depends(user_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).create_user(claims, payload.model_dump())
    return UserResponse.from_user(user)


@router.get("/", response_model=UserListResponse)
async def list_users(
    params: PageParams = Depends(page_params),
    claims: Claims = Depends(user_admin),
    db: AsyncSession = Depends(get_db),
):
    users, total = await UserService(db).list_users(claims, params)
    return UserListResponse(
        data=[UserResponse.from_user(user) for user in users],
        meta=page_meta(total, params),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    claims: Claims = Depends(user_admin),
    target: User = Depends(require_manageable_user),
):
    return UserResponse.from_user(target)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    claims: Claims = Depends(user_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).update_user(claims, user_id, payload.model_dump(exclude_unset=True))
    return UserResponse.from_user(user)


@router.delete("/{user_id}", response_model=UserResponse)
async def deactivate_user(
    user_id: str,
    claims: Claims = Depends(user_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).deactivate_user(claims, user_id)
    return UserResponse.from_user(user)
