"""
Authentication Routes

POST  /api/v1/auth/login            → JSON login, returns token + session user
POST  /api/v1/auth/token            → OAuth2 password-form login (docs / CLI clients)
GET   /api/v1/auth/profile          → current user's profile
PATCH /api/v1/auth/profile          → update own username / names / email
POST  /api/v1/auth/change-password  → change own password
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_current_claims
from ..claims import Claims
from ..database import get_db
from ..schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    ProfileUpdate,
    SessionUser,
    Token,
)
from ..services.auth_service import AuthService, LoginResult

logger = logging.getLogger(__name__)

router = APIRouter()


def _login_response(result: LoginResult) -> LoginResponse:
    user = result.user
    return LoginResponse(
        access_token=result.access_token,
        token_type="Bearer",
        expires_in=result.expires_in,
        user=SessionUser(
            id=user.id,
            username=user.username,
            tenant_id=user.tenant_id,
            tenant_name=user.tenant.name if user.tenant is not None else None,
            roles=list(result.claims.roles),
            permissions=list(result.claims.permissions),
            last_login=user.last_login_at,
        ),
    )


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate with username and password, optionally within a tenant."""
    result = await AuthService(db).login(payload.username, payload.password, payload.tenant_id)
    return _login_response(result)


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """
    Endpoint to generate an access token for the OAuth2 password flow.
    """
    result = await AuthService(db).login(form_data.username, form_data.password)
    return Token(access_token=result.access_token, token_type="Bearer", expires_in=result.expires_in)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    claims: Claims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
):
    user = await AuthService(db).get_profile(claims.sub)
    return ProfileResponse.from_user(user)


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdate,
    claims: Claims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
):
    user = await AuthService(db).update_profile(claims.sub, payload.model_dump(exclude_unset=True))
    logger.info("Profile updated for user %s", claims.sub)
    return ProfileResponse.from_user(user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    claims: Claims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
):
    await AuthService(db).change_password(claims.sub, payload.current_password, payload.new_password)
    return MessageResponse(message="Password changed successfully")
