from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from tenant_iam.utils.password_policy import MIN_PASSWORD_LENGTH


class RoleRef(BaseModel):
    id: int
    name: str


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=255, description="Globally unique username.")
    password: str = Field(..., min_length=6, max_length=100, description="Initial password.")
    tenant_id: Optional[str] = Field(None, description="Tenant; defaults to the requester's tenant.")
    role_ids: Optional[list[int]] = Field(None, description="Role IDs to assign.")
    is_active: bool = True
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=255)
    password: Optional[str] = Field(None, min_length=6, max_length=100)
    tenant_id: Optional[str] = None
    role_ids: Optional[list[int]] = None
    is_active: Optional[bool] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    tenant_id: Optional[str] = None
    is_active: bool
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    roles: list[RoleRef] = []

    @classmethod
    def from_user(cls, user) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            tenant_id=user.tenant_id,
            is_active=user.is_active,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            created_at=user.created_at,
            roles=[RoleRef(id=role.id, name=role.name) for role in user.active_roles],
        )


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class UserListResponse(BaseModel):
    data: list[UserResponse]
    meta: PageMeta


class ProfileRole(BaseModel):
    id: int
    name: str
    permissions: list[str]


class ProfileResponse(BaseModel):
    id: str
    username: str
    tenant_id: Optional[str] = None
    tenant_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    roles: list[ProfileRole] = []

    @classmethod
    def from_user(cls, user) -> "ProfileResponse":
        return cls(
            id=user.id,
            username=user.username,
            tenant_id=user.tenant_id,
            tenant_name=user.tenant.name if user.tenant is not None else None,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_active=user.is_active,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
            roles=[
                ProfileRole(id=role.id, name=role.name, permissions=role.permission_keys)
                for role in user.active_roles
            ],
        )


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50, description="Unique username")
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = Field(None, max_length=255)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=100, description="New password")

    @field_validator("new_password")
    @classmethod
    def differs_from_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("New password cannot be blank")
        return v


class MessageResponse(BaseModel):
    message: str
