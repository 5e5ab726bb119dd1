from .role import PermissionResponse, RoleCreate, RoleResponse, RoleUpdate
from .tenant import TenantCreate, TenantResponse, TenantUpdate
from .token import LoginRequest, LoginResponse, SessionUser, Token
from .user import (
    ChangePasswordRequest,
    MessageResponse,
    PageMeta,
    ProfileResponse,
    ProfileUpdate,
    RoleRef,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "ChangePasswordRequest",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "PageMeta",
    "PermissionResponse",
    "ProfileResponse",
    "ProfileUpdate",
    "RoleCreate",
    "RoleRef",
    "RoleResponse",
    "RoleUpdate",
    "SessionUser",
    "TenantCreate",
    "TenantResponse",
    "TenantUpdate",
    "Token",
    "UserCreate",
    "UserListResponse",
    "UserResponse",
    "UserUpdate",
]
