from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PermissionResponse(BaseModel):
    id: int
    key: str
    description: str


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50, description="Role name")
    tenant_id: Optional[str] = Field(None, description="Tenant ID for tenant-scoped roles")
    permission_ids: Optional[list[int]] = Field(None, description="Permission IDs to assign")


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    tenant_id: Optional[str] = None
    permission_ids: Optional[list[int]] = None


class RoleResponse(BaseModel):
    id: int
    name: str
    tenant_id: Optional[str] = None
    permissions: list[PermissionResponse] = []
    created_at: Optional[datetime] = None

    @classmethod
    def from_role(cls, role) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            tenant_id=role.tenant_id,
            permissions=[
                PermissionResponse(id=rp.permission.id, key=rp.permission.key, description=rp.permission.description)
                for rp in role.role_permissions
                if rp.permission is not None and rp.permission.deleted_at is None
            ],
            created_at=role.created_at,
        )
