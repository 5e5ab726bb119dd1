from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..claims import Claims
from ..constants.roles import RoleName
from ..database import get_db
from ..permissions_config.permission_dependencies import require_access
from ..permissions_config.permissions import VIEW_PERMISSIONS
from ..schemas import PermissionResponse
from ..services.permission_service import PermissionService

router = APIRouter()


@router.get("/", response_model=list[PermissionResponse])
async def list_permissions(
    claims: Claims = Depends(require_access(roles=[RoleName.SUPER_ADMIN.value], permissions=[VIEW_PERMISSIONS])),
    db: AsyncSession = Depends(get_db),
):
    """The permission catalogue."""
    permissions = await PermissionService(db).list_permissions()
    return [PermissionResponse(id=p.id, key=p.key, description=p.description) for p in permissions]
