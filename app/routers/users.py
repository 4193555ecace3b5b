"""User router - account administration endpoints (admin only)."""
from fastapi import APIRouter, Depends, HTTPException, status

from app.database import get_database
from app.exceptions import NotFoundError
from app.models.user import CurrentUser, User, UserRoleUpdate, UserStatusUpdate
from app.routers.auth import require_admin
from app.services.user_service import UserService


router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[User])
async def list_users(
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """List every user."""
    service = UserService(db)
    return await service.list_users()


@router.put("/{user_id}/role", response_model=User)
async def set_user_role(
    user_id: int,
    role_update: UserRoleUpdate,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """Change a user's role."""
    service = UserService(db)

    try:
        return await service.set_role(user_id, role_update.role)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{user_id}/status", response_model=User)
async def set_user_status(
    user_id: int,
    status_update: UserStatusUpdate,
    admin: CurrentUser = Depends(require_admin),
    db=Depends(get_database),
):
    """
    Activate or deactivate a user.

    Admins cannot deactivate themselves.
    """
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change your own status",
        )

    service = UserService(db)

    try:
        return await service.set_status(user_id, status_update.status)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
