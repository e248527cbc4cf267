from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole


def authorize(*roles: UserRole):
    """
    Dependency factory to restrict a route to the given roles.

    Example:
        Depends(authorize(UserRole.ADMIN, UserRole.TEACHER))
    """
    allowed = set(roles)

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"User role '{current_user.role.value}' is not authorized to access this route",
            )
        return current_user

    return _checker
