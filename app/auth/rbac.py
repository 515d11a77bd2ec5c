from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole

ADMIN_PANEL_ROLES = (UserRole.ADMIN.value, UserRole.SUB_ADMIN.value)
ATTENDANCE_ROLES = (UserRole.EMPLOYEE.value, UserRole.ADMIN.value)
SETTINGS_READ_ROLES = (UserRole.ADMIN.value, UserRole.SUB_ADMIN.value, UserRole.EMPLOYEE.value)


def require_roles(*roles: str, detail: str = "Insufficient permissions"):
    """
    Dependency factory restricting an endpoint to the given roles.

    Example:
        current_user: CurrentUser = Depends(require_roles("admin", "sub_admin"))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail,
            )
        return current_user

    return _checker
