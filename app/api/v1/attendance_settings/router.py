"""Attendance time-policy settings API."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import ADMIN_PANEL_ROLES, SETTINGS_READ_ROLES, require_roles
from app.auth.schemas import CurrentUser
from app.db.session import get_db

from .dependencies import get_settings_store
from .schemas import AttendancePolicy, AttendanceSettingsUpdate
from .service import AttendanceSettingsStore

router = APIRouter(prefix="/api/v1/attendance/settings", tags=["attendance-settings"])


@router.get("", response_model=AttendancePolicy)
async def get_settings(
    current_user: CurrentUser = Depends(require_roles(*SETTINGS_READ_ROLES, detail="Access denied")),
    db: AsyncSession = Depends(get_db),
    store: AttendanceSettingsStore = Depends(get_settings_store),
) -> AttendancePolicy:
    """Current check-in / check-out hours. Employees read these to show the allowed windows."""
    return await store.get(db)


@router.put("", response_model=AttendancePolicy)
async def update_settings(
    payload: AttendanceSettingsUpdate,
    current_user: CurrentUser = Depends(require_roles(*ADMIN_PANEL_ROLES, detail="Only admins can update settings")),
    db: AsyncSession = Depends(get_db),
    store: AttendanceSettingsStore = Depends(get_settings_store),
) -> AttendancePolicy:
    """Update any subset of the hours (0-23)."""
    return await store.update(db, payload, updated_by=current_user.id)
