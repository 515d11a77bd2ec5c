from zoneinfo import ZoneInfo

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.timezone_utils import get_zone
from app.db.session import get_db

from .schemas import AttendancePolicy
from .service import AttendanceSettingsStore


def get_settings_store(request: Request) -> AttendanceSettingsStore:
    """The store created by create_app and kept on app.state."""
    return request.app.state.attendance_settings_store


async def get_attendance_policy(
    db: AsyncSession = Depends(get_db),
    store: AttendanceSettingsStore = Depends(get_settings_store),
) -> AttendancePolicy:
    return await store.get(db)


def get_operating_zone() -> ZoneInfo:
    """Timezone in which policy hours and calendar days are evaluated."""
    return get_zone()
