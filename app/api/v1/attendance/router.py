"""Attendance API router."""

from datetime import date
from typing import List, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.attendance_settings.dependencies import get_attendance_policy, get_operating_zone
from app.api.v1.attendance_settings.schemas import AttendancePolicy
from app.auth.rbac import ATTENDANCE_ROLES, require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import (
    AttendanceMarkRequest,
    AttendanceMarkResponse,
    AttendanceRecordResponse,
    MyAttendanceResponse,
)

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


@router.post("/mark", response_model=AttendanceMarkResponse)
async def mark_attendance(
    payload: AttendanceMarkRequest,
    current_user: CurrentUser = Depends(require_roles(*ATTENDANCE_ROLES, detail="Only employees can mark attendance")),
    db: AsyncSession = Depends(get_db),
    policy: AttendancePolicy = Depends(get_attendance_policy),
    zone: ZoneInfo = Depends(get_operating_zone),
) -> AttendanceMarkResponse:
    """Check in or check out from the caller's current coordinates."""
    try:
        return await service.mark_attendance(
            db,
            policy,
            zone,
            current_user.id,
            payload.latitude,
            payload.longitude,
            payload.action,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/me", response_model=MyAttendanceResponse)
async def get_my_attendance(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    current_user: CurrentUser = Depends(require_roles(*ATTENDANCE_ROLES, detail="Only employees can view attendance")),
    db: AsyncSession = Depends(get_db),
    zone: ZoneInfo = Depends(get_operating_zone),
) -> MyAttendanceResponse:
    """Own attendance history (optionally one month), today's record and active locations."""
    return await service.get_my_attendance(db, zone, current_user.id, month=month, year=year)


@router.get("", response_model=List[AttendanceRecordResponse])
async def list_attendance(
    user_id: Optional[UUID] = None,
    att_date: Optional[date] = Query(None, alias="date", description="Local calendar date"),
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    location_id: Optional[UUID] = None,
    limit: int = Query(service.DEFAULT_LIST_LIMIT, ge=1, le=500),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN.value, detail="Unauthorized")),
    db: AsyncSession = Depends(get_db),
    zone: ZoneInfo = Depends(get_operating_zone),
) -> List[AttendanceRecordResponse]:
    """All attendance records (admin), newest first."""
    try:
        return await service.list_attendance(
            db,
            zone,
            user_id=user_id,
            on_date=att_date,
            from_date=from_date,
            to_date=to_date,
            location_id=location_id,
            limit=limit,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
