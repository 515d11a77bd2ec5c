from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import ADMIN_PANEL_ROLES, ATTENDANCE_ROLES, require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import AllLeavesResponse, LeaveApply, LeaveRequestResponse, LeaveReview, LeaveSummary, MyLeavesResponse

router = APIRouter(prefix="/api/v1/leaves", tags=["leaves"])


@router.post(
    "",
    response_model=LeaveRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply_leave(
    payload: LeaveApply,
    current_user: CurrentUser = Depends(require_roles(*ATTENDANCE_ROLES, detail="Only employees can request leave")),
    db: AsyncSession = Depends(get_db),
) -> LeaveRequestResponse:
    """Apply for leave as the current user."""
    try:
        return await service.create_leave_request(
            db,
            current_user.id,
            payload.leave_type,
            payload.start_date,
            payload.end_date,
            payload.reason,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/me", response_model=MyLeavesResponse)
async def list_my_leaves(
    leave_status: Optional[str] = Query(None, alias="status"),
    page: int = 1,
    limit: int = service.MY_LEAVES_DEFAULT_LIMIT,
    current_user: CurrentUser = Depends(require_roles(*ATTENDANCE_ROLES, detail="Access denied")),
    db: AsyncSession = Depends(get_db),
) -> MyLeavesResponse:
    """Leave requests of the current user with a per-status summary. limit is capped at 50."""
    return await service.list_my_leaves(db, current_user.id, status=leave_status, page=page, limit=limit)


@router.get("/summary", response_model=LeaveSummary)
async def get_leave_summary(
    current_user: CurrentUser = Depends(require_roles(*ATTENDANCE_ROLES, detail="Access denied")),
    db: AsyncSession = Depends(get_db),
) -> LeaveSummary:
    return await service.get_leave_summary(db, current_user.id)


@router.get("", response_model=AllLeavesResponse)
async def list_all_leaves(
    leave_status: Optional[str] = Query(None, alias="status"),
    employee_id: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(service.ALL_LEAVES_DEFAULT_LIMIT, ge=1, le=200),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN.value, detail="Admin access required")),
    db: AsyncSession = Depends(get_db),
) -> AllLeavesResponse:
    """All leave requests (admin)."""
    return await service.list_all_leaves(db, status=leave_status, employee_id=employee_id, page=page, limit=limit)


@router.put("/{leave_id}/review", response_model=LeaveRequestResponse)
async def review_leave(
    leave_id: UUID,
    payload: LeaveReview,
    current_user: CurrentUser = Depends(require_roles(*ADMIN_PANEL_ROLES, detail="Admin access required")),
    db: AsyncSession = Depends(get_db),
) -> LeaveRequestResponse:
    """Approve or reject a pending leave request."""
    try:
        return await service.review_leave_request(
            db,
            leave_id,
            current_user.id,
            payload.status,
            note=payload.review_note,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/{leave_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_leave(
    leave_id: UUID,
    current_user: CurrentUser = Depends(require_roles(*ADMIN_PANEL_ROLES, detail="Admin access required")),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await service.delete_leave_request(db, leave_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
